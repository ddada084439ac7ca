"""Command-line test mode.

Runs a quiz in the terminal against a running backend. Starred cards are
cached in a local SQLite file so that stars survive an unreachable server.

    asl-study decks
    asl-study quiz --deck <deck_id>
    asl-study quiz --starred <deck_id>
    asl-study quiz --all-starred
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable
from typing import TextIO

from dotenv import load_dotenv

from asl_study import config
from asl_study.adapters.api_client import ApiStudyClient
from asl_study.domain.constants import FeedbackMessages
from asl_study.domain.services.answer_evaluator import AnswerEvaluator
from asl_study.domain.services.card_selector import CardSelector
from asl_study.domain.services.quiz_session import EmptyAnswerError, QuizSession
from asl_study.domain.services.starred_reconciler import StarredSetReconciler
from asl_study.domain.value_objects.card_selection import (
    AllCards,
    AllStarredAcrossDecks,
    CardSelection,
    StarredOnly,
)
from asl_study.domain.value_objects.match_strictness import MatchStrictness
from asl_study.domain.value_objects.quiz_state import QuizState
from asl_study.infrastructure.cache_store import SqliteCache
from asl_study.ports.card_source import CardSource
from asl_study.ports.local_cache import LocalCache
from asl_study.ports.study_store import StoreError

logger = logging.getLogger(__name__)

InputFn = Callable[[str], str]


class QuizCancelled(Exception):
    """Raised when the user leaves the quiz with Ctrl-C or EOF."""

    pass


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="asl-study", description="ASL vocabulary study tool")
    parser.add_argument(
        "--server",
        default="http://localhost:8000",
        help="Backend URL (default: http://localhost:8000)",
    )
    parser.add_argument("--user", help="User id (default: first user on the server)")
    subparsers = parser.add_subparsers(dest="command")

    # decks
    subparsers.add_parser("decks", help="List the user's decks")

    # quiz
    p_quiz = subparsers.add_parser("quiz", help="Take a test-mode quiz")
    group = p_quiz.add_mutually_exclusive_group(required=True)
    group.add_argument("--deck", help="Quiz on every card of a deck")
    group.add_argument("--starred", metavar="DECK", help="Quiz on the starred cards of a deck")
    group.add_argument(
        "--all-starred",
        action="store_true",
        help="Quiz on starred cards from every deck",
    )
    p_quiz.add_argument("--no-shuffle", action="store_true", help="Keep deck order")
    p_quiz.add_argument(
        "--match-mode",
        choices=[m.value for m in MatchStrictness],
        help="Answer matching strictness (default: ANSWER_MATCH_MODE or fuzzy)",
    )
    p_quiz.add_argument("--cache", help="Local cache path (default: LOCAL_CACHE_PATH)")

    return parser


def selection_from_args(args: argparse.Namespace) -> CardSelection:
    if args.all_starred:
        return AllStarredAcrossDecks()
    if args.starred:
        return StarredOnly(deck_id=args.starred)
    return AllCards(deck_id=args.deck)


def _ask(input_fn: InputFn, prompt: str) -> str:
    try:
        return input_fn(prompt)
    except (EOFError, KeyboardInterrupt):
        raise QuizCancelled() from None


async def resolve_user(client, user_id: str | None) -> str:
    """Use the given user id, or the first user the server knows."""
    if user_id:
        return user_id
    users = await client.list_users()
    if not users:
        raise StoreError("No users found on the server")
    return users[0].id


async def play_quiz(session: QuizSession, input_fn: InputFn, out: TextIO) -> None:
    """Drive a session to completion, prompting for each answer.

    Raises:
        QuizCancelled: If the user leaves before the end
    """
    while True:
        while session.state is not QuizState.COMPLETE:
            card = session.get_current_card()
            print(f"\nCard {session.current_index + 1} of {session.total_cards}", file=out)
            print(f"Video: {card.video_url}", file=out)

            answer = _ask(input_fn, "Your answer: ")
            try:
                quiz_round = await session.submit(answer)
            except EmptyAnswerError as e:
                print(str(e), file=out)
                continue

            print(FeedbackMessages.for_answer(quiz_round.is_correct), file=out)
            if not quiz_round.is_correct:
                print(f"Correct answer: {card.answer}", file=out)
            session.advance()

        print_summary(session, out)
        again = _ask(input_fn, "Try again? [y/N] ")
        if again.strip().lower() not in ("y", "yes"):
            return
        session.restart()


def print_summary(session: QuizSession, out: TextIO) -> None:
    summary = session.summary()
    print(
        f"\nScore: {summary['correct_count']}/{summary['total_cards']} "
        f"({summary['score_percent']}%)",
        file=out,
    )
    if summary["incorrect"]:
        print("Review these:", file=out)
        for missed in summary["incorrect"]:
            print(
                f"  {missed['card']['answer']} (you typed: {missed['user_answer']})",
                file=out,
            )


async def run_quiz(
    client,
    cache: LocalCache,
    user_id: str | None,
    selection: CardSelection,
    shuffle: bool = True,
    strictness: MatchStrictness = MatchStrictness.FUZZY,
    input_fn: InputFn = input,
    out: TextIO = sys.stdout,
    card_load_timeout: float | None = None,
) -> int:
    """Load cards for a selection and play a quiz.

    Args:
        client: Store to read cards and stars from (ApiStudyClient in use)
        cache: Local cache backing the starred set
        user_id: User taking the quiz, None for the first user
        selection: Which cards to quiz on
        shuffle: Shuffle card order
        strictness: Answer matching strictness
        input_fn: Prompt function (input() by default)
        out: Output stream
        card_load_timeout: Seconds to wait for cards

    Returns:
        Process exit code
    """
    timeout = card_load_timeout or config.get_card_load_timeout()
    user_id = await resolve_user(client, user_id)

    reconciler = StarredSetReconciler(
        user_id=user_id,
        store=client,
        cache=cache,
        load_timeout=config.get_starred_load_timeout(),
    )
    try:
        await reconciler.load()
        source: CardSource = CardSelector(client, reconciler)
        try:
            cards = await asyncio.wait_for(source.list_cards(selection), timeout=timeout)
        except TimeoutError:
            print(FeedbackMessages.LOAD_TIMEOUT, file=out)
            return 1

        session = QuizSession.create(
            cards,
            kind=selection.kind,
            shuffle=shuffle,
            evaluator=AnswerEvaluator(strictness),
            reconciler=reconciler,
            user_id=user_id,
            deck_id=selection.deck_id,
        )
        if session.state is QuizState.NO_CARDS:
            print(session.message, file=out)
            return 0

        try:
            await play_quiz(session, input_fn, out)
        except QuizCancelled:
            print("\nQuiz cancelled.", file=out)
        return 0
    finally:
        await reconciler.wait_for_pending()
        for failure in reconciler.failures:
            print(f"Could not save star for card {failure.card_id}: {failure.error}", file=out)


async def list_decks(client, user_id: str | None, out: TextIO = sys.stdout) -> int:
    user_id = await resolve_user(client, user_id)
    decks = await client.list_decks(user_id)
    if not decks:
        print("No decks found.", file=out)
    for deck in decks:
        print(f"{deck.id}\t{deck.title}", file=out)
    return 0


async def _main(args: argparse.Namespace) -> int:
    client = ApiStudyClient(base_url=args.server)
    try:
        if args.command == "decks":
            return await list_decks(client, args.user)

        strictness = (
            MatchStrictness.parse(args.match_mode)
            if args.match_mode
            else config.get_answer_match_mode()
        )
        cache = SqliteCache(args.cache or config.get_local_cache_path())
        return await run_quiz(
            client,
            cache,
            args.user,
            selection_from_args(args),
            shuffle=not args.no_shuffle,
            strictness=strictness,
        )
    except StoreError as e:
        print(f"{FeedbackMessages.LOAD_FAILED}: {e}", file=sys.stderr)
        return 1
    finally:
        await client.close()


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    logging.basicConfig(level=config.get_log_level())
    return asyncio.run(_main(args))


if __name__ == "__main__":
    sys.exit(main())
