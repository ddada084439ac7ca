"""Tests for the quiz session state machine."""

import random
from datetime import UTC, datetime, timedelta

import pytest

from asl_study.domain.constants import FeedbackMessages
from asl_study.domain.services.answer_evaluator import AnswerEvaluator
from asl_study.domain.services.quiz_session import (
    EmptyAnswerError,
    InvalidTransitionError,
    QuizSession,
    score_percent,
    shuffle_cards,
)
from asl_study.domain.services.starred_reconciler import StarredSetReconciler
from asl_study.domain.value_objects.card_selection import SelectionKind
from asl_study.domain.value_objects.match_strictness import MatchStrictness
from asl_study.domain.value_objects.quiz_state import QuizState


class LowestRandom(random.Random):
    """Random source whose randint always returns the lower bound."""

    def randint(self, a, b):
        return a


@pytest.fixture
def reconciler(star_store, memory_cache):
    return StarredSetReconciler(user_id="user-1", store=star_store, cache=memory_cache)


@pytest.fixture
def three_cards(make_cards):
    return make_cards("Hello", "Thank You/Thanks", "Goodbye")


class TestPlayThrough:
    async def test_three_cards_without_shuffle(self, three_cards, reconciler):
        session = QuizSession.create(three_cards, shuffle=False, reconciler=reconciler)

        assert session.state is QuizState.PRESENTING
        assert session.get_current_card().id == "c1"

        await session.submit("hello")
        assert session.state is QuizState.SUBMITTED
        assert session.advance().id == "c2"

        await session.submit("thanks")
        assert session.advance().id == "c3"

        await session.submit("see you")
        assert session.advance() is None

        assert session.state is QuizState.COMPLETE
        assert session.correct_count == 2
        assert session.score_percent == 67
        assert session.get_current_card() is None

    async def test_one_of_three_correct_scores_33(self, three_cards):
        session = QuizSession.create(three_cards, shuffle=False)

        for answer in ("hello", "nope", "nope"):
            await session.submit(answer)
            session.advance()

        assert session.score_percent == 33

    async def test_rounds_are_logged_in_order(self, three_cards):
        session = QuizSession.create(three_cards, shuffle=False)

        await session.submit("helo")
        round_ = session.last_round

        assert round_.card.id == "c1"
        assert round_.user_answer == "helo"
        assert round_.is_correct
        assert round_.result.matched_answer == "hello"

    async def test_exact_evaluator_is_used(self, three_cards):
        session = QuizSession.create(
            three_cards,
            shuffle=False,
            evaluator=AnswerEvaluator(MatchStrictness.EXACT),
        )

        quiz_round = await session.submit("helo")

        assert not quiz_round.is_correct

    async def test_remaining_count(self, three_cards):
        session = QuizSession.create(three_cards, shuffle=False)
        assert session.get_remaining_count() == 3

        await session.submit("hello")
        assert session.get_remaining_count() == 2


class TestTransitions:
    async def test_advance_before_submit_is_invalid(self, three_cards):
        session = QuizSession.create(three_cards, shuffle=False)

        with pytest.raises(InvalidTransitionError) as exc_info:
            session.advance()
        assert exc_info.value.state is QuizState.PRESENTING

    async def test_double_submit_is_invalid(self, three_cards):
        session = QuizSession.create(three_cards, shuffle=False)
        await session.submit("hello")

        with pytest.raises(InvalidTransitionError):
            await session.submit("hello")

    async def test_submit_after_complete_is_invalid(self, make_cards):
        session = QuizSession.create(make_cards("Hello"), shuffle=False)
        await session.submit("hello")
        session.advance()

        with pytest.raises(InvalidTransitionError):
            await session.submit("hello")

    async def test_empty_answer_is_rejected_without_recording(self, three_cards):
        session = QuizSession.create(three_cards, shuffle=False)

        with pytest.raises(EmptyAnswerError, match=FeedbackMessages.EMPTY_ANSWER):
            await session.submit("   ")

        assert session.rounds == []
        assert session.state is QuizState.PRESENTING

    async def test_restart_clears_results_and_keeps_order(self, three_cards):
        session = QuizSession.create(three_cards, rng=random.Random(7))
        order = [card.id for card in session.cards]

        await session.submit("wrong")
        session.advance()
        session.restart()

        assert session.state is QuizState.PRESENTING
        assert session.current_index == 0
        assert session.rounds == []
        assert [card.id for card in session.cards] == order

    async def test_restart_from_submitted(self, three_cards):
        session = QuizSession.create(three_cards, shuffle=False)
        await session.submit("hello")

        session.restart()

        assert session.state is QuizState.PRESENTING
        assert session.correct_count == 0


class TestNoCards:
    def test_empty_deck(self):
        session = QuizSession.create([], kind=SelectionKind.ALL)

        assert session.state is QuizState.NO_CARDS
        assert session.message == FeedbackMessages.NO_CARDS_IN_DECK
        assert session.score_percent == 0

    def test_no_starred_cards_in_deck(self):
        session = QuizSession.create([], kind=SelectionKind.STARRED_ONLY)

        assert session.message == FeedbackMessages.NO_STARRED_CARDS

    def test_no_starred_cards_anywhere(self):
        session = QuizSession.create([], kind=SelectionKind.ALL_STARRED_ACROSS_DECKS)

        assert session.message == FeedbackMessages.NO_STARRED_CARDS_ANYWHERE

    async def test_submit_is_invalid(self):
        session = QuizSession.create([])

        with pytest.raises(InvalidTransitionError):
            await session.submit("hello")

    def test_restart_stays_no_cards(self):
        session = QuizSession.create([])
        session.restart()

        assert session.state is QuizState.NO_CARDS

    def test_message_is_none_with_cards(self, three_cards):
        assert QuizSession.create(three_cards).message is None


class TestAutoStar:
    async def test_wrong_answer_stars_card(self, three_cards, reconciler, star_store):
        session = QuizSession.create(three_cards, shuffle=False, reconciler=reconciler)

        await session.submit("wrong")
        await reconciler.wait_for_pending()

        assert reconciler.is_starred("c1")
        assert ("user-1", "c1", True) in star_store.writes

    async def test_correct_answer_does_not_star(self, three_cards, reconciler, star_store):
        session = QuizSession.create(three_cards, shuffle=False, reconciler=reconciler)

        await session.submit("hello")
        await reconciler.wait_for_pending()

        assert reconciler.snapshot() == frozenset()
        assert star_store.writes == []

    @pytest.mark.parametrize(
        "kind",
        [SelectionKind.STARRED_ONLY, SelectionKind.ALL_STARRED_ACROSS_DECKS],
    )
    async def test_starred_quiz_does_not_star(self, three_cards, reconciler, star_store, kind):
        session = QuizSession.create(three_cards, kind=kind, shuffle=False, reconciler=reconciler)

        await session.submit("wrong")
        await reconciler.wait_for_pending()

        assert star_store.writes == []

    async def test_star_write_failure_does_not_break_quiz(self, three_cards, failing_star_store, memory_cache):
        reconciler = StarredSetReconciler(
            user_id="user-1", store=failing_star_store, cache=memory_cache
        )
        session = QuizSession.create(three_cards, shuffle=False, reconciler=reconciler)

        await session.submit("wrong")
        await reconciler.wait_for_pending()

        assert session.state is QuizState.SUBMITTED
        assert reconciler.is_starred("c1")


class TestSummary:
    async def test_summary_lists_missed_cards(self, three_cards):
        session = QuizSession.create(three_cards, shuffle=False)
        for answer in ("hello", "thanks", "later"):
            await session.submit(answer)
            session.advance()

        summary = session.summary()

        assert summary["total_cards"] == 3
        assert summary["correct_count"] == 2
        assert summary["incorrect_count"] == 1
        assert summary["score_percent"] == 67
        assert [r["card"]["id"] for r in summary["incorrect"]] == ["c3"]
        assert summary["incorrect"][0]["user_answer"] == "later"


class TestTimeout:
    def test_fresh_session_is_not_timed_out(self, three_cards):
        assert not QuizSession.create(three_cards).is_timed_out(30)

    def test_idle_session_times_out(self, three_cards):
        session = QuizSession.create(three_cards)
        session.last_activity = datetime.now(UTC) - timedelta(minutes=31)

        assert session.is_timed_out(30)


class TestShuffle:
    def test_fisher_yates_order(self, make_cards):
        cards = make_cards("a", "b", "c")

        shuffled = shuffle_cards(cards, LowestRandom())

        assert [c.id for c in shuffled] == ["c2", "c3", "c1"]

    def test_shuffle_keeps_every_card_and_copies(self, make_cards):
        cards = make_cards(*"abcdefgh")

        shuffled = shuffle_cards(cards, random.Random(3))

        assert sorted(c.id for c in shuffled) == sorted(c.id for c in cards)
        assert [c.id for c in cards] == [f"c{i}" for i in range(1, 9)]

    def test_no_shuffle_keeps_order(self, three_cards):
        session = QuizSession.create(three_cards, shuffle=False)

        assert [c.id for c in session.cards] == ["c1", "c2", "c3"]


@pytest.mark.parametrize(
    "correct,total,expected",
    [
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),
        (1, 2, 50),
        (3, 3, 100),
        (0, 5, 0),
        (0, 0, 0),
    ],
)
def test_score_percent_rounds_half_up(correct, total, expected):
    assert score_percent(correct, total) == expected
