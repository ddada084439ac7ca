"""Quiz session for test-mode play-throughs."""

import logging
import random
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from uuid import uuid4

from asl_study.domain.constants import FeedbackMessages
from asl_study.domain.entities.card import Card
from asl_study.domain.services.answer_evaluator import AnswerEvaluator, normalize
from asl_study.domain.services.starred_reconciler import StarredSetReconciler
from asl_study.domain.value_objects.card_selection import SelectionKind
from asl_study.domain.value_objects.match_result import MatchResult
from asl_study.domain.value_objects.quiz_state import QuizState

logger = logging.getLogger(__name__)


class InvalidTransitionError(Exception):
    """Raised when an action is not allowed in the current quiz state."""

    def __init__(self, action: str, state: QuizState):
        self.action = action
        self.state = state
        super().__init__(f"Cannot {action} in state {state}")


class EmptyAnswerError(ValueError):
    """Raised when an empty answer is submitted."""

    pass


@dataclass(frozen=True)
class QuizRound:
    """One answered card.

    Attributes:
        card: Card that was shown
        user_answer: Answer as typed by the user
        result: Outcome of answer matching
    """

    card: Card
    user_answer: str
    result: MatchResult

    @property
    def is_correct(self) -> bool:
        return self.result.is_correct

    def to_dict(self) -> dict:
        return {
            "card": self.card.to_dict(),
            "user_answer": self.user_answer,
            "is_correct": self.is_correct,
            "matched_answer": self.result.matched_answer,
        }


def shuffle_cards(cards: list[Card], rng: random.Random) -> list[Card]:
    """Return a uniformly shuffled copy using Fisher-Yates."""
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def score_percent(correct: int, total: int) -> int:
    """Percentage of correct answers, rounded half-up to an integer."""
    if total <= 0:
        return 0
    # Integer arithmetic avoids float artefacts and banker's rounding
    return (correct * 200 + total) // (total * 2)


def no_cards_message(kind: SelectionKind) -> str:
    """Message for a quiz that has nothing to show."""
    if kind is SelectionKind.STARRED_ONLY:
        return FeedbackMessages.NO_STARRED_CARDS
    if kind is SelectionKind.ALL_STARRED_ACROSS_DECKS:
        return FeedbackMessages.NO_STARRED_CARDS_ANYWHERE
    return FeedbackMessages.NO_CARDS_IN_DECK


@dataclass
class QuizSession:
    """Test-mode quiz session.

    Drives one play-through of a card list:
    - Fisher-Yates shuffle once at start; order is then fixed
    - PRESENTING -> SUBMITTED -> PRESENTING | COMPLETE
    - Wrong answers auto-star the card unless the quiz is starred-only
    - Empty card lists start in the terminal NO_CARDS state

    Attributes:
        cards: Cards in presentation order
        kind: Selection the cards were drawn from
        evaluator: Answer matching service
        reconciler: Starred set to update on wrong answers (optional)
        id: Unique session identifier (UUID v4)
        user_id: Owner of the session, if known
        state: Current quiz state
        current_index: Position of the current card
        rounds: Ordered result log
        started_at: When session started
        last_activity: Last user activity timestamp (for timeout)
    """

    cards: list[Card]
    kind: SelectionKind = SelectionKind.ALL
    evaluator: AnswerEvaluator = field(default_factory=AnswerEvaluator)
    reconciler: StarredSetReconciler | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    user_id: str | None = None
    deck_id: str | None = None
    state: QuizState = QuizState.PRESENTING
    current_index: int = 0
    rounds: list[QuizRound] = field(default_factory=list)
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    last_activity: datetime = field(default_factory=lambda: datetime.now(UTC))

    def __post_init__(self) -> None:
        self.cards = list(self.cards)  # Copy to avoid mutating caller's list
        if not self.cards:
            self.state = QuizState.NO_CARDS

    @classmethod
    def create(
        cls,
        cards: list[Card],
        kind: SelectionKind = SelectionKind.ALL,
        shuffle: bool = True,
        evaluator: AnswerEvaluator | None = None,
        reconciler: StarredSetReconciler | None = None,
        rng: random.Random | None = None,
        user_id: str | None = None,
        deck_id: str | None = None,
    ) -> "QuizSession":
        """Create a new quiz session.

        Args:
            cards: Cards already filtered for the selection
            kind: Selection kind (controls auto-starring and no-cards message)
            shuffle: Shuffle card order once at start
            evaluator: Answer matching service (default fuzzy)
            reconciler: Starred set to update on wrong answers
            rng: Random source for the shuffle
            user_id: Owner of the session
            deck_id: Deck being tested, if any

        Returns:
            New session in PRESENTING state, or NO_CARDS if cards is empty
        """
        ordered = shuffle_cards(cards, rng or random.Random()) if shuffle else list(cards)
        return cls(
            cards=ordered,
            kind=kind,
            evaluator=evaluator or AnswerEvaluator(),
            reconciler=reconciler,
            user_id=user_id,
            deck_id=deck_id,
        )

    @property
    def starred_only(self) -> bool:
        return self.kind is not SelectionKind.ALL

    @property
    def total_cards(self) -> int:
        return len(self.cards)

    @property
    def correct_count(self) -> int:
        return sum(1 for r in self.rounds if r.is_correct)

    @property
    def incorrect_count(self) -> int:
        return len(self.rounds) - self.correct_count

    @property
    def score_percent(self) -> int:
        return score_percent(self.correct_count, self.total_cards)

    @property
    def message(self) -> str | None:
        """Explanation for the NO_CARDS state, None otherwise."""
        if self.state is QuizState.NO_CARDS:
            return no_cards_message(self.kind)
        return None

    @property
    def last_round(self) -> QuizRound | None:
        return self.rounds[-1] if self.rounds else None

    def get_current_card(self) -> Card | None:
        """Get the card being presented or just scored.

        Returns:
            Current card or None when the quiz is over or empty
        """
        if self.state.is_terminal() or self.current_index >= len(self.cards):
            return None
        return self.cards[self.current_index]

    def get_remaining_count(self) -> int:
        """Get number of cards not yet answered."""
        return max(0, len(self.cards) - len(self.rounds))

    async def submit(self, answer: str) -> QuizRound:
        """Score an answer for the current card.

        Args:
            answer: Free-text answer typed by the user

        Returns:
            The recorded round

        Raises:
            InvalidTransitionError: If not in PRESENTING state
            EmptyAnswerError: If the answer is blank
        """
        if not self.state.can_accept_answers():
            raise InvalidTransitionError("submit", self.state)
        if not normalize(answer):
            raise EmptyAnswerError(FeedbackMessages.EMPTY_ANSWER)

        card = self.cards[self.current_index]
        result = self.evaluator.evaluate(answer, card.answer)
        quiz_round = QuizRound(card=card, user_answer=answer, result=result)
        self.rounds.append(quiz_round)
        self.state = QuizState.SUBMITTED
        self.touch()

        if not result.is_correct and not self.starred_only and self.reconciler is not None:
            logger.info(
                f"Auto-starring missed card {card.id}",
                extra={"quiz_id": self.id, "card_id": card.id},
            )
            await self.reconciler.toggle(card.id, True)

        return quiz_round

    def advance(self) -> Card | None:
        """Move past the scored card.

        Returns:
            Next card, or None if the quiz is complete

        Raises:
            InvalidTransitionError: If not in SUBMITTED state
        """
        if self.state is not QuizState.SUBMITTED:
            raise InvalidTransitionError("advance", self.state)

        self.touch()
        if self.current_index + 1 < len(self.cards):
            self.current_index += 1
            self.state = QuizState.PRESENTING
            return self.cards[self.current_index]

        self.state = QuizState.COMPLETE
        logger.info(
            "quiz_complete",
            extra={
                "quiz_id": self.id,
                "correct_count": self.correct_count,
                "total_cards": self.total_cards,
                "score_percent": self.score_percent,
            },
        )
        return None

    def restart(self) -> None:
        """Start the same quiz over, keeping the existing card order.

        Allowed from any state; a NO_CARDS session stays NO_CARDS.
        """
        self.current_index = 0
        self.rounds.clear()
        self.state = QuizState.PRESENTING if self.cards else QuizState.NO_CARDS
        self.touch()

    def touch(self) -> None:
        """Update last activity timestamp."""
        self.last_activity = datetime.now(UTC)

    def is_timed_out(self, timeout_minutes: float = 30) -> bool:
        """Check if session has timed out due to inactivity."""
        timeout_delta = timedelta(minutes=timeout_minutes)
        return datetime.now(UTC) - self.last_activity > timeout_delta

    def summary(self) -> dict:
        """Get quiz results for the review screen.

        Returns:
            Dictionary with counts, percentage and missed rounds
        """
        return {
            "total_cards": self.total_cards,
            "answered": len(self.rounds),
            "correct_count": self.correct_count,
            "incorrect_count": self.incorrect_count,
            "score_percent": self.score_percent,
            "incorrect": [r.to_dict() for r in self.rounds if not r.is_correct],
        }
