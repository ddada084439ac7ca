"""Quiz manager service for test-mode session lifecycle management."""

import asyncio
import logging
import random
from collections.abc import Callable
from dataclasses import dataclass

from asl_study.domain.constants import (
    CARD_LOAD_TIMEOUT_SECONDS,
    QUIZ_TIMEOUT_MINUTES,
    FeedbackMessages,
)
from asl_study.domain.entities.card import Card
from asl_study.domain.services.answer_evaluator import AnswerEvaluator
from asl_study.domain.services.card_selector import CardSelector
from asl_study.domain.services.quiz_session import QuizRound, QuizSession
from asl_study.domain.services.starred_reconciler import (
    StarredSetReconciler,
    StarredSetRegistry,
)
from asl_study.domain.value_objects.card_selection import CardSelection
from asl_study.ports.card_source import CardSource
from asl_study.ports.study_store import StoreError, StudyStore

logger = logging.getLogger(__name__)


class QuizNotFoundError(Exception):
    """Raised when no quiz session exists for an id."""

    pass


class QuizExpiredError(Exception):
    """Raised when a quiz session has timed out."""

    pass


class CardLoadError(Exception):
    """Raised when cards for a quiz could not be loaded in time."""

    def __init__(self, message: str, timed_out: bool = False):
        self.timed_out = timed_out
        super().__init__(message)


@dataclass
class AnswerOutcome:
    """Result of submitting an answer."""

    session: QuizSession
    round: QuizRound


class QuizManager:
    """Manages test-mode quiz sessions.

    Responsibilities:
    - Card loading for a selection, bounded by a timeout
    - Session registry keyed by quiz id, with inactivity timeout
    - Sharing each user's starred set with their sessions

    Sessions live in memory only; results are never persisted.
    """

    def __init__(
        self,
        store: StudyStore,
        registry: StarredSetRegistry,
        evaluator: AnswerEvaluator | None = None,
        card_load_timeout: float = CARD_LOAD_TIMEOUT_SECONDS,
        timeout_minutes: float = QUIZ_TIMEOUT_MINUTES,
        rng: random.Random | None = None,
        card_source_factory: Callable[[StarredSetReconciler], CardSource] | None = None,
    ):
        """Initialize quiz manager.

        Args:
            store: Study data store
            registry: Per-user starred sets
            evaluator: Answer matching service shared by all sessions
            card_load_timeout: Seconds to wait for cards before failing
            timeout_minutes: Session inactivity timeout
            rng: Random source for shuffles
            card_source_factory: Builds the card source for a user's starred
                set (default: CardSelector over the store)
        """
        self._store = store
        self._registry = registry
        self._evaluator = evaluator or AnswerEvaluator()
        self._card_load_timeout = card_load_timeout
        self._timeout_minutes = timeout_minutes
        self._rng = rng or random.Random()
        self._card_source_factory = card_source_factory or (
            lambda reconciler: CardSelector(store, reconciler)
        )
        self._sessions: dict[str, QuizSession] = {}

    @property
    def active_count(self) -> int:
        return len(self._sessions)

    async def start_quiz(
        self,
        user_id: str,
        selection: CardSelection,
        shuffle: bool = True,
    ) -> QuizSession:
        """Start a new quiz for a user.

        Reloads the user's starred set first so that starred selections and
        auto-starring see the reconciled state.

        Args:
            user_id: User taking the quiz
            selection: Which cards to quiz on
            shuffle: Shuffle card order once at start

        Returns:
            New session (PRESENTING, or NO_CARDS if nothing matched)

        Raises:
            CardLoadError: If cards could not be loaded or timed out
        """
        self.purge_expired()
        reconciler = await self._registry.load(user_id)
        source = self._card_source_factory(reconciler)

        cards = await self._load_cards(source, selection)

        session = QuizSession.create(
            cards,
            kind=selection.kind,
            shuffle=shuffle,
            evaluator=self._evaluator,
            reconciler=reconciler,
            rng=self._rng,
            user_id=user_id,
            deck_id=selection.deck_id,
        )
        self._sessions[session.id] = session

        logger.info(
            "quiz_started",
            extra={
                "quiz_id": session.id,
                "user_id": user_id,
                "selection": str(selection.kind),
                "card_count": session.total_cards,
            },
        )
        return session

    def get_quiz(self, quiz_id: str) -> QuizSession:
        """Get a live quiz session.

        Raises:
            QuizNotFoundError: If no session has this id
            QuizExpiredError: If the session timed out (it is removed)
        """
        session = self._sessions.get(quiz_id)
        if session is None:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")
        if session.is_timed_out(self._timeout_minutes):
            del self._sessions[quiz_id]
            raise QuizExpiredError("Quiz has timed out due to inactivity")
        return session

    async def submit_answer(self, quiz_id: str, answer: str) -> AnswerOutcome:
        """Score an answer for the current card of a quiz.

        Raises:
            QuizNotFoundError, QuizExpiredError: If the quiz is unavailable
            InvalidTransitionError: If the quiz isn't waiting for an answer
            EmptyAnswerError: If the answer is blank
        """
        session = self.get_quiz(quiz_id)
        quiz_round = await session.submit(answer)
        return AnswerOutcome(session=session, round=quiz_round)

    def advance(self, quiz_id: str) -> tuple[QuizSession, Card | None]:
        """Move a quiz to its next card.

        Returns:
            Tuple of (session, next_card); next_card is None when complete
        """
        session = self.get_quiz(quiz_id)
        next_card = session.advance()
        return session, next_card

    def restart(self, quiz_id: str) -> QuizSession:
        """Restart a quiz with the same card order."""
        session = self.get_quiz(quiz_id)
        session.restart()
        return session

    def cancel(self, quiz_id: str) -> None:
        """Drop a quiz session.

        Raises:
            QuizNotFoundError: If no session has this id
        """
        if self._sessions.pop(quiz_id, None) is None:
            raise QuizNotFoundError(f"Quiz {quiz_id} not found")
        logger.info("quiz_cancelled", extra={"quiz_id": quiz_id})

    def purge_expired(self) -> int:
        """Remove timed-out sessions.

        Returns:
            Number of sessions removed
        """
        expired = [
            quiz_id
            for quiz_id, session in self._sessions.items()
            if session.is_timed_out(self._timeout_minutes)
        ]
        for quiz_id in expired:
            del self._sessions[quiz_id]
        if expired:
            logger.info(f"Purged {len(expired)} idle quiz sessions")
        return len(expired)

    async def shutdown(self) -> None:
        """Drop all sessions and flush pending star writes."""
        self._sessions.clear()
        await self._registry.wait_for_pending()

    async def _load_cards(self, source: CardSource, selection: CardSelection) -> list[Card]:
        try:
            return await asyncio.wait_for(
                source.list_cards(selection),
                timeout=self._card_load_timeout,
            )
        except TimeoutError:
            logger.warning(f"Card load timed out after {self._card_load_timeout}s")
            raise CardLoadError(FeedbackMessages.LOAD_TIMEOUT, timed_out=True) from None
        except StoreError as e:
            logger.error(f"Card load failed: {e}")
            raise CardLoadError(FeedbackMessages.LOAD_FAILED) from e
