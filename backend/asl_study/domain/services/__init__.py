"""Domain services - orchestration and business logic."""

from .answer_evaluator import AnswerEvaluator, evaluate, split_answers, within_one_edit
from .starred_reconciler import (
    PropagationFailure,
    StarredSetReconciler,
    StarredSetRegistry,
    StarredSource,
)
from .quiz_session import (
    EmptyAnswerError,
    InvalidTransitionError,
    QuizRound,
    QuizSession,
    score_percent,
    shuffle_cards,
)
from .card_selector import CardSelector
from .search_service import SearchResults, search
from .quiz_manager import (
    AnswerOutcome,
    CardLoadError,
    QuizExpiredError,
    QuizManager,
    QuizNotFoundError,
)

__all__ = [
    "AnswerEvaluator",
    "evaluate",
    "split_answers",
    "within_one_edit",
    "StarredSetReconciler",
    "StarredSetRegistry",
    "StarredSource",
    "PropagationFailure",
    "QuizSession",
    "QuizRound",
    "InvalidTransitionError",
    "EmptyAnswerError",
    "score_percent",
    "shuffle_cards",
    "CardSelector",
    "SearchResults",
    "search",
    "QuizManager",
    "AnswerOutcome",
    "CardLoadError",
    "QuizNotFoundError",
    "QuizExpiredError",
]
