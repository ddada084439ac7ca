"""Domain value objects - immutable objects without identity."""

from .card_selection import (
    AllCards,
    AllStarredAcrossDecks,
    CardSelection,
    SelectionKind,
    StarredOnly,
    selection_from,
)
from .match_result import MatchResult
from .match_strictness import MatchStrictness
from .quiz_state import QuizState

__all__ = [
    "AllCards",
    "AllStarredAcrossDecks",
    "CardSelection",
    "MatchResult",
    "MatchStrictness",
    "QuizState",
    "SelectionKind",
    "StarredOnly",
    "selection_from",
]
