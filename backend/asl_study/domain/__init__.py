# Domain layer - Business logic (NO external dependencies)

from .entities import Card, Deck, User
from .value_objects import (
    AllCards,
    AllStarredAcrossDecks,
    CardSelection,
    MatchResult,
    MatchStrictness,
    QuizState,
    SelectionKind,
    StarredOnly,
)

__all__ = [
    "AllCards",
    "AllStarredAcrossDecks",
    "Card",
    "CardSelection",
    "Deck",
    "MatchResult",
    "MatchStrictness",
    "QuizState",
    "SelectionKind",
    "StarredOnly",
    "User",
]
