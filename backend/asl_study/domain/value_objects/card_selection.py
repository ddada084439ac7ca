"""Card selection value objects.

A selection says which cards a study view or quiz should use. It replaces
sentinel deck ids ("all-starred", "all-decks") with explicit variants.
"""

from dataclasses import dataclass, field
from enum import StrEnum


class SelectionKind(StrEnum):
    """Discriminator for card selections."""

    ALL = "all"
    STARRED_ONLY = "starred_only"
    ALL_STARRED_ACROSS_DECKS = "all_starred_across_decks"


@dataclass(frozen=True)
class AllCards:
    """Every card in one deck."""

    deck_id: str
    kind: SelectionKind = field(default=SelectionKind.ALL, init=False)

    @property
    def starred_only(self) -> bool:
        return False


@dataclass(frozen=True)
class StarredOnly:
    """Starred cards of one deck."""

    deck_id: str
    kind: SelectionKind = field(default=SelectionKind.STARRED_ONLY, init=False)

    @property
    def starred_only(self) -> bool:
        return True


@dataclass(frozen=True)
class AllStarredAcrossDecks:
    """Starred cards from every deck."""

    kind: SelectionKind = field(default=SelectionKind.ALL_STARRED_ACROSS_DECKS, init=False)

    @property
    def deck_id(self) -> None:
        return None

    @property
    def starred_only(self) -> bool:
        return True


CardSelection = AllCards | StarredOnly | AllStarredAcrossDecks


def selection_from(kind: SelectionKind | str, deck_id: str | None = None) -> CardSelection:
    """Build a selection from its discriminator and optional deck id.

    Raises:
        ValueError: If kind is unknown or a deck-scoped kind has no deck id
    """
    kind = SelectionKind(kind)
    if kind is SelectionKind.ALL_STARRED_ACROSS_DECKS:
        return AllStarredAcrossDecks()
    if not deck_id:
        raise ValueError(f"deck_id is required for selection '{kind}'")
    if kind is SelectionKind.STARRED_ONLY:
        return StarredOnly(deck_id=deck_id)
    return AllCards(deck_id=deck_id)
