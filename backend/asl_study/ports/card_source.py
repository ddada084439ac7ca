"""Port interface for resolving card selections into card lists."""

from typing import Protocol, runtime_checkable

from asl_study.domain.entities.card import Card
from asl_study.domain.value_objects.card_selection import CardSelection


@runtime_checkable
class CardSource(Protocol):
    """Supplies the card pool for a study view or quiz."""

    async def list_cards(self, selection: CardSelection) -> list[Card]:
        """Get the cards matching a selection (unordered).

        Raises:
            StoreError: If the underlying store failed
        """
        ...
