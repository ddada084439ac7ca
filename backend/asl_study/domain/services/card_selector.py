"""Card selector resolving card selections against the study store."""

import logging

from asl_study.domain.entities.card import Card
from asl_study.domain.services.starred_reconciler import StarredSetReconciler
from asl_study.domain.value_objects.card_selection import (
    AllCards,
    AllStarredAcrossDecks,
    CardSelection,
    StarredOnly,
)
from asl_study.ports.study_store import StudyStore

logger = logging.getLogger(__name__)


class CardSelector:
    """CardSource implementation over a StudyStore.

    Starred selections are filtered by the reconciler's snapshot rather than
    a fresh store read, so they agree with what the user sees as starred.
    """

    def __init__(self, store: StudyStore, reconciler: StarredSetReconciler | None = None):
        """Initialize selector.

        Args:
            store: Study data store
            reconciler: Starred set of the active user (required for
                starred selections)
        """
        self._store = store
        self._reconciler = reconciler

    async def list_cards(self, selection: CardSelection) -> list[Card]:
        """Get the cards for a selection.

        Raises:
            StoreError: If the store read failed
            ValueError: If a starred selection is used without a reconciler
        """
        match selection:
            case AllCards(deck_id=deck_id):
                return await self._store.list_cards(deck_id)
            case StarredOnly(deck_id=deck_id):
                starred = self._starred_ids()
                cards = await self._store.list_cards(deck_id)
                return [card for card in cards if card.id in starred]
            case AllStarredAcrossDecks():
                starred = self._starred_ids()
                if not starred:
                    return []
                return await self._store.get_cards_by_ids(sorted(starred))
        raise ValueError(f"Unsupported card selection: {selection!r}")

    def _starred_ids(self) -> frozenset[str]:
        if self._reconciler is None:
            raise ValueError("Starred selections need a starred set")
        return self._reconciler.snapshot()
