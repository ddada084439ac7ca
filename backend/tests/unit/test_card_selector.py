"""Tests for resolving card selections."""

import pytest

from asl_study.domain.services.card_selector import CardSelector
from asl_study.domain.services.starred_reconciler import StarredSetReconciler
from asl_study.domain.value_objects.card_selection import (
    AllCards,
    AllStarredAcrossDecks,
    SelectionKind,
    StarredOnly,
    selection_from,
)
from asl_study.ports.card_source import CardSource

USER = "user-demo"


@pytest.fixture
async def reconciler(local_store, memory_cache):
    await local_store.add_star(USER, "card-01")
    await local_store.add_star(USER, "card-22")
    reconciler = StarredSetReconciler(user_id=USER, store=local_store, cache=memory_cache)
    await reconciler.load()
    return reconciler


def test_selector_is_a_card_source(local_store):
    assert isinstance(CardSelector(local_store), CardSource)


async def test_all_cards(local_store):
    cards = await CardSelector(local_store).list_cards(AllCards("deck-manners"))

    assert [c.answer for c in cards] == ["Thank You/Thanks", "Please", "Sorry/Apologize", "Goodbye/Bye"]


async def test_starred_only_filters_deck(local_store, reconciler):
    cards = await CardSelector(local_store, reconciler).list_cards(StarredOnly("deck-manners"))

    assert [c.id for c in cards] == ["card-22"]


async def test_all_starred_across_decks(local_store, reconciler):
    cards = await CardSelector(local_store, reconciler).list_cards(AllStarredAcrossDecks())

    assert sorted(c.id for c in cards) == ["card-01", "card-22"]


async def test_starred_selection_uses_local_snapshot(local_store, reconciler):
    # Starred locally but not yet in the store
    reconciler.apply("card-20", True)

    cards = await CardSelector(local_store, reconciler).list_cards(StarredOnly("deck-manners"))

    assert sorted(c.id for c in cards) == ["card-20", "card-22"]


async def test_starred_selection_needs_reconciler(local_store):
    with pytest.raises(ValueError):
        await CardSelector(local_store).list_cards(AllStarredAcrossDecks())


class TestSelectionFrom:
    def test_all(self):
        assert selection_from("all", "d1") == AllCards("d1")

    def test_starred_only(self):
        selection = selection_from(SelectionKind.STARRED_ONLY, "d1")
        assert selection == StarredOnly("d1")
        assert selection.starred_only

    def test_across_decks_ignores_deck(self):
        selection = selection_from("all_starred_across_decks", "d1")
        assert selection == AllStarredAcrossDecks()
        assert selection.deck_id is None

    def test_deck_required(self):
        with pytest.raises(ValueError, match="deck_id"):
            selection_from("starred_only")

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            selection_from("all-decks", "d1")
