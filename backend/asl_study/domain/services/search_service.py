"""Case-insensitive substring search over cards and decks."""

from dataclasses import dataclass

from asl_study.domain.constants import UNKNOWN_DECK_TITLE
from asl_study.domain.entities.card import Card, Deck


@dataclass(frozen=True)
class SearchResults:
    """Cards and decks matching a search term."""

    cards: list[dict]
    decks: list[dict]

    def to_dict(self) -> dict:
        return {"cards": self.cards, "decks": self.decks}


def search(term: str, cards: list[Card], decks: list[Deck]) -> SearchResults:
    """Find cards whose answer and decks whose title contain the term.

    Matching is a plain case-insensitive substring test; result order
    follows the input order. Each card result embeds its deck as
    {"id", "title"}; cards of unknown decks get a placeholder title.

    Args:
        term: Search term (must be non-blank)
        cards: Candidate cards
        decks: Candidate decks

    Raises:
        ValueError: If the term is blank
    """
    needle = term.strip().lower()
    if not needle:
        raise ValueError("Search term is required")

    decks_by_id = {deck.id: deck for deck in decks}

    card_results = []
    for card in cards:
        if needle not in card.answer.lower():
            continue
        deck = decks_by_id.get(card.deck_id)
        card_results.append(
            {
                **card.to_dict(),
                "deck": {
                    "id": card.deck_id,
                    "title": deck.title if deck else UNKNOWN_DECK_TITLE,
                },
                "type": "card",
            }
        )

    deck_results = [
        {**deck.to_dict(), "type": "deck"} for deck in decks if needle in deck.title.lower()
    ]

    return SearchResults(cards=card_results, decks=deck_results)
