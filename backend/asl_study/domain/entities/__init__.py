"""Domain entities - objects with identity."""

from .card import Card, CardDict, Deck, DeckDict, User

__all__ = ["Card", "CardDict", "Deck", "DeckDict", "User"]
