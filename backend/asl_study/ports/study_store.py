"""Port interfaces for the study data store (decks, cards, users, stars)."""

from typing import Protocol, runtime_checkable

from asl_study.domain.entities.card import Card, Deck, User


@runtime_checkable
class StarStore(Protocol):
    """Port for the store of record of starred cards.

    A returned list, even an empty one, means the read succeeded.
    A failed read raises StoreError; callers never see an empty list
    standing in for an error.
    """

    async def get_starred_ids(self, user_id: str) -> list[str]:
        """Get ids of all cards the user has starred.

        Raises:
            StoreError: If the store could not be read
        """
        ...

    async def add_star(self, user_id: str, card_id: str) -> None:
        """Mark a card as starred for the user (idempotent).

        Raises:
            StoreError: If the write failed
        """
        ...

    async def remove_star(self, user_id: str, card_id: str) -> None:
        """Remove a user's star from a card (idempotent).

        Raises:
            StoreError: If the write failed
        """
        ...


@runtime_checkable
class StudyStore(StarStore, Protocol):
    """Port for deck, card and user data.

    Abstracts the hosted relational store (Supabase in production).
    Queries are simple filtered selects; the domain doesn't know about
    tables or query builders.
    """

    async def list_users(self) -> list[User]:
        """Get all users."""
        ...

    async def list_decks(self, user_id: str) -> list[Deck]:
        """Get decks owned by a user."""
        ...

    async def list_all_decks(self) -> list[Deck]:
        """Get every deck."""
        ...

    async def list_cards(self, deck_id: str) -> list[Card]:
        """Get all cards in a deck (unordered)."""
        ...

    async def list_all_cards(self) -> list[Card]:
        """Get every card across all decks."""
        ...

    async def get_cards_by_ids(self, card_ids: list[str]) -> list[Card]:
        """Get the cards with the given ids; unknown ids are ignored."""
        ...

    async def get_starred_cards(self, user_id: str) -> list[Card]:
        """Get full card records for a user's starred cards."""
        ...

    async def seed_sample_data(self, cards: list[dict[str, str]]) -> None:
        """Clear existing data and create the demo user, deck and cards.

        Args:
            cards: Dicts with "video_url" and "answer" keys
        """
        ...


class StoreError(Exception):
    """Raised when the study store cannot be read or written."""

    pass
