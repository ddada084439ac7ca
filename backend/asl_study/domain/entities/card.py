"""Card, deck and user entities for the ASL study tool."""

from dataclasses import dataclass
from typing import Any, TypedDict


class CardDict(TypedDict):
    """Card data structure for serialization."""

    id: str
    video_url: str
    answer: str
    deck_id: str


class DeckDict(TypedDict):
    """Deck data structure for serialization."""

    id: str
    title: str
    user_id: str | None


@dataclass(frozen=True)
class Card:
    """Sign-language flashcard entity.

    A card pairs a sign video with its canonical English answer. Cards are
    immutable once created; their lifecycle belongs to deck authoring.

    Attributes:
        id: Unique card identifier from the store
        video_url: Reference to the sign-language video resource
        answer: Canonical answer text, may hold "/"-separated alternatives
        deck_id: Identifier of the owning deck
    """

    id: str
    video_url: str
    answer: str
    deck_id: str

    def to_dict(self) -> CardDict:
        """Convert card to dictionary for serialization."""
        return {
            "id": self.id,
            "video_url": self.video_url,
            "answer": self.answer,
            "deck_id": self.deck_id,
        }

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Card":
        """Create from a store row.

        Ids are normalised to strings so that integer and UUID keys compare
        the same way throughout the domain.
        """
        return cls(
            id=str(row["id"]),
            video_url=row.get("video_url") or "",
            answer=row.get("answer") or "",
            deck_id=str(row.get("deck_id") or ""),
        )


@dataclass(frozen=True)
class Deck:
    """Named collection of cards owned by a user."""

    id: str
    title: str
    user_id: str | None = None

    def to_dict(self) -> DeckDict:
        """Convert deck to dictionary for serialization."""
        return {"id": self.id, "title": self.title, "user_id": self.user_id}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Deck":
        """Create from a store row."""
        user_id = row.get("user_id")
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            user_id=str(user_id) if user_id is not None else None,
        )


@dataclass(frozen=True)
class User:
    """Study tool user."""

    id: str
    email: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id, "email": self.email}

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "User":
        return cls(id=str(row["id"]), email=row.get("email") or "")
