"""Response models shared across API routes."""

from pydantic import BaseModel

from asl_study.domain.entities.card import Card, Deck, User


class ErrorResponse(BaseModel):
    """Error response body."""

    error: str


class SuccessResponse(BaseModel):
    """Acknowledgement for write operations."""

    success: bool


class CardResponse(BaseModel):
    """Card in API response."""

    id: str
    video_url: str
    answer: str
    deck_id: str

    @classmethod
    def from_card(cls, card: Card) -> "CardResponse":
        return cls(**card.to_dict())


class DeckResponse(BaseModel):
    """Deck in API response."""

    id: str
    title: str
    user_id: str | None = None

    @classmethod
    def from_deck(cls, deck: Deck) -> "DeckResponse":
        return cls(**deck.to_dict())


class UserResponse(BaseModel):
    """User in API response."""

    id: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(**user.to_dict())
