"""User and starred-card API routes."""

from fastapi import APIRouter
from pydantic import BaseModel

from asl_study.api.dependencies import StudyStoreDep
from asl_study.api.schemas import CardResponse, ErrorResponse, UserResponse

router = APIRouter(prefix="/api/users", tags=["users"])


class StarredCardsResponse(BaseModel):
    """Starred cards of a user."""

    cards: list[CardResponse]


class StarredCardIdsResponse(BaseModel):
    """Starred card ids of a user."""

    card_ids: list[str]


@router.get(
    "",
    response_model=list[UserResponse],
    responses={500: {"model": ErrorResponse, "description": "Store unavailable"}},
)
async def list_users(store: StudyStoreDep) -> list[UserResponse]:
    """List all users."""
    users = await store.list_users()
    return [UserResponse.from_user(user) for user in users]


@router.get(
    "/{user_id}/starred-cards",
    response_model=StarredCardsResponse,
    responses={500: {"model": ErrorResponse, "description": "Store unavailable"}},
)
async def get_starred_cards(user_id: str, store: StudyStoreDep) -> StarredCardsResponse:
    """Get the full cards a user has starred."""
    cards = await store.get_starred_cards(user_id)
    return StarredCardsResponse(cards=[CardResponse.from_card(card) for card in cards])


@router.get(
    "/{user_id}/starred-card-ids",
    response_model=StarredCardIdsResponse,
    responses={500: {"model": ErrorResponse, "description": "Store unavailable"}},
)
async def get_starred_card_ids(user_id: str, store: StudyStoreDep) -> StarredCardIdsResponse:
    """Get the ids of the cards a user has starred."""
    card_ids = await store.get_starred_ids(user_id)
    return StarredCardIdsResponse(card_ids=card_ids)
