"""Card and star API routes."""

import logging

from fastapi import APIRouter
from pydantic import BaseModel, Field

from asl_study.api.dependencies import StarredRegistryDep, StudyStoreDep
from asl_study.api.schemas import CardResponse, ErrorResponse, SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cards", tags=["cards"])


class StarCardRequest(BaseModel):
    """Request body for starring a card."""

    user_id: str = Field(..., min_length=1)


@router.get(
    "/{deck_id}",
    response_model=list[CardResponse],
    responses={500: {"model": ErrorResponse, "description": "Store unavailable"}},
)
async def list_cards(deck_id: str, store: StudyStoreDep) -> list[CardResponse]:
    """List the cards of a deck."""
    cards = await store.list_cards(deck_id)
    return [CardResponse.from_card(card) for card in cards]


@router.post(
    "/{card_id}/star",
    response_model=SuccessResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing user id"},
        500: {"model": ErrorResponse, "description": "Store write failed"},
    },
)
async def star_card(
    card_id: str,
    request: StarCardRequest,
    store: StudyStoreDep,
    registry: StarredRegistryDep,
) -> SuccessResponse:
    """Star a card for a user.

    Writes through to the store; a loaded starred set for the user is
    updated afterwards so running quizzes see the change.
    """
    await store.add_star(request.user_id, card_id)

    reconciler = registry.find(request.user_id)
    if reconciler is not None:
        reconciler.apply(card_id, True)

    logger.info("card_starred", extra={"user_id": request.user_id, "card_id": card_id})
    return SuccessResponse(success=True)


@router.delete(
    "/{card_id}/star",
    response_model=SuccessResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing user id"},
        500: {"model": ErrorResponse, "description": "Store write failed"},
    },
)
async def unstar_card(
    card_id: str,
    user_id: str,
    store: StudyStoreDep,
    registry: StarredRegistryDep,
) -> SuccessResponse:
    """Remove a user's star from a card."""
    await store.remove_star(user_id, card_id)

    reconciler = registry.find(user_id)
    if reconciler is not None:
        reconciler.apply(card_id, False)

    logger.info("card_unstarred", extra={"user_id": user_id, "card_id": card_id})
    return SuccessResponse(success=True)
