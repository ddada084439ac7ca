"""Deck API routes."""

from fastapi import APIRouter

from asl_study.api.dependencies import StudyStoreDep
from asl_study.api.schemas import DeckResponse, ErrorResponse

router = APIRouter(prefix="/api/decks", tags=["decks"])


@router.get(
    "/{user_id}",
    response_model=list[DeckResponse],
    responses={500: {"model": ErrorResponse, "description": "Store unavailable"}},
)
async def list_decks(user_id: str, store: StudyStoreDep) -> list[DeckResponse]:
    """List the decks owned by a user."""
    decks = await store.list_decks(user_id)
    return [DeckResponse.from_deck(deck) for deck in decks]
