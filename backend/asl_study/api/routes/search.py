"""Search API route."""

import asyncio

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from asl_study.api.dependencies import StudyStoreDep
from asl_study.api.schemas import ErrorResponse
from asl_study.domain.constants import FeedbackMessages
from asl_study.domain.services.search_service import search

router = APIRouter(prefix="/api/search", tags=["search"])


class SearchDeckRef(BaseModel):
    """Deck reference embedded in a card result."""

    id: str
    title: str


class CardSearchResult(BaseModel):
    """Card matching a search term."""

    id: str
    video_url: str
    answer: str
    deck_id: str
    deck: SearchDeckRef
    type: str = "card"


class DeckSearchResult(BaseModel):
    """Deck matching a search term."""

    id: str
    title: str
    user_id: str | None = None
    type: str = "deck"


class SearchResponse(BaseModel):
    """Search results."""

    cards: list[CardSearchResult]
    decks: list[DeckSearchResult]


@router.get(
    "",
    response_model=SearchResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Search term missing"},
        500: {"model": ErrorResponse, "description": "Store unavailable"},
    },
)
async def search_study_content(store: StudyStoreDep, term: str | None = None) -> SearchResponse:
    """Search card answers and deck titles.

    Case-insensitive substring match; results are not ranked.
    """
    if term is None or not term.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": FeedbackMessages.SEARCH_TERM_REQUIRED},
        )

    cards, decks = await asyncio.gather(store.list_all_cards(), store.list_all_decks())
    results = search(term, cards, decks)
    return SearchResponse(**results.to_dict())
