"""API routes module."""

from .cards import router as cards_router
from .decks import router as decks_router
from .quiz import router as quiz_router
from .search import router as search_router
from .users import router as users_router

__all__ = ["users_router", "decks_router", "cards_router", "search_router", "quiz_router"]
