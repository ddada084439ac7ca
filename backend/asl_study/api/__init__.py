"""API layer - FastAPI routes and dependencies."""

from .dependencies import (
    QuizManagerDep,
    StarredRegistryDep,
    StudyStoreDep,
    cleanup_dependencies,
    get_quiz_manager,
    get_starred_registry,
    get_study_store,
    init_dependencies,
)
from .routes import cards_router, decks_router, quiz_router, search_router, users_router

__all__ = [
    # Routes
    "users_router",
    "decks_router",
    "cards_router",
    "search_router",
    "quiz_router",
    # Dependencies
    "init_dependencies",
    "cleanup_dependencies",
    "get_study_store",
    "get_starred_registry",
    "get_quiz_manager",
    # Type aliases
    "StudyStoreDep",
    "StarredRegistryDep",
    "QuizManagerDep",
]
