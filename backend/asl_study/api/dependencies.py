"""FastAPI dependency injection module.

Provides the shared service instances for API routes. Instances are built
by lifespan events and kept on app.state, so each application (and each
TestClient) gets its own set.
"""

import logging
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from asl_study import config
from asl_study.adapters.local_store import sample_vocabulary
from asl_study.composition import (
    create_local_cache,
    create_quiz_manager,
    create_starred_registry,
    create_study_store,
)
from asl_study.domain.services.quiz_manager import QuizManager
from asl_study.domain.services.starred_reconciler import StarredSetRegistry
from asl_study.ports.study_store import StoreError, StudyStore

logger = logging.getLogger(__name__)


async def init_dependencies(app: FastAPI) -> None:
    """Initialize the shared dependencies on app.state.

    Called during FastAPI lifespan startup.
    """
    store = create_study_store()

    if config.should_seed_sample_data():
        try:
            await store.seed_sample_data(sample_vocabulary())
        except StoreError as e:
            # Serve whatever data exists rather than refusing to start
            logger.error(f"Sample data seeding failed: {e}")

    cache = create_local_cache()
    registry = create_starred_registry(store, cache)

    app.state.study_store = store
    app.state.local_cache = cache
    app.state.starred_registry = registry
    app.state.quiz_manager = create_quiz_manager(store, registry)


async def cleanup_dependencies(app: FastAPI) -> None:
    """Cleanup dependencies on shutdown.

    Called during FastAPI lifespan shutdown.
    Drops live quizzes, flushes pending star writes and closes the store.
    """
    quiz_manager: QuizManager | None = getattr(app.state, "quiz_manager", None)
    if quiz_manager is not None:
        await quiz_manager.shutdown()

    store = getattr(app.state, "study_store", None)
    if store is not None and hasattr(store, "close"):
        await store.close()


def _require(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise RuntimeError("Dependencies not initialized. Call init_dependencies first.")
    return value


def get_study_store(request: Request) -> StudyStore:
    """Dependency: Get StudyStore instance."""
    return _require(request, "study_store")


def get_starred_registry(request: Request) -> StarredSetRegistry:
    """Dependency: Get StarredSetRegistry instance."""
    return _require(request, "starred_registry")


def get_quiz_manager(request: Request) -> QuizManager:
    """Dependency: Get QuizManager instance."""
    return _require(request, "quiz_manager")


# Type aliases for dependency injection
StudyStoreDep = Annotated[StudyStore, Depends(get_study_store)]
StarredRegistryDep = Annotated[StarredSetRegistry, Depends(get_starred_registry)]
QuizManagerDep = Annotated[QuizManager, Depends(get_quiz_manager)]
