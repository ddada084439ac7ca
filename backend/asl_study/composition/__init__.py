"""
Composition Root.

Centralized dependency wiring for the application.
All factory functions that instantiate adapters belong here to maintain
hexagonal architecture (domain NEVER imports from adapters).
"""

import logging

from asl_study import config
from asl_study.domain.services.answer_evaluator import AnswerEvaluator
from asl_study.domain.services.quiz_manager import QuizManager
from asl_study.domain.services.starred_reconciler import StarredSetRegistry
from asl_study.infrastructure.cache_store import SqliteCache
from asl_study.ports.local_cache import LocalCache
from asl_study.ports.study_store import StudyStore

logger = logging.getLogger(__name__)


def create_study_store() -> StudyStore:
    """Create the study store selected by STORE_BACKEND.

    Raises:
        ValueError: If the backend is unknown or misconfigured
    """
    backend = config.get_store_backend()

    if backend == "local":
        from asl_study.adapters.local_store import LocalStudyStore

        logger.info("Using local study store with embedded sample decks")
        return LocalStudyStore()

    if backend == "supabase":
        from asl_study.adapters.supabase_store import SupabaseStudyStore

        logger.info("Using Supabase study store")
        return SupabaseStudyStore(
            url=config.get_supabase_url(),
            key=config.get_supabase_key(),
        )

    raise ValueError(f"Invalid STORE_BACKEND: '{backend}'. Valid options: 'supabase', 'local'")


def create_local_cache(path: str | None = None) -> LocalCache:
    """Create the SQLite-backed local cache.

    Args:
        path: Database path (default: LOCAL_CACHE_PATH)
    """
    return SqliteCache(path or config.get_local_cache_path())


def create_answer_evaluator() -> AnswerEvaluator:
    """Create AnswerEvaluator with the configured strictness."""
    return AnswerEvaluator(strictness=config.get_answer_match_mode())


def create_starred_registry(store: StudyStore, cache: LocalCache) -> StarredSetRegistry:
    """Create the per-user starred set registry."""
    return StarredSetRegistry(
        store=store,
        cache=cache,
        load_timeout=config.get_starred_load_timeout(),
    )


def create_quiz_manager(store: StudyStore, registry: StarredSetRegistry) -> QuizManager:
    """Create QuizManager wired to the store, registry and evaluator."""
    return QuizManager(
        store=store,
        registry=registry,
        evaluator=create_answer_evaluator(),
        card_load_timeout=config.get_card_load_timeout(),
        timeout_minutes=config.get_quiz_timeout_minutes(),
    )
