"""Application configuration loaded from environment variables.

Provides type-safe access to configuration with sensible defaults.
Production defaults are restrictive for security.
"""

import os
from pathlib import Path

from asl_study.domain.constants import (
    CARD_LOAD_TIMEOUT_SECONDS,
    QUIZ_TIMEOUT_MINUTES,
    STARRED_LOAD_TIMEOUT_SECONDS,
)
from asl_study.domain.value_objects.match_strictness import MatchStrictness


def get_cors_origins() -> list[str]:
    """Get allowed CORS origins from environment.

    Environment variable: CORS_ORIGINS (comma-separated)
    Default: localhost ports 3000-3005 for development
    """
    default_origins = "http://localhost:3000,http://localhost:3001,http://localhost:3002,http://localhost:3003,http://localhost:3004,http://localhost:3005"
    origins_str = os.getenv("CORS_ORIGINS", default_origins)
    return [origin.strip() for origin in origins_str.split(",") if origin.strip()]


def get_cors_allow_credentials() -> bool:
    """Get CORS allow_credentials setting.

    Environment variable: CORS_ALLOW_CREDENTIALS
    Default: true for development
    """
    return os.getenv("CORS_ALLOW_CREDENTIALS", "true").lower() == "true"


# Restricted HTTP methods - only what the API actually uses
CORS_ALLOWED_METHODS = ["GET", "POST", "DELETE", "OPTIONS"]

# Restricted headers - only what's needed for the API
CORS_ALLOWED_HEADERS = [
    "Accept",
    "Accept-Language",
    "Content-Type",
    "Authorization",
    "X-Requested-With",
]


def get_log_level() -> str:
    """Get root log level.

    Environment variable: LOG_LEVEL
    Default: INFO
    """
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_store_backend() -> str:
    """Get study store backend type.

    Options:
        - 'supabase': Use Supabase (default, requires SUPABASE_URL/KEY)
        - 'local': Use in-memory store with embedded sample decks
    """
    return os.getenv("STORE_BACKEND", "supabase").lower()


def get_supabase_url() -> str:
    """Get Supabase project URL.

    Environment variable: SUPABASE_URL
    Required for the supabase backend.
    """
    return os.getenv("SUPABASE_URL", "")


def get_supabase_key() -> str:
    """Get Supabase API key.

    Environment variable: SUPABASE_KEY
    Required for the supabase backend.
    """
    return os.getenv("SUPABASE_KEY", "")


def should_seed_sample_data() -> bool:
    """Check whether to replace store contents with sample data at startup.

    Environment variable: SEED_SAMPLE_DATA
    Default: false
    """
    return os.getenv("SEED_SAMPLE_DATA", "false").lower() == "true"


def get_answer_match_mode() -> MatchStrictness:
    """Get answer matching strictness.

    Environment variable: ANSWER_MATCH_MODE ('exact' or 'fuzzy')
    Default: fuzzy

    Raises:
        ValueError: If the value is not a known mode
    """
    return MatchStrictness.parse(os.getenv("ANSWER_MATCH_MODE", MatchStrictness.FUZZY))


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"Invalid {name}: '{raw}' is not a number") from None
    if value <= 0:
        raise ValueError(f"Invalid {name}: must be positive")
    return value


def get_card_load_timeout() -> float:
    """Seconds to wait for a quiz's cards (CARD_LOAD_TIMEOUT_SECONDS)."""
    return _get_float("CARD_LOAD_TIMEOUT_SECONDS", CARD_LOAD_TIMEOUT_SECONDS)


def get_starred_load_timeout() -> float:
    """Seconds to wait for remote starred ids (STARRED_LOAD_TIMEOUT_SECONDS)."""
    return _get_float("STARRED_LOAD_TIMEOUT_SECONDS", STARRED_LOAD_TIMEOUT_SECONDS)


def get_quiz_timeout_minutes() -> float:
    """Quiz inactivity timeout in minutes (QUIZ_TIMEOUT_MINUTES)."""
    return _get_float("QUIZ_TIMEOUT_MINUTES", QUIZ_TIMEOUT_MINUTES)


def get_local_cache_path() -> str:
    """Get local cache database path.

    Environment variable: LOCAL_CACHE_PATH
    Default: ~/.asl_study/cache.db
    """
    default_path = str(Path.home() / ".asl_study" / "cache.db")
    return os.getenv("LOCAL_CACHE_PATH", default_path)
