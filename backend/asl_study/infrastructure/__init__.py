"""Infrastructure layer - local persistence and retry helpers."""

from .cache_store import MemoryCache, SqliteCache
from .retry import TransientError, is_transient_error, retry_store_call

__all__ = [
    "MemoryCache",
    "SqliteCache",
    "TransientError",
    "is_transient_error",
    "retry_store_call",
]
