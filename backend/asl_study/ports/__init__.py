# Ports layer - Abstract interfaces (Protocols)

from .card_source import CardSource
from .local_cache import LocalCache
from .study_store import StarStore, StoreError, StudyStore

__all__ = [
    "CardSource",
    "LocalCache",
    "StarStore",
    "StudyStore",
    "StoreError",
]
