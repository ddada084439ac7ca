# Adapters layer - Concrete implementations (Supabase, local sample data, REST client)

from .api_client import ApiStudyClient
from .local_store import LocalStudyStore, parse_vocabulary_lines, sample_vocabulary
from .supabase_store import SupabaseStudyStore

__all__ = [
    "ApiStudyClient",
    "LocalStudyStore",
    "SupabaseStudyStore",
    "parse_vocabulary_lines",
    "sample_vocabulary",
]
