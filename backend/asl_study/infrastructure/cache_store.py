"""Local key-value caches for starred card ids.

SqliteCache persists to a single-table SQLite file and is the durable
fallback of record when the remote store is unreachable. MemoryCache keeps
values in a dict for tests and throwaway sessions.

Both implement the LocalCache port: synchronous, never raising.
"""

import logging
import sqlite3
import threading
from datetime import UTC, datetime
from pathlib import Path

logger = logging.getLogger(__name__)


class SqliteCache:
    """SQLite-backed key-value cache.

    Operations are short single-row statements, so they run synchronously
    on the caller's thread. A threading.Lock serializes access from the
    event loop and worker threads.
    """

    def __init__(self, db_path: str | Path = "cache.db"):
        """Initialize cache.

        Args:
            db_path: Path to SQLite database file

        Parent directories and the table are created on construction.
        """
        self._db_path = Path(db_path).expanduser()
        self._lock = threading.Lock()
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    @property
    def path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        """Create SQLite connection.

        Note: journal_mode=WAL persists to database file.
        """
        conn = sqlite3.connect(self._db_path)
        conn.execute("PRAGMA synchronous=NORMAL")
        conn.execute("PRAGMA temp_store=MEMORY")
        return conn

    def _init_db(self) -> None:
        """Initialize database schema."""
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS cache_entries (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                )
            """
            )

    def get(self, key: str) -> str | None:
        """Get a stored value, or None if absent or unreadable."""
        try:
            with self._lock, self._connect() as conn:
                row = conn.execute(
                    "SELECT value FROM cache_entries WHERE key = ?",
                    (key,),
                ).fetchone()
        except sqlite3.Error as e:
            logger.warning(f"Local cache read failed for {key}: {e}")
            return None
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Store a value, overwriting any previous one."""
        try:
            with self._lock, self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO cache_entries (key, value, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(key) DO UPDATE SET
                        value = excluded.value,
                        updated_at = excluded.updated_at
                    """,
                    (key, value, datetime.now(UTC).isoformat()),
                )
        except sqlite3.Error as e:
            logger.warning(f"Local cache write failed for {key}: {e}")


class MemoryCache:
    """In-process dict cache."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._values: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value
