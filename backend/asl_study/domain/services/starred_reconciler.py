"""Starred-set reconciler for one user's starred card ids."""

import asyncio
import functools
import json
import logging
from dataclasses import dataclass
from enum import StrEnum

from asl_study.domain.constants import STARRED_LOAD_TIMEOUT_SECONDS, starred_cache_key
from asl_study.infrastructure.retry import retry_store_call
from asl_study.ports.local_cache import LocalCache
from asl_study.ports.study_store import StarStore, StoreError

logger = logging.getLogger(__name__)


class StarredSource(StrEnum):
    """Where the current starred set came from."""

    NONE = "none"  # Not loaded yet
    REMOTE = "remote"
    CACHE = "cache"


@dataclass
class PropagationFailure:
    """A star change that could not be written to the store."""

    card_id: str
    starred: bool
    error: str


class StarredSetReconciler:
    """Keeps one authoritative set of starred card ids per user.

    Combines the remote StarStore (store of record) with a LocalCache
    (durable fallback) under unreliable connectivity:

    - load(): waits for in-flight writes first. Non-empty remote reads win
      and overwrite the cache, with changes the store rejected re-applied
      on top. Empty remote reads never replace a non-empty cached set;
      failed or timed out reads fall back to the cache.
    - toggle(): optimistic. Memory and cache update immediately, the store
      write happens in a background task and failures never roll back.
    - snapshot(): current set, no I/O.

    Store writes for the same card id are serialized in call order;
    writes for different cards run independently.
    """

    def __init__(
        self,
        user_id: str,
        store: StarStore,
        cache: LocalCache,
        load_timeout: float = STARRED_LOAD_TIMEOUT_SECONDS,
        max_retry_attempts: int = 3,
        initial_wait: float = 0.5,
    ):
        """Initialize reconciler.

        Args:
            user_id: User whose stars are managed
            store: Remote store of record
            cache: Local cache used as fallback
            load_timeout: Seconds to wait for the remote read
            max_retry_attempts: Max attempts per store write
            initial_wait: Initial wait for exponential backoff
        """
        self._user_id = user_id
        self._store = store
        self._cache = cache
        self._load_timeout = load_timeout
        self._max_retry_attempts = max_retry_attempts
        self._initial_wait = initial_wait
        self._starred: set[str] = set()
        self._source = StarredSource.NONE
        # card id -> (lock, number of writes holding or waiting on it)
        self._card_locks: dict[str, tuple[asyncio.Lock, int]] = {}
        self._pending: set[asyncio.Task] = set()
        self._failures: list[PropagationFailure] = []
        # Latest local state of cards whose store write gave up
        self._unsynced: dict[str, bool] = {}

    @property
    def user_id(self) -> str:
        return self._user_id

    @property
    def last_source(self) -> StarredSource:
        """Source of the set returned by the most recent load()."""
        return self._source

    @property
    def failures(self) -> list[PropagationFailure]:
        """Store writes that gave up after retries (oldest first)."""
        return list(self._failures)

    @property
    def _cache_key(self) -> str:
        return starred_cache_key(self._user_id)

    async def load(self) -> frozenset[str]:
        """Load the starred set, reconciling remote and cached copies.

        Returns:
            The authoritative starred id set after reconciliation
        """
        # The remote read must see every write already issued
        await self.wait_for_pending()
        cached = self._read_cache()

        try:
            remote = await asyncio.wait_for(
                self._store.get_starred_ids(self._user_id),
                timeout=self._load_timeout,
            )
        except (StoreError, TimeoutError) as e:
            logger.warning(
                f"Starred ids unavailable from store, using local cache: {e!r}",
                extra={"user_id": self._user_id, "cached_count": len(cached)},
            )
            self._starred = set(cached)
            self._source = StarredSource.CACHE
            return self.snapshot()

        remote_ids = {str(card_id) for card_id in remote}

        if remote_ids:
            self._starred = self._with_unsynced(remote_ids)
            self._write_cache()
            self._source = StarredSource.REMOTE
        elif cached:
            # Empty remote read is ambiguous; keep the known non-empty set
            logger.info(
                "Store returned no starred ids, keeping cached set",
                extra={"user_id": self._user_id, "cached_count": len(cached)},
            )
            self._starred = set(cached)
            self._source = StarredSource.CACHE
        else:
            self._starred = self._with_unsynced(set())
            if self._starred:
                self._write_cache()
            self._source = StarredSource.REMOTE

        return self.snapshot()

    def _with_unsynced(self, ids: set[str]) -> set[str]:
        """Re-apply local changes the store never accepted."""
        merged = set(ids)
        for card_id, starred in self._unsynced.items():
            if starred:
                merged.add(card_id)
            else:
                merged.discard(card_id)
        return merged

    async def toggle(self, card_id: str, starred: bool) -> None:
        """Star or unstar a card optimistically.

        Updates memory and cache before returning; the store write runs
        in the background. Use wait_for_pending() to await it.

        Args:
            card_id: Card to update
            starred: True to star, False to unstar
        """
        card_id = str(card_id)
        if starred:
            self._starred.add(card_id)
        else:
            self._starred.discard(card_id)
        self._write_cache()

        task = asyncio.create_task(self._propagate(card_id, starred))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def apply(self, card_id: str, starred: bool) -> None:
        """Record a star change already written to the store.

        Updates memory and cache without another store write.
        """
        card_id = str(card_id)
        self._unsynced.pop(card_id, None)
        if starred:
            self._starred.add(card_id)
        else:
            self._starred.discard(card_id)
        self._write_cache()

    def snapshot(self) -> frozenset[str]:
        """Get the current starred set without I/O."""
        return frozenset(self._starred)

    def is_starred(self, card_id: str) -> bool:
        return str(card_id) in self._starred

    async def wait_for_pending(self) -> None:
        """Wait until all in-flight store writes have finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _propagate(self, card_id: str, starred: bool) -> None:
        """Write one star change to the store, serialized per card id."""
        lock, users = self._card_locks.get(card_id, (asyncio.Lock(), 0))
        self._card_locks[card_id] = (lock, users + 1)
        try:
            async with lock:
                await self._write_card(card_id, starred)
        finally:
            lock, users = self._card_locks[card_id]
            if users == 1:
                del self._card_locks[card_id]
            else:
                self._card_locks[card_id] = (lock, users - 1)

    async def _write_card(self, card_id: str, starred: bool) -> None:
        try:
            await self._write_with_retry(card_id, starred)
            self._unsynced.pop(card_id, None)
            logger.debug(f"Propagated star={starred} for card {card_id}")
        except Exception as e:
            # Local state stays as-is; the cache is the fallback of record
            self._unsynced[card_id] = starred
            self._failures.append(
                PropagationFailure(card_id=card_id, starred=starred, error=str(e))
            )
            logger.warning(
                f"Failed to propagate star change for card {card_id}: {e}",
                extra={"user_id": self._user_id, "starred": starred},
            )

    async def _write_with_retry(self, card_id: str, starred: bool) -> None:
        if starred:
            operation = functools.partial(self._store.add_star, self._user_id, card_id)
        else:
            operation = functools.partial(self._store.remove_star, self._user_id, card_id)

        await retry_store_call(
            operation,
            description=f"{'add_star' if starred else 'remove_star'} {card_id}",
            max_attempts=self._max_retry_attempts,
            initial_wait=self._initial_wait,
        )

    def _read_cache(self) -> set[str]:
        raw = self._cache.get(self._cache_key)
        if not raw:
            return set()
        try:
            ids = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring unreadable starred cache for {self._user_id}: {e}")
            return set()
        if not isinstance(ids, list):
            logger.warning(f"Ignoring malformed starred cache for {self._user_id}")
            return set()
        return {str(card_id) for card_id in ids}

    def _write_cache(self) -> None:
        self._cache.set(self._cache_key, json.dumps(sorted(self._starred)))


class StarredSetRegistry:
    """Owns one reconciler per user so that all callers share its state."""

    def __init__(
        self,
        store: StarStore,
        cache: LocalCache,
        load_timeout: float = STARRED_LOAD_TIMEOUT_SECONDS,
    ):
        self._store = store
        self._cache = cache
        self._load_timeout = load_timeout
        self._reconcilers: dict[str, StarredSetReconciler] = {}

    def get(self, user_id: str) -> StarredSetReconciler:
        """Get or create the reconciler for a user (no I/O)."""
        reconciler = self._reconcilers.get(user_id)
        if reconciler is None:
            reconciler = StarredSetReconciler(
                user_id=user_id,
                store=self._store,
                cache=self._cache,
                load_timeout=self._load_timeout,
            )
            self._reconcilers[user_id] = reconciler
        return reconciler

    def find(self, user_id: str) -> StarredSetReconciler | None:
        """Get the reconciler for a user if one exists."""
        return self._reconcilers.get(user_id)

    async def load(self, user_id: str) -> StarredSetReconciler:
        """Get the reconciler for a user and reload its set."""
        reconciler = self.get(user_id)
        await reconciler.load()
        return reconciler

    async def wait_for_pending(self) -> None:
        """Wait for in-flight store writes of every reconciler."""
        for reconciler in list(self._reconcilers.values()):
            await reconciler.wait_for_pending()
