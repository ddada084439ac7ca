"""Tests for starred-set reconciliation."""

import asyncio
import json

import pytest

from asl_study.domain.constants import starred_cache_key
from asl_study.domain.services.starred_reconciler import (
    StarredSetReconciler,
    StarredSetRegistry,
    StarredSource,
)
from asl_study.infrastructure.cache_store import MemoryCache
from asl_study.ports.study_store import StoreError

USER = "user-1"


def cached(cache: MemoryCache) -> list[str]:
    return json.loads(cache.get(starred_cache_key(USER)))


def make_reconciler(store, cache, **kwargs) -> StarredSetReconciler:
    kwargs.setdefault("initial_wait", 0.01)
    return StarredSetReconciler(user_id=USER, store=store, cache=cache, **kwargs)


class TestLoad:
    async def test_store_failure_falls_back_to_cache(self, failing_star_store):
        cache = MemoryCache({starred_cache_key(USER): json.dumps(["a", "b"])})
        reconciler = make_reconciler(failing_star_store, cache)

        result = await reconciler.load()

        assert result == {"a", "b"}
        assert reconciler.last_source is StarredSource.CACHE

    async def test_store_failure_with_empty_cache(self, failing_star_store, memory_cache):
        reconciler = make_reconciler(failing_star_store, memory_cache)

        assert await reconciler.load() == frozenset()

    async def test_timeout_falls_back_to_cache(self, star_store):
        star_store.starred = ["remote"]
        star_store.read_delay = 1.0
        cache = MemoryCache({starred_cache_key(USER): json.dumps(["local"])})
        reconciler = make_reconciler(star_store, cache, load_timeout=0.05)

        assert await reconciler.load() == {"local"}
        assert reconciler.last_source is StarredSource.CACHE

    async def test_non_empty_remote_overwrites_cache(self, star_store):
        star_store.starred = ["x", "y"]
        cache = MemoryCache({starred_cache_key(USER): json.dumps(["a"])})
        reconciler = make_reconciler(star_store, cache)

        assert await reconciler.load() == {"x", "y"}
        assert cached(cache) == ["x", "y"]
        assert reconciler.last_source is StarredSource.REMOTE

    async def test_empty_remote_keeps_non_empty_cache(self, star_store):
        cache = MemoryCache({starred_cache_key(USER): json.dumps(["a", "b"])})
        reconciler = make_reconciler(star_store, cache)

        assert await reconciler.load() == {"a", "b"}
        assert cached(cache) == ["a", "b"]
        assert reconciler.last_source is StarredSource.CACHE

    async def test_empty_remote_and_empty_cache(self, star_store, memory_cache):
        reconciler = make_reconciler(star_store, memory_cache)

        assert await reconciler.load() == frozenset()
        assert reconciler.last_source is StarredSource.REMOTE

    @pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "42"])
    async def test_corrupt_cache_is_treated_as_empty(self, failing_star_store, raw):
        cache = MemoryCache({starred_cache_key(USER): raw})
        reconciler = make_reconciler(failing_star_store, cache)

        assert await reconciler.load() == frozenset()

    async def test_reload_waits_for_in_flight_star(self, star_store, memory_cache):
        star_store.starred = ["a"]
        star_store.write_delays["x"] = 0.1
        reconciler = make_reconciler(star_store, memory_cache)
        await reconciler.load()

        await reconciler.toggle("x", True)
        result = await reconciler.load()

        assert result == {"a", "x"}
        assert cached(memory_cache) == ["a", "x"]
        assert sorted(star_store.starred) == ["a", "x"]

    async def test_reload_keeps_rejected_changes(self, star_store, memory_cache):
        star_store.starred = ["a", "b"]
        reconciler = make_reconciler(star_store, memory_cache)
        await reconciler.load()
        star_store.write_error = StoreError("permission denied")

        await reconciler.toggle("x", True)
        await reconciler.toggle("b", False)
        result = await reconciler.load()

        assert result == {"a", "x"}
        assert cached(memory_cache) == ["a", "x"]
        assert star_store.starred == ["a", "b"]

    async def test_later_successful_write_clears_rejected_change(self, star_store, memory_cache):
        star_store.starred = ["a"]
        reconciler = make_reconciler(star_store, memory_cache)
        star_store.write_error = StoreError("permission denied")
        await reconciler.toggle("x", True)
        await reconciler.wait_for_pending()

        star_store.write_error = None
        await reconciler.toggle("x", False)

        assert await reconciler.load() == {"a"}

    async def test_numeric_ids_are_normalised(self, star_store, memory_cache):
        star_store.starred = [1, 2]
        reconciler = make_reconciler(star_store, memory_cache)

        assert await reconciler.load() == {"1", "2"}


class TestToggle:
    async def test_toggle_updates_memory_and_cache_immediately(self, star_store, memory_cache):
        reconciler = make_reconciler(star_store, memory_cache)

        await reconciler.toggle("c1", True)

        assert reconciler.snapshot() == {"c1"}
        assert cached(memory_cache) == ["c1"]

        await reconciler.wait_for_pending()
        assert star_store.writes == [(USER, "c1", True)]

    async def test_unstar(self, star_store, memory_cache):
        star_store.starred = ["c1", "c2"]
        reconciler = make_reconciler(star_store, memory_cache)
        await reconciler.load()

        await reconciler.toggle("c1", False)
        await reconciler.wait_for_pending()

        assert reconciler.snapshot() == {"c2"}
        assert star_store.starred == ["c2"]

    async def test_failed_write_keeps_local_state(self, failing_star_store, memory_cache):
        reconciler = make_reconciler(failing_star_store, memory_cache)

        await reconciler.toggle("x", True)
        await reconciler.wait_for_pending()

        assert reconciler.snapshot() == {"x"}
        assert cached(memory_cache) == ["x"]
        assert len(reconciler.failures) == 1
        assert reconciler.failures[0].card_id == "x"

    async def test_unstar_holds_locally_when_writes_fail(self, failing_star_store, memory_cache):
        reconciler = make_reconciler(failing_star_store, memory_cache)

        await reconciler.toggle("x", True)
        await reconciler.toggle("x", False)
        await reconciler.wait_for_pending()

        assert "x" not in reconciler.snapshot()
        assert cached(memory_cache) == []
        assert [f.starred for f in reconciler.failures] == [True, False]

    async def test_card_locks_are_released(self, star_store, memory_cache):
        star_store.write_delays["c1"] = 0.05
        reconciler = make_reconciler(star_store, memory_cache)

        await reconciler.toggle("c1", True)
        await reconciler.toggle("c1", False)
        await reconciler.toggle("c2", True)
        await asyncio.sleep(0)
        assert "c1" in reconciler._card_locks

        await reconciler.wait_for_pending()
        assert reconciler._card_locks == {}

    async def test_star_survives_failed_write_and_failed_reload(self, failing_star_store, memory_cache):
        reconciler = make_reconciler(failing_star_store, memory_cache)
        await reconciler.toggle("x", True)
        await reconciler.wait_for_pending()

        fresh = make_reconciler(failing_star_store, memory_cache)

        assert await fresh.load() == {"x"}

    async def test_transient_write_failure_is_retried(self, star_store, memory_cache):
        attempts = []

        async def flaky_add_star(user_id, card_id):
            attempts.append(card_id)
            if len(attempts) < 2:
                raise StoreError("connection reset")
            star_store.writes.append((user_id, card_id, True))

        star_store.add_star = flaky_add_star
        reconciler = make_reconciler(star_store, memory_cache, max_retry_attempts=3)

        await reconciler.toggle("c1", True)
        await reconciler.wait_for_pending()

        assert len(attempts) == 2
        assert star_store.writes == [(USER, "c1", True)]
        assert reconciler.failures == []

    async def test_writes_for_same_card_reach_store_in_call_order(self, star_store, memory_cache):
        # First write is slow; without per-card ordering the unstar would land first
        star_store.write_delays["c1"] = 0.05
        reconciler = make_reconciler(star_store, memory_cache)

        await reconciler.toggle("c1", True)
        await reconciler.toggle("c1", False)
        await reconciler.wait_for_pending()

        assert star_store.writes == [(USER, "c1", True), (USER, "c1", False)]
        assert star_store.starred == []
        assert reconciler.snapshot() == frozenset()

    async def test_writes_for_different_cards_run_independently(self, star_store, memory_cache):
        star_store.write_delays["slow"] = 0.05
        reconciler = make_reconciler(star_store, memory_cache)

        await reconciler.toggle("slow", True)
        await reconciler.toggle("fast", True)
        await reconciler.wait_for_pending()

        assert [w[1] for w in star_store.writes] == ["fast", "slow"]


class TestApply:
    async def test_apply_skips_store_write(self, star_store, memory_cache):
        reconciler = make_reconciler(star_store, memory_cache)

        reconciler.apply("c9", True)
        await reconciler.wait_for_pending()

        assert reconciler.is_starred("c9")
        assert cached(memory_cache) == ["c9"]
        assert star_store.writes == []


class TestRegistry:
    async def test_same_reconciler_per_user(self, star_store, memory_cache):
        registry = StarredSetRegistry(star_store, memory_cache)

        assert registry.get("u1") is registry.get("u1")
        assert registry.get("u1") is not registry.get("u2")

    async def test_find_does_not_create(self, star_store, memory_cache):
        registry = StarredSetRegistry(star_store, memory_cache)

        assert registry.find("u1") is None
        registry.get("u1")
        assert registry.find("u1") is not None

    async def test_load_reloads_from_store(self, star_store, memory_cache):
        star_store.starred = ["c1"]
        registry = StarredSetRegistry(star_store, memory_cache)

        reconciler = await registry.load("u1")

        assert reconciler.snapshot() == {"c1"}

    async def test_users_do_not_share_cache_entries(self, star_store, memory_cache):
        registry = StarredSetRegistry(star_store, memory_cache)

        await registry.get("u1").toggle("c1", True)
        await registry.wait_for_pending()

        assert memory_cache.get(starred_cache_key("u2")) is None


async def test_wait_for_pending_with_nothing_pending(star_store, memory_cache):
    reconciler = make_reconciler(star_store, memory_cache)
    await asyncio.wait_for(reconciler.wait_for_pending(), timeout=1)
