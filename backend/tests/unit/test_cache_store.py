"""Tests for the local key-value caches."""

import sqlite3

from asl_study.infrastructure.cache_store import MemoryCache, SqliteCache


def test_missing_key_is_none(tmp_path):
    cache = SqliteCache(tmp_path / "cache.db")

    assert cache.get("nope") is None


def test_set_then_get(tmp_path):
    cache = SqliteCache(tmp_path / "cache.db")

    cache.set("k", '["a"]')

    assert cache.get("k") == '["a"]'


def test_set_overwrites(tmp_path):
    cache = SqliteCache(tmp_path / "cache.db")

    cache.set("k", "1")
    cache.set("k", "2")

    assert cache.get("k") == "2"


def test_values_persist_across_instances(tmp_path):
    path = tmp_path / "nested" / "cache.db"
    SqliteCache(path).set("k", "v")

    assert SqliteCache(path).get("k") == "v"


def test_unreadable_database_returns_none(tmp_path):
    cache = SqliteCache(tmp_path / "cache.db")
    with sqlite3.connect(cache.path) as conn:
        conn.execute("DROP TABLE cache_entries")

    assert cache.get("k") is None
    cache.set("k", "v")  # Must not raise


def test_memory_cache():
    cache = MemoryCache({"a": "1"})

    cache.set("b", "2")

    assert cache.get("a") == "1"
    assert cache.get("b") == "2"
    assert cache.get("c") is None
