"""Shared fixtures for unit and integration tests."""

import asyncio

import pytest

from asl_study.adapters.local_store import LocalStudyStore
from asl_study.domain.entities.card import Card
from asl_study.infrastructure.cache_store import MemoryCache
from asl_study.ports.study_store import StoreError


class FakeStarStore:
    """Scriptable StarStore.

    Records every write in call order. Reads return `starred` unless
    `read_error` is set; writes raise `write_error` when set. A non-zero
    `read_delay` makes reads slow enough to hit timeouts.
    """

    def __init__(self, starred=None):
        self.starred: list[str] = list(starred or [])
        self.read_error: Exception | None = None
        self.write_error: Exception | None = None
        self.read_delay = 0.0
        self.write_delays: dict[str, float] = {}
        self.writes: list[tuple[str, str, bool]] = []

    async def get_starred_ids(self, user_id: str) -> list[str]:
        if self.read_delay:
            await asyncio.sleep(self.read_delay)
        if self.read_error is not None:
            raise self.read_error
        return list(self.starred)

    async def add_star(self, user_id: str, card_id: str) -> None:
        await self._write(user_id, card_id, True)

    async def remove_star(self, user_id: str, card_id: str) -> None:
        await self._write(user_id, card_id, False)

    async def _write(self, user_id: str, card_id: str, starred: bool) -> None:
        delay = self.write_delays.pop(card_id, 0.0)
        if delay:
            await asyncio.sleep(delay)
        if self.write_error is not None:
            raise self.write_error
        self.writes.append((user_id, card_id, starred))
        if starred and card_id not in self.starred:
            self.starred.append(card_id)
        if not starred and card_id in self.starred:
            self.starred.remove(card_id)


def make_cards(*answers: str, deck_id: str = "deck-1") -> list[Card]:
    """Cards c1..cN with the given answers."""
    return [
        Card(id=f"c{i}", video_url=f"https://videos.example/{i}.mp4", answer=answer, deck_id=deck_id)
        for i, answer in enumerate(answers, start=1)
    ]


@pytest.fixture
def star_store() -> FakeStarStore:
    return FakeStarStore()


@pytest.fixture
def failing_star_store() -> FakeStarStore:
    store = FakeStarStore()
    store.read_error = StoreError("connection refused")
    store.write_error = StoreError("permission denied")
    return store


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache()


@pytest.fixture
def local_store() -> LocalStudyStore:
    return LocalStudyStore()


@pytest.fixture
def api_env(monkeypatch, tmp_path):
    """Environment for running the app against the local store."""
    monkeypatch.setenv("STORE_BACKEND", "local")
    monkeypatch.setenv("SEED_SAMPLE_DATA", "false")
    monkeypatch.setenv("LOCAL_CACHE_PATH", str(tmp_path / "cache.db"))
    monkeypatch.setenv("ANSWER_MATCH_MODE", "fuzzy")
    monkeypatch.delenv("CARD_LOAD_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("STARRED_LOAD_TIMEOUT_SECONDS", raising=False)
    monkeypatch.delenv("QUIZ_TIMEOUT_MINUTES", raising=False)
    return tmp_path


@pytest.fixture
def client(api_env):
    """TestClient with lifespan events run against the local store."""
    from fastapi.testclient import TestClient

    from asl_study.app import app

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture(name="make_cards")
def make_cards_fixture():
    return make_cards
