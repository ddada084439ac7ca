"""Local in-memory study store for development and testing.

This adapter bypasses Supabase by loading decks from an embedded JSON file.
Use STORE_BACKEND=local to enable.
"""

import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

from asl_study.domain.constants import DEMO_DECK_TITLE, DEMO_USER_EMAIL
from asl_study.domain.entities.card import Card, Deck, User
from asl_study.ports.study_store import StoreError

logger = logging.getLogger(__name__)


def load_sample_data() -> dict[str, Any]:
    """Load the embedded sample deck JSON.

    Uses importlib.resources for reliable package data access.
    Falls back to file path if running outside package context.
    """
    try:
        data_path = resources.files("asl_study.adapters.data").joinpath("sample_deck.json")
        with data_path.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (ModuleNotFoundError, FileNotFoundError, TypeError):
        file_path = Path(__file__).parent / "data" / "sample_deck.json"
        with open(file_path, encoding="utf-8") as f:
            return json.load(f)


def sample_vocabulary() -> list[dict[str, str]]:
    """Video/answer pairs of the demo deck, for seeding a fresh store."""
    data = load_sample_data()
    deck = next(d for d in data["decks"] if d["title"] == DEMO_DECK_TITLE)
    return [{"video_url": c["video_url"], "answer": c["answer"]} for c in deck["cards"]]


def parse_vocabulary_lines(lines: list[str]) -> list[dict[str, str]]:
    """Parse "video_url, answer" lines from a vocabulary file.

    Blank lines and lines without an answer are skipped.
    """
    entries = []
    for line in lines:
        if not line.strip():
            continue
        url, _, answer = line.partition(",")
        if not answer.strip():
            logger.warning(f"Skipping vocabulary line without answer: {line.strip()!r}")
            continue
        entries.append({"video_url": url.strip(), "answer": answer.strip()})
    return entries


class LocalStudyStore:
    """StudyStore implementation with embedded sample decks.

    Stars are accepted but not persisted between restarts.

    This adapter is useful for:
    - Development without a Supabase project
    - Integration testing without network access
    - Demo environments
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._users: list[User] = []
        self._decks: list[Deck] = []
        self._cards: list[Card] = []
        self._stars: set[tuple[str, str]] = set()  # (user_id, card_id)
        self._next_id = 1
        self._load(data if data is not None else load_sample_data())

    def _load(self, data: dict[str, Any]) -> None:
        self._users = [User.from_row(u) for u in data.get("users", [])]
        for deck_data in data.get("decks", []):
            deck = Deck.from_row(deck_data)
            self._decks.append(deck)
            for card_data in deck_data.get("cards", []):
                self._cards.append(Card.from_row({**card_data, "deck_id": deck.id}))

    def _new_id(self, prefix: str) -> str:
        new_id = f"{prefix}-{self._next_id}"
        self._next_id += 1
        return new_id

    async def list_users(self) -> list[User]:
        return list(self._users)

    async def list_decks(self, user_id: str) -> list[Deck]:
        return [d for d in self._decks if d.user_id == user_id]

    async def list_all_decks(self) -> list[Deck]:
        return list(self._decks)

    async def list_cards(self, deck_id: str) -> list[Card]:
        return [c for c in self._cards if c.deck_id == deck_id]

    async def list_all_cards(self) -> list[Card]:
        return list(self._cards)

    async def get_cards_by_ids(self, card_ids: list[str]) -> list[Card]:
        wanted = {str(card_id) for card_id in card_ids}
        return [c for c in self._cards if c.id in wanted]

    async def get_starred_ids(self, user_id: str) -> list[str]:
        return sorted(card_id for uid, card_id in self._stars if uid == user_id)

    async def get_starred_cards(self, user_id: str) -> list[Card]:
        return await self.get_cards_by_ids(await self.get_starred_ids(user_id))

    async def add_star(self, user_id: str, card_id: str) -> None:
        if not any(c.id == str(card_id) for c in self._cards):
            raise StoreError(f"Card {card_id} does not exist")
        self._stars.add((user_id, str(card_id)))

    async def remove_star(self, user_id: str, card_id: str) -> None:
        self._stars.discard((user_id, str(card_id)))

    async def seed_sample_data(self, cards: list[dict[str, str]]) -> None:
        """Replace all data with the demo user, deck and given cards."""
        user = User(id=self._new_id("user"), email=DEMO_USER_EMAIL)
        deck = Deck(id=self._new_id("deck"), title=DEMO_DECK_TITLE, user_id=user.id)
        self._users = [user]
        self._decks = [deck]
        self._cards = [
            Card(
                id=self._new_id("card"),
                video_url=c["video_url"],
                answer=c["answer"],
                deck_id=deck.id,
            )
            for c in cards
        ]
        self._stars.clear()
        logger.info(f"Seeded local store with {len(self._cards)} cards")

    async def close(self) -> None:
        """No-op cleanup."""
        pass
