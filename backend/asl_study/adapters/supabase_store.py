"""Supabase adapter for decks, cards, users and starred cards."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from supabase import Client, create_client

from asl_study.domain.constants import DEMO_DECK_TITLE, DEMO_USER_EMAIL
from asl_study.domain.entities.card import Card, Deck, User
from asl_study.ports.study_store import StoreError

logger = logging.getLogger(__name__)

# Matches no real row; used to express "delete everything" through the
# query builder, which refuses unfiltered deletes
NIL_UUID = "00000000-0000-0000-0000-000000000000"


class SupabaseStudyStore:
    """Supabase adapter implementing the StudyStore protocol.

    Tables:
        users(id, email, ...)
        decks(id, title, user_id)
        cards(id, video_url, answer, deck_id)
        starred_cards(user_id, card_id) with a unique (user_id, card_id)

    supabase-py's query builder is synchronous, so every query runs in a
    worker thread via asyncio.to_thread.
    """

    def __init__(
        self,
        url: str | None = None,
        key: str | None = None,
        client: Client | None = None,
    ):
        """Initialize adapter.

        Args:
            url: Supabase project URL
            key: Supabase API key
            client: Pre-built client (takes precedence over url/key)

        Raises:
            ValueError: If neither a client nor url and key are given
        """
        if client is None:
            if not url or not key:
                raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set for the supabase store")
            client = create_client(url, key)
        self._client = client

    async def _execute(self, description: str, query: Callable[[], Any]) -> list[dict[str, Any]]:
        """Run a query builder chain in a thread and return its rows.

        Raises:
            StoreError: If the query failed
        """
        try:
            response = await asyncio.to_thread(query)
        except Exception as e:
            logger.error(f"Supabase {description} failed: {e}")
            raise StoreError(f"{description} failed: {e}") from e
        return response.data or []

    async def test_connection(self) -> bool:
        """Check that the users table is reachable."""
        try:
            await self._execute(
                "connection test",
                lambda: self._client.table("users").select("id").limit(1).execute(),
            )
        except StoreError:
            return False
        logger.info("Supabase connection successful")
        return True

    async def list_users(self) -> list[User]:
        rows = await self._execute(
            "list users",
            lambda: self._client.table("users").select("*").execute(),
        )
        return [User.from_row(row) for row in rows]

    async def list_decks(self, user_id: str) -> list[Deck]:
        rows = await self._execute(
            "list decks",
            lambda: self._client.table("decks").select("*").eq("user_id", user_id).execute(),
        )
        return [Deck.from_row(row) for row in rows]

    async def list_all_decks(self) -> list[Deck]:
        rows = await self._execute(
            "list all decks",
            lambda: self._client.table("decks").select("*").execute(),
        )
        return [Deck.from_row(row) for row in rows]

    async def list_cards(self, deck_id: str) -> list[Card]:
        rows = await self._execute(
            "list cards",
            lambda: self._client.table("cards").select("*").eq("deck_id", deck_id).execute(),
        )
        return [Card.from_row(row) for row in rows]

    async def list_all_cards(self) -> list[Card]:
        rows = await self._execute(
            "list all cards",
            lambda: self._client.table("cards").select("*").execute(),
        )
        return [Card.from_row(row) for row in rows]

    async def get_cards_by_ids(self, card_ids: list[str]) -> list[Card]:
        if not card_ids:
            return []
        rows = await self._execute(
            "get cards by id",
            lambda: self._client.table("cards").select("*").in_("id", list(card_ids)).execute(),
        )
        return [Card.from_row(row) for row in rows]

    async def get_starred_ids(self, user_id: str) -> list[str]:
        rows = await self._execute(
            "get starred ids",
            lambda: self._client.table("starred_cards")
            .select("card_id")
            .eq("user_id", user_id)
            .execute(),
        )
        return [str(row["card_id"]) for row in rows]

    async def get_starred_cards(self, user_id: str) -> list[Card]:
        return await self.get_cards_by_ids(await self.get_starred_ids(user_id))

    async def add_star(self, user_id: str, card_id: str) -> None:
        await self._execute(
            "add star",
            lambda: self._client.table("starred_cards")
            .upsert({"user_id": user_id, "card_id": card_id}, on_conflict="user_id,card_id")
            .execute(),
        )

    async def remove_star(self, user_id: str, card_id: str) -> None:
        await self._execute(
            "remove star",
            lambda: self._client.table("starred_cards")
            .delete()
            .eq("user_id", user_id)
            .eq("card_id", card_id)
            .execute(),
        )

    async def seed_sample_data(self, cards: list[dict[str, str]]) -> None:
        """Clear existing data and create the demo user, deck and cards.

        Raises:
            StoreError: If any step failed
        """
        for table in ("starred_cards", "cards", "decks", "users"):
            column = "user_id" if table == "starred_cards" else "id"
            await self._execute(
                f"clear {table}",
                lambda table=table, column=column: self._client.table(table)
                .delete()
                .neq(column, NIL_UUID)
                .execute(),
            )
        logger.info("Existing data cleared successfully")

        users = await self._execute(
            "create demo user",
            lambda: self._client.table("users").insert([{"email": DEMO_USER_EMAIL}]).execute(),
        )
        if not users:
            raise StoreError("create demo user returned no row")
        user_id = users[0]["id"]

        decks = await self._execute(
            "create demo deck",
            lambda: self._client.table("decks")
            .insert([{"title": DEMO_DECK_TITLE, "user_id": user_id}])
            .execute(),
        )
        if not decks:
            raise StoreError("create demo deck returned no row")
        deck_id = decks[0]["id"]

        rows = [{**card, "deck_id": deck_id} for card in cards]
        if rows:
            await self._execute(
                "create demo cards",
                lambda: self._client.table("cards").insert(rows).execute(),
            )
        logger.info(f"Sample data created successfully ({len(rows)} cards)")

    async def close(self) -> None:
        """No persistent connections to close."""
        pass
