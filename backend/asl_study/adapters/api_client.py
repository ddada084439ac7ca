"""HTTP client for the study REST backend.

Used by the command-line quiz. Implements the StarStore protocol so a
StarredSetReconciler can sit on top of it, and the CardSource protocol so
a quiz can load its cards over the network.
"""

import logging
from typing import Any

import httpx

from asl_study.domain.entities.card import Card, Deck, User
from asl_study.ports.study_store import StoreError

logger = logging.getLogger(__name__)


class ApiStudyClient:
    """Async REST client for the study backend.

    Uses lazy client initialization for connection reuse. Transport
    failures and error responses are raised as StoreError.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:8000",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize client.

        Args:
            base_url: Backend root URL
            timeout: Request timeout in seconds
            transport: Optional httpx transport (for testing)
        """
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Lazy client initialization for connection reuse."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            )
        return self._client

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        """Send a request and decode the JSON body.

        Raises:
            StoreError: On network failure or non-2xx response
        """
        client = await self._get_client()
        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e!r}")
            raise StoreError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            raise StoreError(self._error_message(response))
        return response.json()

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(body, dict) and body.get("error"):
            return str(body["error"])
        return f"HTTP {response.status_code}"

    async def health(self) -> bool:
        """Check that the backend is reachable."""
        try:
            body = await self._request("GET", "/health")
        except StoreError:
            return False
        return body.get("status") == "healthy"

    async def list_users(self) -> list[User]:
        rows = await self._request("GET", "/api/users")
        return [User.from_row(row) for row in rows]

    async def list_decks(self, user_id: str) -> list[Deck]:
        rows = await self._request("GET", f"/api/decks/{user_id}")
        return [Deck.from_row(row) for row in rows]

    async def list_cards(self, deck_id: str) -> list[Card]:
        rows = await self._request("GET", f"/api/cards/{deck_id}")
        return [Card.from_row(row) for row in rows]

    async def search(self, term: str) -> dict[str, list[dict[str, Any]]]:
        """Search cards and decks by term.

        Returns:
            Dict with "cards" and "decks" result lists
        """
        return await self._request("GET", "/api/search", params={"term": term})

    async def get_starred_ids(self, user_id: str) -> list[str]:
        body = await self._request("GET", f"/api/users/{user_id}/starred-card-ids")
        return [str(card_id) for card_id in body.get("card_ids", [])]

    async def get_starred_cards(self, user_id: str) -> list[Card]:
        body = await self._request("GET", f"/api/users/{user_id}/starred-cards")
        return [Card.from_row(row) for row in body.get("cards", [])]

    async def get_cards_by_ids(self, card_ids: list[str]) -> list[Card]:
        """Look up cards by id.

        The backend has no lookup-by-id endpoint, so this walks every
        user's decks and filters.
        """
        wanted = {str(card_id) for card_id in card_ids}
        if not wanted:
            return []
        cards: list[Card] = []
        for user in await self.list_users():
            for deck in await self.list_decks(user.id):
                cards.extend(c for c in await self.list_cards(deck.id) if c.id in wanted)
        return cards

    async def add_star(self, user_id: str, card_id: str) -> None:
        await self._request("POST", f"/api/cards/{card_id}/star", json={"user_id": user_id})

    async def remove_star(self, user_id: str, card_id: str) -> None:
        await self._request("DELETE", f"/api/cards/{card_id}/star", params={"user_id": user_id})

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
