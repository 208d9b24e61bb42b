# elite_cards.services.pokemon_tcg.client

import logging
from typing import Dict, List, Optional, Any

import httpx

from elite_cards.core.config import Settings
from elite_cards.core.exceptions import (
    CardAPIRateLimitError,
    CardAPITimeoutError,
    CardAPIUnavailableError,
)
from elite_cards.schemas.card import CardSearchPage, CardSet, PokemonCard
from .pricing import extract_pricing

logger = logging.getLogger(__name__)


class PokemonTCGClient:
    """
    Async client for the Pokemon TCG API (v2).

    Returns normalized PokemonCard / CardSet records. Every card carries a
    price: TCGplayer, then Cardmarket, then a synthetic estimate.

    Errors are raised as CardAPITimeoutError, CardAPIRateLimitError or
    CardAPIUnavailableError so routes can map them onto 504 / 429 / 503.

    Documentation: https://docs.pokemontcg.io/
    """

    BASE_URL = "https://api.pokemontcg.io/v2"
    USER_AGENT = "Elite-Cards/1.0"

    def __init__(self, api_key: Optional[str] = None, timeout: float = 60.0):
        self.api_key = api_key
        self.timeout = timeout
        logger.debug(f"PokemonTCGClient initialized ({'with' if api_key else 'without'} API key)")

    @classmethod
    def from_settings(cls, settings: Settings) -> "PokemonTCGClient":
        return cls(api_key=settings.POKEMON_TCG_API_KEY or None, timeout=settings.POKEMON_TCG_TIMEOUT)

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Accept": "application/json",
            "User-Agent": self.USER_AGENT,
        }
        if self.api_key:
            headers["X-Api-Key"] = self.api_key
        return headers

    async def _make_request(self, endpoint: str, params: Optional[Dict] = None) -> Dict:
        """
        Make a GET request to the Pokemon TCG API

        Args:
            endpoint: API endpoint (without base URL)
            params: Query parameters

        Returns:
            Dict: Response data

        Raises:
            CardAPITimeoutError: If the request times out
            CardAPIRateLimitError: On HTTP 429
            CardAPIUnavailableError: On other non-2xx responses or network errors
        """
        url = f"{self.BASE_URL}/{endpoint.lstrip('/')}"
        logger.debug(f"Making GET request to {url} with params {params}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.request(
                    method="GET",
                    url=url,
                    headers=self._get_headers(),
                    params=params
                )
        except httpx.TimeoutException as e:
            logger.error(f"Pokemon TCG API timeout: {str(e)}")
            raise CardAPITimeoutError("Request timeout")
        except httpx.RequestError as e:
            logger.error(f"Pokemon TCG API network error: {str(e)}")
            raise CardAPIUnavailableError(f"Pokemon TCG API unavailable: {str(e)}")

        if response.status_code == 429:
            logger.warning("Pokemon TCG API rate limit exceeded")
            raise CardAPIRateLimitError("Rate limit exceeded")

        if response.status_code != 200:
            logger.error(f"Pokemon TCG API error: {response.status_code} {response.text}")
            raise CardAPIUnavailableError(f"Pokemon TCG API error: {response.status_code}")

        return response.json()

    @staticmethod
    def transform_card(raw: Dict[str, Any]) -> PokemonCard:
        """Normalize a raw card payload."""
        card_set = raw.get("set") or {}
        images = raw.get("images") or {}
        return PokemonCard(
            id=raw["id"],
            name=raw.get("name", ""),
            set_name=card_set.get("name", ""),
            set_id=card_set.get("id"),
            number=raw.get("number"),
            rarity=raw.get("rarity") or "Unknown",
            image_url=images.get("large") or images.get("small") or "",
            pricing=extract_pricing(raw),
        )

    @staticmethod
    def transform_set(raw: Dict[str, Any]) -> CardSet:
        images = raw.get("images") or {}
        return CardSet(
            id=raw["id"],
            name=raw.get("name", ""),
            series=raw.get("series"),
            total=raw.get("total"),
            release_date=raw.get("releaseDate"),
            logo_url=images.get("logo"),
            symbol_url=images.get("symbol"),
        )

    async def search_cards(self, query: str = "", page: int = 1, page_size: int = 250) -> CardSearchPage:
        """
        Search cards with the API's Lucene-like query syntax.

        Args:
            query: e.g. 'name:charizard' or 'set.id:base1'
            page: 1-indexed page
            page_size: Results per page (API max 250)
        """
        params: Dict[str, Any] = {"page": page, "pageSize": page_size}
        if query:
            params["q"] = query
        data = await self._make_request("cards", params=params)
        cards = [self.transform_card(raw) for raw in data.get("data", [])]
        return CardSearchPage(
            cards=cards,
            page=data.get("page", page),
            page_size=data.get("pageSize", page_size),
            total=data.get("totalCount", len(cards)),
        )

    async def get_cards_by_set(self, set_id: str, page: int = 1, page_size: int = 250) -> CardSearchPage:
        return await self.search_cards(f"set.id:{set_id}", page=page, page_size=page_size)

    async def get_card(self, card_id: str) -> PokemonCard:
        data = await self._make_request(f"cards/{card_id}")
        return self.transform_card(data["data"])

    async def get_sets(self) -> List[CardSet]:
        data = await self._make_request("sets", params={"orderBy": "-releaseDate"})
        return [self.transform_set(raw) for raw in data.get("data", [])]
