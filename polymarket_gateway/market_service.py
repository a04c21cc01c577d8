"""Market service backed by the Gamma API."""

from __future__ import annotations

from typing import Any

from .models import MarketFilters, MarketSearchOptions
from .service_base import BaseService
from .utils import filter_by_text, number_or_zero, parse_date_for_sort, sort_items

MARKET_SORT_ACCESSORS = {
    "volume": lambda market: number_or_zero(market.get("volumeNum")),
    "liquidity": lambda market: number_or_zero(market.get("liquidityNum")),
    "createdAt": lambda market: parse_date_for_sort(market.get("endDate")),
}


class MarketService(BaseService):
    """Service for market lookups, searches and tags."""

    async def get_markets(self, filters: MarketFilters | None = None) -> list[dict[str, Any]]:
        """
        Fetch markets matching the filters.

        Results are cached per distinct filter set and concurrent identical
        requests share one upstream call.
        """
        params = (filters or MarketFilters()).to_params()
        return await self._fetch_collection(
            "markets",
            params,
            lambda: self.client.fetch_markets(params),
        )

    async def search_markets(
        self, options: MarketSearchOptions | None = None
    ) -> list[dict[str, Any]]:
        """
        Search markets by question text with optional sorting.

        Text matching and sorting run on the cached get_markets() result, so
        searches with the same filters share one cache entry.
        """
        options = options or MarketSearchOptions()
        markets = await self.get_markets(MarketFilters(**options.to_params()))
        matched = filter_by_text(markets, options.query, "question")
        return sort_items(matched, options.sort_by, options.sort_order, MARKET_SORT_ACCESSORS)

    async def get_market_by_id(self, market_id: str) -> dict[str, Any] | None:
        return await self._fetch_entity(
            "market:id", market_id, lambda: self.client.fetch_market_by_id(market_id)
        )

    async def get_market_by_slug(self, slug: str) -> dict[str, Any] | None:
        return await self._fetch_entity(
            "market:slug", slug, lambda: self.client.fetch_market_by_slug(slug)
        )

    async def get_market_tags(self, market_id: str) -> list[dict[str, Any]] | None:
        """Tags attached to a market, or None if the market does not exist."""
        return await self._fetch_entity(
            "market:tags", market_id, lambda: self.client.fetch_market_tags(market_id)
        )
