"""Public search service backed by the Gamma API."""

from __future__ import annotations

from typing import Any

from .models import SearchOptions
from .service_base import BaseService


class SearchService(BaseService):
    """Service for searching markets, events and profiles in one call."""

    async def search(self, options: SearchOptions) -> dict[str, Any]:
        """
        Run a public search.

        When options.cache is False (or caching is disabled in config) the
        request skips the cache entirely and is not coalesced with concurrent
        identical searches.
        """
        params = options.to_params()
        bypass = options.cache is False or not self.cache_enabled
        if bypass:
            self.logger.info("Cache disabled for search request: %s", options.q)

        return await self._fetch_collection(
            "search",
            params,
            lambda: self.client.fetch_search(params),
            bypass_cache=bypass,
        )
