"""Event service backed by the Gamma API."""

from __future__ import annotations

from typing import Any

from .models import EventFilters, EventSearchOptions
from .service_base import BaseService
from .utils import filter_by_text, number_or_zero, parse_date_for_sort, sort_items

EVENT_SORT_ACCESSORS = {
    "volume": lambda event: number_or_zero(event.get("volume")),
    "liquidity": lambda event: number_or_zero(event.get("liquidity")),
    "createdAt": lambda event: parse_date_for_sort(event.get("startDate")),
}


class EventService(BaseService):
    """Service for event lookups, searches and tags."""

    async def get_events(self, filters: EventFilters | None = None) -> list[dict[str, Any]]:
        params = (filters or EventFilters()).to_params()
        return await self._fetch_collection(
            "events",
            params,
            lambda: self.client.fetch_events(params),
        )

    async def search_events(
        self, options: EventSearchOptions | None = None
    ) -> list[dict[str, Any]]:
        """Search events by title, sorting by volume, liquidity or start date."""
        options = options or EventSearchOptions()
        events = await self.get_events(EventFilters(**options.to_params()))
        matched = filter_by_text(events, options.query, "title")
        return sort_items(matched, options.sort_by, options.sort_order, EVENT_SORT_ACCESSORS)

    async def get_event_by_id(self, event_id: str) -> dict[str, Any] | None:
        return await self._fetch_entity(
            "event:id", event_id, lambda: self.client.fetch_event_by_id(event_id)
        )

    async def get_event_by_slug(self, slug: str) -> dict[str, Any] | None:
        return await self._fetch_entity(
            "event:slug", slug, lambda: self.client.fetch_event_by_slug(slug)
        )

    async def get_event_tags(self, event_id: str) -> list[dict[str, Any]] | None:
        return await self._fetch_entity(
            "event:tags", event_id, lambda: self.client.fetch_event_tags(event_id)
        )
