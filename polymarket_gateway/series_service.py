"""Series service backed by the Gamma API."""

from __future__ import annotations

from typing import Any

from .models import SeriesFilters, SeriesSearchOptions
from .service_base import BaseService
from .utils import (
    apply_field_filters,
    filter_by_text,
    number_or_zero,
    parse_date_for_sort,
    sort_items,
)

SERIES_SORT_ACCESSORS = {
    "volume": lambda series: number_or_zero(series.get("volume")),
    "liquidity": lambda series: number_or_zero(series.get("liquidity")),
    "createdAt": lambda series: parse_date_for_sort(series.get("createdAt")),
}


def _in_category(series: dict[str, Any], category: str) -> bool:
    categories = series.get("categories") or []
    return any(isinstance(c, dict) and c.get("name") == category for c in categories)


def filter_series(series: list[dict[str, Any]], params: dict[str, Any]) -> list[dict[str, Any]]:
    """Apply category/active/closed filters the series endpoint may ignore."""
    category = params.get("category")
    if category is not None:
        series = [s for s in series if _in_category(s, category)]
    return apply_field_filters(
        series, {"active": params.get("active"), "closed": params.get("closed")}
    )


class SeriesService(BaseService):
    """Service for series lookups and searches."""

    async def get_series(self, filters: SeriesFilters | None = None) -> list[dict[str, Any]]:
        """
        Fetch series matching the filters.

        The filtered list, not the raw upstream response, is what gets cached.
        """
        params = (filters or SeriesFilters()).to_params()
        return await self._fetch_collection(
            "series",
            params,
            lambda: self.client.fetch_series(params),
            filter_series,
        )

    async def search_series(
        self, options: SeriesSearchOptions | None = None
    ) -> list[dict[str, Any]]:
        options = options or SeriesSearchOptions()
        series = await self.get_series(SeriesFilters(**options.to_params()))
        matched = filter_by_text(series, options.query, "title")
        return sort_items(matched, options.sort_by, options.sort_order, SERIES_SORT_ACCESSORS)

    async def get_series_by_id(self, series_id: str) -> dict[str, Any] | None:
        return await self._fetch_entity(
            "series:id", series_id, lambda: self.client.fetch_series_by_id(series_id)
        )

    async def get_series_by_slug(self, slug: str) -> dict[str, Any] | None:
        return await self._fetch_entity(
            "series:slug", slug, lambda: self.client.fetch_series_by_slug(slug)
        )
