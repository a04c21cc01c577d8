"""
Helpers applied to upstream payloads after they are fetched.

Text filtering, sorting and field filtering run on plain dicts as returned
by the Polymarket APIs. None of them mutate their input.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

SortAccessor = Callable[[dict[str, Any]], float]


def number_or_zero(value: Any) -> float:
    """Coerce a numeric field for sorting; missing, non-numeric or non-finite values count as 0."""
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return number if math.isfinite(number) else 0


def parse_date_for_sort(value: Any) -> float:
    """
    Convert an ISO date string into epoch seconds.

    Dates without an offset are read as UTC. Returns 0 for missing or
    unparseable dates so they sort as the oldest.
    """
    if not value or not isinstance(value, str):
        return 0
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.timestamp()
    except (ValueError, OverflowError, OSError):
        return 0


def filter_by_text(
    items: Iterable[dict[str, Any]],
    query: str | None,
    field: str,
) -> list[dict[str, Any]]:
    """Case-insensitive substring match of query against one string field."""
    items = list(items)
    if query is None or not query.strip():
        return items
    needle = query.strip().lower()
    return [
        item
        for item in items
        if isinstance(item.get(field), str) and needle in item[field].lower()
    ]


def sort_items(
    items: Iterable[dict[str, Any]],
    sort_by: str | None,
    sort_order: str,
    accessors: Mapping[str, SortAccessor],
) -> list[dict[str, Any]]:
    """
    Stable sort by a named accessor.

    An unknown or empty sort_by returns the items in their original order.
    """
    items = list(items)
    accessor = accessors.get(sort_by) if sort_by else None
    if accessor is None:
        return items
    if sort_order == "asc":
        return sorted(items, key=accessor)
    # Negate instead of reverse=True so ties keep their upstream order.
    return sorted(items, key=lambda item: -accessor(item))


def apply_field_filters(
    items: Iterable[dict[str, Any]],
    expected: Mapping[str, Any],
) -> list[dict[str, Any]]:
    """Keep items whose fields equal every expected value that is not None."""
    active = {name: value for name, value in expected.items() if value is not None}
    return [
        item
        for item in items
        if all(item.get(name) == value for name, value in active.items())
    ]


__all__ = [
    "apply_field_filters",
    "filter_by_text",
    "number_or_zero",
    "parse_date_for_sort",
    "sort_items",
]
