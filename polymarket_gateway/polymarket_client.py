"""Thin HTTP client for the Polymarket Gamma, Data and Bridge APIs."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

import aiohttp

from .config_loader import config
from .errors import (
    ApiResponseError,
    NetworkError,
    ParsingError,
    UpstreamConnectionError,
    UpstreamTimeoutError,
    ValidationError,
)

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "polymarket-gateway/1.0",
}


def build_query(params: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    """
    Flatten query parameters into (name, value) pairs.

    None values are skipped, booleans become "true"/"false" and lists repeat
    the parameter once per element.
    """
    query: list[tuple[str, str]] = []
    if not params:
        return query
    for name, value in params.items():
        if value is None:
            continue
        values = value if isinstance(value, (list, tuple, set, frozenset)) else [value]
        for item in values:
            if item is None:
                continue
            query.append((name, _format_value(item)))
    return query


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _segment(value: Any, name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} must be a non-empty string", {name: value})
    return quote(str(value).strip(), safe="")


def _join_markets(markets: list[str] | None) -> str | None:
    # The Data API takes several markets as one comma-separated value.
    return ",".join(markets) if markets else None


class PolymarketClient:
    """Encapsulates upstream HTTP calls so services stay focused on caching."""

    def __init__(
        self,
        gamma_api_url: str | None = None,
        data_api_url: str | None = None,
        bridge_api_url: str | None = None,
        timeout: float | None = None,
        logger: logging.Logger | None = None,
    ):
        self.gamma_api_url = (gamma_api_url or config.gamma_api_url).rstrip("/")
        self.data_api_url = (data_api_url or config.data_api_url).rstrip("/")
        self.bridge_api_url = (bridge_api_url or config.bridge_api_url).rstrip("/")
        self.timeout = timeout if timeout is not None else config.request_timeout
        self.logger = logger or logging.getLogger(self.__class__.__module__)

    async def _get(
        self,
        base_url: str,
        path: str,
        params: Mapping[str, Any] | None = None,
    ) -> Any:
        """Execute a GET request and return the parsed JSON body."""
        url = f"{base_url}{path}"
        query = build_query(params)
        started = time.monotonic()
        self.logger.debug("Upstream request: %s %s", url, query)

        async with aiohttp.ClientSession(headers=DEFAULT_HEADERS) as session:
            try:
                async with session.get(
                    url,
                    params=query,
                    timeout=aiohttp.ClientTimeout(total=self.timeout),
                ) as response:
                    if response.status >= 400:
                        body = await self._read_error_body(response)
                        self.logger.error(
                            "Polymarket API returned %s for %s: %s",
                            response.status,
                            url,
                            str(body)[:500],
                        )
                        if response.status >= 500:
                            raise ApiResponseError(
                                f"Upstream API error: {response.reason}",
                                503,
                                response.status,
                                body,
                            )
                        raise ApiResponseError(
                            f"API request failed with status {response.status}",
                            response.status,
                            response.status,
                            body,
                        )

                    try:
                        data = await response.json(content_type=None)
                    except ValueError as exc:
                        self.logger.error("Failed to parse response from %s: %s", url, exc)
                        raise ParsingError(
                            "Failed to parse API response", {"url": url}
                        ) from exc
            except TimeoutError as exc:
                self.logger.error("Polymarket API timeout after %ss: %s", self.timeout, url)
                raise UpstreamTimeoutError(
                    "Request timeout", {"url": url, "timeout": self.timeout}
                ) from exc
            except aiohttp.ClientConnectionError as exc:
                self.logger.error("Polymarket API connection error for %s: %s", url, exc)
                raise UpstreamConnectionError(str(exc) or "Connection failed", {"url": url}) from exc
            except aiohttp.ClientError as exc:
                self.logger.error("Polymarket API error for %s: %s", url, exc)
                raise NetworkError(str(exc) or "Network request failed", {"url": url}) from exc

        self.logger.debug(
            "Upstream request succeeded: %s in %.3fs", url, time.monotonic() - started
        )
        return data

    @staticmethod
    async def _read_error_body(response: aiohttp.ClientResponse) -> Any:
        text = await response.text()
        try:
            return json.loads(text)
        except ValueError:
            return text

    # =========================================================================
    # Markets
    # =========================================================================

    async def fetch_markets(self, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        return await self._get(self.gamma_api_url, "/markets", params)

    async def fetch_market_by_id(self, market_id: str) -> dict[str, Any]:
        return await self._get(self.gamma_api_url, f"/markets/{_segment(market_id, 'id')}")

    async def fetch_market_by_slug(self, slug: str) -> dict[str, Any]:
        return await self._get(self.gamma_api_url, f"/markets/slug/{_segment(slug, 'slug')}")

    async def fetch_market_tags(self, market_id: str) -> list[dict[str, Any]]:
        return await self._get(self.gamma_api_url, f"/markets/{_segment(market_id, 'id')}/tags")

    # =========================================================================
    # Events
    # =========================================================================

    async def fetch_events(self, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        return await self._get(self.gamma_api_url, "/events", params)

    async def fetch_event_by_id(self, event_id: str) -> dict[str, Any]:
        return await self._get(self.gamma_api_url, f"/events/{_segment(event_id, 'id')}")

    async def fetch_event_by_slug(self, slug: str) -> dict[str, Any]:
        return await self._get(self.gamma_api_url, f"/events/slug/{_segment(slug, 'slug')}")

    async def fetch_event_tags(self, event_id: str) -> list[dict[str, Any]]:
        return await self._get(self.gamma_api_url, f"/events/{_segment(event_id, 'id')}/tags")

    # =========================================================================
    # Series
    # =========================================================================

    async def fetch_series(self, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        return await self._get(self.gamma_api_url, "/series", params)

    async def fetch_series_by_id(self, series_id: str) -> dict[str, Any]:
        return await self._get(self.gamma_api_url, f"/series/{_segment(series_id, 'id')}")

    async def fetch_series_by_slug(self, slug: str) -> dict[str, Any]:
        return await self._get(self.gamma_api_url, f"/series/slug/{_segment(slug, 'slug')}")

    # =========================================================================
    # Comments
    # =========================================================================

    async def fetch_comments(self, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        return await self._get(self.gamma_api_url, "/comments", params)

    async def fetch_comment_by_id(
        self, comment_id: str, params: Mapping[str, Any] | None = None
    ) -> Any:
        return await self._get(
            self.gamma_api_url, f"/comments/{_segment(comment_id, 'id')}", params
        )

    async def fetch_comments_by_user(
        self, address: str, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        return await self._get(
            self.gamma_api_url,
            f"/comments/user_address/{_segment(address, 'address')}",
            params,
        )

    # =========================================================================
    # Search
    # =========================================================================

    async def fetch_search(self, params: Mapping[str, Any]) -> dict[str, Any]:
        if not params.get("q") or not str(params["q"]).strip():
            raise ValidationError("q must be a non-empty string", {"q": params.get("q")})
        return await self._get(self.gamma_api_url, "/public-search", params)

    # =========================================================================
    # Tags
    # =========================================================================

    async def fetch_tags(self, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        return await self._get(self.gamma_api_url, "/tags", params)

    async def fetch_tag_by_id(self, tag_id: str) -> dict[str, Any]:
        return await self._get(self.gamma_api_url, f"/tags/{_segment(tag_id, 'id')}")

    async def fetch_tag_by_slug(self, slug: str) -> dict[str, Any]:
        return await self._get(self.gamma_api_url, f"/tags/slug/{_segment(slug, 'slug')}")

    async def fetch_tag_relationships_by_id(self, tag_id: str) -> list[dict[str, Any]]:
        return await self._get(
            self.gamma_api_url, f"/tags/{_segment(tag_id, 'id')}/related-tags"
        )

    async def fetch_tag_relationships_by_slug(self, slug: str) -> list[dict[str, Any]]:
        return await self._get(
            self.gamma_api_url, f"/tags/slug/{_segment(slug, 'slug')}/related-tags"
        )

    async def fetch_related_tags_by_id(self, tag_id: str) -> list[dict[str, Any]]:
        return await self._get(
            self.gamma_api_url, f"/tags/{_segment(tag_id, 'id')}/related-tags/tags"
        )

    async def fetch_related_tags_by_slug(self, slug: str) -> list[dict[str, Any]]:
        return await self._get(
            self.gamma_api_url, f"/tags/slug/{_segment(slug, 'slug')}/related-tags/tags"
        )

    # =========================================================================
    # Sports
    # =========================================================================

    async def fetch_teams(self, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        return await self._get(self.gamma_api_url, "/teams", params)

    async def fetch_sports_metadata(self) -> list[dict[str, Any]]:
        return await self._get(self.gamma_api_url, "/sports")

    # =========================================================================
    # Data API and Bridge API
    # =========================================================================

    async def fetch_builder_leaderboard(
        self, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        return await self._get(self.data_api_url, "/v1/builders/leaderboard", params)

    async def fetch_builder_volume(
        self, params: Mapping[str, Any] | None = None
    ) -> list[dict[str, Any]]:
        return await self._get(self.data_api_url, "/v1/builders/volume", params)

    async def fetch_current_positions(
        self, user: str, markets: list[str] | None = None
    ) -> list[dict[str, Any]]:
        return await self._get(
            self.data_api_url, "/positions", {"user": user, "market": _join_markets(markets)}
        )

    async def fetch_trades(
        self, user: str | None = None, markets: list[str] | None = None
    ) -> list[dict[str, Any]]:
        return await self._get(
            self.data_api_url, "/trades", {"user": user, "market": _join_markets(markets)}
        )

    async def fetch_user_activity(self, user: str) -> list[dict[str, Any]]:
        return await self._get(self.data_api_url, "/activity", {"user": user})

    async def fetch_top_holders(self, markets: list[str]) -> list[dict[str, Any]]:
        return await self._get(self.data_api_url, "/holders", {"market": _join_markets(markets)})

    async def fetch_portfolio_value(
        self, user: str, markets: list[str] | None = None
    ) -> list[dict[str, Any]]:
        return await self._get(
            self.data_api_url, "/value", {"user": user, "market": _join_markets(markets)}
        )

    async def fetch_closed_positions(self, user: str) -> list[dict[str, Any]]:
        return await self._get(self.data_api_url, "/closed-positions", {"user": user})

    async def fetch_supported_assets(self) -> dict[str, Any]:
        return await self._get(self.bridge_api_url, "/supported-assets")


__all__ = ["PolymarketClient", "build_query"]
