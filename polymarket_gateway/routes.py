"""
FastAPI route handlers for the Polymarket gateway endpoints.

This module defines the HTTP API layer with thin route handlers that
delegate caching and upstream calls to service classes. Handles
HTTP-specific concerns like cache headers and not-found responses.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Query, Response
from fastapi.responses import PlainTextResponse

from .errors import NotFoundError
from .models import (
    BuilderLeaderboardParams,
    BuilderVolumeParams,
    CommentFilters,
    EventFilters,
    EventSearchOptions,
    HoldersParams,
    MarketFilters,
    MarketSearchOptions,
    SearchOptions,
    SeriesFilters,
    SeriesSearchOptions,
    TeamQueryParams,
    TradesParams,
    UserCommentFilters,
    UserMarketParams,
    UserParams,
)
from .services import (
    BridgeService,
    BuilderDataService,
    CommentService,
    EventService,
    MarketService,
    SearchService,
    SeriesService,
    SportsService,
    TagService,
    UserDataService,
)
from .shared import get_shared_instances

# Initialize logger for routes
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter()

# Services resolve the shared registry on every call, so module-level
# instances stay valid across reset_shared_instances().
market_service = MarketService(logger=logger)
event_service = EventService(logger=logger)
series_service = SeriesService(logger=logger)
comment_service = CommentService(logger=logger)
tag_service = TagService(logger=logger)
search_service = SearchService(logger=logger)
sports_service = SportsService(logger=logger)
builder_data_service = BuilderDataService(logger=logger)
bridge_service = BridgeService(logger=logger)
user_data_service = UserDataService(logger=logger)

# Browser/CDN cache durations in seconds per kind of endpoint.
CACHE_PROFILES = {
    "markets-list": 60,
    "market-detail": 30,
    "events-list": 60,
    "event-detail": 60,
    "search-results": 300,
    "sports-teams": 300,
    "sports-metadata": 3600,
    "bridge-assets": 300,
    "tags": 60,
    "builders": 300,
    "user-data": 60,
    "no-cache": 0,
}


def set_cache_headers(response: Response, profile: str) -> None:
    """Apply Cache-Control headers for one of CACHE_PROFILES."""
    max_age = CACHE_PROFILES[profile]
    if max_age == 0:
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
        response.headers["CDN-Cache-Control"] = "no-store"
        return
    response.headers["Cache-Control"] = f"public, max-age={max_age}, s-maxage={max_age}"
    response.headers["CDN-Cache-Control"] = f"public, max-age={max_age}"


def require_found(value: Any, message: str) -> Any:
    """Turn a None lookup result into a 404."""
    if value is None:
        raise NotFoundError(message)
    return value


# =============================================================================
# Markets
# =============================================================================


@router.get("/api/markets")
async def list_markets(
    filters: Annotated[MarketFilters, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "markets-list")
    return await market_service.get_markets(filters)


@router.get("/api/markets/search")
async def search_markets(
    options: Annotated[MarketSearchOptions, Query()], response: Response
) -> list[dict[str, Any]]:
    """
    Search markets by question text.

    Accepts every market filter plus query, sort_by (volume, liquidity,
    createdAt) and sort_order (asc, desc).
    """
    set_cache_headers(response, "search-results")
    return await market_service.search_markets(options)


@router.get("/api/markets/slug/{slug}")
async def get_market_by_slug(slug: str, response: Response) -> dict[str, Any]:
    market = require_found(
        await market_service.get_market_by_slug(slug), f"Market not found: {slug}"
    )
    set_cache_headers(response, "market-detail")
    return market


@router.get("/api/markets/{market_id}")
async def get_market(market_id: str, response: Response) -> dict[str, Any]:
    market = require_found(
        await market_service.get_market_by_id(market_id), f"Market not found: {market_id}"
    )
    set_cache_headers(response, "market-detail")
    return market


@router.get("/api/markets/{market_id}/tags")
async def get_market_tags(market_id: str, response: Response) -> list[dict[str, Any]]:
    tags = require_found(
        await market_service.get_market_tags(market_id), f"Market not found: {market_id}"
    )
    set_cache_headers(response, "market-detail")
    return tags


# =============================================================================
# Events
# =============================================================================


@router.get("/api/events")
async def list_events(
    filters: Annotated[EventFilters, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "events-list")
    return await event_service.get_events(filters)


@router.get("/api/events/search")
async def search_events(
    options: Annotated[EventSearchOptions, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "search-results")
    return await event_service.search_events(options)


@router.get("/api/events/slug/{slug}")
async def get_event_by_slug(slug: str, response: Response) -> dict[str, Any]:
    event = require_found(
        await event_service.get_event_by_slug(slug), f"Event not found: {slug}"
    )
    set_cache_headers(response, "event-detail")
    return event


@router.get("/api/events/{event_id}")
async def get_event(event_id: str, response: Response) -> dict[str, Any]:
    event = require_found(
        await event_service.get_event_by_id(event_id), f"Event not found: {event_id}"
    )
    set_cache_headers(response, "event-detail")
    return event


@router.get("/api/events/{event_id}/tags")
async def get_event_tags(event_id: str, response: Response) -> list[dict[str, Any]]:
    tags = require_found(
        await event_service.get_event_tags(event_id), f"Event not found: {event_id}"
    )
    set_cache_headers(response, "event-detail")
    return tags


# =============================================================================
# Series
# =============================================================================


@router.get("/api/series")
async def list_series(
    filters: Annotated[SeriesFilters, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "events-list")
    return await series_service.get_series(filters)


@router.get("/api/series/search")
async def search_series(
    options: Annotated[SeriesSearchOptions, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "search-results")
    return await series_service.search_series(options)


@router.get("/api/series/slug/{slug}")
async def get_series_by_slug(slug: str, response: Response) -> dict[str, Any]:
    series = require_found(
        await series_service.get_series_by_slug(slug), f"Series not found: {slug}"
    )
    set_cache_headers(response, "event-detail")
    return series


@router.get("/api/series/{series_id}")
async def get_series(series_id: str, response: Response) -> dict[str, Any]:
    series = require_found(
        await series_service.get_series_by_id(series_id), f"Series not found: {series_id}"
    )
    set_cache_headers(response, "event-detail")
    return series


# =============================================================================
# Comments
# =============================================================================


@router.get("/api/comments")
async def list_comments(
    filters: Annotated[CommentFilters, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "markets-list")
    return await comment_service.get_comments(filters)


@router.get("/api/comments/user/{address}")
async def list_user_comments(
    address: str,
    filters: Annotated[UserCommentFilters, Query()],
    response: Response,
) -> list[dict[str, Any]]:
    set_cache_headers(response, "markets-list")
    return await comment_service.get_comments_by_user(address, filters)


@router.get("/api/comments/{comment_id}")
async def get_comment(
    comment_id: str, response: Response, get_positions: bool = False
) -> Any:
    comment = require_found(
        await comment_service.get_comment_by_id(comment_id, get_positions),
        f"Comment not found: {comment_id}",
    )
    set_cache_headers(response, "market-detail")
    return comment


# =============================================================================
# Tags
# =============================================================================


@router.get("/api/tags")
async def list_tags(response: Response) -> list[dict[str, Any]]:
    set_cache_headers(response, "tags")
    return await tag_service.get_tags()


@router.get("/api/tags/slug/{slug}")
async def get_tag_by_slug(slug: str, response: Response) -> dict[str, Any]:
    tag = require_found(await tag_service.get_tag_by_slug(slug), f"Tag not found: {slug}")
    set_cache_headers(response, "tags")
    return tag


@router.get("/api/tags/slug/{slug}/relationships")
async def get_tag_relationships_by_slug(slug: str, response: Response) -> list[dict[str, Any]]:
    set_cache_headers(response, "tags")
    return await tag_service.get_tag_relationships_by_slug(slug)


@router.get("/api/tags/slug/{slug}/related")
async def get_related_tags_by_slug(slug: str, response: Response) -> list[dict[str, Any]]:
    set_cache_headers(response, "tags")
    return await tag_service.get_related_tags_by_slug(slug)


@router.get("/api/tags/{tag_id}")
async def get_tag(tag_id: str, response: Response) -> dict[str, Any]:
    tag = require_found(await tag_service.get_tag_by_id(tag_id), f"Tag not found: {tag_id}")
    set_cache_headers(response, "tags")
    return tag


@router.get("/api/tags/{tag_id}/relationships")
async def get_tag_relationships(tag_id: str, response: Response) -> list[dict[str, Any]]:
    set_cache_headers(response, "tags")
    return await tag_service.get_tag_relationships_by_id(tag_id)


@router.get("/api/tags/{tag_id}/related")
async def get_related_tags(tag_id: str, response: Response) -> list[dict[str, Any]]:
    set_cache_headers(response, "tags")
    return await tag_service.get_related_tags_by_id(tag_id)


# =============================================================================
# Search, sports, builders, bridge
# =============================================================================


@router.get("/api/search")
async def search(options: Annotated[SearchOptions, Query()], response: Response) -> Any:
    """
    Public search across markets, events and profiles.

    Pass cache=false to skip the gateway cache for this request.
    """
    set_cache_headers(response, "no-cache" if options.cache is False else "search-results")
    return await search_service.search(options)


@router.get("/api/sports/teams")
async def list_teams(
    params: Annotated[TeamQueryParams, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "sports-teams")
    return await sports_service.get_teams(params)


@router.get("/api/sports/metadata")
async def sports_metadata(response: Response) -> list[dict[str, Any]]:
    set_cache_headers(response, "sports-metadata")
    return await sports_service.get_sports_metadata()


@router.get("/api/builders/leaderboard")
async def builders_leaderboard(
    params: Annotated[BuilderLeaderboardParams, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "builders")
    return await builder_data_service.get_leaderboard(params)


@router.get("/api/builders/volume")
async def builders_volume(
    params: Annotated[BuilderVolumeParams, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "builders")
    return await builder_data_service.get_volume_time_series(params)


@router.get("/api/bridge/supported-assets")
async def supported_assets(response: Response) -> dict[str, Any]:
    set_cache_headers(response, "bridge-assets")
    return await bridge_service.get_supported_assets()


# =============================================================================
# User data
# =============================================================================


@router.get("/api/users/positions")
async def user_positions(
    params: Annotated[UserMarketParams, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "user-data")
    return await user_data_service.get_current_positions(params.user, params.market)


@router.get("/api/users/trades")
async def user_trades(
    params: Annotated[TradesParams, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "user-data")
    return await user_data_service.get_trades(params.user, params.market)


@router.get("/api/users/activity")
async def user_activity(
    params: Annotated[UserParams, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "user-data")
    return await user_data_service.get_user_activity(params.user)


@router.get("/api/users/holders")
async def top_holders(
    params: Annotated[HoldersParams, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "user-data")
    return await user_data_service.get_top_holders(params.market)


@router.get("/api/users/value")
async def portfolio_value(
    params: Annotated[UserMarketParams, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "user-data")
    return await user_data_service.get_portfolio_value(params.user, params.market)


@router.get("/api/users/closed-positions")
async def closed_positions(
    params: Annotated[UserParams, Query()], response: Response
) -> list[dict[str, Any]]:
    set_cache_headers(response, "user-data")
    return await user_data_service.get_closed_positions(params.user)


# =============================================================================
# Operational
# =============================================================================


@router.get("/api/health")
async def health() -> dict[str, Any]:
    """
    Health check endpoint.

    Reports service status together with cache and in-flight request stats.

    Returns:
        Dictionary with status, service name and shared instance stats
    """
    return {
        "status": "ok",
        "service": "polymarket-gateway",
        **get_shared_instances().get_stats(),
    }


@router.get("/robots.txt", response_class=PlainTextResponse)
async def robots_txt() -> str:
    """
    Robots exclusion file route.

    Returns a static robots.txt that tells crawlers to skip all paths.
    """
    return "User-agent: *\nDisallow: /"
