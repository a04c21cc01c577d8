"""
Pydantic models for gateway query parameters.

Filter models mirror the query parameters the Polymarket APIs accept. Search
option models extend them with fields the gateway applies itself (text query
and sorting); those never reach the upstream API or the collection cache key.
"""

from typing import Annotated, Any, ClassVar, Literal

from pydantic import BaseModel, ConfigDict, Field

SortField = Literal["volume", "liquidity", "createdAt"]
SortOrder = Literal["asc", "desc"]
TimePeriod = Literal["DAY", "WEEK", "MONTH", "ALL"]
WalletAddress = Annotated[str, Field(pattern=r"^0x[0-9a-fA-F]{40}$")]
MarketToken = Annotated[str, Field(min_length=1)]


class QueryModel(BaseModel):
    """Base for every parameter model; knows which fields are gateway-local."""

    model_config = ConfigDict(populate_by_name=True)

    LOCAL_FIELDS: ClassVar[frozenset[str]] = frozenset()

    def to_params(self) -> dict[str, Any]:
        """Upstream query parameters: None dropped, aliases applied, local fields removed."""
        return self.model_dump(
            exclude_none=True,
            by_alias=True,
            exclude=set(self.LOCAL_FIELDS),
        )


class TextSearchMixin(BaseModel):
    """
    Gateway-side search options.

    Attributes:
        query: Case-insensitive substring to match
        sort_by: Field to sort on (volume, liquidity or createdAt)
        sort_order: asc or desc (default: desc)
    """

    LOCAL_FIELDS: ClassVar[frozenset[str]] = frozenset({"query", "sort_by", "sort_order"})

    query: str | None = None
    sort_by: SortField | None = None
    sort_order: SortOrder = "desc"


class Pagination(QueryModel):
    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)
    order: str | None = None
    ascending: bool | None = None


# =============================================================================
# Markets
# =============================================================================


class MarketFilters(Pagination):
    id: list[int] | None = None
    slug: list[str] | None = None
    clob_token_ids: list[str] | None = None
    condition_ids: list[str] | None = None
    market_maker_address: list[str] | None = None
    question_ids: list[str] | None = None
    liquidity_num_min: float | None = None
    liquidity_num_max: float | None = None
    volume_num_min: float | None = None
    volume_num_max: float | None = None
    start_date_min: str | None = None
    start_date_max: str | None = None
    end_date_min: str | None = None
    end_date_max: str | None = None
    tag_id: int | None = None
    related_tags: bool | None = None
    sports_market_types: list[str] | None = None
    uma_resolution_status: str | None = None
    game_id: str | None = None
    rewards_min_size: float | None = None
    cyom: bool | None = None
    closed: bool | None = None
    active: bool | None = None
    include_tag: bool | None = None


class MarketSearchOptions(TextSearchMixin, MarketFilters):
    pass


# =============================================================================
# Events
# =============================================================================


class EventFilters(Pagination):
    id: list[int] | None = None
    slug: list[str] | None = None
    tag_id: int | None = None
    tag_slug: str | None = None
    exclude_tag_id: list[int] | None = None
    related_tags: bool | None = None
    active: bool | None = None
    closed: bool | None = None
    archived: bool | None = None
    featured: bool | None = None
    cyom: bool | None = None
    liquidity_min: float | None = None
    liquidity_max: float | None = None
    volume_min: float | None = None
    volume_max: float | None = None
    start_date_min: str | None = None
    start_date_max: str | None = None
    end_date_min: str | None = None
    end_date_max: str | None = None
    recurrence: str | None = None
    include_chat: bool | None = None
    include_template: bool | None = None


class EventSearchOptions(TextSearchMixin, EventFilters):
    pass


# =============================================================================
# Series
# =============================================================================


class SeriesFilters(QueryModel):
    """
    Series query parameters.

    category, active and closed are also applied to the upstream response,
    since the series endpoint does not honour all of them.
    """

    category: str | None = None
    active: bool | None = None
    closed: bool | None = None
    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)


class SeriesSearchOptions(TextSearchMixin, SeriesFilters):
    pass


# =============================================================================
# Comments
# =============================================================================


class CommentFilters(Pagination):
    parent_entity_type: Literal["Event", "Series", "market"] | None = None
    parent_entity_id: int | None = None
    get_positions: bool | None = None
    holders_only: bool | None = None


class UserCommentFilters(Pagination):
    pass


# =============================================================================
# Public search
# =============================================================================


class SearchOptions(QueryModel):
    """
    Options for the public search endpoint.

    Attributes:
        q: Search text (required)
        cache: False skips the cache and request coalescing for this call
    """

    LOCAL_FIELDS: ClassVar[frozenset[str]] = frozenset({"cache"})

    q: str = Field(min_length=1)
    cache: bool | None = None
    events_status: str | None = None
    limit_per_type: int | None = Field(default=None, ge=0)
    page: int | None = Field(default=None, ge=0)
    events_tag: list[str] | None = None
    keep_closed_markets: int | None = None
    sort: str | None = None
    ascending: bool | None = None
    search_tags: bool | None = None
    search_profiles: bool | None = None
    recurrence: str | None = None
    exclude_tag_id: list[int] | None = None
    optimized: bool | None = None


# =============================================================================
# Sports and builders
# =============================================================================


class TeamQueryParams(Pagination):
    league: list[str] | None = None
    name: list[str] | None = None
    abbreviation: list[str] | None = None


class BuilderLeaderboardParams(QueryModel):
    time_period: TimePeriod = Field(default="DAY", alias="timePeriod")
    limit: int | None = Field(default=None, ge=0)
    offset: int | None = Field(default=None, ge=0)


class BuilderVolumeParams(QueryModel):
    time_period: TimePeriod = Field(default="DAY", alias="timePeriod")


# =============================================================================
# User data
# =============================================================================


class UserMarketParams(QueryModel):
    """
    Wallet plus optional markets, for positions and portfolio value.

    Attributes:
        user: Proxy wallet address (0x followed by 40 hex characters)
        market: Condition ids or slugs to narrow the result to
    """

    user: WalletAddress
    market: list[MarketToken] | None = Field(default=None, min_length=1)


class UserParams(QueryModel):
    user: WalletAddress


class TradesParams(QueryModel):
    """Trades need a user, a market list, or both."""

    user: WalletAddress | None = None
    market: list[MarketToken] | None = Field(default=None, min_length=1)


class HoldersParams(QueryModel):
    market: list[MarketToken] = Field(min_length=1)


__all__ = [
    "BuilderLeaderboardParams",
    "BuilderVolumeParams",
    "CommentFilters",
    "EventFilters",
    "EventSearchOptions",
    "HoldersParams",
    "MarketFilters",
    "MarketSearchOptions",
    "QueryModel",
    "SearchOptions",
    "SeriesFilters",
    "SeriesSearchOptions",
    "SortField",
    "SortOrder",
    "TeamQueryParams",
    "TradesParams",
    "UserCommentFilters",
    "UserMarketParams",
    "UserParams",
    "WalletAddress",
]
