import asyncio
import pathlib
import sys

import pytest

# Ensure repo root on sys.path for direct module imports when running tests locally.
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from polymarket_gateway.config_loader import Config
from polymarket_gateway.errors import ApiResponseError, ValidationError
from polymarket_gateway.models import (
    BuilderLeaderboardParams,
    BuilderVolumeParams,
    CommentFilters,
    EventSearchOptions,
    MarketFilters,
    MarketSearchOptions,
    SearchOptions,
    SeriesFilters,
    SeriesSearchOptions,
    TeamQueryParams,
)
from polymarket_gateway.services import (
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
from polymarket_gateway.shared import SharedInstances

MARKETS = [
    {"id": "1", "question": "Will Bitcoin reach 100k?", "volumeNum": 500, "liquidityNum": 10, "endDate": "2025-03-01T00:00:00Z"},
    {"id": "2", "question": "Will ETH flip bitcoin?", "volumeNum": 900, "liquidityNum": 30, "endDate": "2025-01-01T00:00:00Z"},
    {"id": "3", "question": "Election winner", "volumeNum": 100, "liquidityNum": 20, "endDate": None},
]

SERIES = [
    {"id": "s1", "title": "NBA Finals", "active": True, "closed": False, "categories": [{"name": "sports"}], "volume": 5},
    {"id": "s2", "title": "Fed rates", "active": True, "closed": True, "categories": [{"name": "economy"}], "volume": 50},
    {"id": "s3", "title": "NFL Season", "active": False, "closed": False, "categories": [{"name": "sports"}], "volume": 20},
]

WALLET = "0x" + "ab" * 20

POSITIONS = [
    {"conditionId": "0xC1", "slug": "will-it-rain", "size": 10},
    {"conditionId": "0xc2", "slug": "fed-cut", "size": 4},
    {"conditionId": "0xc3", "slug": None, "size": 1},
]

TRADES = [
    {"proxyWallet": WALLET.upper().replace("0X", "0x"), "conditionId": "0xc1", "slug": "will-it-rain"},
    {"proxyWallet": "0x" + "cd" * 20, "conditionId": "0xc1", "slug": "will-it-rain"},
    {"proxyWallet": WALLET, "conditionId": "0xc2", "slug": "fed-cut"},
]


def _not_found() -> ApiResponseError:
    return ApiResponseError("API request failed with status 404", 404, 404)


class _StubPolymarketClient:
    """Records every upstream call and answers from in-memory fixtures."""

    def __init__(self, delay: float = 0):
        self.calls: list[tuple] = []
        self.delay = delay

    async def _answer(self, name, *args, result):
        self.calls.append((name, *args))
        if self.delay:
            await asyncio.sleep(self.delay)
        if isinstance(result, Exception):
            raise result
        return result

    async def fetch_markets(self, params):
        return await self._answer("markets", params, result=MARKETS)

    async def fetch_market_by_id(self, market_id):
        result = next((m for m in MARKETS if m["id"] == market_id), _not_found())
        return await self._answer("market", market_id, result=result)

    async def fetch_market_by_slug(self, slug):
        return await self._answer("market_slug", slug, result={"id": "1", "slug": slug})

    async def fetch_market_tags(self, market_id):
        return await self._answer("market_tags", market_id, result=[{"id": "t1", "label": "Crypto"}])

    async def fetch_events(self, params):
        return await self._answer(
            "events",
            params,
            result=[
                {"id": "e1", "title": "Super Bowl", "volume": "10", "startDate": "2025-02-01T00:00:00Z"},
                {"id": "e2", "title": "World Cup", "volume": "300.5", "startDate": "2026-06-01T00:00:00Z"},
            ],
        )

    async def fetch_event_by_id(self, event_id):
        return await self._answer("event", event_id, result=_not_found())

    async def fetch_series(self, params):
        return await self._answer("series", params, result=SERIES)

    async def fetch_series_by_id(self, series_id):
        return await self._answer("series_by_id", series_id, result=SERIES[0])

    async def fetch_comments(self, params):
        return await self._answer("comments", params, result=[{"id": "c1"}])

    async def fetch_comment_by_id(self, comment_id, params):
        return await self._answer("comment", comment_id, params, result=[{"id": comment_id}])

    async def fetch_comments_by_user(self, address, params):
        return await self._answer("user_comments", address, params, result=[{"id": "c2"}])

    async def fetch_search(self, params):
        return await self._answer("search", params, result={"events": [], "tags": [], "profiles": []})

    async def fetch_tags(self):
        return await self._answer("tags", result=[{"id": "t1"}])

    async def fetch_tag_by_slug(self, slug):
        return await self._answer("tag_slug", slug, result=_not_found())

    async def fetch_related_tags_by_id(self, tag_id):
        return await self._answer("related_tags", tag_id, result=_not_found())

    async def fetch_teams(self, params):
        return await self._answer("teams", params, result=[{"id": 1, "league": "NBA"}])

    async def fetch_sports_metadata(self):
        return await self._answer("sports", result=[{"sport": "NFL"}])

    async def fetch_builder_leaderboard(self, params):
        return await self._answer("leaderboard", params, result=[{"builder": "b1"}])

    async def fetch_builder_volume(self, params):
        return await self._answer("volume", params, result=[{"builder": "b1", "volume": 1}])

    async def fetch_supported_assets(self):
        return await self._answer("assets", result={"supportedAssets": []})

    async def fetch_current_positions(self, user, markets=None):
        return await self._answer("positions", user, markets, result=POSITIONS)

    async def fetch_trades(self, user=None, markets=None):
        return await self._answer("trades", user, markets, result=TRADES)

    async def fetch_user_activity(self, user):
        return await self._answer("activity", user, result=[{"type": "TRADE"}])

    async def fetch_top_holders(self, markets):
        return await self._answer("holders", markets, result=[{"token": "t1", "holders": []}])

    async def fetch_portfolio_value(self, user, markets=None):
        return await self._answer("value", user, markets, result=[{"user": user, "value": 12.5}])

    async def fetch_closed_positions(self, user):
        return await self._answer("closed", user, result=[])


class _RecordingCache:
    """Wraps a CacheStore to capture the TTL of every write."""

    def __init__(self, inner):
        self.inner = inner
        self.ttls: dict[str, float] = {}

    def get(self, key):
        return self.inner.get(key)

    def set(self, key, value, ttl_seconds):
        self.ttls[key] = ttl_seconds
        self.inner.set(key, value, ttl_seconds)


def _instances(client, **cache_settings) -> SharedInstances:
    data = {"gateway": {"cache": cache_settings}} if cache_settings else {}
    return SharedInstances(config=Config(data=data), client=client)


@pytest.mark.asyncio
async def test_market_service_caches_and_coalesces_get_markets():
    client = _StubPolymarketClient(delay=0.02)
    service = MarketService(instances=_instances(client))

    results = await asyncio.gather(*(service.get_markets(MarketFilters(limit=3)) for _ in range(3)))
    again = await service.get_markets(MarketFilters(limit=3))

    assert [c[0] for c in client.calls] == ["markets"]
    assert client.calls[0][1] == {"limit": 3}
    assert results[0] == MARKETS
    assert again == MARKETS


@pytest.mark.asyncio
async def test_search_markets_filters_and_sorts_from_shared_cache():
    client = _StubPolymarketClient()
    service = MarketService(instances=_instances(client))

    by_volume = await service.search_markets(
        MarketSearchOptions(query="BITCOIN", sort_by="volume", sort_order="desc")
    )
    by_date = await service.search_markets(MarketSearchOptions(sort_by="createdAt", sort_order="asc"))
    plain = await service.get_markets()

    assert [m["id"] for m in by_volume] == ["2", "1"]
    assert [m["id"] for m in by_date] == ["3", "2", "1"]
    assert plain == MARKETS
    assert len(client.calls) == 1
    assert client.calls[0][1] == {}


@pytest.mark.asyncio
async def test_market_by_id_returns_none_when_missing():
    client = _StubPolymarketClient()
    service = MarketService(instances=_instances(client))

    assert await service.get_market_by_id("404") is None
    assert (await service.get_market_by_id("1"))["id"] == "1"
    assert await service.get_market_by_id("1") == MARKETS[0]

    assert client.calls == [("market", "404"), ("market", "1")]


@pytest.mark.asyncio
async def test_search_events_matches_title_and_sorts_numeric_strings():
    client = _StubPolymarketClient()
    service = EventService(instances=_instances(client))

    events = await service.search_events(EventSearchOptions(sort_by="volume"))
    matched = await service.search_events(EventSearchOptions(query="bowl"))

    assert [e["id"] for e in events] == ["e2", "e1"]
    assert [e["id"] for e in matched] == ["e1"]
    assert await service.get_event_by_id("e9") is None


@pytest.mark.asyncio
async def test_series_post_filters_category_and_status():
    client = _StubPolymarketClient()
    service = SeriesService(instances=_instances(client))

    sports = await service.get_series(SeriesFilters(category="sports"))
    active_sports = await service.get_series(SeriesFilters(category="sports", active=True))
    open_series = await service.search_series(
        SeriesSearchOptions(closed=False, sort_by="volume", sort_order="asc")
    )

    assert [s["id"] for s in sports] == ["s1", "s3"]
    assert [s["id"] for s in active_sports] == ["s1"]
    assert [s["id"] for s in open_series] == ["s1", "s3"]
    assert client.calls[0] == ("series", {"category": "sports"})


@pytest.mark.asyncio
async def test_series_status_filters_return_exact_subset():
    client = _StubPolymarketClient()
    service = SeriesService(instances=_instances(client))

    live = await service.get_series(SeriesFilters(active=True, closed=False))

    assert [s["id"] for s in live] == ["s1"]
    assert client.calls == [("series", {"active": True, "closed": False})]


@pytest.mark.asyncio
async def test_comment_by_id_caches_positions_variant_separately():
    client = _StubPolymarketClient()
    service = CommentService(instances=_instances(client))

    await service.get_comment_by_id("c1")
    await service.get_comment_by_id("c1", get_positions=True)
    await service.get_comment_by_id("c1")
    await service.get_comments(CommentFilters(parent_entity_type="Event", parent_entity_id=7))
    await service.get_comments_by_user("0xabc")

    assert client.calls == [
        ("comment", "c1", {"get_positions": False}),
        ("comment", "c1", {"get_positions": True}),
        ("comments", {"parent_entity_type": "Event", "parent_entity_id": 7}),
        ("user_comments", "0xabc", {}),
    ]


@pytest.mark.asyncio
async def test_tag_lookups_distinguish_entity_and_collection_not_found():
    client = _StubPolymarketClient()
    service = TagService(instances=_instances(client))

    assert await service.get_tags() == [{"id": "t1"}]
    assert await service.get_tag_by_slug("nope") is None
    with pytest.raises(ApiResponseError) as exc:
        await service.get_related_tags_by_id("nope")
    assert exc.value.status_code == 404


@pytest.mark.asyncio
async def test_search_service_respects_cache_flag():
    client = _StubPolymarketClient(delay=0.01)
    service = SearchService(instances=_instances(client))

    await service.search(SearchOptions(q="btc"))
    await service.search(SearchOptions(q="btc"))
    await asyncio.gather(*(service.search(SearchOptions(q="btc", cache=False)) for _ in range(2)))

    assert len(client.calls) == 3
    assert client.calls[0] == ("search", {"q": "btc"})


@pytest.mark.asyncio
async def test_cache_disabled_in_config_still_coalesces_collections():
    client = _StubPolymarketClient(delay=0.01)
    instances = _instances(client, enabled=False)
    service = MarketService(instances=instances)

    await asyncio.gather(*(service.get_markets() for _ in range(3)))
    await service.get_markets()

    assert len(client.calls) == 2
    assert instances.cache.size == 0


@pytest.mark.asyncio
async def test_services_share_one_cache():
    client = _StubPolymarketClient()
    instances = _instances(client)

    await SportsService(instances=instances).get_teams(TeamQueryParams(limit=5, league=["NBA"]))
    await SportsService(instances=instances).get_teams(TeamQueryParams(league=["NBA"], limit=5))
    await SportsService(instances=instances).get_sports_metadata()

    assert [c[0] for c in client.calls] == ["teams", "sports"]
    assert instances.cache.size == 2


@pytest.mark.asyncio
async def test_builder_and_bridge_use_longer_ttls():
    client = _StubPolymarketClient()
    instances = _instances(client)
    recorder = _RecordingCache(instances.cache)
    instances._cache = recorder

    await BuilderDataService(instances=instances).get_leaderboard(
        BuilderLeaderboardParams(time_period="WEEK", limit=10)
    )
    await BuilderDataService(instances=instances).get_volume_time_series(BuilderVolumeParams())
    await BridgeService(instances=instances).get_supported_assets()
    await MarketService(instances=instances).get_markets()

    assert client.calls[0] == ("leaderboard", {"timePeriod": "WEEK", "limit": 10})
    assert client.calls[1] == ("volume", {"timePeriod": "DAY"})
    assert recorder.ttls == {
        'builders:leaderboard:{"limit":10,"timePeriod":"WEEK"}': 300,
        'builders:volume:{"timePeriod":"DAY"}': 600,
        "bridge:supported-assets": 300,
        "markets": 60,
    }


@pytest.mark.asyncio
async def test_positions_are_filtered_by_market_ignoring_case():
    client = _StubPolymarketClient()
    service = UserDataService(instances=_instances(client))

    everything = await service.get_current_positions(WALLET)
    narrowed = await service.get_current_positions(WALLET, ["0xc1", "FED-CUT"])
    again = await service.get_current_positions(WALLET, ["0xc1", "FED-CUT"])

    assert everything == POSITIONS
    assert [p["conditionId"] for p in narrowed] == ["0xC1", "0xc2"]
    assert again == narrowed
    assert client.calls == [
        ("positions", WALLET, None),
        ("positions", WALLET, ["0xc1", "FED-CUT"]),
    ]


@pytest.mark.asyncio
async def test_trades_are_filtered_by_wallet_and_market():
    client = _StubPolymarketClient()
    service = UserDataService(instances=_instances(client))

    mine = await service.get_trades(WALLET)
    mine_in_market = await service.get_trades(WALLET, ["will-it-rain"])
    market_only = await service.get_trades(markets=["0xc1"])

    assert mine == [TRADES[0], TRADES[2]]
    assert mine_in_market == [TRADES[0]]
    assert market_only == [TRADES[0], TRADES[1]]


@pytest.mark.asyncio
async def test_trades_need_a_user_or_a_market():
    client = _StubPolymarketClient()
    service = UserDataService(instances=_instances(client))

    with pytest.raises(ValidationError):
        await service.get_trades()
    assert client.calls == []


@pytest.mark.asyncio
async def test_user_lookups_share_cache_and_coalesce():
    client = _StubPolymarketClient(delay=0.01)
    instances = _instances(client)
    recorder = _RecordingCache(instances.cache)
    instances._cache = recorder
    service = UserDataService(instances=instances)

    await asyncio.gather(*(service.get_user_activity(WALLET) for _ in range(3)))
    await service.get_top_holders(["0xc1"])
    await service.get_portfolio_value(WALLET)
    await service.get_closed_positions(WALLET)
    await service.get_closed_positions(WALLET)

    assert [c[0] for c in client.calls] == ["activity", "holders", "value", "closed"]
    assert recorder.ttls == {
        f'users:activity:{{"user":"{WALLET}"}}': 60,
        'users:holders:{"market":["0xc1"]}': 60,
        f'users:value:{{"user":"{WALLET}"}}': 60,
        f'users:closed-positions:{{"user":"{WALLET}"}}': 60,
    }
