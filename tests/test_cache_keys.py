import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from polymarket_gateway.cache_keys import build_cache_key
from polymarket_gateway.models import MarketFilters, MarketSearchOptions


def test_namespace_only_when_no_params():
    assert build_cache_key("bridge:supported-assets") == "bridge:supported-assets"
    assert build_cache_key("markets", {}) == "markets"
    assert build_cache_key("markets", {"limit": None}) == "markets"


def test_key_order_does_not_matter():
    first = build_cache_key("markets", {"limit": 10, "active": True, "offset": 0})
    second = build_cache_key("markets", {"offset": 0, "active": True, "limit": 10})
    assert first == second


def test_none_values_match_absent_fields():
    assert build_cache_key("markets", {"a": 1, "b": None}) == build_cache_key("markets", {"a": 1})


def test_nested_filters_are_canonicalized():
    first = build_cache_key("events", {"filter": {"b": 2, "a": None, "c": {"y": 1, "x": 2}}})
    second = build_cache_key("events", {"filter": {"c": {"x": 2, "y": 1}, "b": 2}})
    assert first == second


def test_distinct_queries_never_collide():
    keys = {
        build_cache_key("markets", {"active": True}),
        build_cache_key("markets", {"active": "true"}),
        build_cache_key("markets", {"active": 1}),
        build_cache_key("markets", {"q": "a&b=c"}),
        build_cache_key("markets", {"q": "a", "b": "c"}),
        build_cache_key("markets", {"slug": ["a", "b"]}),
        build_cache_key("markets", {"slug": ["b", "a"]}),
        build_cache_key("events", {"active": True}),
    }
    assert len(keys) == 8


def test_known_serialization():
    assert build_cache_key("markets", {"limit": 10, "active": True}) == (
        'markets:{"active":true,"limit":10}'
    )


def test_pydantic_models_match_equivalent_dicts():
    filters = MarketFilters(limit=5, closed=False)
    assert build_cache_key("markets", filters) == build_cache_key(
        "markets", {"closed": False, "limit": 5}
    )


def test_search_options_share_key_with_filters():
    options = MarketSearchOptions(limit=5, query="bitcoin", sort_by="volume")
    assert build_cache_key("markets", options.to_params()) == build_cache_key(
        "markets", MarketFilters(limit=5).to_params()
    )
