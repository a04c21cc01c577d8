import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from polymarket_gateway.config_loader import Config
from polymarket_gateway.market_service import MarketService
from polymarket_gateway.shared import (
    SharedInstances,
    get_shared_cache,
    get_shared_client,
    get_shared_coalescer,
    get_shared_instances,
    reset_shared_instances,
)


def test_module_accessors_return_the_same_instances():
    assert get_shared_cache() is get_shared_cache()
    assert get_shared_client() is get_shared_client()
    assert get_shared_coalescer() is get_shared_coalescer()
    assert get_shared_instances().cache is get_shared_cache()


def test_reset_discards_cached_data():
    cache = get_shared_cache()
    cache.set("markets", [1], ttl_seconds=60)

    reset_shared_instances()

    assert get_shared_cache() is not cache
    assert get_shared_cache().get("markets") is None


def test_cache_capacity_comes_from_config():
    instances = SharedInstances(config=Config(data={"gateway": {"cache": {"max_entries": 7}}}))
    assert instances.cache.max_entries == 7


def test_client_uses_configured_urls():
    instances = SharedInstances(
        config=Config(data={"gateway": {"gamma_api_url": "http://gamma.test/", "request_timeout_seconds": 3}})
    )
    assert instances.client.gamma_api_url == "http://gamma.test"
    assert instances.client.timeout == 3


def test_injected_client_survives_reset():
    client = object()
    instances = SharedInstances(client=client)
    cache = instances.cache

    instances.reset()

    assert instances.client is client
    assert instances.cache is not cache


class _StubClient:
    def __init__(self):
        self.calls = 0

    async def fetch_markets(self, params):
        self.calls += 1
        return [{"id": str(self.calls)}]


@pytest.mark.asyncio
async def test_services_without_injection_follow_the_global_registry(monkeypatch):
    import polymarket_gateway.shared as shared

    client = _StubClient()
    monkeypatch.setattr(shared, "_shared_instances", SharedInstances(client=client))
    service = MarketService()

    assert await service.get_markets() == [{"id": "1"}]
    assert await service.get_markets() == [{"id": "1"}]

    shared.get_shared_instances().reset()
    assert await service.get_markets() == [{"id": "2"}]
