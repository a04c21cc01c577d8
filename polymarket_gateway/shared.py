"""
Process-wide registry of the cache store, coalescer and upstream client.

Every service façade reads and writes the same cache and joins the same
in-flight table, so an entry populated through one service is visible to all
of them. Tests call reset_shared_instances() between cases.
"""

from __future__ import annotations

import logging

from .cache import CacheStore
from .coalescer import RequestCoalescer
from .config_loader import Config
from .config_loader import config as default_config
from .polymarket_client import PolymarketClient

logger = logging.getLogger(__name__)


class SharedInstances:
    """Lazily built cache/coalescer/client trio bound to one configuration."""

    def __init__(self, config: Config | None = None, client: PolymarketClient | None = None):
        self.config = config or default_config
        # An injected client (tests, embedding) survives reset().
        self._injected_client = client
        self._cache: CacheStore | None = None
        self._coalescer: RequestCoalescer | None = None
        self._client: PolymarketClient | None = client

    @property
    def cache(self) -> CacheStore:
        if self._cache is None:
            self._cache = CacheStore(max_entries=self.config.cache_max_entries)
            logger.debug("Created shared cache (max_entries=%s)", self.config.cache_max_entries)
        return self._cache

    @property
    def coalescer(self) -> RequestCoalescer:
        if self._coalescer is None:
            self._coalescer = RequestCoalescer()
        return self._coalescer

    @property
    def client(self) -> PolymarketClient:
        if self._client is None:
            self._client = PolymarketClient(
                gamma_api_url=self.config.gamma_api_url,
                data_api_url=self.config.data_api_url,
                bridge_api_url=self.config.bridge_api_url,
                timeout=self.config.request_timeout,
            )
        return self._client

    def reset(self) -> None:
        """Drop cache, coalescer and any lazily built client; the next access builds fresh ones."""
        self._cache = None
        self._coalescer = None
        self._client = self._injected_client

    def get_stats(self) -> dict:
        return {
            "cache": self.cache.get_stats(),
            "coalescer": self.coalescer.get_stats(),
        }


_shared_instances: SharedInstances | None = None


def get_shared_instances() -> SharedInstances:
    """Get or create the global registry."""
    global _shared_instances
    if _shared_instances is None:
        _shared_instances = SharedInstances()
    return _shared_instances


def get_shared_cache() -> CacheStore:
    return get_shared_instances().cache


def get_shared_coalescer() -> RequestCoalescer:
    return get_shared_instances().coalescer


def get_shared_client() -> PolymarketClient:
    return get_shared_instances().client


def reset_shared_instances() -> None:
    """
    Discard every shared instance.

    Clears all cached data and forgets in-flight requests for every façade.
    Intended for tests.
    """
    global _shared_instances
    if _shared_instances is not None:
        _shared_instances.reset()
    _shared_instances = None
    logger.debug("Shared instances reset")


__all__ = [
    "SharedInstances",
    "get_shared_cache",
    "get_shared_client",
    "get_shared_coalescer",
    "get_shared_instances",
    "reset_shared_instances",
]
