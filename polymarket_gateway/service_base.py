"""Shared service helpers and base classes.

Provides the base class every Polymarket façade derives from: a logger, the
shared cache/coalescer/client registry and thin wrappers around the
read-through helpers, without coupling services to HTTP or FastAPI layers.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from .polymarket_client import PolymarketClient
from .read_through import Params, fetch_collection, fetch_entity
from .shared import SharedInstances, get_shared_instances


class BaseService:
    """Base class that provides a logger and shared caching for derived services."""

    def __init__(
        self,
        logger: logging.Logger | None = None,
        instances: SharedInstances | None = None,
        cache_ttl: float | None = None,
    ):
        # Use module-qualified name so loggers stay readable when subclassed
        self.logger = logger or logging.getLogger(self.__class__.__module__)
        self._instances = instances
        self._cache_ttl = cache_ttl

    @property
    def instances(self) -> SharedInstances:
        # Resolved per call so reset_shared_instances() is always observed.
        return self._instances or get_shared_instances()

    @property
    def client(self) -> PolymarketClient:
        return self.instances.client

    @property
    def cache_ttl(self) -> float:
        if self._cache_ttl is not None:
            return self._cache_ttl
        return self.instances.config.cache_ttl

    @property
    def cache_enabled(self) -> bool:
        return self.instances.config.cache_enabled

    async def _fetch_collection(
        self,
        namespace: str,
        params: Params,
        fetch_fn: Callable[[], Awaitable[Any]],
        post_process: Callable[[Any, Params], Any] | None = None,
        *,
        ttl: float | None = None,
        bypass_cache: bool = False,
    ) -> Any:
        """Pattern A lookup; bypass_cache skips both the cache and coalescing."""
        return await fetch_collection(
            self.instances,
            namespace,
            params,
            self.cache_ttl if ttl is None else ttl,
            fetch_fn,
            post_process,
            use_cache=self.cache_enabled and not bypass_cache,
            coalesce=not bypass_cache,
            logger=self.logger,
        )

    async def _fetch_entity(
        self,
        namespace: str,
        identifier: str,
        fetch_fn: Callable[[], Awaitable[Any]],
        *,
        params: Mapping[str, Any] | None = None,
        ttl: float | None = None,
    ) -> Any | None:
        return await fetch_entity(
            self.instances,
            namespace,
            identifier,
            self.cache_ttl if ttl is None else ttl,
            fetch_fn,
            params=params,
            use_cache=self.cache_enabled,
            logger=self.logger,
        )
