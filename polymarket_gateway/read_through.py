"""
Read-through orchestration shared by every service façade.

Two shapes cover all lookups:

- fetch_collection: list/query endpoints. Cache hit, else one coalesced
  fetch that post-processes and writes the cache once.
- fetch_entity: single-entity endpoints. Same flow without post-processing,
  and an upstream 404 resolves to None without being cached.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel

from .cache_keys import build_cache_key
from .errors import is_not_found
from .shared import SharedInstances

T = TypeVar("T")

module_logger = logging.getLogger(__name__)

Params = Mapping[str, Any] | BaseModel | None


async def fetch_collection(
    instances: SharedInstances,
    namespace: str,
    params: Params,
    ttl: float,
    fetch_fn: Callable[[], Awaitable[Any]],
    post_process: Callable[[Any, Params], Any] | None = None,
    *,
    use_cache: bool = True,
    coalesce: bool = True,
    logger: logging.Logger | None = None,
) -> Any:
    """
    Return a cached collection or fetch, post-process and cache it.

    Args:
        instances: Registry providing the cache and coalescer
        namespace: Cache key namespace, e.g. "markets"
        params: Query parameters that identify the collection
        ttl: Seconds the processed result stays fresh
        fetch_fn: Zero-argument coroutine function calling the upstream API
        post_process: Optional (result, params) -> result transform applied
            before caching
        use_cache: When False the cache is neither read nor written
        coalesce: When False concurrent callers each hit the upstream API

    Raises:
        ApiError: Upstream failures propagate unchanged and are never cached
    """
    log = logger or module_logger
    cache_key = build_cache_key(namespace, params)
    # Bound now so a reset mid-fetch cannot leak the result into the new store.
    cache = instances.cache

    if use_cache:
        cached = cache.get(cache_key)
        if cached is not None:
            log.debug("Cache hit for %s", cache_key)
            return cached

    async def produce() -> Any:
        log.info("Cache miss for %s, fetching from API", cache_key)
        result = await fetch_fn()
        if post_process is not None:
            result = post_process(result, params)
        if use_cache:
            cache.set(cache_key, result, ttl)
        return result

    if not coalesce:
        return await produce()
    return await instances.coalescer.get_or_fetch(cache_key, produce)


async def fetch_entity(
    instances: SharedInstances,
    namespace: str,
    identifier: str,
    ttl: float,
    fetch_fn: Callable[[], Awaitable[T]],
    *,
    params: Mapping[str, Any] | None = None,
    use_cache: bool = True,
    logger: logging.Logger | None = None,
) -> T | None:
    """
    Return a single entity, or None when the upstream API reports it missing.

    The identifier and any extra params are part of the cache key. A missing
    entity is not cached, so the next call asks upstream again.
    """
    log = logger or module_logger
    cache_key = build_cache_key(namespace, {"id": identifier, **(params or {})})
    cache = instances.cache

    if use_cache:
        cached = cache.get(cache_key)
        if cached is not None:
            log.debug("Cache hit for %s", cache_key)
            return cached

    async def produce() -> T | None:
        log.info("Cache miss for %s, fetching from API", cache_key)
        try:
            entity = await fetch_fn()
        except Exception as exc:
            if is_not_found(exc):
                log.info("%s not found: %s", namespace, identifier)
                return None
            raise
        if use_cache and entity is not None:
            cache.set(cache_key, entity, ttl)
        return entity

    return await instances.coalescer.get_or_fetch(cache_key, produce)


__all__ = ["fetch_collection", "fetch_entity"]
