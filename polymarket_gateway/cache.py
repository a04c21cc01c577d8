"""
In-memory cache store shared by every service façade.

This module wraps cachetools' TLRUCache so each entry can carry its own
expiry time while the cache as a whole stays bounded with least-recently-used
eviction. Values are deep copied on the way in and out so route handlers and
post-processing code cannot mutate shared state.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from copy import deepcopy
from dataclasses import dataclass
from typing import Any

from cachetools import TLRUCache

DEFAULT_MAX_ENTRIES = 100


@dataclass(frozen=True)
class CacheEntry:
    """A cached payload and the absolute (timer-based) time it stops being fresh."""

    value: Any
    expires_at: float


def _entry_expiry(_key: str, entry: CacheEntry, _now: float) -> float:
    return entry.expires_at


class CacheStore:
    """
    Bounded key→value store with per-entry TTL and LRU eviction.

    Expired entries are treated as absent and pruned lazily. When the store is
    full and a new key is written, expired entries go first, then the least
    recently used live entry.

    Usage:
        store = CacheStore(max_entries=500)
        store.set("markets", markets, ttl_seconds=60)
        cached = store.get("markets")
    """

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._timer = timer
        self._max_entries = max_entries
        self._cache: TLRUCache[str, CacheEntry] = TLRUCache(
            maxsize=max_entries,
            ttu=_entry_expiry,
            timer=timer,
        )
        self._hits = 0
        self._misses = 0

    def get(self, key: str) -> Any | None:
        """
        Return a copy of the cached value, or None on a miss or expired entry.

        A hit marks the key as most recently used.
        """
        entry = self._cache.get(key)
        if entry is None:
            self._misses += 1
            return None
        self._hits += 1
        return deepcopy(entry.value)

    def set(self, key: str, value: Any, ttl_seconds: float) -> None:
        """
        Store a value for ttl_seconds.

        A non-positive TTL means the value is already expired: nothing is stored
        and any previous entry for the key is dropped.
        """
        if ttl_seconds <= 0:
            self._cache.pop(key, None)
            return
        self._cache[key] = CacheEntry(
            value=deepcopy(value),
            expires_at=self._timer() + ttl_seconds,
        )

    def has(self, key: str) -> bool:
        """True if the key holds a live entry. Does not affect LRU order."""
        return key in self._cache

    def is_stale(self, key: str) -> bool:
        """True if the key is missing or its entry has expired."""
        return key not in self._cache

    def clear(self) -> int:
        """
        Remove every entry.

        Returns:
            Number of entries cleared
        """
        count = len(self._cache)
        self._cache.clear()
        return count

    @property
    def size(self) -> int:
        """Number of live entries."""
        return len(self._cache)

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def __len__(self) -> int:
        return self.size

    def __contains__(self, key: object) -> bool:
        return key in self._cache

    def get_stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total = self._hits + self._misses
        hit_rate = (self._hits / total * 100) if total > 0 else 0
        return {
            "entries": self.size,
            "max_entries": self._max_entries,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate_percent": round(hit_rate, 1),
        }


__all__ = ["CacheEntry", "CacheStore", "DEFAULT_MAX_ENTRIES"]
