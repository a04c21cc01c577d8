"""
Request coalescing to prevent duplicate upstream API calls.

When multiple concurrent requests ask for the same data, only one
upstream call is made and all requesters share the result.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class RequestCoalescer:
    """
    Ensures concurrent requests for the same cache key share one upstream call.

    Pattern:
    - First request for a key starts the fetch as a task and registers it
      before yielding to the event loop
    - Subsequent requests for the same key await that task
    - The task unregisters its key in a finally block before any waiter
      resumes, so a failed fetch never poisons the key
    - Waiters are shielded: cancelling one caller leaves the fetch and the
      other callers untouched

    Usage:
        coalescer = RequestCoalescer()
        markets = await coalescer.get_or_fetch(
            "markets:{...}",
            lambda: client.fetch_markets(params),
        )
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task[Any]] = {}

    async def get_or_fetch(
        self,
        cache_key: str,
        fetch_fn: Callable[[], Awaitable[T]],
    ) -> T:
        """
        Either join an existing in-flight request or initiate a new one.

        Args:
            cache_key: Unique key for this request
            fetch_fn: Zero-argument coroutine function to call if we need to fetch

        Returns:
            The fetched data (shared among all concurrent callers)

        Raises:
            Exception: Any error from fetch_fn is propagated to every caller
        """
        task = self._in_flight.get(cache_key)
        if task is not None:
            logger.debug("Request already in-flight, joining: %s", cache_key)
        else:
            logger.debug("Initiating fetch for %s", cache_key)
            task = asyncio.ensure_future(self._run(cache_key, fetch_fn))
            self._in_flight[cache_key] = task
            task.add_done_callback(_consume_exception)

        return await asyncio.shield(task)

    async def _run(self, cache_key: str, fetch_fn: Callable[[], Awaitable[T]]) -> T:
        try:
            return await fetch_fn()
        finally:
            current = asyncio.current_task()
            if self._in_flight.get(cache_key) is current:
                del self._in_flight[cache_key]

    def is_in_flight(self, cache_key: str) -> bool:
        return cache_key in self._in_flight

    @property
    def active_requests(self) -> int:
        """Number of currently in-flight requests."""
        return len(self._in_flight)

    def get_stats(self) -> dict[str, Any]:
        """Get coalescer statistics."""
        return {
            "active_requests": len(self._in_flight),
            "active_keys": list(self._in_flight.keys()),
        }


def _consume_exception(task: asyncio.Task[Any]) -> None:
    # Every waiter may have been cancelled; read the exception so asyncio does
    # not report it as never retrieved.
    if not task.cancelled() and task.exception() is not None:
        logger.debug("Coalesced fetch failed: %r", task.exception())


__all__ = ["RequestCoalescer"]
