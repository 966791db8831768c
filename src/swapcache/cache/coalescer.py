"""Request coalescing to prevent duplicate upstream calls.

When multiple concurrent callers ask for the same key, only one producer
runs and every caller shares its result or its failure.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Coalescer:
    """Ensures concurrent requests for the same key share one producer call.

    Pattern:
    - First request for a key starts the producer as a task
    - Later requests for the same key await that task
    - When the task settles, its registration is dropped and all waiters
      receive the same value or exception
    - Nothing is retried or memoized; the next call starts fresh

    Waiters await through ``asyncio.shield``: cancelling a waiter leaves the
    shared operation running. The registry is bound to the running event
    loop; use one coalescer per loop.

    Usage:
        coalescer = Coalescer()
        quote = await coalescer.run("quote:v2:...", lambda: fetch_quote(...))
    """

    def __init__(self) -> None:
        self._in_flight: dict[str, asyncio.Task[Any]] = {}
        self._started = 0
        self._joined = 0

    async def run(self, key: str, producer: Callable[[], Awaitable[T]]) -> T:
        """Join the in-flight operation for ``key`` or start a new one.

        Raises:
            Exception: whatever the shared producer raised
        """
        task = self._in_flight.get(key)
        # A settled task may still be registered until its callback runs
        if task is not None and not task.done():
            self._joined += 1
            logger.debug("Coalescing request for %s", key)
        else:
            task = asyncio.ensure_future(producer())
            self._in_flight[key] = task
            self._started += 1
            task.add_done_callback(lambda t: self._settle(key, t))
            logger.debug("Started producer for %s", key)

        return await asyncio.shield(task)

    def in_flight(self, key: str) -> bool:
        return key in self._in_flight

    @property
    def active_requests(self) -> int:
        """Number of currently in-flight operations."""
        return len(self._in_flight)

    def stats(self) -> dict[str, Any]:
        return {
            "active_requests": len(self._in_flight),
            "active_keys": list(self._in_flight),
            "started": self._started,
            "joined": self._joined,
        }

    def _settle(self, key: str, task: asyncio.Task[Any]) -> None:
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if task.cancelled():
            logger.debug("Producer for %s was cancelled", key)
            return
        error = task.exception()
        if error is not None:
            logger.warning("Producer failed for %s: %s", key, error)
