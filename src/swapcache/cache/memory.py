"""Volatile in-memory cache — TTL checked at read time, LRU count bound."""

from __future__ import annotations

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from typing import Any

from swapcache.cache.stats import CacheEntry

logger = logging.getLogger(__name__)

_DEFAULT_MAX_ENTRIES = 10_000


class VolatileStore:
    """In-memory keyed store for short-lived computed results.

    The TTL belongs to the class of request and is supplied on every read.
    Stale entries are not purged on read; they are replaced by the next
    write, removed by invalidation, or evicted once the store is full.
    """

    def __init__(
        self,
        max_entries: int | None = _DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be >= 1 or None, got {max_entries}")
        self._store: OrderedDict[str, CacheEntry] = OrderedDict()
        self._max_entries = max_entries
        self._clock = clock
        self._lock = threading.RLock()

    def get(self, key: str, ttl: float) -> CacheEntry | None:
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if not entry.is_fresh(self._clock(), ttl):
                return None
            # Move to end (most recently used)
            self._store.move_to_end(key)
            return entry

    def peek(self, key: str) -> CacheEntry | None:
        """Return the entry for ``key`` regardless of age."""
        with self._lock:
            return self._store.get(key)

    def set(self, key: str, value: Any) -> CacheEntry:
        with self._lock:
            now = self._clock()
            previous = self._store.pop(key, None)
            if previous is not None and previous.stored_at > now:
                now = previous.stored_at
            entry = CacheEntry(key=key, value=value, stored_at=now)
            self._store[key] = entry
            self._evict_if_needed()
            return entry

    def invalidate(self, key: str) -> bool:
        with self._lock:
            removed = self._store.pop(key, None) is not None
        if removed:
            logger.debug("Invalidated %s", key)
        return removed

    def invalidate_by_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with ``prefix``."""
        return self._remove_where(lambda key: key.startswith(prefix), prefix)

    def invalidate_matching(self, fragment: str) -> int:
        """Remove every entry whose key contains ``fragment``."""
        return self._remove_where(lambda key: fragment in key, fragment)

    def clear(self) -> int:
        with self._lock:
            count = len(self._store)
            self._store.clear()
        logger.info("Cleared %d volatile entries", count)
        return count

    def keys(self) -> list[str]:
        with self._lock:
            return list(self._store)

    @property
    def max_entries(self) -> int | None:
        return self._max_entries

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def _remove_where(self, predicate: Callable[[str], bool], pattern: str) -> int:
        with self._lock:
            to_remove = [key for key in self._store if predicate(key)]
            for key in to_remove:
                del self._store[key]
        if to_remove:
            logger.info("Invalidated %d entries matching '%s'", len(to_remove), pattern)
        return len(to_remove)

    def _evict_if_needed(self) -> None:
        if self._max_entries is None:
            return
        while len(self._store) > self._max_entries:
            key, _ = self._store.popitem(last=False)
            logger.debug("Evicted least recently used entry %s", key)
