"""Cache context — composition root for the volatile, persistent and coalescing layers."""

from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from swapcache.cache.coalescer import Coalescer
from swapcache.cache.medium import DurableMedium, SqliteMedium
from swapcache.cache.memory import VolatileStore
from swapcache.cache.persistent import FlatRecordCodec, PersistentStore
from swapcache.cache.stats import CacheStats
from swapcache.config.hierarchy import load_config_hierarchy
from swapcache.config.schema import CacheSettings
from swapcache.types import TokenMetadata, TtlClass

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CacheContext:
    """Owns every cache structure of one application instance.

    Created once by the application's composition root and handed to the
    callers that need it, so lifetime and test isolation are explicit.
    """

    def __init__(
        self,
        settings: CacheSettings | None = None,
        volatile: VolatileStore | None = None,
        coalescer: Coalescer | None = None,
        medium: DurableMedium | None = None,
        clock: Callable[[], float] | None = None,
        wall_clock: Callable[[], float] | None = None,
    ) -> None:
        self._settings = settings or CacheSettings()
        self._volatile = volatile or VolatileStore(
            max_entries=self._settings.memory_max_entries,
            clock=clock or time.monotonic,
        )
        self._coalescer = coalescer or Coalescer()
        self._medium = medium
        self._wall_clock = wall_clock or time.time
        self._metadata: PersistentStore | None = None
        if medium is not None:
            self._metadata = PersistentStore(
                medium,
                namespace=self._settings.metadata_namespace,
                ttl=self._settings.metadata_ttl_seconds,
                clock=self._wall_clock,
                codec=FlatRecordCodec(TokenMetadata),
            )
        self._stats = CacheStats()

    @classmethod
    def from_config(cls, **overrides: Any) -> CacheContext:
        """Resolve the configuration hierarchy and build a context from it."""
        settings = CacheSettings.from_mapping(load_config_hierarchy(**overrides))
        medium = None
        if not settings.persistence_disabled:
            medium = SqliteMedium(db_path=settings.cache_db_path)
        return cls(settings=settings, medium=medium)

    @property
    def settings(self) -> CacheSettings:
        return self._settings

    @property
    def volatile(self) -> VolatileStore:
        return self._volatile

    @property
    def coalescer(self) -> Coalescer:
        return self._coalescer

    @property
    def metadata(self) -> PersistentStore | None:
        """Persistent token metadata store, or None when persistence is off."""
        return self._metadata

    def wall_time(self) -> float:
        """Epoch seconds, as stamped on persisted records."""
        return self._wall_clock()

    def ttl_for(self, ttl_class: TtlClass | str) -> float:
        return self._settings.ttl_for(ttl_class)

    async def get_or_fetch(
        self,
        key: str,
        producer: Callable[[], Awaitable[T]],
        ttl: float | None = None,
        *,
        ttl_class: TtlClass = TtlClass.QUOTE,
        coalesce: bool = True,
        refresh: bool = False,
    ) -> T:
        """Return the cached value for ``key`` or produce, store and return it.

        Producer failures propagate to every waiter and nothing is stored.
        """
        ttl = self.ttl_for(ttl_class) if ttl is None else ttl

        if not refresh:
            entry = self._volatile.get(key, ttl)
            if entry is not None:
                self._stats.hits += 1
                logger.debug("CACHE HIT: %s", key)
                return entry.value

        self._stats.misses += 1
        logger.debug("CACHE MISS: %s%s", key, " (refresh)" if refresh else "")

        async def fetch_and_store() -> T:
            value = await producer()
            self._volatile.set(key, value)
            return value

        if not coalesce:
            return await fetch_and_store()
        if self._coalescer.in_flight(key):
            self._stats.coalesced += 1
        return await self._coalescer.run(key, fetch_and_store)

    def get_cached(
        self,
        key: str,
        ttl: float | None = None,
        *,
        ttl_class: TtlClass = TtlClass.QUOTE,
    ) -> Any | None:
        """Fresh cached value for ``key`` or None; never fetches."""
        ttl = self.ttl_for(ttl_class) if ttl is None else ttl
        entry = self._volatile.get(key, ttl)
        return entry.value if entry is not None else None

    def set_cached(self, key: str, value: Any) -> None:
        self._volatile.set(key, value)

    def invalidate(self, key: str) -> bool:
        return self._volatile.invalidate(key)

    def invalidate_by_prefix(self, prefix: str) -> int:
        return self._volatile.invalidate_by_prefix(prefix)

    def invalidate_matching(self, fragment: str) -> int:
        return self._volatile.invalidate_matching(fragment)

    def clear(self) -> int:
        """Drop every volatile entry. Persisted records are left alone."""
        return self._volatile.clear()

    def stats(self) -> CacheStats:
        return CacheStats(
            entries=len(self._volatile),
            hits=self._stats.hits,
            misses=self._stats.misses,
            coalesced=self._stats.coalesced,
            in_flight=self._coalescer.active_requests,
            storage_errors=self._metadata.storage_errors if self._metadata else 0,
            persisted_records=self._metadata.count() if self._metadata else 0,
        )

    def close(self) -> None:
        close = getattr(self._medium, "close", None)
        if close is not None:
            close()

    def __enter__(self) -> CacheContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
