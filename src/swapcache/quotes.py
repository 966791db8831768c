"""Quote cache — short-lived router quotes keyed by pair, amount and pool options."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import Any, TypeVar

from swapcache.cache.context import CacheContext
from swapcache.cache.keys import (
    DELIMITER,
    QUOTE_PREFIX,
    normalize_address,
    quote_cache_key,
    quote_kind_prefix,
)
from swapcache.types import QuoteKind, TtlClass

logger = logging.getLogger(__name__)

T = TypeVar("T")


class QuoteCache:
    """Caches and coalesces quote lookups in the QUOTE TTL class."""

    def __init__(self, context: CacheContext) -> None:
        self._context = context

    async def get_quote(
        self,
        kind: QuoteKind | str,
        token_in: str,
        token_out: str,
        amount: int | str | Decimal,
        producer: Callable[[], Awaitable[T]],
        *,
        stable: bool | None = None,
        tick_spacing: int | None = None,
        refresh: bool = False,
    ) -> T:
        key = quote_cache_key(kind, token_in, token_out, amount, stable, tick_spacing)
        return await self._context.get_or_fetch(
            key, producer, ttl_class=TtlClass.QUOTE, refresh=refresh
        )

    def cached_quote(
        self,
        kind: QuoteKind | str,
        token_in: str,
        token_out: str,
        amount: int | str | Decimal,
        *,
        stable: bool | None = None,
        tick_spacing: int | None = None,
    ) -> Any | None:
        key = quote_cache_key(kind, token_in, token_out, amount, stable, tick_spacing)
        return self._context.get_cached(key, ttl_class=TtlClass.QUOTE)

    def invalidate_quotes(self, kind: QuoteKind | str | None = None) -> int:
        """Force quotes stale, e.g. after a swap changed pool reserves."""
        prefix = QUOTE_PREFIX if kind is None else quote_kind_prefix(kind)
        return self._context.invalidate_by_prefix(prefix)

    def invalidate_token(self, token: str) -> int:
        """Drop every cached quote that routes through ``token``."""
        fragment = f"{DELIMITER}{normalize_address(token)}{DELIMITER}"
        removed = 0
        for key in self._context.volatile.keys():
            if key.startswith(QUOTE_PREFIX) and fragment in key:
                removed += int(self._context.invalidate(key))
        logger.info("Invalidated %d quotes for token %s", removed, token)
        return removed
