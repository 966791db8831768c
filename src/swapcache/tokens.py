"""Token metadata cache — symbol/name/decimals kept across sessions."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from swapcache.cache.context import CacheContext
from swapcache.cache.keys import build_key, token_metadata_key
from swapcache.cache.results import Ok
from swapcache.cache.stats import CacheEntry, TokenMetadataRecord
from swapcache.types import TokenMetadata, TtlClass

logger = logging.getLogger(__name__)

_TOKEN_TAG = "token"


class TokenMetadataCache:
    """Looks up token metadata in the persistent store before asking a producer.

    Without a durable medium, or when a durable write fails, records live in
    the volatile store under the METADATA TTL class and are lost on restart.
    """

    def __init__(self, context: CacheContext) -> None:
        self._context = context

    def get(self, address: str) -> TokenMetadataRecord | None:
        store = self._context.metadata
        if store is not None:
            entry = store.get(token_metadata_key(address))
            if entry is not None:
                return _to_record(entry)
        entry = self._context.volatile.get(
            _volatile_key(address), self._context.ttl_for(TtlClass.METADATA)
        )
        return entry.value if entry is not None else None

    def set(self, address: str, symbol: str, name: str, decimals: int) -> TokenMetadataRecord:
        metadata = TokenMetadata(symbol=symbol, name=name, decimals=decimals)
        return self._store(address, metadata)

    async def get_or_fetch(
        self,
        address: str,
        producer: Callable[[], Awaitable[TokenMetadata | Mapping[str, Any]]],
    ) -> TokenMetadataRecord:
        record = self.get(address)
        if record is not None:
            logger.debug("Token metadata hit for %s", address)
            return record

        async def fetch_and_store() -> TokenMetadataRecord:
            raw = await producer()
            metadata = raw if isinstance(raw, TokenMetadata) else TokenMetadata.model_validate(raw)
            return self._store(address, metadata)

        return await self._context.coalescer.run(_volatile_key(address), fetch_and_store)

    def evict(self, address: str) -> None:
        store = self._context.metadata
        if store is not None:
            store.invalidate(token_metadata_key(address))
        self._context.invalidate(_volatile_key(address))

    def _store(self, address: str, metadata: TokenMetadata) -> TokenMetadataRecord:
        store = self._context.metadata
        if store is not None:
            result = store.write(token_metadata_key(address), metadata)
            if isinstance(result, Ok):
                return _to_record(result.entry)
            # Durable write failed; keep the record for this process only
        record = TokenMetadataRecord(
            **metadata.model_dump(), stored_at=self._context.wall_time()
        )
        self._context.volatile.set(_volatile_key(address), record)
        return record


def _volatile_key(address: str) -> str:
    return build_key(_TOKEN_TAG, token_metadata_key(address))


def _to_record(entry: CacheEntry) -> TokenMetadataRecord:
    metadata: TokenMetadata = entry.value
    return TokenMetadataRecord(
        symbol=metadata.symbol,
        name=metadata.name,
        decimals=metadata.decimals,
        stored_at=entry.stored_at,
    )
