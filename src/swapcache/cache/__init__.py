"""Cache subsystem — volatile TTL store, fail-soft persistent store, request coalescing."""

from swapcache.cache.coalescer import Coalescer
from swapcache.cache.context import CacheContext
from swapcache.cache.keys import (
    build_key,
    normalize_address,
    normalize_amount,
    quote_cache_key,
    token_metadata_key,
)
from swapcache.cache.medium import DurableMedium, SqliteMedium
from swapcache.cache.memory import VolatileStore
from swapcache.cache.persistent import PersistentStore
from swapcache.cache.results import Miss, Ok, StorageError
from swapcache.cache.stats import CacheEntry, CacheStats, TokenMetadataRecord

__all__ = [
    "CacheContext",
    "CacheEntry",
    "CacheStats",
    "Coalescer",
    "DurableMedium",
    "Miss",
    "Ok",
    "PersistentStore",
    "SqliteMedium",
    "StorageError",
    "TokenMetadataRecord",
    "VolatileStore",
    "build_key",
    "normalize_address",
    "normalize_amount",
    "quote_cache_key",
    "token_metadata_key",
]
