"""swapcache — client-side quote and token metadata cache for a DEX front end."""

from swapcache.cache import CacheContext, CacheStats, TokenMetadataRecord
from swapcache.quotes import QuoteCache
from swapcache.tokens import TokenMetadataCache
from swapcache.types import QuoteKind, TokenMetadata, TtlClass

__version__ = "0.1.0"

__all__ = [
    "CacheContext",
    "CacheStats",
    "QuoteCache",
    "QuoteKind",
    "TokenMetadata",
    "TokenMetadataCache",
    "TokenMetadataRecord",
    "TtlClass",
]
