"""Cache entry, persisted record and statistics models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class CacheEntry(BaseModel):
    """A stored value. Immutable: a write replaces the entry, never mutates it."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str
    value: Any = None
    stored_at: float

    def age(self, now: float) -> float:
        return now - self.stored_at

    def is_fresh(self, now: float, ttl: float) -> bool:
        return now - self.stored_at < ttl


class TokenMetadataRecord(BaseModel):
    """Token metadata as persisted across sessions."""

    model_config = ConfigDict(frozen=True)

    symbol: str
    name: str
    decimals: int = Field(ge=0, le=255)
    stored_at: float = 0.0


class CacheStats(BaseModel):
    """Aggregate cache statistics."""

    entries: int = 0
    hits: int = 0
    misses: int = 0
    coalesced: int = 0
    in_flight: int = 0
    storage_errors: int = 0
    persisted_records: int = 0

    @property
    def hit_rate(self) -> float:
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0
