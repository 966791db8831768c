"""Pydantic model for cache configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from swapcache.config.defaults import (
    DEFAULT_CACHE_DB_PATH,
    DEFAULT_LOG_LEVEL,
    DEFAULT_MEMORY_MAX_ENTRIES,
    DEFAULT_METADATA_NAMESPACE,
    DEFAULT_METADATA_TTL_SECONDS,
    DEFAULT_PERSISTENCE_DISABLED,
    DEFAULT_QUOTE_TTL_SECONDS,
)
from swapcache.types import TtlClass


class CacheSettings(BaseModel):
    quote_ttl_seconds: float = Field(default=DEFAULT_QUOTE_TTL_SECONDS, gt=0)
    metadata_ttl_seconds: float = Field(default=DEFAULT_METADATA_TTL_SECONDS, gt=0)
    memory_max_entries: int | None = Field(default=DEFAULT_MEMORY_MAX_ENTRIES, ge=1)
    metadata_namespace: str = Field(default=DEFAULT_METADATA_NAMESPACE, min_length=1)
    cache_db_path: Path | None = DEFAULT_CACHE_DB_PATH
    persistence_disabled: bool = DEFAULT_PERSISTENCE_DISABLED
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> CacheSettings:
        """Build settings from a merged config dict, ignoring unrelated keys."""
        known = {k: v for k, v in data.items() if k in cls.model_fields}
        return cls(**known)

    def ttl_for(self, ttl_class: TtlClass | str) -> float:
        ttl_class = TtlClass(ttl_class)
        if ttl_class == TtlClass.METADATA:
            return self.metadata_ttl_seconds
        return self.quote_ttl_seconds
