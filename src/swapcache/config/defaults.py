"""Package-level default configuration values."""

from __future__ import annotations

from typing import Any

# TTL policy, in seconds. Quotes go stale fast; token metadata barely changes.
DEFAULT_QUOTE_TTL_SECONDS = 3.0
DEFAULT_METADATA_TTL_SECONDS = 3600.0

# Volatile store bound (LRU under the TTL check)
DEFAULT_MEMORY_MAX_ENTRIES = 10_000

# Persistent store
DEFAULT_METADATA_NAMESPACE = "windswap_token_metadata"
DEFAULT_CACHE_DB_PATH = None
DEFAULT_PERSISTENCE_DISABLED = False

# Log level
DEFAULT_LOG_LEVEL = "WARNING"


def get_defaults() -> dict[str, Any]:
    """Return all defaults as a flat dictionary for merging."""
    return {
        "quote_ttl_seconds": DEFAULT_QUOTE_TTL_SECONDS,
        "metadata_ttl_seconds": DEFAULT_METADATA_TTL_SECONDS,
        "memory_max_entries": DEFAULT_MEMORY_MAX_ENTRIES,
        "metadata_namespace": DEFAULT_METADATA_NAMESPACE,
        "cache_db_path": DEFAULT_CACHE_DB_PATH,
        "persistence_disabled": DEFAULT_PERSISTENCE_DISABLED,
        "log_level": DEFAULT_LOG_LEVEL,
    }
