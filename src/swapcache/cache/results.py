"""Typed outcomes of persistent store operations.

``StorageError`` stays visible internally so failure paths can be asserted
on; the public store API collapses it to a miss or a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass

from swapcache.cache.stats import CacheEntry


@dataclass(frozen=True)
class Ok:
    entry: CacheEntry


@dataclass(frozen=True)
class Miss:
    reason: str = "absent"


@dataclass(frozen=True)
class StorageError:
    operation: str
    key: str
    error: Exception


ReadResult = Ok | Miss | StorageError
WriteResult = Ok | StorageError
