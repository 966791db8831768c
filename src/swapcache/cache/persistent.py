"""Persistent cache over a durable medium — fail-soft, fixed TTL per record class."""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable
from typing import Any, Protocol

from pydantic import BaseModel, ValidationError

from swapcache.cache.medium import DurableMedium
from swapcache.cache.results import Miss, Ok, ReadResult, StorageError, WriteResult
from swapcache.cache.stats import CacheEntry

logger = logging.getLogger(__name__)

_NAMESPACE_SEPARATOR = "_"


class RecordCodec(Protocol):
    """Turns a ``CacheEntry`` into the stored text and back."""

    def encode(self, entry: CacheEntry) -> str: ...

    def decode(self, key: str, raw: str) -> CacheEntry: ...


class EnvelopeCodec:
    """JSON envelope ``{"key", "stored_at", "value"}``.

    When ``model`` is given, decoded values are validated into it.
    """

    def __init__(self, model: type[BaseModel] | None = None) -> None:
        self._model = model

    def encode(self, entry: CacheEntry) -> str:
        if isinstance(entry.value, BaseModel):
            entry = entry.model_copy(update={"value": entry.value.model_dump(mode="json")})
        return entry.model_dump_json()

    def decode(self, key: str, raw: str) -> CacheEntry:
        entry = CacheEntry.model_validate_json(raw)
        if self._model is not None:
            entry = entry.model_copy(update={"value": self._model.model_validate(entry.value)})
        return entry


class FlatRecordCodec:
    """Model fields at the top level plus a millisecond ``timestamp``.

    This is the layout browser front ends keep in local storage, e.g.
    ``{"symbol": "WSEI", "name": "Wrapped SEI", "decimals": 18, "timestamp": 1700000000000}``.
    Records carrying ``stored_at`` in seconds are read as well.
    """

    def __init__(self, model: type[BaseModel]) -> None:
        self._model = model

    def encode(self, entry: CacheEntry) -> str:
        value = entry.value
        fields = value.model_dump(mode="json") if isinstance(value, BaseModel) else dict(value)
        fields["timestamp"] = int(entry.stored_at * 1000)
        return json.dumps(fields)

    def decode(self, key: str, raw: str) -> CacheEntry:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("record is not a JSON object")
        if "timestamp" in data:
            stored_at = float(data.pop("timestamp")) / 1000
        elif "stored_at" in data:
            stored_at = float(data.pop("stored_at"))
        else:
            raise ValueError("record has no timestamp")
        return CacheEntry(key=key, value=self._model.model_validate(data), stored_at=stored_at)


class PersistentStore:
    """Durable keyed store for long-lived, low-churn records.

    Records are written under ``<namespace>_<key>`` in the layout chosen by
    ``codec`` (a JSON envelope by default). Durability is an optimization:
    ``get``/``set`` never raise for medium or decoding failures, they log and
    behave as a miss or a no-op. ``read``/``write`` expose the typed outcome.
    """

    def __init__(
        self,
        medium: DurableMedium,
        namespace: str,
        ttl: float,
        clock: Callable[[], float] = time.time,
        codec: RecordCodec | None = None,
    ) -> None:
        if not namespace:
            raise ValueError("Persistent store namespace must not be empty")
        self._medium = medium
        self._namespace = namespace
        self._ttl = ttl
        self._clock = clock
        self._codec = codec or EnvelopeCodec()
        self._storage_errors = 0

    @property
    def namespace(self) -> str:
        return self._namespace

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def storage_errors(self) -> int:
        return self._storage_errors

    def namespaced(self, key: str) -> str:
        return f"{self._namespace}{_NAMESPACE_SEPARATOR}{key}"

    # ── Typed API ──

    def read(self, key: str) -> ReadResult:
        """Read ``key`` and report exactly what happened."""
        full_key = self.namespaced(key)
        try:
            raw = self._medium.read_raw(full_key)
        except Exception as e:
            return self._failure("read", key, e)
        if raw is None:
            return Miss()

        try:
            entry = self._codec.decode(key, raw)
        except (ValidationError, ValueError, TypeError) as e:
            return self._failure("decode", key, e)

        if not entry.is_fresh(self._clock(), self._ttl):
            return Miss(reason="expired")
        return Ok(entry)

    def write(self, key: str, value: Any) -> WriteResult:
        """Write ``value`` under ``key`` with a fresh timestamp.

        The timestamp never goes below the one already stored for ``key``,
        so a wall clock stepping backwards cannot make a record look older.
        """
        stored_at = self._clock()
        previous = self._previous_stored_at(key)
        if previous is not None:
            stored_at = max(stored_at, previous)
        entry = CacheEntry(key=key, value=value, stored_at=stored_at)
        try:
            raw = self._codec.encode(entry)
        except (ValueError, TypeError) as e:
            return self._failure("encode", key, e)
        try:
            self._medium.write_raw(self.namespaced(key), raw)
        except Exception as e:
            return self._failure("write", key, e)
        return Ok(entry)

    # ── Fail-soft API ──

    def get(self, key: str) -> CacheEntry | None:
        result = self.read(key)
        if isinstance(result, Ok):
            return result.entry
        return None

    def set(self, key: str, value: Any) -> None:
        self.write(key, value)

    def invalidate(self, key: str) -> None:
        try:
            self._medium.delete_raw(self.namespaced(key))
        except Exception as e:
            self._failure("delete", key, e)

    def clear(self) -> int:
        """Remove every record in this store's namespace."""
        prefix = self.namespaced("")
        try:
            count = self._medium.delete_prefix(prefix)
        except Exception as e:
            self._failure("delete", prefix, e)
            return 0
        logger.info("Cleared %d records from namespace '%s'", count, self._namespace)
        return count

    def count(self) -> int:
        prefix = self.namespaced("")
        try:
            return self._medium.count_prefix(prefix)
        except Exception as e:
            self._failure("count", prefix, e)
            return 0

    def _previous_stored_at(self, key: str) -> float | None:
        # Unreadable previous records count as absent
        try:
            raw = self._medium.read_raw(self.namespaced(key))
            if raw is None:
                return None
            return self._codec.decode(key, raw).stored_at
        except Exception as e:
            logger.debug("No previous record for %s: %s", self.namespaced(key), e)
            return None

    def _failure(self, operation: str, key: str, error: Exception) -> StorageError:
        self._storage_errors += 1
        logger.warning(
            "Persistent cache %s failed for %s (treated as miss): %s",
            operation,
            self.namespaced(key),
            error,
        )
        return StorageError(operation=operation, key=key, error=error)
