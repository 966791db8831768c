"""Durable media backing the persistent store."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Protocol, runtime_checkable

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from swapcache.errors.exceptions import MediumError

logger = logging.getLogger(__name__)

_DEFAULT_DB_PATH = Path.home() / ".swapcache" / "cache.db"

# "database is locked" and friends; worth a short backoff
_busy_retry = retry(
    retry=retry_if_exception_type(sqlite3.OperationalError),
    wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
    stop=stop_after_attempt(3),
    reraise=True,
)


@runtime_checkable
class DurableMedium(Protocol):
    """String-keyed get/set outside process memory.

    Only single-key operations are atomic. Any method may raise.
    """

    def read_raw(self, namespaced_key: str) -> str | None: ...

    def write_raw(self, namespaced_key: str, raw: str) -> None: ...

    def delete_raw(self, namespaced_key: str) -> None: ...

    def delete_prefix(self, prefix: str) -> int: ...

    def count_prefix(self, prefix: str) -> int: ...


class SqliteMedium:
    """SQLite-backed key/value medium."""

    def __init__(self, db_path: Path | None = None) -> None:
        self._db_path = Path(db_path) if db_path else _DEFAULT_DB_PATH
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._db_path))
        self._create_table()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def read_raw(self, namespaced_key: str) -> str | None:
        try:
            row = self._fetchone("SELECT value FROM kv WHERE key = ?", (namespaced_key,))
        except sqlite3.Error as e:
            raise MediumError(str(e), operation="read", key=namespaced_key, original=e) from e
        return row[0] if row is not None else None

    def write_raw(self, namespaced_key: str, raw: str) -> None:
        try:
            self._execute(
                "INSERT OR REPLACE INTO kv (key, value) VALUES (?, ?)",
                (namespaced_key, raw),
            )
        except sqlite3.Error as e:
            raise MediumError(str(e), operation="write", key=namespaced_key, original=e) from e

    def delete_raw(self, namespaced_key: str) -> None:
        try:
            self._execute("DELETE FROM kv WHERE key = ?", (namespaced_key,))
        except sqlite3.Error as e:
            raise MediumError(str(e), operation="delete", key=namespaced_key, original=e) from e

    def delete_prefix(self, prefix: str) -> int:
        try:
            return self._execute(
                "DELETE FROM kv WHERE substr(key, 1, ?) = ?",
                (len(prefix), prefix),
            )
        except sqlite3.Error as e:
            raise MediumError(str(e), operation="delete", key=prefix, original=e) from e

    def count_prefix(self, prefix: str) -> int:
        try:
            row = self._fetchone(
                "SELECT COUNT(*) FROM kv WHERE substr(key, 1, ?) = ?",
                (len(prefix), prefix),
            )
        except sqlite3.Error as e:
            raise MediumError(str(e), operation="count", key=prefix, original=e) from e
        return row[0]

    def close(self) -> None:
        self._conn.close()

    @_busy_retry
    def _fetchone(self, sql: str, params: tuple) -> tuple | None:
        return self._conn.execute(sql, params).fetchone()

    @_busy_retry
    def _execute(self, sql: str, params: tuple) -> int:
        cursor = self._conn.execute(sql, params)
        self._conn.commit()
        return cursor.rowcount

    def _create_table(self) -> None:
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS kv (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL
            )
        """)
        self._conn.commit()
