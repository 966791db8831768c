"""Tests for the SQLite durable medium."""

import sqlite3

import pytest

from swapcache.cache.medium import DurableMedium, SqliteMedium
from swapcache.errors.exceptions import MediumError


@pytest.fixture
def medium(tmp_path):
    m = SqliteMedium(db_path=tmp_path / "cache.db")
    yield m
    m.close()


class TestSqliteMedium:
    def test_satisfies_protocol(self, medium):
        assert isinstance(medium, DurableMedium)

    def test_write_read(self, medium):
        medium.write_raw("ns_k1", '{"a": 1}')
        assert medium.read_raw("ns_k1") == '{"a": 1}'

    def test_read_absent(self, medium):
        assert medium.read_raw("missing") is None

    def test_overwrite(self, medium):
        medium.write_raw("ns_k1", "first")
        medium.write_raw("ns_k1", "second")
        assert medium.read_raw("ns_k1") == "second"

    def test_delete(self, medium):
        medium.write_raw("ns_k1", "v")
        medium.delete_raw("ns_k1")
        assert medium.read_raw("ns_k1") is None

    def test_delete_prefix_leaves_others(self, medium):
        medium.write_raw("a_1", "v")
        medium.write_raw("a_2", "v")
        medium.write_raw("b_1", "v")
        assert medium.delete_prefix("a_") == 2
        assert medium.read_raw("b_1") == "v"

    def test_prefix_is_literal(self, medium):
        # LIKE wildcards must not leak into prefix matching
        medium.write_raw("a%_1", "v")
        medium.write_raw("ab_1", "v")
        assert medium.count_prefix("a%") == 1

    def test_count_prefix(self, medium):
        medium.write_raw("a_1", "v")
        medium.write_raw("b_1", "v")
        assert medium.count_prefix("a_") == 1

    def test_persists_across_connections(self, tmp_path):
        path = tmp_path / "cache.db"
        first = SqliteMedium(db_path=path)
        first.write_raw("k", "v")
        first.close()
        second = SqliteMedium(db_path=path)
        try:
            assert second.read_raw("k") == "v"
        finally:
            second.close()

    def test_creates_parent_directory(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "cache.db"
        m = SqliteMedium(db_path=path)
        m.close()
        assert path.exists()

    def test_closed_connection_raises_medium_error(self, tmp_path):
        m = SqliteMedium(db_path=tmp_path / "cache.db")
        m.close()
        with pytest.raises(MediumError) as exc_info:
            m.read_raw("k")
        assert exc_info.value.operation == "read"
        assert isinstance(exc_info.value.original, sqlite3.Error)
