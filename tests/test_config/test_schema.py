"""Tests for CacheSettings and package defaults."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from swapcache.config.defaults import get_defaults
from swapcache.config.schema import CacheSettings
from swapcache.types import TtlClass


class TestDefaults:
    def test_settings_match_defaults(self):
        assert CacheSettings().model_dump() == CacheSettings.from_mapping(get_defaults()).model_dump()

    def test_default_ttls(self):
        defaults = get_defaults()
        assert defaults["quote_ttl_seconds"] == 3.0
        assert defaults["metadata_ttl_seconds"] == 3600.0


class TestCacheSettings:
    def test_ttl_for_class(self):
        settings = CacheSettings(quote_ttl_seconds=2, metadata_ttl_seconds=600)
        assert settings.ttl_for(TtlClass.QUOTE) == 2
        assert settings.ttl_for("metadata") == 600

    def test_from_mapping_ignores_unknown_keys(self):
        settings = CacheSettings.from_mapping({"quote_ttl_seconds": 1, "api_key": "x"})
        assert settings.quote_ttl_seconds == 1

    def test_db_path_coerced(self):
        settings = CacheSettings.from_mapping({"cache_db_path": "/tmp/c.db"})
        assert settings.cache_db_path == Path("/tmp/c.db")

    @pytest.mark.parametrize("field", ["quote_ttl_seconds", "metadata_ttl_seconds"])
    def test_ttl_must_be_positive(self, field):
        with pytest.raises(ValidationError):
            CacheSettings(**{field: 0})

    def test_memory_bound_may_be_disabled(self):
        assert CacheSettings(memory_max_entries=None).memory_max_entries is None

    def test_memory_bound_must_be_positive(self):
        with pytest.raises(ValidationError):
            CacheSettings(memory_max_entries=0)
