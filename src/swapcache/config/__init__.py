"""Configuration — defaults, YAML/env hierarchy and the settings schema."""

from swapcache.config.hierarchy import load_config_hierarchy
from swapcache.config.schema import CacheSettings

__all__ = ["CacheSettings", "load_config_hierarchy"]
