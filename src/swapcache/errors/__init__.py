"""Error handling — exception hierarchy for swapcache."""

from swapcache.errors.exceptions import (
    InvalidKeyError,
    MediumError,
    SwapCacheError,
)

__all__ = [
    "SwapCacheError",
    "InvalidKeyError",
    "MediumError",
]
