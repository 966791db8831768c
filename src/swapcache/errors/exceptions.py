"""Custom exception hierarchy for swapcache."""

from __future__ import annotations

from typing import Any


class SwapCacheError(Exception):
    """Base exception for all swapcache errors."""

    def __init__(self, message: str = "", **kwargs: Any) -> None:
        super().__init__(message)
        self.message = message


class InvalidKeyError(SwapCacheError, ValueError):
    """A cache key could not be built from the given parameters.

    Programmer error: raised at construction time and never recovered.
    Examples: float amounts, fields containing the key delimiter, empty tag.
    """

    def __init__(self, message: str = "", field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class MediumError(SwapCacheError):
    """A durable medium operation failed.

    Raised by medium implementations; the persistent store converts it into
    a miss or a no-op write so it never reaches callers.
    """

    def __init__(
        self,
        message: str = "",
        operation: str = "read",
        key: str | None = None,
        original: Exception | None = None,
    ) -> None:
        super().__init__(message)
        self.operation = operation
        self.key = key
        self.original = original
