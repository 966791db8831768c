"""Cache key generation — canonical, colon-delimited, case-normalized.

Key format::

    <operation-tag>:<param1>:<param2>:...[:<optional-tag>:<value>]

Address and identifier fields are lower-cased, amounts are written in their
shortest exact decimal form, and absent optional parameters are left out of the
key rather than encoded as empty fields.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from swapcache.errors.exceptions import InvalidKeyError
from swapcache.types import QuoteKind

DELIMITER = ":"
QUOTE_PREFIX = "quote" + DELIMITER


def build_key(tag: str, *fields: object, **optional: object) -> str:
    """Build a cache key from an operation tag and ordered parameters.

    Optional parameters are keyword arguments; ``None`` drops the parameter,
    anything else is appended as ``name:value`` in sorted name order.
    """
    if not tag or not tag.strip():
        raise InvalidKeyError("Cache key tag must not be empty")

    parts = [tag.strip()]
    for i, value in enumerate(fields):
        parts.append(_normalize_field(value, f"field[{i}]"))
    for name in sorted(optional):
        value = optional[name]
        if value is None:
            continue
        parts.append(_normalize_field(name, name))
        parts.append(_normalize_field(value, name))
    return DELIMITER.join(parts)


def normalize_address(address: str) -> str:
    """Normalize an address or identifier to a single case."""
    return _check_delimiter(address.strip().lower(), "address")


def normalize_amount(amount: int | str | Decimal) -> str:
    """Exact decimal string for an amount; floats are rejected.

    Equal amounts give equal strings: ``"1000000.0"``, ``Decimal("1E+6")``
    and ``1000000`` all become ``"1000000"``.
    """
    if isinstance(amount, (bool, float)):
        raise InvalidKeyError(
            f"Amount must be int, str or Decimal, got {type(amount).__name__}",
            field="amount",
        )
    if isinstance(amount, str):
        try:
            amount = Decimal(amount.strip())
        except InvalidOperation:
            raise InvalidKeyError(
                f"Amount is not a decimal number: {amount!r}", field="amount"
            ) from None
    return _normalize_field(amount, "amount")


def quote_cache_key(
    kind: QuoteKind | str,
    token_in: str,
    token_out: str,
    amount: int | str | Decimal,
    stable: bool | None = None,
    tick_spacing: int | None = None,
) -> str:
    """Key for a router quote, e.g. ``quote:v2:0xa…:0xb…:1000000:s:false``."""
    kind = QuoteKind(kind)
    return build_key(
        f"{QUOTE_PREFIX}{kind.value}",
        normalize_address(token_in),
        normalize_address(token_out),
        normalize_amount(amount),
        s=stable,
        t=tick_spacing,
    )


def quote_kind_prefix(kind: QuoteKind | str) -> str:
    """Prefix matching every cached quote of one kind."""
    return f"{QUOTE_PREFIX}{QuoteKind(kind).value}{DELIMITER}"


def token_metadata_key(address: str) -> str:
    """Key for persisted token metadata (namespaced by the persistent store)."""
    return normalize_address(address)


def _normalize_field(value: object, field: str) -> str:
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        text = "true" if value else "false"
    elif isinstance(value, int):
        text = str(value)
    elif isinstance(value, Decimal):
        if not value.is_finite():
            raise InvalidKeyError(f"Non-finite decimal in {field}", field=field)
        # normalize() drops trailing fractional zeros so 1000000.0 == 1E+6
        text = format(value.normalize(), "f")
    elif isinstance(value, str):
        text = value.strip().lower()
    elif isinstance(value, float):
        raise InvalidKeyError(
            f"Float values are not allowed in cache keys ({field}={value!r}); "
            "pass an int, Decimal or decimal string",
            field=field,
        )
    else:
        raise InvalidKeyError(
            f"Unsupported cache key value for {field}: {type(value).__name__}",
            field=field,
        )
    return _check_delimiter(text, field)


def _check_delimiter(text: str, field: str) -> str:
    if DELIMITER in text:
        raise InvalidKeyError(
            f"Cache key field {field} must not contain '{DELIMITER}': {text!r}",
            field=field,
        )
    return text
