"""Shared enums and Pydantic models for swapcache."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

# ── Enums ──


class TtlClass(StrEnum):
    """Class of request a TTL is attached to."""

    QUOTE = "quote"
    METADATA = "metadata"


class QuoteKind(StrEnum):
    """Router quote flavours: V2/V3 pools, exact input or exact output."""

    V2 = "v2"
    V2_OUT = "v2-out"
    V3 = "v3"
    V3_OUT = "v3-out"


# ── Payload models ──


class TokenMetadata(BaseModel):
    """ERC-20 metadata as returned by a metadata producer."""

    symbol: str
    name: str
    decimals: int = Field(ge=0, le=255)
