"""Source pin models — immutable references to pinned external content."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from toolpin.core.hasher import strip_digest_prefix


class SourcePin(BaseModel):
    """An immutable ``{name, location, sha256}`` record for one external source.

    The checksum is the SHA-256 of the raw content bytes. Identical pins
    always resolve to byte-identical content.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    location: str = Field(min_length=1)  # path, file:// URL, or fetcher-specific URL
    sha256: str

    @field_validator("sha256")
    @classmethod
    def _normalize_sha256(cls, value: str) -> str:
        digest = strip_digest_prefix(value)
        if len(digest) != 64 or any(c not in "0123456789abcdef" for c in digest):
            raise ValueError(f"not a SHA-256 hex digest: {value!r}")
        return digest


class SourceKind(str, Enum):
    """What a piece of pinned content evaluates to."""

    UNIVERSE = "universe"
    OVERLAY = "overlay"


class SourceDocument(BaseModel):
    """Parsed pin content.

    ``entry_point`` is a dotted import path with an attribute, e.g.
    ``"toolpin.providers.base_universe:make_universe"``. The entry point is
    called with ``attrs``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    kind: SourceKind
    entry_point: str = Field(pattern=r"^[A-Za-z_][\w.]*:[A-Za-z_]\w*$")
    attrs: dict[str, Any] = Field(default_factory=dict)
