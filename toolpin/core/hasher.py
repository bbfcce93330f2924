"""Canonical hashing helpers for pin integrity and content addressing.

Pin checksums are SHA-256 digests of the raw content bytes. Artifact
references are SHA-256 digests of canonical JSON, so two resolutions of the
same release on different machines yield the same handle.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

SHA256_PREFIX = "sha256:"


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def strip_digest_prefix(digest: str) -> str:
    """Normalize ``sha256:<hex>`` or ``<hex>`` to lowercase ``<hex>``."""
    return digest.strip().lower().removeprefix(SHA256_PREFIX)


def content_address(obj: Any) -> str:
    """Content-address a JSON-serializable object.

    Returns "sha256:<hex>" format used for toolchain artifact references.
    """
    return f"{SHA256_PREFIX}{sha256_hex(canonical_json_bytes(obj))}"
