"""Content-addressed, immutable store for pinned source content.

Storage layout: {base_path}/{sha256[0:2]}/{sha256[2:4]}/{sha256}.dat
No delete method — content is immutable once stored. The store acts as a
local mirror that ``StoreFetcher`` can serve pins from.
"""

from __future__ import annotations

import logging
from pathlib import Path

from toolpin.core.hasher import SHA256_PREFIX, sha256_hex, strip_digest_prefix

logger = logging.getLogger(__name__)


class SourceIntegrityError(RuntimeError):
    """Raised when stored content's hash does not match its address."""


class SourceStore:
    """SHA-256 keyed, immutable content store.

    Storing the same content twice is a no-op (idempotent). There is no
    update or delete.

    Parameters
    ----------
    base_path:
        Root directory for stored content.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)
        self._base.mkdir(parents=True, exist_ok=True)

    @property
    def base_path(self) -> Path:
        return self._base

    def _content_path(self, sha256_digest: str) -> Path:
        """Layout: {base}/{sha256[0:2]}/{sha256[2:4]}/{sha256}.dat"""
        return self._base / sha256_digest[:2] / sha256_digest[2:4] / f"{sha256_digest}.dat"

    # ------------------------------------------------------------------
    # Store
    # ------------------------------------------------------------------

    def store(self, data: bytes) -> str:
        """Store *data* and return its ``sha256:<hex>`` address.

        If the content already exists, verifies it and leaves it in place.
        """
        digest = sha256_hex(data)
        path = self._content_path(digest)

        if path.exists():
            if not self.verify(digest):
                raise SourceIntegrityError(
                    f"Existing content at {digest} failed integrity check"
                )
            logger.debug("Content %s already stored.", digest)
        else:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
            logger.debug("Stored %d bytes at %s.", len(data), digest)

        return f"{SHA256_PREFIX}{digest}"

    # ------------------------------------------------------------------
    # Retrieve
    # ------------------------------------------------------------------

    def retrieve(self, content_address: str) -> bytes:
        """Retrieve content by address (``sha256:<hex>`` or bare hex)."""
        digest = strip_digest_prefix(content_address)
        path = self._content_path(digest)
        if not path.exists():
            raise FileNotFoundError(f"Content not found: {content_address}")
        return path.read_bytes()

    # ------------------------------------------------------------------
    # Check and verify
    # ------------------------------------------------------------------

    def exists(self, content_address: str) -> bool:
        return self._content_path(strip_digest_prefix(content_address)).exists()

    def verify(self, content_address: str) -> bool:
        """Re-hash stored data and compare against the content address."""
        digest = strip_digest_prefix(content_address)
        path = self._content_path(digest)
        if not path.exists():
            return False
        return sha256_hex(path.read_bytes()) == digest
