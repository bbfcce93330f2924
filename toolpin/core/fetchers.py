"""Pin fetch collaborators — turn a ``SourcePin`` into raw content bytes.

Fetchers only retrieve; integrity is checked by ``PinRegistry``. Any
transient failure surfaces as ``FetchError`` and is never retried by the
resolution core.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable
from urllib.parse import unquote, urlparse

from toolpin.core.source_store import SourceStore
from toolpin.models.pins import SourcePin

logger = logging.getLogger(__name__)


class FetchError(RuntimeError):
    """Raised when pin content cannot be retrieved."""

    def __init__(self, pin_name: str, reason: str) -> None:
        self.pin_name = pin_name
        self.reason = reason
        super().__init__(f"Cannot fetch pin {pin_name!r}: {reason}")


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class PinFetcher(Protocol):
    """Protocol for pin-resolution services.

    Any object with a ``fetch(pin) -> bytes`` method satisfies this protocol.
    """

    def fetch(self, pin: SourcePin) -> bytes:
        """Return the raw content bytes recorded by *pin*."""
        ...


# ---------------------------------------------------------------------------
# Default implementations
# ---------------------------------------------------------------------------


class FileFetcher:
    """Reads pin content from local paths and ``file://`` URLs.

    Relative paths are resolved against *root* when given.
    """

    def __init__(self, root: Path | None = None) -> None:
        self.root = root

    def _path_for(self, pin: SourcePin) -> Path:
        parsed = urlparse(pin.location)
        if parsed.scheme == "file":
            return Path(unquote(parsed.path))
        # Single letters are Windows drive letters, not schemes.
        if parsed.scheme and len(parsed.scheme) > 1:
            raise FetchError(pin.name, f"unsupported location scheme {parsed.scheme!r}")
        path = Path(pin.location)
        if not path.is_absolute() and self.root is not None:
            path = self.root / path
        return path

    def fetch(self, pin: SourcePin) -> bytes:
        path = self._path_for(pin)
        logger.debug("Fetching pin %s from %s.", pin.name, path)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise FetchError(pin.name, f"{path}: {exc.strerror or exc}") from exc


class StoreFetcher:
    """Serves pin content from a ``SourceStore`` mirror by checksum.

    The pin's location is ignored: content is looked up by its recorded
    SHA-256, so an offline mirror can stand in for the original location.
    """

    def __init__(self, store: SourceStore) -> None:
        self.store = store

    def fetch(self, pin: SourcePin) -> bytes:
        logger.debug("Fetching pin %s from store %s.", pin.name, self.store.base_path)
        try:
            return self.store.retrieve(pin.sha256)
        except FileNotFoundError as exc:
            raise FetchError(pin.name, f"sha256:{pin.sha256} is not mirrored") from exc
