"""Source pin registry — the fixed table of pinned external sources.

The table is populated once, from a niv-style ``sources.json``::

    {
        "package-universe": {"path": "package-universe.json", "sha256": "..."},
        "rust-channels": {"url": "file:///srv/pins/rust-channels.json", "sha256": "..."}
    }

and is read-only afterwards. Every fetch is checked against the recorded
checksum; a mismatch is fatal and never retried here.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Iterator
from pathlib import Path
from types import MappingProxyType

from pydantic import ValidationError

from toolpin.core.errors import IntegrityError, UnknownPinError
from toolpin.core.fetchers import FileFetcher, PinFetcher
from toolpin.core.hasher import sha256_hex
from toolpin.models.pins import SourcePin

logger = logging.getLogger(__name__)


class PinRegistry:
    """Read-only table of ``SourcePin`` records plus the fetcher that reads them.

    Parameters
    ----------
    pins:
        The pins to register. Names must be unique.
    fetcher:
        The pin-resolution service used to retrieve content.

    Examples
    --------
    >>> registry = PinRegistry.from_sources_file(Path("pins/sources.json"))
    >>> registry.resolve_pin("package-universe").name
    'package-universe'
    """

    def __init__(self, pins: Iterable[SourcePin], fetcher: PinFetcher) -> None:
        table: dict[str, SourcePin] = {}
        for pin in pins:
            if pin.name in table:
                raise ValueError(f"Duplicate source pin name: {pin.name!r}")
            table[pin.name] = pin
        self._pins = MappingProxyType(table)
        self._fetcher = fetcher

    @classmethod
    def from_sources_file(
        cls, path: Path, fetcher: PinFetcher | None = None
    ) -> PinRegistry:
        """Load the pin table from a ``sources.json`` file.

        Each entry needs a ``sha256`` and either ``url`` or ``path``.
        Relative paths are resolved against the sources file's directory.

        Raises
        ------
        FileNotFoundError
            If the sources file does not exist.
        ValueError
            If the file is not valid JSON or an entry is malformed.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Sources file not found: {path}")

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid sources file '{path}': {exc}") from exc
        if not isinstance(raw, dict):
            raise ValueError(f"Sources file '{path}' must be a JSON object")

        root = path.resolve().parent
        pins: list[SourcePin] = []
        for name, entry in raw.items():
            if not isinstance(entry, dict):
                raise ValueError(f"Source {name!r} in '{path}' must be a JSON object")
            location = entry.get("url") or entry.get("path")
            if location and "url" not in entry and not Path(location).is_absolute():
                location = str(root / location)
            try:
                pins.append(
                    SourcePin(name=name, location=location or "", sha256=entry.get("sha256", ""))
                )
            except ValidationError as exc:
                raise ValueError(f"Invalid source {name!r} in '{path}': {exc}") from exc

        logger.info("Loaded %d source pin(s) from %s.", len(pins), path)
        return cls(pins, fetcher or FileFetcher(root=root))

    # -- Lookup -------------------------------------------------------------

    def get(self, name: str) -> SourcePin:
        """Return the registered pin for *name* without fetching it."""
        try:
            return self._pins[name]
        except KeyError:
            raise UnknownPinError(name) from None

    @property
    def names(self) -> list[str]:
        return sorted(self._pins)

    def __contains__(self, name: object) -> bool:
        return name in self._pins

    def __iter__(self) -> Iterator[SourcePin]:
        return iter(self._pins[name] for name in self.names)

    def __len__(self) -> int:
        return len(self._pins)

    # -- Resolution ---------------------------------------------------------

    def fetch(self, pin: SourcePin) -> bytes:
        """Fetch *pin*'s content and verify it against the recorded checksum.

        Raises
        ------
        IntegrityError
            If the content's SHA-256 differs from ``pin.sha256``.
        """
        content = self._fetcher.fetch(pin)
        actual = sha256_hex(content)
        if actual != pin.sha256:
            raise IntegrityError(pin.name, pin.sha256, actual)
        logger.debug("Verified pin %s (%d bytes).", pin.name, len(content))
        return content

    def resolve_pin(self, name: str) -> SourcePin:
        """Return the pin registered as *name* after verifying its content.

        Raises
        ------
        UnknownPinError
            If *name* is not registered.
        IntegrityError
            If the fetched content does not match the pin's checksum.
        """
        pin = self.get(name)
        self.fetch(pin)
        return pin

    def verify_all(self) -> dict[str, bool]:
        """Check every pin's integrity without raising.

        Returns a mapping of pin name to ``True`` when the content was
        fetched and matched its checksum.
        """
        results: dict[str, bool] = {}
        for pin in self:
            try:
                self.fetch(pin)
            except IntegrityError as exc:
                logger.warning("%s", exc)
                results[pin.name] = False
            except Exception:
                logger.exception("Failed to fetch pin %s.", pin.name)
                results[pin.name] = False
            else:
                results[pin.name] = True
        return results
