"""Base package universe — pinned release manifests and host platform.

Entry point: ``toolpin.providers.base_universe:make_universe``. The pin's
``attrs`` look like::

    {
        "version": "2020.08",
        "host": "x86_64-unknown-linux-gnu",
        "releases": [ {ReleaseManifest}, ... ]
    }
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Iterable, Iterator
from typing import Any

from toolpin.models.channels import Channel, is_valid_target_triple
from toolpin.models.releases import ReleaseManifest

logger = logging.getLogger(__name__)


class ReleaseIndex:
    """Immutable index of release manifests keyed by ``(channel, date)``.

    Examples
    --------
    >>> index = ReleaseIndex([])
    >>> (Channel.NIGHTLY, dt.date(2020, 8, 6)) in index
    False
    """

    def __init__(self, manifests: Iterable[ReleaseManifest]) -> None:
        entries: dict[tuple[Channel, dt.date], ReleaseManifest] = {}
        for manifest in manifests:
            key = (manifest.channel, manifest.date)
            if key in entries:
                raise ValueError(
                    f"Duplicate {manifest.channel.value} release for {manifest.date.isoformat()}"
                )
            entries[key] = manifest
        self._entries = entries

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ReleaseManifest]:
        return iter(self._entries[key] for key in sorted(self._entries))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReleaseIndex):
            return NotImplemented
        return self._entries == other._entries

    __hash__ = None  # type: ignore[assignment]

    def get(self, channel: Channel, release_date: dt.date) -> ReleaseManifest | None:
        return self._entries.get((Channel(channel), release_date))

    def releases(self, channel: Channel) -> list[ReleaseManifest]:
        """All releases on *channel*, oldest first."""
        channel = Channel(channel)
        return [m for m in self if m.channel == channel]


def make_universe(attrs: dict[str, Any]) -> dict[str, Any]:
    """Build the base universe's capabilities from pinned ``attrs``."""
    host = attrs.get("host")
    if not is_valid_target_triple(host):
        raise ValueError(f"host must be a target triple, got {host!r}")

    index = ReleaseIndex(ReleaseManifest(**raw) for raw in attrs.get("releases", []))
    logger.debug("Base universe indexes %d release(s) for host %s.", len(index), host)
    return {
        "release-manifests": index,
        "host-platform": host,
        "lib": {"version": str(attrs.get("version", ""))},
    }
