"""Channel overlay — adds channel-aware toolchain construction to a universe.

Entry point: ``toolpin.providers.rust_channels:rust_channels_overlay``.

The overlay needs two capabilities from the universe it extends:
``release-manifests`` (a ``ReleaseIndex``) and ``host-platform``. It adds:

* ``rust-channel-of`` — ``(channel, date) -> ReleaseManifest``
* ``channel-toolchain-builder`` — ``(channel, date, targets) -> artifact reference``

Optional pinned ``attrs``::

    {
        "host_components": ["rustc", "cargo", "rust-std"],
        "target_components": ["rust-std"]
    }
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from toolpin.core.errors import (
    ComponentUnavailableError,
    MissingCapabilityError,
    ReleaseNotFoundError,
)
from toolpin.core.hasher import content_address
from toolpin.core.universe import PackageUniverse
from toolpin.models.channels import Channel
from toolpin.models.releases import ReleaseManifest
from toolpin.providers.base_universe import ReleaseIndex

logger = logging.getLogger(__name__)

DEFAULT_HOST_COMPONENTS = ("rustc", "cargo", "rust-std")
DEFAULT_TARGET_COMPONENTS = ("rust-std",)


class ChannelToolchainBuilder:
    """Builds content-addressed toolchain references from pinned manifests.

    Parameters
    ----------
    index:
        Release manifests to resolve against.
    host:
        Target triple of the machine the toolchain runs on.
    host_components:
        Packages required for the host.
    target_components:
        Packages required for every requested target.
    """

    def __init__(
        self,
        index: ReleaseIndex,
        host: str,
        host_components: Iterable[str] = DEFAULT_HOST_COMPONENTS,
        target_components: Iterable[str] = DEFAULT_TARGET_COMPONENTS,
    ) -> None:
        self.index = index
        self.host = host
        self.host_components = tuple(host_components)
        self.target_components = tuple(target_components)

    def channel_of(self, channel: Channel, release_date: dt.date) -> ReleaseManifest:
        """Return the release manifest for the exact *channel* and date."""
        manifest = self.index.get(channel, release_date)
        if manifest is None:
            raise ReleaseNotFoundError(Channel(channel).value, release_date)
        return manifest

    def __call__(
        self,
        channel: Channel,
        release_date: dt.date,
        targets: Iterable[str],
    ) -> str:
        manifest = self.channel_of(channel, release_date)

        wanted: set[tuple[str, str]] = {
            (package, self.host) for package in self.host_components
        }
        for target in targets:
            wanted.update((package, target) for package in self.target_components)

        components: list[dict[str, str]] = []
        for package, target in sorted(wanted):
            artifact = manifest.component(package, target)
            if artifact is None:
                raise ComponentUnavailableError(
                    manifest.channel.value, manifest.date, package, target
                )
            components.append(
                {"name": package, "target": target, "sha256": artifact.sha256}
            )

        reference = content_address(
            {
                "channel": manifest.channel.value,
                "date": manifest.date.isoformat(),
                "version": manifest.version,
                "host": self.host,
                "components": components,
            }
        )
        logger.debug(
            "Built %s %s (%d components) -> %s.",
            manifest.channel.value,
            manifest.version,
            len(components),
            reference,
        )
        return reference


def rust_channels_overlay(
    attrs: Mapping[str, Any],
) -> Callable[[PackageUniverse], dict[str, Any]]:
    """Return the overlay function configured by pinned *attrs*."""
    host_components = tuple(attrs.get("host_components", DEFAULT_HOST_COMPONENTS))
    target_components = tuple(attrs.get("target_components", DEFAULT_TARGET_COMPONENTS))

    def overlay(universe: PackageUniverse) -> dict[str, Any]:
        index = universe.get("release-manifests")
        host = universe.get("host-platform")
        if not isinstance(index, ReleaseIndex):
            raise MissingCapabilityError("release-manifests")
        if not isinstance(host, str):
            raise MissingCapabilityError("host-platform")

        builder = ChannelToolchainBuilder(
            index,
            host,
            host_components=host_components,
            target_components=target_components,
        )
        return {
            "rust-channel-of": builder.channel_of,
            "channel-toolchain-builder": builder,
        }

    return overlay
