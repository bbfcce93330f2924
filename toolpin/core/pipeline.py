"""Resolution pipeline — wires registry, composer, and resolver together.

``ResolutionPipeline`` is the entry point the build-orchestration layer
uses: it composes the configured base pin and overlays once, holds the
resulting universe as an explicit value, and resolves channel
specifications against it. Independent specifications can be resolved
concurrently against the same universe because nothing in it is mutable.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor

from toolpin.config import ToolpinConfig
from toolpin.core.composer import OverlayComposer
from toolpin.core.fetchers import PinFetcher, StoreFetcher
from toolpin.core.pin_registry import PinRegistry
from toolpin.core.resolver import ChannelResolver
from toolpin.core.source_store import SourceStore
from toolpin.core.universe import PackageUniverse
from toolpin.models.channels import ChannelSpec
from toolpin.models.toolchain import ToolchainDescriptor

logger = logging.getLogger(__name__)


class ResolutionPipeline:
    """Registry -> composer -> resolver, for one base pin and overlay list.

    Parameters
    ----------
    registry:
        The pin table and fetcher.
    base_pin:
        Name of the pin holding the base universe.
    overlay_pins:
        Names of overlay pins, applied in this order.
    resolver:
        Channel resolver. A default ``ChannelResolver`` is used if omitted.
    max_workers:
        Thread count for ``resolve_many``.
    """

    def __init__(
        self,
        registry: PinRegistry,
        base_pin: str,
        overlay_pins: Sequence[str],
        *,
        resolver: ChannelResolver | None = None,
        max_workers: int = 8,
    ) -> None:
        self.registry = registry
        self.base_pin = base_pin
        self.overlay_pins = tuple(overlay_pins)
        self.composer = OverlayComposer(registry)
        self.resolver = resolver or ChannelResolver()
        self.max_workers = max_workers
        self._universe: PackageUniverse | None = None

    @classmethod
    def from_config(
        cls,
        config: ToolpinConfig,
        *,
        resolver: ChannelResolver | None = None,
    ) -> ResolutionPipeline:
        """Build a pipeline from ``ToolpinConfig`` settings.

        With ``config.offline`` set, pin content is served from the
        ``SourceStore`` at ``config.store_path`` instead of pin locations.
        """
        fetcher: PinFetcher | None = None
        if config.offline:
            fetcher = StoreFetcher(SourceStore(config.store_path))
        registry = PinRegistry.from_sources_file(config.sources_path, fetcher=fetcher)
        return cls(
            registry,
            config.base_pin,
            config.overlay_pins,
            resolver=resolver,
            max_workers=config.max_concurrent_resolutions,
        )

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def compose(self) -> PackageUniverse:
        """Look up the configured pins and compose a fresh universe.

        Each pin is fetched and verified once, by the composer.
        """
        base = self.registry.get(self.base_pin)
        overlays = [self.registry.get(name) for name in self.overlay_pins]
        return self.composer.compose(base, overlays)

    @property
    def universe(self) -> PackageUniverse:
        """The composed universe, composed on first access."""
        if self._universe is None:
            self._universe = self.compose()
        return self._universe

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve(self, spec: ChannelSpec) -> ToolchainDescriptor:
        """Resolve one specification against the composed universe."""
        return self.resolver.resolve(self.universe, spec)

    def resolve_many(self, specs: Sequence[ChannelSpec]) -> list[ToolchainDescriptor]:
        """Resolve independent specifications concurrently.

        Results are returned in input order. The first failure (in input
        order) is re-raised unchanged.
        """
        universe = self.universe
        if not specs:
            return []
        workers = min(self.max_workers, len(specs))
        logger.debug("Resolving %d spec(s) with %d worker(s).", len(specs), workers)
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(self.resolver.resolve, universe, spec) for spec in specs]
            return [future.result() for future in futures]

