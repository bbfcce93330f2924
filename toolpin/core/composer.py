"""Overlay composer — builds a package universe from pinned sources.

Composition happens in two inspectable phases:

1. ``evaluate_base`` evaluates the base pin into the initial universe.
2. ``apply_overlays`` left-folds the overlay pins over it, in the order
   given. Later overlays shadow earlier definitions on name collision.

Any evaluation failure aborts the whole composition; no partial universe
is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from toolpin.core.errors import EvaluationError, IntegrityError, MissingCapabilityError
from toolpin.core.evaluator import SourceEvaluator
from toolpin.core.pin_registry import PinRegistry
from toolpin.core.universe import Overlay, PackageUniverse
from toolpin.models.pins import SourcePin

logger = logging.getLogger(__name__)


class OverlayComposer:
    """Composes a base universe with an ordered sequence of overlays.

    Parameters
    ----------
    registry:
        Supplies verified content for each pin.
    evaluator:
        Turns content into universes and overlays. A ``SourceEvaluator``
        is created if not provided.
    """

    def __init__(
        self,
        registry: PinRegistry,
        evaluator: SourceEvaluator | None = None,
    ) -> None:
        self._registry = registry
        self._evaluator = evaluator or SourceEvaluator()

    def evaluate_base(self, base_pin: SourcePin) -> PackageUniverse:
        """Phase 1: evaluate *base_pin* into the initial universe."""
        content = self._registry.fetch(base_pin)
        return self._evaluator.evaluate_universe(base_pin, content)

    def load_overlays(self, overlay_pins: Sequence[SourcePin]) -> list[Overlay]:
        """Evaluate every overlay pin before any of them is applied."""
        return [
            self._evaluator.evaluate_overlay(pin, self._registry.fetch(pin))
            for pin in overlay_pins
        ]

    def apply_overlays(
        self,
        universe: PackageUniverse,
        overlay_pins: Sequence[SourcePin],
    ) -> PackageUniverse:
        """Phase 2: apply *overlay_pins* to *universe* as a left fold."""
        for overlay in self.load_overlays(overlay_pins):
            universe = self._apply(overlay, universe)
        return universe

    def compose(
        self,
        base_pin: SourcePin,
        overlay_pins: Sequence[SourcePin],
    ) -> PackageUniverse:
        """Evaluate *base_pin* and apply *overlay_pins* in order.

        Raises
        ------
        IntegrityError
            If any pin's content fails its checksum.
        EvaluationError
            If any pin cannot be evaluated or an overlay misbehaves.
        """
        universe = self.apply_overlays(self.evaluate_base(base_pin), overlay_pins)
        logger.info(
            "Composed universe from %s with %d capabilities.",
            " -> ".join(universe.layers),
            len(universe),
        )
        return universe

    @staticmethod
    def _apply(overlay: Overlay, universe: PackageUniverse) -> PackageUniverse:
        try:
            return overlay.apply(universe)
        except MissingCapabilityError as exc:
            raise EvaluationError(
                overlay.name, f"overlay requires a capability the universe lacks: {exc}"
            ) from exc
        except (EvaluationError, IntegrityError):
            raise
        except Exception as exc:
            raise EvaluationError(
                overlay.name, f"overlay failed against {'/'.join(universe.layers)}: {exc}"
            ) from exc
