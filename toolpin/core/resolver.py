"""Channel resolver — turns a ``ChannelSpec`` into a ``ToolchainDescriptor``.

Resolution order is fixed so that cheap, local validation always happens
before the toolchain-construction capability is invoked:

1. look up ``channel-toolchain-builder`` in the universe
2. validate every target triple (all offenders reported together)
3. validate the release date (a real calendar date, not in the future)
4. invoke the capability; ``ReleaseNotFoundError`` propagates unchanged
5. wrap the artifact reference with the echoed request fields

The resolver never substitutes a nearby date, another channel, or a
default target.
"""

from __future__ import annotations

import datetime as dt
import logging
from collections.abc import Callable

from toolpin.core.errors import (
    EvaluationError,
    InvalidDateError,
    InvalidTargetError,
    MissingCapabilityError,
)
from toolpin.core.universe import PackageUniverse
from toolpin.models.channels import ChannelSpec, is_valid_target_triple
from toolpin.models.toolchain import ToolchainDescriptor

logger = logging.getLogger(__name__)

TOOLCHAIN_BUILDER_CAPABILITY = "channel-toolchain-builder"


def utc_today() -> dt.date:
    """Return the current calendar date in UTC."""
    return dt.datetime.now(dt.timezone.utc).date()


class ChannelResolver:
    """Resolves channel specifications against a composed universe.

    The resolver holds no universe of its own; callers pass the universe
    they composed, so independent resolutions can share one universe.

    Parameters
    ----------
    today:
        Clock returning the current date. Defaults to ``utc_today``.
    """

    def __init__(self, today: Callable[[], dt.date] | None = None) -> None:
        self._today = today or utc_today

    def resolve(self, universe: PackageUniverse, spec: ChannelSpec) -> ToolchainDescriptor:
        """Resolve *spec* to a toolchain descriptor.

        Raises
        ------
        MissingCapabilityError
            If the universe has no callable ``channel-toolchain-builder``.
        InvalidTargetError
            If the target set is empty or any triple is malformed.
        InvalidDateError
            If the date is not a calendar date or lies in the future.
        ReleaseNotFoundError
            If no release exists for the exact channel and date.
        """
        builder = self.toolchain_builder(universe)
        self.validate_targets(spec.targets)
        self.validate_date(spec.date)

        logger.debug(
            "Building %s-%s for %s.",
            spec.channel.value,
            spec.date.isoformat(),
            ", ".join(sorted(spec.targets)),
        )
        reference = builder(spec.channel, spec.date, spec.targets)
        if not isinstance(reference, str) or not reference:
            raise EvaluationError(
                universe.origin(TOOLCHAIN_BUILDER_CAPABILITY),
                f"{TOOLCHAIN_BUILDER_CAPABILITY} returned {reference!r}, "
                "expected a non-empty artifact reference",
            )

        descriptor = ToolchainDescriptor(
            channel=spec.channel,
            date=spec.date,
            targets=spec.targets,
            artifact_reference=reference,
        )
        logger.info(
            "Resolved %s-%s to %s.",
            spec.channel.value,
            spec.date.isoformat(),
            reference,
        )
        return descriptor

    # -- Validation steps ---------------------------------------------------

    @staticmethod
    def toolchain_builder(universe: PackageUniverse) -> Callable[..., object]:
        builder = universe.capability(TOOLCHAIN_BUILDER_CAPABILITY)
        if not callable(builder):
            raise MissingCapabilityError(
                TOOLCHAIN_BUILDER_CAPABILITY,
                f"defined by {universe.origin(TOOLCHAIN_BUILDER_CAPABILITY)} but not callable",
            )
        return builder

    @staticmethod
    def validate_targets(targets: frozenset[str]) -> None:
        if not targets:
            raise InvalidTargetError([])
        invalid = [t for t in targets if not is_valid_target_triple(t)]
        if invalid:
            raise InvalidTargetError(invalid)

    def validate_date(self, value: object) -> None:
        if isinstance(value, dt.datetime) or not isinstance(value, dt.date):
            raise InvalidDateError(value, "expected a calendar date")
        today = self._today()
        if value > today:
            raise InvalidDateError(
                value, f"no release can exist after today ({today.isoformat()})"
            )
