"""Error taxonomy for pin resolution, composition, and channel resolution.

Every error carries the structured context a caller needs to act on it
(pin name, capability, offending values). None of them are retried inside
toolpin: they are either deterministic input errors or integrity violations.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any


class ToolpinError(RuntimeError):
    """Base class for every error raised by the resolution core."""


# ---------------------------------------------------------------------------
# Source Pin Registry
# ---------------------------------------------------------------------------


class UnknownPinError(ToolpinError, KeyError):
    """Raised when a pin name is not present in the registry."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown source pin: {name!r}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message.
        return str(self.args[0])


class IntegrityError(ToolpinError):
    """Raised when fetched pin content does not match its recorded checksum."""

    def __init__(self, name: str, expected: str, actual: str) -> None:
        self.name = name
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Integrity check failed for pin {name!r}: "
            f"expected sha256:{expected}, got sha256:{actual}"
        )


# ---------------------------------------------------------------------------
# Overlay Composer
# ---------------------------------------------------------------------------


class EvaluationError(ToolpinError):
    """Raised when pin content cannot be evaluated into a universe or overlay."""

    def __init__(self, pin_name: str, reason: str) -> None:
        self.pin_name = pin_name
        self.reason = reason
        super().__init__(f"Cannot evaluate pin {pin_name!r}: {reason}")


# ---------------------------------------------------------------------------
# Channel Resolver
# ---------------------------------------------------------------------------


class MissingCapabilityError(ToolpinError, LookupError):
    """Raised when the composed universe lacks a required capability."""

    def __init__(self, capability: str, detail: str = "") -> None:
        self.capability = capability
        message = f"Universe has no usable capability {capability!r}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class InvalidTargetError(ToolpinError, ValueError):
    """Raised when the target set is empty or holds malformed triples.

    ``invalid`` lists every offending entry, sorted. It is empty when the
    target set itself was empty.
    """

    def __init__(self, invalid: Iterable[Any]) -> None:
        self.invalid = sorted(str(t) for t in invalid)
        if self.invalid:
            message = "Malformed target triple(s): " + ", ".join(
                repr(t) for t in self.invalid
            )
        else:
            message = "At least one target triple is required"
        super().__init__(message)


class InvalidDateError(ToolpinError, ValueError):
    """Raised when a release date is not a plausible, past calendar date."""

    def __init__(self, value: Any, reason: str) -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid release date {value!r}: {reason}")


class ReleaseNotFoundError(ToolpinError, LookupError):
    """Raised when no release exists for the exact channel and date."""

    def __init__(self, channel: str, release_date: date, detail: str = "") -> None:
        self.channel = channel
        self.date = release_date
        self.detail = detail
        message = f"No {channel} release dated {release_date.isoformat()}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ComponentUnavailableError(ReleaseNotFoundError):
    """Raised when a release exists but lacks a required component for a target."""

    def __init__(
        self, channel: str, release_date: date, component: str, target: str
    ) -> None:
        self.component = component
        self.target = target
        super().__init__(
            channel,
            release_date,
            f"component {component!r} is not available for {target}",
        )
