"""Package universe and overlay value types.

A ``PackageUniverse`` is an immutable mapping from capability name to
capability (pinned data or pure functions). It remembers which layer
defined each capability, so shadowing between overlays is observable.
Nested dict, list and set data is frozen on the way in, so one universe can
be shared by concurrent resolutions.

An ``Overlay`` is the explicit contract for universe extension: a function
from a universe to either a mapping of added/shadowed capabilities or a
superset universe. ``Overlay.apply`` always yields a new universe; the
input is never modified.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any

from toolpin.core.errors import EvaluationError, MissingCapabilityError

logger = logging.getLogger(__name__)

Capability = Any
OverlayFunction = Callable[["PackageUniverse"], Any]


class PackageUniverse(Mapping[str, Capability]):
    """Immutable mapping of capability name to capability.

    Parameters
    ----------
    capabilities:
        The capabilities this universe exposes.
    origins:
        Capability name -> name of the layer (pin) that defined it.
    layers:
        Ordered names of the layers that built this universe.
    """

    def __init__(
        self,
        capabilities: Mapping[str, Capability],
        *,
        origins: Mapping[str, str],
        layers: tuple[str, ...],
    ) -> None:
        self._capabilities = MappingProxyType(dict(capabilities))
        self._origins = MappingProxyType(dict(origins))
        self._layers = tuple(layers)

    @classmethod
    def from_base(
        cls, layer: str, capabilities: Mapping[str, Capability]
    ) -> PackageUniverse:
        """Create the initial universe from a base layer's capabilities."""
        _check_names(layer, capabilities)
        return cls(
            {name: _freeze(value) for name, value in capabilities.items()},
            origins={name: layer for name in capabilities},
            layers=(layer,),
        )

    # -- Mapping interface --------------------------------------------------

    def __getitem__(self, name: str) -> Capability:
        return self._capabilities[name]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._capabilities))

    def __len__(self) -> int:
        return len(self._capabilities)

    def __repr__(self) -> str:
        return f"PackageUniverse(layers={list(self._layers)!r}, capabilities={list(self)!r})"

    # -- Introspection ------------------------------------------------------

    @property
    def layers(self) -> tuple[str, ...]:
        return self._layers

    def origin(self, name: str) -> str:
        """Return the name of the layer that defined capability *name*."""
        try:
            return self._origins[name]
        except KeyError:
            raise MissingCapabilityError(name) from None

    def capability(self, name: str) -> Capability:
        """Return capability *name* or raise ``MissingCapabilityError``."""
        try:
            return self._capabilities[name]
        except KeyError:
            raise MissingCapabilityError(name) from None

    def describe(self) -> dict[str, str]:
        """Capability name -> defining layer, sorted by name."""
        return {name: self._origins[name] for name in self}

    # -- Extension ----------------------------------------------------------

    def extend(self, layer: str, additions: Mapping[str, Capability]) -> PackageUniverse:
        """Return a new universe with *additions* layered on top.

        Names already present are shadowed by the new definitions.
        """
        _check_names(layer, additions)
        for name in sorted(additions):
            if name in self._capabilities:
                logger.info(
                    "Layer %s shadows capability %r from layer %s.",
                    layer,
                    name,
                    self._origins[name],
                )
        capabilities = {
            **self._capabilities,
            **{name: _freeze(value) for name, value in additions.items()},
        }
        origins = {**self._origins, **{name: layer for name in additions}}
        return PackageUniverse(
            capabilities, origins=origins, layers=self._layers + (layer,)
        )


class Overlay:
    """A named, validated function from ``PackageUniverse`` to ``PackageUniverse``.

    The wrapped function receives the current universe and returns either
    a mapping of capabilities to add or shadow, or a ``PackageUniverse``
    that keeps every capability of its input.
    """

    def __init__(self, name: str, function: OverlayFunction) -> None:
        if not callable(function):
            raise EvaluationError(name, "overlay is not callable")
        if not _accepts_single_argument(function):
            raise EvaluationError(
                name, "overlay must accept exactly one positional argument (the universe)"
            )
        self.name = name
        self.function = function

    def __repr__(self) -> str:
        return f"Overlay({self.name!r})"

    def apply(self, universe: PackageUniverse) -> PackageUniverse:
        """Apply this overlay to *universe* and return the extended universe.

        Raises
        ------
        EvaluationError
            If the overlay result is neither a mapping nor a superset universe.
        """
        result = self.function(universe)

        if isinstance(result, PackageUniverse):
            dropped = sorted(set(universe) - set(result))
            if dropped:
                raise EvaluationError(
                    self.name, f"overlay removed capabilities: {', '.join(dropped)}"
                )
            additions = {
                name: result[name]
                for name in result
                if name not in universe or result[name] is not universe[name]
            }
            return universe.extend(self.name, additions)

        if isinstance(result, Mapping):
            return universe.extend(self.name, result)

        raise EvaluationError(
            self.name,
            f"overlay returned {type(result).__name__}, expected a mapping of capabilities",
        )


def _check_names(layer: str, capabilities: Any) -> None:
    if not isinstance(capabilities, Mapping):
        raise EvaluationError(
            layer, f"expected a mapping of capabilities, got {type(capabilities).__name__}"
        )
    bad = [repr(name) for name in capabilities if not isinstance(name, str) or not name]
    if bad:
        raise EvaluationError(layer, f"invalid capability name(s): {', '.join(bad)}")


def _accepts_single_argument(function: Callable[..., Any]) -> bool:
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        # Callables without an introspectable signature are accepted.
        return True
    try:
        signature.bind(object())
    except TypeError:
        return False
    return True


def _freeze(value: Any) -> Any:
    """Return a read-only equivalent of plain JSON-like containers.

    Dicts become ``MappingProxyType`` views over a private copy, lists and
    tuples become tuples, sets become frozensets. Other objects are
    returned unchanged.
    """
    if isinstance(value, MappingProxyType):
        return value
    if isinstance(value, dict):
        return MappingProxyType({key: _freeze(item) for key, item in value.items()})
    if isinstance(value, list) or type(value) is tuple:
        return tuple(_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(value)
    return value
