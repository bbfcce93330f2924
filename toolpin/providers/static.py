"""Static providers — pin plain data as capabilities.

``static_overlay`` is the equivalent of an overlay that only sets
attributes, e.g. overriding ``host-platform``::

    {
        "kind": "overlay",
        "entry_point": "toolpin.providers.static:static_overlay",
        "attrs": {"capabilities": {"host-platform": "aarch64-unknown-linux-gnu"}}
    }
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from toolpin.core.universe import PackageUniverse


def _capabilities(attrs: Mapping[str, Any]) -> dict[str, Any]:
    capabilities = attrs.get("capabilities", {})
    if not isinstance(capabilities, Mapping):
        raise ValueError("'capabilities' must be a JSON object")
    return dict(capabilities)


def static_universe(attrs: Mapping[str, Any]) -> dict[str, Any]:
    return _capabilities(attrs)


def static_overlay(attrs: Mapping[str, Any]) -> Callable[[PackageUniverse], dict[str, Any]]:
    capabilities = _capabilities(attrs)

    def overlay(universe: PackageUniverse) -> dict[str, Any]:
        return dict(capabilities)

    return overlay
