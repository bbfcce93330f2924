"""Shared test fixtures for toolpin."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

import pytest

from toolpin.core.composer import OverlayComposer
from toolpin.core.fetchers import FileFetcher
from toolpin.core.hasher import sha256_hex
from toolpin.core.pin_registry import PinRegistry
from toolpin.core.resolver import ChannelResolver
from toolpin.core.universe import PackageUniverse
from toolpin.models.pins import SourcePin

HOST = "x86_64-unknown-linux-gnu"
FIXED_TODAY = date(2024, 1, 1)

BASE_ENTRY_POINT = "toolpin.providers.base_universe:make_universe"
CHANNELS_ENTRY_POINT = "toolpin.providers.rust_channels:rust_channels_overlay"
STATIC_OVERLAY_ENTRY_POINT = "toolpin.providers.static:static_overlay"


def _component(package: str, target: str, release_date: str) -> dict[str, Any]:
    return {
        "available": True,
        "url": f"https://static.rust-lang.org/dist/{release_date}/{package}-{target}.tar.xz",
        "sha256": sha256_hex(f"{package}-{target}-{release_date}".encode()),
    }


def make_release(
    channel: str,
    release_date: str,
    version: str,
    targets: list[str],
) -> dict[str, Any]:
    """Build a release manifest dict with host tools plus rust-std per target."""
    return {
        "channel": channel,
        "date": release_date,
        "version": version,
        "packages": {
            "rustc": {HOST: _component("rustc", HOST, release_date)},
            "cargo": {HOST: _component("cargo", HOST, release_date)},
            "rust-std": {
                t: _component("rust-std", t, release_date) for t in [HOST, *targets]
            },
        },
    }


@pytest.fixture
def base_attrs() -> dict[str, Any]:
    """Pinned attrs for the base universe: a few releases around 2020-08-06."""
    return {
        "version": "test",
        "host": HOST,
        "releases": [
            make_release("stable", "2020-08-03", "1.45.2", ["wasm32-unknown-unknown"]),
            make_release("beta", "2020-08-06", "1.46.0-beta.4", ["wasm32-unknown-unknown"]),
            make_release(
                "nightly",
                "2020-08-06",
                "1.47.0-nightly",
                ["wasm32-unknown-unknown", "aarch64-unknown-linux-gnu"],
            ),
        ],
    }


@pytest.fixture
def write_pin(tmp_path: Path) -> Callable[..., SourcePin]:
    """Factory fixture: write pin content to disk and return a matching pin."""

    def _factory(name: str, content: dict[str, Any] | bytes) -> SourcePin:
        data = content if isinstance(content, bytes) else json.dumps(content).encode("utf-8")
        path = tmp_path / "pins" / f"{name}.json"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return SourcePin(name=name, location=str(path), sha256=sha256_hex(data))

    return _factory


@pytest.fixture
def base_pin(write_pin: Callable[..., SourcePin], base_attrs: dict[str, Any]) -> SourcePin:
    return write_pin(
        "package-universe",
        {"kind": "universe", "entry_point": BASE_ENTRY_POINT, "attrs": base_attrs},
    )


@pytest.fixture
def channels_pin(write_pin: Callable[..., SourcePin]) -> SourcePin:
    return write_pin(
        "rust-channels",
        {"kind": "overlay", "entry_point": CHANNELS_ENTRY_POINT, "attrs": {}},
    )


@pytest.fixture
def make_static_overlay(write_pin: Callable[..., SourcePin]) -> Callable[..., SourcePin]:
    """Factory fixture: an overlay pin that sets the given capabilities."""

    def _factory(name: str, **capabilities: Any) -> SourcePin:
        return write_pin(
            name,
            {
                "kind": "overlay",
                "entry_point": STATIC_OVERLAY_ENTRY_POINT,
                "attrs": {"capabilities": capabilities},
            },
        )

    return _factory


@pytest.fixture
def registry(base_pin: SourcePin, channels_pin: SourcePin) -> PinRegistry:
    """A registry holding the base and channel overlay pins."""
    return PinRegistry([base_pin, channels_pin], FileFetcher())


@pytest.fixture
def composer(registry: PinRegistry) -> OverlayComposer:
    return OverlayComposer(registry)


@pytest.fixture
def universe(
    composer: OverlayComposer, base_pin: SourcePin, channels_pin: SourcePin
) -> PackageUniverse:
    """A correctly composed universe: base + channel overlay."""
    return composer.compose(base_pin, [channels_pin])


@pytest.fixture
def resolver() -> ChannelResolver:
    """A resolver with a fixed clock."""
    return ChannelResolver(today=lambda: FIXED_TODAY)
