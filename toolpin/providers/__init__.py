"""Bundled universe providers referenced by pin entry points.

``base_universe`` supplies the pinned release manifests and host platform;
``rust_channels`` is the overlay that adds ``channel-toolchain-builder``.
"""
