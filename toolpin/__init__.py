"""toolpin: declarative, reproducible toolchain pinning.

Turns a symbolic toolchain request (channel, release date, targets) into a
content-addressed toolchain descriptor:

  - Source pins: checksum-verified references to pinned content
  - Overlay composition: a base package universe folded with ordered overlays
  - Channel resolution: exact-date releases, no implicit defaults
"""

__version__ = "0.1.0"
__description__ = "Declarative toolchain-pinning resolver"

from toolpin.core.composer import OverlayComposer
from toolpin.core.pin_registry import PinRegistry
from toolpin.core.pipeline import ResolutionPipeline
from toolpin.core.resolver import ChannelResolver
from toolpin.models import ChannelSpec, SourcePin, ToolchainDescriptor
from toolpin.cli.app import app as cli

__all__ = [
    "ChannelResolver",
    "ChannelSpec",
    "OverlayComposer",
    "PinRegistry",
    "ResolutionPipeline",
    "SourcePin",
    "ToolchainDescriptor",
    "cli",
    "__version__",
]
