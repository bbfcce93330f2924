"""toolpin data models — all Pydantic v2, all frozen (immutable)."""

from toolpin.models.channels import Channel, ChannelSpec, is_valid_target_triple
from toolpin.models.pins import SourceDocument, SourceKind, SourcePin
from toolpin.models.releases import ComponentArtifact, ReleaseManifest
from toolpin.models.toolchain import ToolchainDescriptor

__all__ = [
    # pins
    "SourcePin",
    "SourceKind",
    "SourceDocument",
    # channels
    "Channel",
    "ChannelSpec",
    "is_valid_target_triple",
    # releases
    "ComponentArtifact",
    "ReleaseManifest",
    # output
    "ToolchainDescriptor",
]
