"""Release manifest models — what a channel published on a given date."""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from types import MappingProxyType

from pydantic import BaseModel, ConfigDict, Field, field_validator

from toolpin.models.channels import Channel


class ComponentArtifact(BaseModel):
    """One downloadable component of a release for a single target."""

    model_config = ConfigDict(frozen=True)

    available: bool = True
    url: str = ""
    sha256: str = ""


class ReleaseManifest(BaseModel):
    """The published contents of one channel release.

    ``packages`` maps a package name (``rustc``, ``cargo``, ``rust-std``)
    to a mapping of target triple to the component built for it. Both levels
    are read-only.
    """

    model_config = ConfigDict(frozen=True)

    channel: Channel
    date: dt.date
    version: str
    packages: Mapping[str, Mapping[str, ComponentArtifact]] = Field(
        default_factory=dict, validate_default=True
    )

    @field_validator("packages")
    @classmethod
    def _freeze_packages(
        cls, value: Mapping[str, Mapping[str, ComponentArtifact]]
    ) -> Mapping[str, Mapping[str, ComponentArtifact]]:
        return MappingProxyType(
            {name: MappingProxyType(dict(targets)) for name, targets in value.items()}
        )

    def component(self, package: str, target: str) -> ComponentArtifact | None:
        """Return the component for *package* on *target*, if it is available."""
        artifact = self.packages.get(package, {}).get(target)
        if artifact is None or not artifact.available:
            return None
        return artifact
