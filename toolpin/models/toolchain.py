"""Toolchain descriptor — the output of a resolution."""

from __future__ import annotations

import datetime as dt
import json

from pydantic import BaseModel, ConfigDict, Field

from toolpin.models.channels import Channel


class ToolchainDescriptor(BaseModel):
    """A resolved, reproducible reference to a concrete toolchain.

    ``channel``, ``date`` and ``targets`` echo the request exactly.
    ``artifact_reference`` is an opaque content-addressed handle supplied by
    the universe's toolchain-construction capability.
    """

    model_config = ConfigDict(frozen=True)

    channel: Channel
    date: dt.date
    targets: frozenset[str]
    artifact_reference: str = Field(min_length=1)

    def to_json(self) -> str:
        """Serialize with targets sorted, so output is stable across runs."""
        return json.dumps(
            {
                "channel": self.channel.value,
                "date": self.date.isoformat(),
                "targets": sorted(self.targets),
                "artifact_reference": self.artifact_reference,
            },
            indent=2,
        )
