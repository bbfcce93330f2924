"""Channel specification model and target-triple syntax."""

from __future__ import annotations

import datetime as dt
import re
from collections.abc import Iterable
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from toolpin.core.errors import InvalidDateError


class Channel(str, Enum):
    """Named release tracks of the compiler toolchain."""

    STABLE = "stable"
    BETA = "beta"
    NIGHTLY = "nightly"


# Architecture families accepted as the first component of a target triple.
_ARCH_PATTERN = re.compile(
    r"^(?:"
    r"x86_64|i[3-6]86|aarch64(?:_be)?|arm64(?:e|_32)?"
    r"|arm(?:eb)?(?:v[4-8][a-z0-9.]*)?|thumbv[4-8][a-z0-9.]*"
    r"|wasm(?:32|64)|riscv(?:32|64)[a-z0-9]*"
    r"|powerpc(?:64)?(?:le)?|mips(?:64)?(?:el)?(?:isa[a-z0-9]+)?(?:el)?"
    r"|s390x|sparc(?:v9|64)?|loongarch64|nvptx64|bpfe[bl]|avr|msp430|hexagon|m68k"
    r")$"
)
_COMPONENT_PATTERN = re.compile(r"^[a-z0-9_.]+$")


def is_valid_target_triple(triple: object) -> bool:
    """Return ``True`` if *triple* has the ``arch-vendor-os[-abi]`` shape.

    >>> is_valid_target_triple("wasm32-unknown-unknown")
    True
    >>> is_valid_target_triple("x86_64-unknown-linux-gnu")
    True
    >>> is_valid_target_triple("not-a-triple")
    False
    """
    if not isinstance(triple, str):
        return False
    parts = triple.split("-")
    if len(parts) not in (3, 4):
        return False
    if not all(_COMPONENT_PATTERN.match(part) for part in parts):
        return False
    return bool(_ARCH_PATTERN.match(parts[0]))


def parse_release_date(value: object) -> dt.date:
    """Return *value* as a calendar date.

    Accepts a ``datetime.date`` or an ISO ``YYYY-MM-DD`` string. Timestamps,
    numbers, and impossible dates raise ``InvalidDateError``.
    """
    if isinstance(value, dt.datetime):
        raise InvalidDateError(value, "expected a calendar date, not a timestamp")
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        try:
            return dt.date.fromisoformat(value)
        except ValueError as exc:
            raise InvalidDateError(value, str(exc)) from exc
    raise InvalidDateError(value, "expected an ISO calendar date")


class ChannelSpec(BaseModel):
    """A complete, unambiguous toolchain request.

    Every field is required; no defaults are invented. ``date`` is parsed
    with ``parse_release_date`` on construction, so a non-date value raises
    ``InvalidDateError``. Target syntax and the release date's recency are
    validated by the resolver, not here, so that a caller gets one error
    listing every malformed target.
    """

    model_config = ConfigDict(frozen=True)

    channel: Channel
    date: dt.date = Field(strict=True)
    targets: frozenset[str]

    def __init__(self, **data: Any) -> None:
        if "date" in data:
            data["date"] = parse_release_date(data["date"])
        super().__init__(**data)

    @classmethod
    def build(
        cls,
        channel: str | Channel,
        date: str | dt.date,
        targets: Iterable[str],
    ) -> ChannelSpec:
        """Build a spec from loosely-typed input such as CLI arguments.

        Raises
        ------
        ValueError
            If *channel* is not a known channel, or *targets* is a single
            string rather than a collection of triples.
        InvalidDateError
            If *date* is not an ISO calendar date.
        """
        try:
            resolved_channel = Channel(channel)
        except ValueError:
            known = ", ".join(c.value for c in Channel)
            raise ValueError(
                f"Unknown channel {channel!r} (expected one of: {known})"
            ) from None

        if isinstance(targets, str):
            raise ValueError(
                f"targets must be a collection of target triples, not the string {targets!r}"
            )

        return cls(
            channel=resolved_channel,
            date=parse_release_date(date),
            targets=frozenset(targets),
        )
