"""Universe evaluation — turns verified pin content into callable capabilities.

Pin content is a JSON document::

    {
        "kind": "universe" | "overlay",
        "entry_point": "package.module:attribute",
        "attrs": { ... pinned data handed to the entry point ... }
    }

For a ``universe`` document the entry point is a factory returning a
mapping of capabilities. For an ``overlay`` document it is a factory
returning the overlay function, which is validated before composition
starts.
"""

from __future__ import annotations

import importlib
import json
import logging
from typing import Any

from pydantic import ValidationError

from toolpin.core.errors import EvaluationError, IntegrityError
from toolpin.core.universe import Overlay, PackageUniverse
from toolpin.models.pins import SourceDocument, SourceKind, SourcePin

logger = logging.getLogger(__name__)


class SourceEvaluator:
    """Evaluates pin content into a ``PackageUniverse`` or an ``Overlay``."""

    def parse(self, pin: SourcePin, content: bytes) -> SourceDocument:
        """Decode and validate pin content.

        Raises
        ------
        EvaluationError
            If the content is not UTF-8 JSON or fails schema validation.
        """
        try:
            raw = json.loads(content.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise EvaluationError(pin.name, f"content is not UTF-8 JSON: {exc}") from exc
        if not isinstance(raw, dict):
            raise EvaluationError(pin.name, "content must be a JSON object")
        try:
            return SourceDocument(**raw)
        except ValidationError as exc:
            raise EvaluationError(pin.name, f"invalid source document: {exc}") from exc

    def evaluate_universe(self, pin: SourcePin, content: bytes) -> PackageUniverse:
        """Evaluate a ``universe`` document into the initial universe."""
        document = self._expect(pin, content, SourceKind.UNIVERSE)
        capabilities = self._call_entry_point(pin, document)
        universe = PackageUniverse.from_base(pin.name, capabilities)
        logger.debug(
            "Evaluated base universe %s with %d capabilities.", pin.name, len(universe)
        )
        return universe

    def evaluate_overlay(self, pin: SourcePin, content: bytes) -> Overlay:
        """Evaluate an ``overlay`` document into a validated ``Overlay``."""
        document = self._expect(pin, content, SourceKind.OVERLAY)
        function = self._call_entry_point(pin, document)
        overlay = Overlay(pin.name, function)
        logger.debug("Evaluated overlay %s.", pin.name)
        return overlay

    # -- Internal helpers ---------------------------------------------------

    def _expect(self, pin: SourcePin, content: bytes, kind: SourceKind) -> SourceDocument:
        document = self.parse(pin, content)
        if document.kind != kind:
            raise EvaluationError(
                pin.name, f"expected {kind.value!r} source, got {document.kind.value!r}"
            )
        return document

    def _call_entry_point(self, pin: SourcePin, document: SourceDocument) -> Any:
        module_name, _, attribute = document.entry_point.partition(":")
        try:
            module = importlib.import_module(module_name)
        except ImportError as exc:
            raise EvaluationError(
                pin.name, f"cannot import {module_name!r}: {exc}"
            ) from exc

        factory = getattr(module, attribute, None)
        if not callable(factory):
            raise EvaluationError(
                pin.name, f"entry point {document.entry_point!r} is not callable"
            )

        try:
            return factory(dict(document.attrs))
        except (EvaluationError, IntegrityError):
            raise
        except Exception as exc:
            raise EvaluationError(
                pin.name, f"entry point {document.entry_point!r} failed: {exc}"
            ) from exc
