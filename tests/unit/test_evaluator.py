"""Tests for SourceEvaluator — parsing, entry points, kind checks."""

from __future__ import annotations

import json

import pytest

import toolpin.providers.static as static_provider
from toolpin.core.errors import EvaluationError, InvalidTargetError
from toolpin.core.evaluator import SourceEvaluator
from toolpin.core.hasher import sha256_hex
from toolpin.core.universe import Overlay
from toolpin.models.pins import SourceKind, SourcePin


def _pin(content: bytes, name: str = "p") -> SourcePin:
    return SourcePin(name=name, location="memory", sha256=sha256_hex(content))


def _doc(**fields) -> bytes:
    return json.dumps(fields).encode("utf-8")


@pytest.fixture
def evaluator() -> SourceEvaluator:
    return SourceEvaluator()


class TestParse:
    def test_valid_document(self, evaluator: SourceEvaluator):
        content = _doc(kind="overlay", entry_point="a.b:c", attrs={"x": 1})
        doc = evaluator.parse(_pin(content), content)
        assert doc.kind == SourceKind.OVERLAY
        assert doc.attrs == {"x": 1}

    @pytest.mark.parametrize(
        "content",
        [b"\xff\xfe", b"not json", b"[1, 2]", _doc(kind="plugin", entry_point="a:b")],
    )
    def test_malformed_content(self, evaluator: SourceEvaluator, content: bytes):
        with pytest.raises(EvaluationError) as excinfo:
            evaluator.parse(_pin(content, "broken"), content)
        assert excinfo.value.pin_name == "broken"


class TestEvaluateUniverse:
    def test_static_universe(self, evaluator: SourceEvaluator):
        content = _doc(
            kind="universe",
            entry_point="toolpin.providers.static:static_universe",
            attrs={"capabilities": {"host-platform": "x86_64-unknown-linux-gnu"}},
        )
        universe = evaluator.evaluate_universe(_pin(content, "base"), content)
        assert universe["host-platform"] == "x86_64-unknown-linux-gnu"
        assert universe.layers == ("base",)

    def test_wrong_kind(self, evaluator: SourceEvaluator):
        content = _doc(kind="overlay", entry_point="toolpin.providers.static:static_overlay")
        with pytest.raises(EvaluationError, match="expected 'universe' source"):
            evaluator.evaluate_universe(_pin(content), content)

    def test_unimportable_module(self, evaluator: SourceEvaluator):
        content = _doc(kind="universe", entry_point="toolpin.no_such_module:make")
        with pytest.raises(EvaluationError, match="cannot import"):
            evaluator.evaluate_universe(_pin(content), content)

    def test_missing_attribute(self, evaluator: SourceEvaluator):
        content = _doc(kind="universe", entry_point="toolpin.providers.static:nothing_here")
        with pytest.raises(EvaluationError, match="not callable"):
            evaluator.evaluate_universe(_pin(content), content)

    def test_factory_failure(self, evaluator: SourceEvaluator):
        content = _doc(
            kind="universe",
            entry_point="toolpin.providers.base_universe:make_universe",
            attrs={"host": "not-a-triple"},
        )
        with pytest.raises(EvaluationError, match="failed: host must be a target triple"):
            evaluator.evaluate_universe(_pin(content), content)

    def test_factory_domain_error_is_wrapped(
        self, evaluator: SourceEvaluator, monkeypatch: pytest.MonkeyPatch
    ):
        def rejects_targets(attrs):
            raise InvalidTargetError(["not-a-triple"])

        monkeypatch.setattr(static_provider, "static_universe", rejects_targets)
        content = _doc(kind="universe", entry_point="toolpin.providers.static:static_universe")
        with pytest.raises(EvaluationError) as excinfo:
            evaluator.evaluate_universe(_pin(content, "strict"), content)
        assert excinfo.value.pin_name == "strict"
        assert isinstance(excinfo.value.__cause__, InvalidTargetError)

    def test_capabilities_must_be_object(self, evaluator: SourceEvaluator):
        content = _doc(
            kind="universe",
            entry_point="toolpin.providers.static:static_universe",
            attrs={"capabilities": ["host-platform"]},
        )
        with pytest.raises(EvaluationError, match="'capabilities' must be a JSON object"):
            evaluator.evaluate_universe(_pin(content), content)

    def test_factory_must_return_mapping(self, evaluator: SourceEvaluator):
        # static_overlay returns a function, not a capability mapping.
        content = _doc(kind="universe", entry_point="toolpin.providers.static:static_overlay")
        with pytest.raises(EvaluationError, match="expected a mapping"):
            evaluator.evaluate_universe(_pin(content), content)


class TestEvaluateOverlay:
    def test_static_overlay(self, evaluator: SourceEvaluator):
        content = _doc(
            kind="overlay",
            entry_point="toolpin.providers.static:static_overlay",
            attrs={"capabilities": {"x": 1}},
        )
        overlay = evaluator.evaluate_overlay(_pin(content, "extra"), content)
        assert isinstance(overlay, Overlay)
        assert overlay.name == "extra"

    def test_factory_must_return_overlay_function(self, evaluator: SourceEvaluator):
        # static_universe returns a dict, which is not an overlay function.
        content = _doc(kind="overlay", entry_point="toolpin.providers.static:static_universe")
        with pytest.raises(EvaluationError, match="not callable"):
            evaluator.evaluate_overlay(_pin(content), content)
