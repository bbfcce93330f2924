"""Tests for ResolutionPipeline — config wiring, lazy composition, batching."""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path

import pytest

from toolpin.config import ToolpinConfig
from toolpin.core.errors import InvalidTargetError, ReleaseNotFoundError, UnknownPinError
from toolpin.core.fetchers import FetchError, FileFetcher, StoreFetcher
from toolpin.core.pin_registry import PinRegistry
from toolpin.core.pipeline import ResolutionPipeline
from toolpin.core.resolver import ChannelResolver
from toolpin.core.source_store import SourceStore
from toolpin.models.channels import Channel, ChannelSpec
from toolpin.models.pins import SourcePin


def _spec(channel: str, day: str, *targets: str) -> ChannelSpec:
    return ChannelSpec.build(channel, day, targets)


class CountingFetcher(FileFetcher):
    """Records the name of every pin it fetches."""

    def __init__(self) -> None:
        super().__init__()
        self.fetched: list[str] = []

    def fetch(self, pin: SourcePin) -> bytes:
        self.fetched.append(pin.name)
        return super().fetch(pin)


@pytest.fixture
def sources_file(tmp_path: Path, base_pin: SourcePin, channels_pin: SourcePin) -> Path:
    path = tmp_path / "sources.json"
    path.write_text(
        json.dumps(
            {
                pin.name: {"path": pin.location, "sha256": pin.sha256}
                for pin in (base_pin, channels_pin)
            }
        ),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def settings(sources_file: Path, tmp_path: Path) -> ToolpinConfig:
    return ToolpinConfig(
        sources_path=sources_file,
        store_path=tmp_path / "store",
        base_pin="package-universe",
        overlay_pins=["rust-channels"],
        offline=False,
    )


@pytest.fixture
def pipeline(settings: ToolpinConfig, resolver: ChannelResolver) -> ResolutionPipeline:
    return ResolutionPipeline.from_config(settings, resolver=resolver)


class TestFromConfig:
    def test_reads_settings(self, pipeline: ResolutionPipeline, settings: ToolpinConfig):
        assert pipeline.base_pin == "package-universe"
        assert pipeline.overlay_pins == ("rust-channels",)
        assert pipeline.max_workers == settings.max_concurrent_resolutions
        assert pipeline.registry.names == ["package-universe", "rust-channels"]

    def test_offline_uses_store(self, settings: ToolpinConfig):
        offline = ResolutionPipeline.from_config(settings.model_copy(update={"offline": True}))
        assert isinstance(offline.registry._fetcher, StoreFetcher)

    def test_missing_sources_file(self, settings: ToolpinConfig, tmp_path: Path):
        missing = settings.model_copy(update={"sources_path": tmp_path / "nope.json"})
        with pytest.raises(FileNotFoundError):
            ResolutionPipeline.from_config(missing)


class TestComposition:
    def test_universe_is_lazy_and_cached(self, pipeline: ResolutionPipeline):
        assert pipeline._universe is None
        first = pipeline.universe
        assert pipeline.universe is first
        assert first.layers == ("package-universe", "rust-channels")

    def test_compose_returns_fresh_equal_universe(self, pipeline: ResolutionPipeline):
        assert pipeline.compose().describe() == pipeline.compose().describe()

    def test_each_pin_fetched_once(self, base_pin: SourcePin, channels_pin: SourcePin):
        fetcher = CountingFetcher()
        registry = PinRegistry([base_pin, channels_pin], fetcher)
        ResolutionPipeline(registry, "package-universe", ["rust-channels"]).compose()
        assert fetcher.fetched == ["package-universe", "rust-channels"]

    def test_unknown_overlay_pin(self, registry: PinRegistry):
        pipeline = ResolutionPipeline(registry, "package-universe", ["no-such-overlay"])
        with pytest.raises(UnknownPinError):
            pipeline.compose()


class TestResolve:
    def test_resolve(self, pipeline: ResolutionPipeline):
        descriptor = pipeline.resolve(_spec("nightly", "2020-08-06", "wasm32-unknown-unknown"))
        assert descriptor.channel == Channel.NIGHTLY
        assert descriptor.date == date(2020, 8, 6)
        assert descriptor.artifact_reference.startswith("sha256:")

    def test_resolve_many_preserves_order(self, pipeline: ResolutionPipeline):
        specs = [
            _spec("nightly", "2020-08-06", "wasm32-unknown-unknown"),
            _spec("stable", "2020-08-03", "wasm32-unknown-unknown"),
            _spec("beta", "2020-08-06", "wasm32-unknown-unknown"),
            _spec("nightly", "2020-08-06", "aarch64-unknown-linux-gnu"),
        ]
        results = pipeline.resolve_many(specs)
        assert [(r.channel, r.date, r.targets) for r in results] == [
            (s.channel, s.date, s.targets) for s in specs
        ]
        assert results == [pipeline.resolve(s) for s in specs]

    def test_resolve_many_empty(self, pipeline: ResolutionPipeline):
        assert pipeline.resolve_many([]) == []

    def test_resolve_many_raises_first_failure(self, pipeline: ResolutionPipeline):
        specs = [
            _spec("nightly", "2020-08-06", "wasm32-unknown-unknown"),
            _spec("nightly", "2020-08-01", "wasm32-unknown-unknown"),
            _spec("nightly", "2020-08-06", "not-a-triple"),
        ]
        with pytest.raises(ReleaseNotFoundError):
            pipeline.resolve_many(specs)

    def test_resolve_many_single_worker(self, registry: PinRegistry, resolver: ChannelResolver):
        pipeline = ResolutionPipeline(
            registry, "package-universe", ["rust-channels"], resolver=resolver, max_workers=1
        )
        with pytest.raises(InvalidTargetError):
            pipeline.resolve_many([_spec("nightly", "2020-08-06")])


class TestOffline:
    def test_serves_from_mirror(
        self,
        settings: ToolpinConfig,
        resolver: ChannelResolver,
        base_pin: SourcePin,
        channels_pin: SourcePin,
    ):
        store = SourceStore(settings.store_path)
        for pin in (base_pin, channels_pin):
            store.store(Path(pin.location).read_bytes())
            Path(pin.location).unlink()

        offline = ResolutionPipeline.from_config(
            settings.model_copy(update={"offline": True}), resolver=resolver
        )
        descriptor = offline.resolve(_spec("nightly", "2020-08-06", "wasm32-unknown-unknown"))
        assert descriptor.artifact_reference.startswith("sha256:")

    def test_unmirrored_pin_fails(self, settings: ToolpinConfig):
        offline = ResolutionPipeline.from_config(settings.model_copy(update={"offline": True}))
        with pytest.raises(FetchError, match="is not mirrored"):
            offline.compose()
