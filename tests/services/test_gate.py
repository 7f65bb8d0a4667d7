"""Tests for GatePipeline — the end-to-end access check."""

from __future__ import annotations

import functools
from collections.abc import Callable
from pathlib import Path

import anyio
import httpx
import pytest

from devicegate.config.settings import GateSettings
from devicegate.domain.fingerprint import build_fingerprint
from devicegate.domain.signals import SignalBundle
from devicegate.infrastructure.loader import AccessListLoader
from devicegate.infrastructure.signal_providers import StaticSignalProvider
from devicegate.infrastructure.sources import HttpSource
from devicegate.services.gate import GatePipeline
from devicegate.services.result import ServiceResult

Transport = Callable[[dict[str, tuple[int, str] | Exception]], httpx.MockTransport]

SOURCE_1 = "https://example.org/passkey/KEY.txt"
SOURCE_2 = "https://example.org/passkey/KEY"


def _evaluate(pipeline: GatePipeline, fingerprint: str | None = None) -> ServiceResult:
    return anyio.run(functools.partial(pipeline.evaluate, fingerprint=fingerprint))


class _FailingProvider:
    async def collect(self) -> SignalBundle:
        raise RuntimeError("device enumeration denied")


class _ExplodingLoader(AccessListLoader):
    def __init__(self) -> None:
        super().__init__([])

    async def load_report(self):  # type: ignore[override]
        raise RuntimeError("loader bug")


@pytest.fixture
def short_settings(project_root: Path) -> GateSettings:
    """Settings accepting short identifiers, for readable list fixtures."""
    return GateSettings.from_cli(project_root=project_root, fingerprint={"min_length": 1})


@pytest.fixture
def device_fp(sample_signals: dict[str, object]) -> str:
    fp = build_fingerprint(SignalBundle(sample_signals))
    assert isinstance(fp, str)
    return fp


class TestEndToEndScenario:
    """Source 1 unreachable, source 2 serves ``!aaa`` / ``bbb``."""

    @pytest.fixture
    def make_pipeline(
        self, short_settings: GateSettings, route_transport: Transport
    ) -> Callable[[str], GatePipeline]:
        def _make(body: str) -> GatePipeline:
            transport = route_transport(
                {SOURCE_1: httpx.ConnectError("unreachable"), SOURCE_2: (200, body)}
            )
            loader = AccessListLoader(
                [HttpSource(SOURCE_1), HttpSource(SOURCE_2)], transport=transport
            )
            return GatePipeline(short_settings, loader=loader)

        return _make

    def test_listed_device_admitted(self, make_pipeline: Callable[[str], GatePipeline]) -> None:
        result = _evaluate(make_pipeline("!aaa\nbbb"), "bbb")
        assert result.data["outcome"] == "admit"
        assert result.data["reason"] == "allowed_match"
        assert result.data["source"] == SOURCE_2
        assert result.data["navigate_to"] is None

    def test_blocked_device(self, make_pipeline: Callable[[str], GatePipeline]) -> None:
        result = _evaluate(make_pipeline("!aaa\nbbb"), "aaa")
        assert result.data["outcome"] == "block"
        assert result.data["navigate_to"] == "blocked.html"

    def test_empty_list_default_open(self, make_pipeline: Callable[[str], GatePipeline]) -> None:
        result = _evaluate(make_pipeline(""), "aaa")
        assert result.data["outcome"] == "admit"
        assert result.data["reason"] == "default_open"

    def test_unlisted_device_no_service(self, make_pipeline: Callable[[str], GatePipeline]) -> None:
        result = _evaluate(make_pipeline("!aaa\nbbb"), "ccc")
        assert result.data["outcome"] == "no_service"
        assert result.data["navigate_to"] == "noserve.html"


class TestSignalsToDecision:
    def test_device_on_allow_list(
        self,
        settings: GateSettings,
        sample_signals: dict[str, object],
        device_fp: str,
        write_list: Callable[..., Path],
    ) -> None:
        write_list(f"{device_fp};\n")
        pipeline = GatePipeline(settings, provider=StaticSignalProvider(sample_signals))
        result = _evaluate(pipeline)
        assert result.ok
        assert result.data["fingerprint"] == device_fp
        assert result.data["outcome"] == "admit"

    def test_device_on_block_list(
        self,
        settings: GateSettings,
        sample_signals: dict[str, object],
        device_fp: str,
        write_list: Callable[..., Path],
    ) -> None:
        write_list(f"{device_fp}\n!{device_fp}\n")
        pipeline = GatePipeline(settings, provider=StaticSignalProvider(sample_signals))
        assert _evaluate(pipeline).data["outcome"] == "block"

    def test_no_list_anywhere_admits_with_warning(
        self, settings: GateSettings, sample_signals: dict[str, object]
    ) -> None:
        pipeline = GatePipeline(settings, provider=StaticSignalProvider(sample_signals))
        result = _evaluate(pipeline)
        assert result.data["outcome"] == "admit"
        assert result.data["source"] is None
        assert any("No access list source reachable" in w for w in result.warnings)

    def test_degraded_signals_reported(
        self, settings: GateSettings, sample_signals: dict[str, object]
    ) -> None:
        pipeline = GatePipeline(settings, provider=StaticSignalProvider(sample_signals))
        result = _evaluate(pipeline)
        assert any("doNotTrack" in w for w in result.warnings)


class TestFailClosed:
    def test_malformed_first_candidate_still_blocks(
        self, short_settings: GateSettings, route_transport: Transport
    ) -> None:
        transport = route_transport({SOURCE_2: (200, "!aaa\nbbb")})
        loader = AccessListLoader(
            [HttpSource("http://example.org:port/KEY"), HttpSource(SOURCE_2)],
            transport=transport,
        )
        result = _evaluate(GatePipeline(short_settings, loader=loader), "aaa")
        assert result.data["outcome"] == "block"
        assert result.data["source"] == SOURCE_2

    def test_invalid_fingerprint_is_no_service(self, settings: GateSettings) -> None:
        result = _evaluate(GatePipeline(settings), "short")
        assert result.data["outcome"] == "no_service"
        assert result.data["reason"] == "fingerprint_invalid"
        assert result.data["fingerprint"] is None

    def test_invalid_fingerprint_skips_list_load(self, settings: GateSettings) -> None:
        pipeline = GatePipeline(settings, loader=_ExplodingLoader())
        result = _evaluate(pipeline, "")
        assert result.data["reason"] == "fingerprint_invalid"

    def test_signal_collection_failure_is_no_service(self, settings: GateSettings) -> None:
        pipeline = GatePipeline(settings, provider=_FailingProvider())
        result = _evaluate(pipeline)
        assert result.data["outcome"] == "no_service"
        assert result.data["reason"] == "fingerprint_invalid"

    def test_internal_error_is_no_service(self, settings: GateSettings, device_fp: str) -> None:
        pipeline = GatePipeline(settings, loader=_ExplodingLoader())
        result = _evaluate(pipeline, device_fp)
        assert result.data["outcome"] == "no_service"
        assert result.data["reason"] == "internal_error"
        assert result.data["navigate_to"] == "noserve.html"


class TestFingerprintOperation:
    def test_reports_fingerprint(
        self, settings: GateSettings, sample_signals: dict[str, object], device_fp: str
    ) -> None:
        pipeline = GatePipeline(settings, provider=StaticSignalProvider(sample_signals))
        result = anyio.run(pipeline.fingerprint)
        assert result.ok
        assert result.op == "fingerprint"
        assert result.data["fingerprint"] == device_fp

    def test_failure_is_error_result(self, settings: GateSettings) -> None:
        result = anyio.run(GatePipeline(settings, provider=_FailingProvider()).fingerprint)
        assert not result.ok
        assert result.error is not None
        assert result.error.code == "FINGERPRINT_INVALID"


class TestLoadAccessListOperation:
    def test_reports_entries_and_attempts(
        self, settings: GateSettings, write_list: Callable[..., Path]
    ) -> None:
        write_list("abc;\n!def\n", "KEY")
        result = anyio.run(GatePipeline(settings).load_access_list)
        assert result.ok
        assert result.op == "acl"
        assert result.data["allowed"] == ["abc"]
        assert result.data["blocked"] == ["def"]
        assert [a["ok"] for a in result.data["attempts"]] == [False, True]


class TestConfiguration:
    def test_custom_pages(self, project_root: Path) -> None:
        settings = GateSettings.from_cli(
            project_root=project_root,
            pages={"blocked": "/denied", "no_service": "/sorry"},
        )
        result = _evaluate(GatePipeline(settings), "x")
        assert result.data["navigate_to"] == "/sorry"

    def test_debug_is_constructor_option(self, settings: GateSettings, device_fp: str) -> None:
        quiet = GatePipeline(settings)
        loud = GatePipeline(settings, debug=True)
        assert not quiet.debug
        assert loud.debug
        assert _evaluate(quiet, device_fp).meta is None
        assert "duration_ms" in (_evaluate(loud, device_fp).meta or {})

    def test_evaluations_are_independent(
        self, settings: GateSettings, device_fp: str, write_list: Callable[..., Path]
    ) -> None:
        pipeline = GatePipeline(settings)
        write_list(f"!{device_fp}")
        assert _evaluate(pipeline, device_fp).data["outcome"] == "block"
        write_list("")
        assert _evaluate(pipeline, device_fp).data["outcome"] == "admit"
