"""Tests for the format_result dispatcher and OutputSettings."""

import json

from devicegate.output.formatters import OutputSettings, format_result
from devicegate.services.result import ServiceError, ServiceResult


def _ok(op: str = "test", **data: object) -> ServiceResult:
    return ServiceResult(ok=True, op=op, data=dict(data))


def _err(op: str = "test", msg: str = "fail") -> ServiceResult:
    return ServiceResult(
        ok=False,
        op=op,
        error=ServiceError(code="INTERNAL_ERROR", message=msg),
    )


class TestOutputSettings:
    def test_defaults(self) -> None:
        s = OutputSettings()
        assert s.json_output is False
        assert s.quiet is False
        assert s.verbose is False


class TestFormatResultJSON:
    def test_json_mode_returns_valid_json(self) -> None:
        output = format_result(_ok("check", outcome="admit"), settings=OutputSettings(json_output=True))
        data = json.loads(output)
        assert data["ok"] is True
        assert data["op"] == "check"
        assert data["data"]["outcome"] == "admit"

    def test_json_mode_error(self) -> None:
        output = format_result(_err("fingerprint", "Bad"), json_output=True)
        data = json.loads(output)
        assert data["ok"] is False
        assert data["error"]["message"] == "Bad"

    def test_settings_overrides_kwarg(self) -> None:
        output = format_result(_ok("test"), settings=OutputSettings(), json_output=True)
        assert output.startswith("OK")


class TestFormatResultHuman:
    def test_quiet_mode(self) -> None:
        output = format_result(
            _ok("fingerprint", fingerprint="abcdef12"), settings=OutputSettings(quiet=True)
        )
        assert output == "abcdef12"

    def test_default_mode_renders(self) -> None:
        output = format_result(_ok("check", outcome="block", reason="blocked_match"))
        assert "OK" in output
        assert "outcome: block" in output
