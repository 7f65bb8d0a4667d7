"""Shared pytest fixtures and test helpers for devicegate tests."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import httpx
import pytest
from click.testing import CliRunner

from devicegate.config.settings import GateSettings

_SAMPLE_SIGNALS: dict[str, object] = {
    "userAgent": "Mozilla/5.0 (X11; Linux x86_64) Firefox/128.0",
    "language": "en-US",
    "platform": "Linux x86_64",
    "hardwareConcurrency": 8,
    "screenResolution": "1920x1080",
    "screenColorDepth": 24,
    "timezone": "Europe/Berlin",
    "timezoneOffset": -120,
    "localStorage": True,
    "sessionStorage": True,
    "cookieEnabled": True,
    "doNotTrack": None,
    "plugins": "PDF Viewer;Chrome PDF Viewer",
    "canvas": "data:image/png;base64,iVBORw0KGgo=",
    "webgl": '{"vendor":"Mozilla","renderer":"Mozilla","version":"WebGL 1.0"}',
    "deviceIds": "",
}


@pytest.fixture
def sample_signals() -> dict[str, object]:
    """A browser-like signal mapping in the standard key order."""
    return dict(_SAMPLE_SIGNALS)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def project_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary project directory with an empty ``passkey/`` folder.

    Clears config env vars so a developer's environment never leaks in.
    """
    monkeypatch.delenv("DEVICEGATE_CONFIG", raising=False)
    (tmp_path / "passkey").mkdir()
    return tmp_path


@pytest.fixture
def settings(project_root: Path) -> GateSettings:
    """Default settings rooted at the temp project."""
    return GateSettings.from_cli(project_root=project_root)


@pytest.fixture
def write_list(project_root: Path) -> Callable[..., Path]:
    """Write list text to ``passkey/<name>`` (default ``KEY.txt``)."""

    def _write(text: str, name: str = "KEY.txt") -> Path:
        path = project_root / "passkey" / name
        path.write_bytes(text.encode("utf-8"))
        return path

    return _write


@pytest.fixture
def _isolated_project(project_root: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to the temp project so the CLI resolves sources there.

    Use via ``@pytest.mark.usefixtures("_isolated_project")`` on command
    test classes.
    """
    monkeypatch.chdir(project_root)


@pytest.fixture
def route_transport() -> Callable[[dict[str, tuple[int, str] | Exception]], httpx.MockTransport]:
    """Factory for a mock transport answering by exact URL.

    Each route maps to ``(status, body)`` or an exception to raise.
    Unknown URLs answer 404.
    """

    def _build(routes: dict[str, tuple[int, str] | Exception]) -> httpx.MockTransport:
        def handler(request: httpx.Request) -> httpx.Response:
            answer = routes.get(str(request.url))
            if answer is None:
                return httpx.Response(404, text="not found")
            if isinstance(answer, Exception):
                raise answer
            status, body = answer
            return httpx.Response(status, text=body)

        return httpx.MockTransport(handler)

    return _build
