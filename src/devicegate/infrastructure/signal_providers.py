"""Signal providers — where a SignalBundle comes from.

Two providers ship with the package:

- :class:`StaticSignalProvider` replays a fixed mapping, typically the JSON
  a browser agent posted or a fixture file.
- :class:`HostSignalProvider` describes the machine running the process.
  Browser-only signals (canvas, WebGL, screen, storage, plugins) are
  reported with the unavailable sentinel so the key order never changes.
"""

from __future__ import annotations

import json
import locale
import os
import platform
import uuid
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path
from typing import Any, Protocol

from devicegate.domain.signals import SignalBundle


class SignalProvider(Protocol):
    """Supplies one signal bundle per evaluation.

    Signals that could not be gathered carry the unavailable sentinel;
    callers read them back with :meth:`SignalBundle.degraded_keys`.
    """

    async def collect(self) -> SignalBundle: ...


class StaticSignalProvider:
    """Replays a fixed mapping, preserving its key order."""

    def __init__(self, signals: Mapping[str, Any]) -> None:
        self._signals = dict(signals)

    @classmethod
    def from_file(cls, path: Path) -> StaticSignalProvider:
        """Load a JSON object of signals from *path*.

        Raises:
            ValueError: If the file does not hold a JSON object.
        """
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            msg = f"Signals file must contain a JSON object, got {type(data).__name__}"
            raise ValueError(msg)
        return cls(data)

    async def collect(self) -> SignalBundle:
        return SignalBundle(self._signals)


def _language() -> str | None:
    lang = locale.getlocale()[0] or os.environ.get("LANG", "").split(".")[0]
    if not lang or lang in ("C", "POSIX"):
        return None
    return lang.replace("_", "-")


def _timezone() -> tuple[str | None, int]:
    now = datetime.now().astimezone()
    offset = now.utcoffset()
    minutes = int(offset.total_seconds() // 60) if offset is not None else 0
    # Browsers report minutes *behind* UTC, so UTC+2 is -120.
    name = os.environ.get("TZ") or now.tzname()
    return name, -minutes


def _device_ids() -> str | None:
    node = uuid.getnode()
    # Multicast bit set means getnode() fell back to a random value.
    if (node >> 40) & 0x01:
        return None
    return f"{node:012x}"


class HostSignalProvider:
    """Signals for the local host, in the standard key order."""

    def __init__(self, user_agent: str | None = None) -> None:
        self._user_agent = user_agent

    def _default_user_agent(self) -> str:
        from devicegate import __version__

        return (
            f"devicegate/{__version__} "
            f"({platform.python_implementation()} {platform.python_version()}; "
            f"{platform.system()} {platform.release()})"
        )

    async def collect(self) -> SignalBundle:
        tz_name, tz_offset = _timezone()
        return SignalBundle.standard(
            {
                "userAgent": self._user_agent or self._default_user_agent(),
                "language": _language(),
                "platform": f"{platform.system()} {platform.machine()}".strip() or None,
                "hardwareConcurrency": os.cpu_count(),
                "timezone": tz_name,
                "timezoneOffset": tz_offset,
                "deviceIds": _device_ids(),
            }
        )
