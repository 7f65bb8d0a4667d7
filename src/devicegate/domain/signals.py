"""Signal bundles — ordered name/value pairs describing one device.

INVARIANT: Key order is part of the bundle's identity. Two bundles with the
same pairs in a different order canonicalize differently and therefore
produce different fingerprints.
"""

from __future__ import annotations

import json
from collections.abc import Iterator, Mapping
from typing import Any

UNAVAILABLE = "unavailable"

# Order in which providers emit the standard keys.
SIGNAL_KEYS: tuple[str, ...] = (
    "userAgent",
    "language",
    "platform",
    "hardwareConcurrency",
    "screenResolution",
    "screenColorDepth",
    "timezone",
    "timezoneOffset",
    "localStorage",
    "sessionStorage",
    "cookieEnabled",
    "doNotTrack",
    "plugins",
    "canvas",
    "webgl",
    "deviceIds",
)


def coerce_signal_value(value: Any) -> str:
    """Stringify a raw signal value.

    ``None`` becomes the :data:`UNAVAILABLE` sentinel so that a missing
    capability never drops its key from the bundle.
    """
    if value is None:
        return UNAVAILABLE
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return ";".join(coerce_signal_value(v) for v in value)
    return str(value)


class SignalBundle(Mapping[str, str]):
    """Immutable, insertion-ordered mapping of signal name to string value."""

    __slots__ = ("_items",)

    def __init__(self, items: Mapping[str, Any] | None = None) -> None:
        pairs: dict[str, str] = {}
        for key, value in (items or {}).items():
            pairs[str(key)] = coerce_signal_value(value)
        self._items = pairs

    @classmethod
    def standard(cls, values: Mapping[str, Any]) -> SignalBundle:
        """Build a bundle over :data:`SIGNAL_KEYS`, in standard order.

        Keys missing from *values* get the sentinel. Extra keys are appended
        after the standard ones in their given order.
        """
        ordered: dict[str, Any] = {key: values.get(key) for key in SIGNAL_KEYS}
        for key, value in values.items():
            if key not in ordered:
                ordered[key] = value
        return cls(ordered)

    def __getitem__(self, key: str) -> str:
        return self._items[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"SignalBundle({self._items!r})"

    def degraded_keys(self) -> list[str]:
        """Names of signals that carry the unavailable sentinel."""
        return [key for key, value in self._items.items() if value == UNAVAILABLE]

    def canonical(self) -> str:
        """Serialize to compact JSON, preserving key order and non-ASCII text."""
        return json.dumps(self._items, ensure_ascii=False, separators=(",", ":"))
