"""Error taxonomy for the access gate.

Only FINGERPRINT_INVALID and INTERNAL_ERROR are terminal for an evaluation;
every other code degrades locally toward the more conservative outcome.
"""

from __future__ import annotations

from enum import StrEnum


class GateErrorCode(StrEnum):
    """Machine-readable codes carried by ServiceError and warnings."""

    SIGNAL_COLLECTION_DEGRADED = "SIGNAL_COLLECTION_DEGRADED"
    FINGERPRINT_INVALID = "FINGERPRINT_INVALID"
    LIST_SOURCE_UNREACHABLE = "LIST_SOURCE_UNREACHABLE"
    LIST_LOAD_EXHAUSTED = "LIST_LOAD_EXHAUSTED"
    LIST_PARSE_ANOMALY = "LIST_PARSE_ANOMALY"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class SourceUnavailableError(Exception):
    """A candidate list source could not be retrieved or returned a failure status."""

    def __init__(self, location: str, reason: str) -> None:
        super().__init__(f"{location}: {reason}")
        self.location = location
        self.reason = reason
