"""Fingerprint construction from a signal bundle.

Pipeline: CANONICALIZE → SHA-256 → NORMALIZE → VALIDATE

The normalization step strips ``_`` and ``-`` from the digest. A hex digest
never contains either, so today the step is a no-op; it stays because list
files are allowed to carry identifiers from encodings that do.
"""

from __future__ import annotations

import hashlib
import re

from pydantic import BaseModel

from devicegate.domain.errors import GateErrorCode
from devicegate.domain.signals import SignalBundle

DEFAULT_MIN_LENGTH = 8

_STRIP_CHARS = re.compile(r"[_\-]")


class FingerprintFailure(BaseModel):
    """Returned instead of a fingerprint when the digest is unusable."""

    model_config = {"frozen": True}

    code: GateErrorCode = GateErrorCode.FINGERPRINT_INVALID
    message: str


def hash_canonical(canonical: str) -> str:
    """SHA-256 of the UTF-8 bytes of *canonical*, as lowercase hex."""
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def normalize_digest(digest: str) -> str:
    """Remove underscores and hyphens from *digest*."""
    return _STRIP_CHARS.sub("", digest)


def validate_fingerprint(
    value: str, *, min_length: int = DEFAULT_MIN_LENGTH
) -> str | FingerprintFailure:
    """Return *value* if usable as a fingerprint, else a failure."""
    if not value:
        return FingerprintFailure(message="Fingerprint is empty")
    if len(value) < min_length:
        return FingerprintFailure(
            message=f"Fingerprint shorter than {min_length} characters: {value!r}",
        )
    return value


def build_fingerprint(
    signals: SignalBundle, *, min_length: int = DEFAULT_MIN_LENGTH
) -> str | FingerprintFailure:
    """Derive the device fingerprint for *signals*.

    Identical bundles (same keys, values, and order) always produce the
    same fingerprint.
    """
    digest = hash_canonical(signals.canonical())
    return validate_fingerprint(normalize_digest(digest), min_length=min_length)
