"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, devicegate.toml only contains
overrides. A project with its list at ``passkey/KEY.txt`` needs no config
file at all.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from devicegate.domain.fingerprint import DEFAULT_MIN_LENGTH
from devicegate.domain.navigation import DEFAULT_BLOCKED_PAGE, DEFAULT_NO_SERVICE_PAGE

DEFAULT_CANDIDATES: tuple[str, ...] = ("passkey/KEY.txt", "passkey/KEY")


class SourcesConfig(BaseModel):
    """[sources] section."""

    model_config = {"frozen": True}

    candidates: list[str] = Field(default_factory=lambda: list(DEFAULT_CANDIDATES))
    base_url: str | None = None
    timeout: float = Field(default=5.0, gt=0)

    @field_validator("candidates")
    @classmethod
    def _non_empty(cls, value: list[str]) -> list[str]:
        cleaned = [c.strip() for c in value if c.strip()]
        if not cleaned:
            raise ValueError("at least one candidate source is required")
        return cleaned


class FingerprintConfig(BaseModel):
    """[fingerprint] section."""

    model_config = {"frozen": True}

    min_length: int = Field(default=DEFAULT_MIN_LENGTH, ge=1)


class PagesConfig(BaseModel):
    """[pages] section."""

    model_config = {"frozen": True}

    blocked: str = DEFAULT_BLOCKED_PAGE
    no_service: str = DEFAULT_NO_SERVICE_PAGE

