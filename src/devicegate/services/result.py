"""Result envelope shared by every gate operation.

``fingerprint``, ``acl`` and ``check`` each return a :class:`ServiceResult`.
The CLI renders it; an embedding host can read ``data`` directly or dump
the model to JSON.  A ``check`` result is always ``ok``: the decision
itself (including no-service) lives in ``data``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from devicegate.domain.errors import GateErrorCode


class ServiceError(BaseModel):
    """Why an operation could not produce its payload."""

    model_config = {"frozen": True}

    code: GateErrorCode
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class ServiceResult(BaseModel):
    """Outcome of one gate operation.

    Attributes:
        ok: False only when the operation has no payload to report.
        op: ``"fingerprint"``, ``"acl"`` or ``"check"``.
        data: Operation payload.
        warnings: Degradations that did not stop the operation
            (unreachable sources, unavailable signals).
        error: Set when ``ok`` is False.
        meta: Timing, present in verbose runs.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: ServiceError | None = None
    meta: dict[str, Any] | None = None

    @classmethod
    def failure(
        cls,
        op: str,
        code: GateErrorCode,
        message: str,
        *,
        warnings: list[str] | None = None,
        **detail: Any,
    ) -> ServiceResult:
        return cls(
            ok=False,
            op=op,
            warnings=warnings or [],
            error=ServiceError(code=code, message=message, detail=detail),
        )
