"""GatePipeline — the device access check.

Pipeline: COLLECT → FINGERPRINT → LOAD LIST → DECIDE → DISPATCH

Each step is awaited in turn; nothing runs concurrently. The pipeline holds
only immutable configuration, so one instance may serve any number of
evaluations without state leaking between them.

INVARIANT: ``evaluate`` never fails open. An unexpected exception anywhere
in the pipeline yields NO_SERVICE.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any

import structlog

from devicegate.domain.access_list import EMPTY_ACCESS_LIST
from devicegate.domain.decision import Decision, DecisionReason, Outcome, evaluate_policy
from devicegate.domain.errors import GateErrorCode
from devicegate.domain.fingerprint import (
    FingerprintFailure,
    build_fingerprint,
    normalize_digest,
    validate_fingerprint,
)
from devicegate.domain.navigation import dispatch
from devicegate.infrastructure.loader import AccessListLoader, LoadReport
from devicegate.infrastructure.signal_providers import HostSignalProvider, SignalProvider
from devicegate.services.result import ServiceResult

if TYPE_CHECKING:
    from devicegate.config.settings import GateSettings
    from devicegate.domain.signals import SignalBundle

log = structlog.get_logger(__name__)


class GatePipeline:
    """Decides whether the device described by a signal provider may proceed.

    Args:
        settings: Resolved settings (sources, fingerprint, pages).
        provider: Signal source; defaults to :class:`HostSignalProvider`.
        loader: Access list loader; defaults to one built from *settings*.
        debug: Emit per-step trace events (fingerprint value, list lines,
            matches). Off by default.
    """

    def __init__(
        self,
        settings: GateSettings,
        *,
        provider: SignalProvider | None = None,
        loader: AccessListLoader | None = None,
        debug: bool = False,
    ) -> None:
        self._settings = settings
        self._provider = provider or HostSignalProvider()
        self._loader = loader or AccessListLoader.from_settings(settings, debug=debug)
        self._debug = debug

    @property
    def debug(self) -> bool:
        return self._debug

    # ── Steps ────────────────────────────────────────────────────────

    async def collect_signals(self) -> SignalBundle:
        signals = await self._provider.collect()
        degraded = signals.degraded_keys()
        if degraded:
            self._trace(
                "signals.degraded",
                keys=degraded,
                code=str(GateErrorCode.SIGNAL_COLLECTION_DEGRADED),
            )
        return signals

    async def build_fingerprint(self, signals: SignalBundle) -> str | FingerprintFailure:
        fp = build_fingerprint(signals, min_length=self._settings.fingerprint.min_length)
        if isinstance(fp, FingerprintFailure):
            log.warning("fingerprint.invalid", reason=fp.message, code=str(fp.code))
        else:
            self._trace("fingerprint.built", fingerprint=fp)
        return fp

    async def _resolve_fingerprint(
        self, override: str | None, warnings: list[str]
    ) -> str | FingerprintFailure:
        if override is not None:
            return validate_fingerprint(
                normalize_digest(override.strip()),
                min_length=self._settings.fingerprint.min_length,
            )
        try:
            signals = await self.collect_signals()
        except Exception as exc:
            log.warning("signals.collect_failed", exc_info=True)
            return FingerprintFailure(message=f"Signal collection failed: {exc}")
        degraded = signals.degraded_keys()
        if degraded:
            warnings.append(f"Signals unavailable: {', '.join(degraded)}")
        return await self.build_fingerprint(signals)

    # ── Operations ───────────────────────────────────────────────────

    async def fingerprint(self) -> ServiceResult:
        """Collect signals and report the device fingerprint."""
        op = "fingerprint"
        warnings: list[str] = []
        fp = await self._resolve_fingerprint(None, warnings)
        if isinstance(fp, FingerprintFailure):
            return ServiceResult.failure(op, fp.code, fp.message, warnings=warnings)
        return ServiceResult(ok=True, op=op, data={"fingerprint": fp}, warnings=warnings)

    async def load_access_list(self) -> ServiceResult:
        """Load the access list through the candidate chain."""
        report = await self._loader.load_report()
        acl = report.access_list
        return ServiceResult(
            ok=True,
            op="acl",
            data={
                "source": acl.source,
                "allowed": list(acl.allowed),
                "blocked": list(acl.blocked),
                "attempts": [a.model_dump() for a in report.attempts],
            },
            warnings=_load_warnings(report),
        )

    async def evaluate(self, *, fingerprint: str | None = None) -> ServiceResult:
        """Run the whole pipeline and report the outcome.

        Args:
            fingerprint: Check this identifier instead of collecting signals.
        """
        op = "check"
        started = time.perf_counter()
        warnings: list[str] = []
        data: dict[str, Any] = {"fingerprint": None, "source": None}

        try:
            fp = await self._resolve_fingerprint(fingerprint, warnings)
            if isinstance(fp, FingerprintFailure):
                warnings.append(fp.message)
                decision = evaluate_policy(fp, EMPTY_ACCESS_LIST)
            else:
                data["fingerprint"] = fp
                report = await self._loader.load_report()
                warnings.extend(_load_warnings(report))
                data["source"] = report.access_list.source
                decision = evaluate_policy(fp, report.access_list)
        except Exception as exc:
            log.error("gate.internal_error", exc_info=True)
            warnings.append(f"Internal error, denying service: {exc}")
            decision = Decision(outcome=Outcome.NO_SERVICE, reason=DecisionReason.INTERNAL_ERROR)

        pages = self._settings.pages
        nav = dispatch(
            decision.outcome,
            blocked_page=pages.blocked,
            no_service_page=pages.no_service,
        )
        self._trace(
            "gate.decided",
            outcome=str(decision.outcome),
            reason=str(decision.reason),
            navigate_to=nav.target,
        )

        data.update(
            outcome=str(decision.outcome),
            reason=str(decision.reason),
            navigate_to=nav.target,
        )
        meta = None
        if self._debug:
            meta = {"duration_ms": round((time.perf_counter() - started) * 1000, 2)}
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings, meta=meta)

    def _trace(self, event: str, **fields: object) -> None:
        if self._debug:
            log.debug(event, **fields)


def _load_warnings(report: LoadReport) -> list[str]:
    if report.error_code == GateErrorCode.LIST_LOAD_EXHAUSTED:
        tried = ", ".join(a.location for a in report.attempts)
        return [f"No access list source reachable ({tried}); using empty list"]
    if report.error_code is not None:
        return ["Access list could not be read; using empty list"]
    return []

