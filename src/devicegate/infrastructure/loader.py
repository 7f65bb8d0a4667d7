"""AccessListLoader — fetch the first reachable list and parse it.

Pipeline: RESOLVE → OPEN (first success wins) → READ → DECODE → PARSE

INVARIANT: ``load()`` never raises. Any failure degrades to an empty
access list, which the gate policy treats as default-open.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import httpx
import structlog
from pydantic import BaseModel

from devicegate.domain.access_list import EMPTY_ACCESS_LIST, AccessList, parse_access_list
from devicegate.domain.errors import GateErrorCode, SourceUnavailableError
from devicegate.infrastructure.sources import ListBody, ListSource, first_success, resolve_sources

if TYPE_CHECKING:
    from devicegate.config.settings import GateSettings

log = structlog.get_logger(__name__)


class SourceAttempt(BaseModel):
    """One step of the fallback chain."""

    model_config = {"frozen": True}

    location: str
    ok: bool
    error: str | None = None


class LoadReport(BaseModel):
    """The loaded list plus how it was obtained."""

    model_config = {"frozen": True}

    access_list: AccessList = EMPTY_ACCESS_LIST
    attempts: tuple[SourceAttempt, ...] = ()
    error_code: GateErrorCode | None = None


class AccessListLoader:
    """Loads the access list from an ordered chain of candidate sources.

    A fresh HTTP client is opened for each :meth:`load` call and closed
    before it returns; nothing is cached between loads.
    """

    def __init__(
        self,
        sources: Sequence[ListSource],
        *,
        timeout: float = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
        debug: bool = False,
    ) -> None:
        self._sources = tuple(sources)
        self._timeout = timeout
        self._transport = transport
        self._debug = debug

    @classmethod
    def from_settings(
        cls,
        settings: GateSettings,
        *,
        candidates: Sequence[str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        debug: bool = False,
    ) -> AccessListLoader:
        """Build a loader from ``[sources]`` config, optionally overriding candidates."""
        cfg = settings.sources
        sources = resolve_sources(
            candidates or cfg.candidates,
            root=settings.project_root,
            base_url=cfg.base_url,
        )
        return cls(sources, timeout=cfg.timeout, transport=transport, debug=debug)

    @property
    def sources(self) -> tuple[ListSource, ...]:
        return self._sources

    async def load(self) -> AccessList:
        """Return the parsed access list, or an empty one on any failure."""
        report = await self.load_report()
        return report.access_list

    async def load_report(self) -> LoadReport:
        attempts: list[SourceAttempt] = []

        def _failed(source: ListSource, exc: Exception) -> None:
            if isinstance(exc, SourceUnavailableError):
                reason = exc.reason
                log.info(
                    "source.unreachable",
                    location=source.location,
                    reason=reason,
                    code=str(GateErrorCode.LIST_SOURCE_UNREACHABLE),
                )
            else:
                reason = f"{type(exc).__name__}: {exc}"
                log.warning(
                    "source.failed",
                    location=source.location,
                    code=str(GateErrorCode.LIST_SOURCE_UNREACHABLE),
                    exc_info=exc,
                )
            attempts.append(SourceAttempt(location=source.location, ok=False, error=reason))

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                winner = await first_success(
                    self._sources,
                    lambda source: source.open(client),
                    on_failure=_failed,
                )
                if winner is None:
                    log.warning(
                        "list.exhausted",
                        tried=[s.location for s in self._sources],
                        code=str(GateErrorCode.LIST_LOAD_EXHAUSTED),
                    )
                    return LoadReport(
                        attempts=tuple(attempts),
                        error_code=GateErrorCode.LIST_LOAD_EXHAUSTED,
                    )

                source, body = winner
                attempts.append(SourceAttempt(location=source.location, ok=True))
                try:
                    access_list = await self._read(source, body)
                except Exception:
                    log.warning("list.read_failed", location=source.location, exc_info=True)
                    return LoadReport(
                        attempts=tuple(attempts),
                        error_code=GateErrorCode.INTERNAL_ERROR,
                    )
                finally:
                    await body.aclose()
        except Exception:
            log.warning("list.fetch_failed", exc_info=True)
            return LoadReport(attempts=tuple(attempts), error_code=GateErrorCode.INTERNAL_ERROR)

        self._trace(
            "list.parsed",
            location=source.location,
            allowed=list(access_list.allowed),
            blocked=list(access_list.blocked),
        )
        return LoadReport(access_list=access_list, attempts=tuple(attempts))

    async def _read(self, source: ListSource, body: ListBody) -> AccessList:
        payload = await body.read()
        self._trace("list.fetched", location=source.location, size=len(payload))
        return parse_access_list(
            payload.decode("utf-8-sig"),
            source=source.location,
            on_line=self._trace_line if self._debug else None,
        )

    def _trace(self, event: str, **fields: object) -> None:
        if self._debug:
            log.debug(event, **fields)

    def _trace_line(self, lineno: int, cleaned: str, kind: str) -> None:
        if kind == "dropped":
            log.debug(
                "list.line_dropped",
                line=lineno,
                value=cleaned,
                code=str(GateErrorCode.LIST_PARSE_ANOMALY),
            )
        else:
            log.debug("list.line", line=lineno, value=cleaned, kind=kind)
