"""Candidate list sources and the first-success fallback chain.

A source is a location that can be opened for raw list bytes. Sources are
tried in order; the first that answers with a successful status wins and no
further candidates are contacted.

Opening and reading are separate steps. ``open()`` decides whether a
candidate answered; only then is the body read. A body that fails to read
belongs to the winning source and does not send the chain on to the next
candidate.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, TypeVar
from urllib.parse import urljoin

import httpx

from devicegate.domain.errors import SourceUnavailableError

S = TypeVar("S")
R = TypeVar("R")

_URL_SCHEMES = ("http://", "https://")

# Request-side failures that httpx does not root under HTTPError.
_HTTPX_FAILURES = (httpx.HTTPError, httpx.InvalidURL, httpx.StreamError)


class ListBody(Protocol):
    """The body of a source that answered."""

    async def read(self) -> bytes: ...

    async def aclose(self) -> None: ...


class ListSource(Protocol):
    """Anything that can be opened for raw access-list bytes."""

    @property
    def location(self) -> str: ...

    async def open(self, client: httpx.AsyncClient) -> ListBody: ...


@dataclass(frozen=True)
class _LoadedBody:
    data: bytes

    async def read(self) -> bytes:
        return self.data

    async def aclose(self) -> None:
        return None


@dataclass(frozen=True)
class _StreamedBody:
    response: httpx.Response

    async def read(self) -> bytes:
        return await self.response.aread()

    async def aclose(self) -> None:
        await self.response.aclose()


@dataclass(frozen=True)
class FileSource:
    """A list file on local disk. Exists and readable counts as success."""

    path: Path

    @property
    def location(self) -> str:
        return str(self.path)

    async def open(self, client: httpx.AsyncClient) -> ListBody:
        try:
            if not self.path.is_file():
                raise SourceUnavailableError(self.location, "not found")
            data = await asyncio.to_thread(self.path.read_bytes)
        except OSError as exc:
            raise SourceUnavailableError(self.location, str(exc)) from exc
        return _LoadedBody(data)


@dataclass(frozen=True)
class HttpSource:
    """A list served over HTTP(S). Any 2xx status counts as success."""

    url: str

    @property
    def location(self) -> str:
        return self.url

    async def open(self, client: httpx.AsyncClient) -> ListBody:
        try:
            request = client.build_request("GET", self.url)
            response = await client.send(request, stream=True)
        except _HTTPX_FAILURES as exc:
            raise SourceUnavailableError(self.location, str(exc) or type(exc).__name__) from exc
        if not response.is_success:
            await response.aclose()
            raise SourceUnavailableError(self.location, f"HTTP {response.status_code}")
        return _StreamedBody(response)


def resolve_source(candidate: str, *, root: Path, base_url: str | None = None) -> ListSource:
    """Turn a configured candidate string into a source descriptor.

    Absolute URLs are fetched as-is. Other candidates are joined onto
    *base_url* when one is configured, otherwise resolved under *root*.
    """
    if candidate.startswith(_URL_SCHEMES):
        return HttpSource(candidate)
    if base_url:
        base = base_url if base_url.endswith("/") else f"{base_url}/"
        return HttpSource(urljoin(base, candidate.lstrip("/")))
    path = Path(candidate)
    return FileSource(path if path.is_absolute() else root / path)


def resolve_sources(
    candidates: Sequence[str], *, root: Path, base_url: str | None = None
) -> tuple[ListSource, ...]:
    """Resolve every candidate, preserving order."""
    return tuple(resolve_source(c, root=root, base_url=base_url) for c in candidates)


async def first_success(
    sources: Sequence[S],
    attempt: Callable[[S], Awaitable[R]],
    *,
    on_failure: Callable[[S, Exception], None] | None = None,
) -> tuple[S, R] | None:
    """Return the first ``(source, result)`` for which *attempt* succeeds.

    Any exception from one source is reported to *on_failure* and the next
    source is tried. Returns None when every source fails.
    """
    for source in sources:
        try:
            result = await attempt(source)
        except Exception as exc:
            if on_failure is not None:
                on_failure(source, exc)
            continue
        return source, result
    return None
