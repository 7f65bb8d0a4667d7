"""Access list text format and parser.

One identifier per line, LF or CRLF endings. A ``!`` prefix marks a block
entry. A single trailing ``;`` is optional. All whitespace is insignificant.
Blank lines are ignored.

INVARIANT: Parsing is line-independent. A line that cleans down to nothing
is dropped; it never aborts the parse.
"""

from __future__ import annotations

import re
from collections.abc import Callable

from pydantic import BaseModel

BLOCK_PREFIX = "!"

_LINE_SPLIT = re.compile(r"\r?\n")
_WHITESPACE = re.compile(r"\s+")


class AccessList(BaseModel):
    """Parsed allow and block entries, in file order."""

    model_config = {"frozen": True}

    allowed: tuple[str, ...] = ()
    blocked: tuple[str, ...] = ()
    source: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.allowed and not self.blocked


EMPTY_ACCESS_LIST = AccessList()


def clean_entry(raw: str | None) -> str:
    """Trim, drop one trailing semicolon, and remove all internal whitespace."""
    if not raw:
        return ""
    text = raw.strip()
    if text.endswith(";"):
        text = text[:-1]
    return _WHITESPACE.sub("", text)


def split_lines(text: str) -> list[str]:
    """Split on LF/CRLF and discard blank or whitespace-only lines."""
    return [line for line in _LINE_SPLIT.split(text) if line.strip()]


def parse_access_list(
    text: str,
    *,
    source: str | None = None,
    on_line: Callable[[int, str, str], None] | None = None,
) -> AccessList:
    """Parse list *text* into an :class:`AccessList`.

    Args:
        text: Raw list file contents.
        source: Location the text came from, recorded on the result.
        on_line: Optional observer called as ``on_line(lineno, cleaned, kind)``
            where *kind* is ``"allowed"``, ``"blocked"``, or ``"dropped"``.
    """
    allowed: list[str] = []
    blocked: list[str] = []

    for index, line in enumerate(split_lines(text), start=1):
        cleaned = clean_entry(line)
        if cleaned.startswith(BLOCK_PREFIX):
            entry = cleaned[len(BLOCK_PREFIX) :]
            if entry:
                blocked.append(entry)
                kind = "blocked"
            else:
                kind = "dropped"
        elif cleaned:
            allowed.append(cleaned)
            kind = "allowed"
        else:
            kind = "dropped"
        if on_line is not None:
            on_line(index, cleaned, kind)

    return AccessList(allowed=tuple(allowed), blocked=tuple(blocked), source=source)
