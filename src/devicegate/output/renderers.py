"""Operation-specific Rich renderers for ServiceResult.

Each renderer writes to a Rich Console (backed by StringIO).  The caller
extracts the rendered text via ``get_output(console)``.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from devicegate.domain.access_list import BLOCK_PREFIX
from devicegate.output.console import create_console, get_output, style_for_outcome

if TYPE_CHECKING:
    from rich.console import Console

    from devicegate.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich.

    Returns plain text (no ANSI) when Rich detects no terminal,
    which is the case inside Click's CliRunner and piped output.
    """
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} — {msg}"

    if result.op == "fingerprint":
        return str(result.data.get("fingerprint", ""))
    if result.op == "check":
        return str(result.data.get("outcome", ""))
    if result.op == "acl":
        lines = [str(e) for e in result.data.get("allowed", [])]
        lines.extend(f"{BLOCK_PREFIX}{e}" for e in result.data.get("blocked", []))
        return "\n".join(lines)

    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    """Print the OK/ERROR status line."""
    label = Text("OK", style="gate.ok")
    op = Text(f"  {result.op}", style="gate.op")
    console.print(Text.assemble(label, op))


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="gate.key")
    if key == "fingerprint":
        v = Text(str(value), style="gate.fingerprint")
    elif key == "outcome":
        v = Text(str(value), style=style_for_outcome(str(value)))
    elif key in ("source", "navigate_to"):
        v = Text(str(value), style="gate.path")
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print the meta block (verbose only)."""
    if not result.meta:
        return
    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="gate.error")
    op = Text(f"  {result.op}", style="gate.op")
    console.print(Text.assemble(label, op, " — ", msg))

    if verbose and err:
        console.print(Text(f"  code: {err.code}", style="dim"))
        if err.detail:
            console.print(Text("  detail:", style="dim"))
            for k, v in err.detail.items():
                console.print(f"    {k}: {v}")


# ── Operation renderers ───────────────────────────────────────────────


def _render_fingerprint(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "fingerprint", result.data.get("fingerprint", ""))
    if verbose:
        _render_meta(console, result)


def _render_acl(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    source = result.data.get("source")
    _field(console, "source", source if source else "(none)")

    allowed = result.data.get("allowed", [])
    blocked = result.data.get("blocked", [])
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("list")
    table.add_column("fingerprint", style="gate.fingerprint")
    for i, entry in enumerate(allowed, start=1):
        table.add_row(str(i), Text("allow", style="gate.ok"), entry)
    for i, entry in enumerate(blocked, start=len(allowed) + 1):
        table.add_row(str(i), Text("block", style="gate.error"), entry)

    if allowed or blocked:
        console.print(table)
    else:
        console.print(Text("  (empty list: every unblocked device is admitted)", style="dim"))

    if verbose:
        for attempt in result.data.get("attempts", []):
            state = "ok" if attempt.get("ok") else f"failed ({attempt.get('error')})"
            console.print(Text(f"  tried {attempt.get('location')}: {state}", style="dim"))
        _render_meta(console, result)


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key in ("outcome", "reason", "fingerprint", "source", "navigate_to"):
        value = result.data.get(key)
        if value is not None:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)
    if verbose:
        _render_meta(console, result)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Any] = {
    "fingerprint": _render_fingerprint,
    "acl": _render_acl,
    "check": _render_check,
}
