"""Rich Console factory and theme for devicegate output.

Creates Console instances that render to a StringIO buffer, preserving
the ``format_result() -> str`` contract.  In non-TTY environments
(tests, pipes) Rich automatically disables color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

GATE_THEME = Theme(
    {
        "gate.ok": "bold green",
        "gate.error": "bold red",
        "gate.warning": "bold yellow",
        "gate.op": "bold cyan",
        "gate.key": "dim",
        "gate.fingerprint": "bold blue",
        "gate.path": "dim",
        "gate.outcome.admit": "bold green",
        "gate.outcome.block": "bold red",
        "gate.outcome.no_service": "bold yellow",
    }
)

_OUTCOME_STYLES: dict[str, str] = {
    "admit": "gate.outcome.admit",
    "block": "gate.outcome.block",
    "no_service": "gate.outcome.no_service",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes (used in tests).
        width: Override terminal width (useful for consistent test output).
    """
    return Console(
        file=StringIO(),
        theme=GATE_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_outcome(outcome: str) -> str:
    """Return the Rich style name for a gate outcome."""
    return _OUTCOME_STYLES.get(outcome, "")
