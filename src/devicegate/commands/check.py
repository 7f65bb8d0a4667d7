"""Command: run the full access check."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import TYPE_CHECKING

import anyio
import click

from devicegate.commands._base import GateCommand
from devicegate.domain.decision import Outcome

if TYPE_CHECKING:
    from devicegate.commands._context import AppContext

EXIT_CODES: dict[str, int] = {
    Outcome.ADMIT: 0,
    Outcome.BLOCK: 2,
    Outcome.NO_SERVICE: 3,
}

_EXIT_HELP = {
    0: "admit: the device may proceed",
    1: "the check could not run (bad config)",
    2: "block: the device is on the block list (also click usage errors)",
    3: "no-service: not on the allow list, or the fingerprint is unusable",
}


@click.command(
    cls=GateCommand,
    exit_codes=_EXIT_HELP,
    examples="""\
  devicegate check
  devicegate check --signals visitor.json
  devicegate check --fingerprint 3f1c9a0e... --source passkey/KEY.txt
  devicegate --json check --signals visitor.json""",
)
@click.option(
    "--signals",
    "signals_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON object of signals (default: describe this host).",
)
@click.option(
    "--fingerprint",
    "fingerprint_value",
    default=None,
    help="Check this fingerprint instead of building one from signals.",
)
@click.option(
    "--source",
    "sources",
    multiple=True,
    help="Candidate list location, tried in order (repeatable).",
)
@click.pass_obj
def check(
    app: AppContext,
    signals_file: Path | None,
    fingerprint_value: str | None,
    sources: tuple[str, ...],
) -> None:
    """Decide admit / block / no-service for a device."""
    pipeline = app.pipeline(signals_file=signals_file, sources=sources)
    result = anyio.run(functools.partial(pipeline.evaluate, fingerprint=fingerprint_value))
    app.emit(result)
    code = EXIT_CODES.get(result.data.get("outcome", Outcome.NO_SERVICE), 3)
    if code:
        raise SystemExit(code)
