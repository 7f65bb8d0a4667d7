"""Command: compute the device fingerprint."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import anyio
import click

from devicegate.commands._base import GateCommand

if TYPE_CHECKING:
    from devicegate.commands._context import AppContext


@click.command(
    cls=GateCommand,
    examples="""\
  devicegate fingerprint
  devicegate fingerprint --signals visitor.json
  devicegate -q fingerprint --signals visitor.json >> passkey/KEY.txt""",
)
@click.option(
    "--signals",
    "signals_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="JSON object of signals (default: describe this host).",
)
@click.pass_obj
def fingerprint(app: AppContext, signals_file: Path | None) -> None:
    """Print the fingerprint for a signal bundle."""
    pipeline = app.pipeline(signals_file=signals_file)
    app.emit(anyio.run(pipeline.fingerprint))
