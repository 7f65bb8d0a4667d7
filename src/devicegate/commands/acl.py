"""Command: load and show the access list."""

from __future__ import annotations

from typing import TYPE_CHECKING

import anyio
import click

from devicegate.commands._base import GateCommand

if TYPE_CHECKING:
    from devicegate.commands._context import AppContext


@click.command(
    cls=GateCommand,
    examples="""\
  devicegate acl
  devicegate acl --source passkey/KEY.txt
  devicegate acl --source https://example.org/passkey/KEY --source passkey/KEY
  devicegate -v acl""",
)
@click.option(
    "--source",
    "sources",
    multiple=True,
    help="Candidate list location, tried in order (repeatable).",
)
@click.pass_obj
def acl(app: AppContext, sources: tuple[str, ...]) -> None:
    """Show the allow and block entries from the first reachable list."""
    pipeline = app.pipeline(sources=sources)
    app.emit(anyio.run(pipeline.load_access_list))
