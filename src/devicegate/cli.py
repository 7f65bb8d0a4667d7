"""Root CLI group for devicegate with global flags and command registration."""

from __future__ import annotations

import click

from devicegate import __version__
from devicegate.commands import register_commands
from devicegate.commands._base import GateGroup
from devicegate.commands._context import AppContext
from devicegate.config.settings import GateSettings


@click.group(
    cls=GateGroup,
    invoke_without_command=True,
    examples="""\
  devicegate fingerprint --signals visitor.json
  devicegate acl
  devicegate check --signals visitor.json""",
)
@click.version_option(version=__version__, prog_name="devicegate")
@click.option("--json", "json_output", is_flag=True, help="Structured JSON output.")
@click.option("-q", "--quiet", is_flag=True, help="Minimal output.")
@click.option("-v", "--verbose", is_flag=True, help="Detailed output with debug trace.")
@click.option("--log-json", is_flag=True, help="Structured JSON log output to stderr.")
@click.option("-c", "--config", "config_path", default=None, help="Override config file path.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """devicegate — device fingerprint access gate."""
    ctx.ensure_object(dict)
    settings = GateSettings.from_cli(
        config_path=config_path,
        json_output=json_output,
        quiet=quiet,
        verbose=verbose,
        log_json=log_json,
    )
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
