"""Subcommand modules for devicegate.

Provides register_commands() which uses deferred imports to keep
``devicegate --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all standalone commands on the root CLI group."""
    from devicegate.commands.acl import acl
    from devicegate.commands.check import check
    from devicegate.commands.fingerprint import fingerprint

    cli.add_command(fingerprint)
    cli.add_command(acl)
    cli.add_command(check)
