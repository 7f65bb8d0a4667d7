"""Click classes shared by devicegate commands.

Two extras on top of plain click:

* ``examples=`` adds an eager ``--examples`` flag that prints sample
  invocations and exits, so ``--help`` stays short.
* ``exit_codes=`` documents non-standard exit statuses in an
  "Exit status" section of ``--help`` (``check`` exits 2 or 3 on refusal).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import click


def _examples_option(examples: str) -> click.Option:
    def show(ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(examples)
        ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        expose_value=False,
        is_eager=True,
        callback=show,
        help="Show usage examples.",
    )


class GateCommand(click.Command):
    """Command accepting ``examples`` and ``exit_codes``."""

    def __init__(
        self,
        *args: Any,
        examples: str | None = None,
        exit_codes: Mapping[int, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        self.exit_codes = dict(exit_codes or {})
        if examples:
            self.params.append(_examples_option(examples))

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        if self.exit_codes:
            with formatter.section("Exit status"):
                formatter.write_dl(
                    [(str(code), meaning) for code, meaning in sorted(self.exit_codes.items())]
                )
        super().format_epilog(ctx, formatter)


class GateGroup(click.Group):
    """Root group; subcommands default to :class:`GateCommand`."""

    command_class = GateCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(_examples_option(examples))
