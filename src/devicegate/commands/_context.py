"""AppContext — shared Click context for all commands.

Created once by the root CLI group and flows to all subcommands via
``@click.pass_obj``.  Builds the gate pipeline on demand and centralizes
result emission (stdout/stderr routing + exit codes).
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

import click

from devicegate.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from devicegate.config.settings import GateSettings
    from devicegate.services.gate import GatePipeline
    from devicegate.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Subcommands access it via ``@click.pass_obj``.  Nothing is fetched or
    collected until a command asks for a pipeline, so ``--help`` and
    ``--version`` stay side-effect free.
    """

    def __init__(self, settings: GateSettings) -> None:
        self.settings = settings

        from devicegate.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    def pipeline(
        self,
        *,
        signals_file: Path | None = None,
        sources: Sequence[str] = (),
    ) -> GatePipeline:
        """Build a pipeline for one command invocation.

        Args:
            signals_file: JSON object of signals; the host provider is used
                when omitted.
            sources: Candidate locations overriding ``[sources] candidates``.
        """
        from devicegate.infrastructure.loader import AccessListLoader
        from devicegate.infrastructure.signal_providers import (
            HostSignalProvider,
            SignalProvider,
            StaticSignalProvider,
        )
        from devicegate.services.gate import GatePipeline

        debug = self.settings.verbose
        provider: SignalProvider
        if signals_file is not None:
            try:
                provider = StaticSignalProvider.from_file(signals_file)
            except (OSError, ValueError) as exc:
                raise click.BadParameter(str(exc), param_hint="--signals") from exc
        else:
            provider = HostSignalProvider()

        loader = AccessListLoader.from_settings(
            self.settings,
            candidates=list(sources) or None,
            debug=debug,
        )
        return GatePipeline(self.settings, provider=provider, loader=loader, debug=debug)

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success (``result.ok``): writes to stdout, returns normally.
          Warnings are emitted to stderr so they don't pollute piped output.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # In JSON mode, warnings are already in the serialized payload.
            if not settings.json_output and not settings.quiet:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
