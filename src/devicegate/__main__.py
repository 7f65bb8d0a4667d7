"""Allow ``python -m devicegate``."""

from devicegate.cli import cli

cli()
