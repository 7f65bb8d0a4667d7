"""structlog setup for devicegate.

Everything logs through stdlib ``logging`` to stderr, so stdout carries
only command output.  ``--log-json`` switches the renderer to one JSON
object per line; otherwise a console renderer is used.

Gate loggers live under ``devicegate``.  They emit DEBUG (per-line list
trace, fingerprint values, decisions) only with ``--verbose``.  HTTP client
chatter is held at WARNING either way.
"""

from __future__ import annotations

import logging
import sys

import structlog

_QUIET_LIBRARIES = ("httpx", "httpcore", "anyio")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _final_processors(log_json: bool) -> list[structlog.types.Processor]:
    if log_json:
        # Tracebacks become a string field instead of breaking the line.
        return [
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    return [
        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
        structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
    ]


def configure_logging(
    *,
    verbose: bool = False,
    log_json: bool = False,
) -> None:
    """Route structlog and stdlib logging to stderr.

    Safe to call repeatedly; each call replaces the previous handler.

    Args:
        verbose: Let ``devicegate`` loggers emit DEBUG.
        log_json: Render JSON lines instead of console text.
    """
    shared = _shared_processors()
    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=_final_processors(log_json),
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(logging.WARNING)

    logging.getLogger("devicegate").setLevel(logging.DEBUG if verbose else logging.WARNING)
    for name in _QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)
