"""Locating the site a gate runs for.

A site is the directory tree served next to the gated page.  Its root is
the nearest ancestor holding ``devicegate.toml`` or, failing that, a
``passkey/`` directory (where the default list candidates live).  Relative
list candidates resolve against that root.

``DEVICEGATE_CONFIG`` names a config file directly and disables walk-up.
"""

from __future__ import annotations

import os
import tomllib
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

CONFIG_FILENAME = "devicegate.toml"
CONFIG_ENV_VAR = "DEVICEGATE_CONFIG"
LIST_DIRNAME = "passkey"


def _walk_up(start: Path | None, match: Callable[[Path], bool]) -> Path | None:
    current = (start or Path.cwd()).resolve()
    for directory in (current, *current.parents):
        if match(directory):
            return directory
    return None


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file governing *start* (default: cwd), if any."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        p = Path(env_path)
        return p if p.is_file() else None

    found = _walk_up(start, lambda d: (d / CONFIG_FILENAME).is_file())
    return found / CONFIG_FILENAME if found else None


def find_site_root(start: Path | None = None) -> Path:
    """Nearest ancestor of *start* that looks like a gated site.

    Falls back to *start* itself (or cwd) when nothing matches.
    """
    found = _walk_up(
        start,
        lambda d: (d / CONFIG_FILENAME).is_file() or (d / LIST_DIRNAME).is_dir(),
    )
    return found or (start or Path.cwd()).resolve()


def read_toml(path: Path) -> dict[str, Any]:
    """Parse *path*, reporting syntax errors as a CLI-facing failure."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise click.ClickException(f"Invalid TOML in {path}: {exc}") from exc

