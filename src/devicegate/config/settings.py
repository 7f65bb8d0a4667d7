"""GateSettings: everything one gate run needs to know.

Later layers override earlier ones:

  defaults < devicegate.toml < DEVICEGATE_* env vars < CLI flags

Nested sections take env overrides with a double underscore, e.g.
``DEVICEGATE_SOURCES__BASE_URL=https://cdn.example.org/``.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from devicegate.config.discovery import find_config, find_site_root, read_toml
from devicegate.config.models import FingerprintConfig, PagesConfig, SourcesConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``devicegate.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            self._data = read_toml(toml_path)

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class GateSettings(BaseSettings):
    """Resolved settings for the CLI and :class:`~devicegate.services.gate.GatePipeline`.

    Attributes:
        project_root: Site root that relative list candidates resolve
            against (see :func:`~devicegate.config.discovery.find_site_root`).
        config_path: The TOML file actually loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DEVICEGATE_",
        "env_nested_delimiter": "__",
    }

    project_root: Path = Field(default_factory=lambda: find_site_root())
    config_path: Path | None = None

    # Output and logging
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    # [sources], [fingerprint], [pages]
    sources: SourcesConfig = Field(default_factory=SourcesConfig)
    fingerprint: FingerprintConfig = Field(default_factory=FingerprintConfig)
    pages: PagesConfig = Field(default_factory=PagesConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        project_root: Path | None = None,
        **cli_flags: Any,
    ) -> GateSettings:
        """Construct settings from CLI invocation.

        Discovers ``devicegate.toml`` via walk-up (or explicit *config_path*),
        resolves *project_root* from the config file's parent directory,
        and merges CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(project_root)

        resolved_root = project_root
        if resolved_root is None:
            resolved_root = toml_path.parent.resolve() if toml_path else find_site_root()

        _tls.toml_path = toml_path
        try:
            return cls(
                project_root=resolved_root,
                config_path=toml_path,
                **cli_flags,
            )
        finally:
            _tls.toml_path = None
