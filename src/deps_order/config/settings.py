"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``DEPS_ORDER_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``deps-order.toml`` discovered via walk-up
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
reuses the ``find_config`` walk-up discovery from
:mod:`deps_order.config.discovery`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsError

from deps_order.config.discovery import find_config, search_root
from deps_order.config.models import OutputConfig, RunConfig, ScopeConfig
from deps_order.domain.errors import InvalidConfiguration


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``deps-order.toml`` file discovered via walk-up."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise InvalidConfiguration(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for TOML path during construction.
_tls = threading.local()


class DepsOrderSettings(BaseSettings):
    """Unified settings for the deps-order CLI.

    Merges CLI flags, environment variables, TOML config sections,
    and code-baked defaults into a single frozen object.

    Attributes:
        config_path: The TOML file that was loaded, or None.
        manifest_path: ``Cargo.toml`` handed to ``cargo metadata``.
        metadata_file: Saved ``cargo metadata`` JSON used instead of Cargo.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "DEPS_ORDER_",
        "env_nested_delimiter": "__",
        "extra": "forbid",
    }

    config_path: Path | None = None
    manifest_path: Path | None = None
    metadata_file: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    scope: ScopeConfig = Field(default_factory=ScopeConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)

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
        start: Path | None = None,
        **cli_flags: Any,
    ) -> DepsOrderSettings:
        """Construct settings from a CLI invocation.

        Discovers ``deps-order.toml`` via walk-up from *start*, else from
        the directory of the ``manifest_path`` flag, else the working
        directory (or uses the explicit *config_path*) and merges CLI flags as highest-priority
        overrides. Section overrides are passed as partial dicts, e.g.
        ``run={"wait": 2}``, and merged over the lower-priority sources.

        Raises:
            InvalidConfiguration: The config file is missing or malformed,
                or a value fails validation.
        """
        toml_path: Path | None = None
        if config_path:
            toml_path = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise InvalidConfiguration(msg)
        else:
            manifest = cli_flags.get("manifest_path")
            toml_path = find_config(start or search_root(Path(manifest) if manifest else None))

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, **cli_flags)
        except (ValidationError, SettingsError) as exc:
            source = f" ({toml_path})" if toml_path else ""
            msg = f"Invalid configuration{source}: {exc}"
            raise InvalidConfiguration(msg) from exc
        finally:
            _tls.toml_path = None
