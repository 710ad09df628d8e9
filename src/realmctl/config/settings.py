"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``REALMCTL_*`` prefix (``REALMCTL_CLIENT__ADDRESS``)
  3. TOML file    — ``--config``, ``REALMCTL_CONFIG``, or walk-up discovery
  4. Code defaults — baked into the section models

Uses Pydantic Settings v2 with a custom :class:`TomlSettingsSource` that
locates the file with :func:`realmctl.config.discovery.resolve_config`.
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from realmctl.config.discovery import resolve_config
from realmctl.config.models import BrowseConfig, ClientConfig


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``realmctl.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        """Return the full TOML data dict for Pydantic to merge."""
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class RealmSettings(BaseSettings):
    """Unified settings for the realmctl CLI.

    Stored on the :class:`~realmctl.commands._context.AppContext` at the CLI
    root and read by every command.

    Attributes:
        config_path: The TOML file that was loaded, or None.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "REALMCTL_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False
    no_interact: bool = False

    # --- TOML sections ---
    client: ClientConfig = Field(default_factory=ClientConfig)
    browse: BrowseConfig = Field(default_factory=BrowseConfig)

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
        start_dir: Path | None = None,
        address: str | None = None,
        **cli_flags: Any,
    ) -> RealmSettings:
        """Construct settings from a CLI invocation.

        Picks the config file with :func:`resolve_config` (*config_path*,
        then the env var, then walk-up from *start_dir*) and merges CLI
        flags as highest-priority overrides. *address* replaces only
        ``client.address``; the rest of the ``[client]`` section keeps its
        configured values.
        """
        toml_path = resolve_config(config_path, start_dir)
        _tls.toml_path = toml_path
        try:
            settings = cls(config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

        if address:
            client = settings.client.model_copy(update={"address": address})
            settings = settings.model_copy(update={"client": client})
        return settings
