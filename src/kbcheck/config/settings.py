"""Unified settings: CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  - CLI flags passed by Click
  2. Env vars     - ``KBCHECK_*`` prefix, ``__`` for nested sections
  3. TOML file    - ``kbcheck.toml`` discovered via walk-up
  4. Code defaults - baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

import click
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from kbcheck.config.discovery import find_config
from kbcheck.config.models import (
    LintConfig,
    PluginsConfig,
    ReportConfig,
    RulesConfig,
    ScanConfig,
    WatchConfig,
)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``kbcheck.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.UsageError(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# Thread-local storage for the TOML path during construction.
_tls = threading.local()


class KbSettings(BaseSettings):
    """Settings for the whole kbcheck CLI, frozen after construction.

    Attributes:
        config_path: The TOML file in effect, or None.
        config_dir: Directory relative config paths resolve against
            (the TOML file's parent, else the working directory).
    """

    model_config = {
        "frozen": True,
        "env_prefix": "KBCHECK_",
        "env_nested_delimiter": "__",
    }

    config_path: Path | None = None
    config_dir: Path = Field(default_factory=Path.cwd)

    # --- CLI flags ---
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    scan: ScanConfig = Field(default_factory=ScanConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    lint: LintConfig = Field(default_factory=LintConfig)
    watch: WatchConfig = Field(default_factory=WatchConfig)
    plugins: PluginsConfig = Field(default_factory=PluginsConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert the TOML source between env vars and defaults."""
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
    ) -> KbSettings:
        """Construct settings from a CLI invocation.

        Uses *config_path* when given, otherwise walks up from *start*
        (default: cwd) for ``kbcheck.toml``.

        Raises:
            click.UsageError: An explicit *config_path* does not exist or
                the TOML file is invalid.
        """
        toml_path: Path | None
        if config_path:
            toml_path = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.UsageError(msg)
        else:
            toml_path = find_config(start)

        config_dir = toml_path.parent if toml_path else (start or Path.cwd())

        _tls.toml_path = toml_path
        try:
            return cls(config_path=toml_path, config_dir=config_dir, **cli_flags)
        except ValidationError as exc:
            source = toml_path or "environment"
            msg = f"Invalid configuration ({source}): {exc}"
            raise click.UsageError(msg) from exc
        finally:
            _tls.toml_path = None

    def schema_file(self) -> Path | None:
        """The configured schema path, resolved against :attr:`config_dir`."""
        if self.rules.schema_path is None:
            return None
        return self.config_dir / self.rules.schema_path
