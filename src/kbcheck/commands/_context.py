"""AppContext: shared Click context for all commands.

Created once by the root group and passed to subcommands via
``@click.pass_obj``. Owns logging setup, lazy plugin loading, and result
emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

import click

from kbcheck.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from kbcheck.config.models import ScanConfig
    from kbcheck.config.settings import KbSettings
    from kbcheck.plugins.manager import PluginManager
    from kbcheck.services.check import CheckService
    from kbcheck.services.result import ServiceResult

# Exit codes
EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_USAGE = 2


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: KbSettings) -> None:
        self.settings = settings
        self._plugins: PluginManager | None = None

        from kbcheck.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def plugins(self) -> PluginManager:
        """Plugin manager, built on first use.

        A bad plugin configuration is a usage failure.
        """
        if self._plugins is None:
            from kbcheck.domain.errors import ConfigurationError
            from kbcheck.plugins.manager import build_plugin_manager

            try:
                self._plugins = build_plugin_manager(self.settings)
            except ConfigurationError as exc:
                click.echo(f"Error: {exc}", err=True)
                raise SystemExit(EXIT_USAGE) from exc
        return self._plugins

    def scan_overrides(self, **flags: Any) -> ScanConfig:
        """Configured ``[scan]`` options with non-empty CLI *flags* applied."""
        update = {key: value for key, value in flags.items() if value not in (None, ())}
        return self.settings.scan.model_copy(update=update)

    def check_service(self, scan: ScanConfig | None = None) -> CheckService:
        from kbcheck.services.check import CheckService

        return CheckService(self.settings, plugins=self.plugins, scan=scan)

    def emit(
        self,
        result: ServiceResult,
        *,
        output_format: Literal["json", "text"] | None = None,
        exit_code: int = EXIT_OK,
    ) -> None:
        """Write a ServiceResult and exit with the right status.

        * Success: output to stdout; in text mode warnings go to stderr.
          Exits with *exit_code* when it is non-zero.
        * Failure: output to stderr, exit code 2 (usage/configuration).
        """
        settings = OutputSettings(
            format=output_format or self.settings.report.format,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if not result.ok:
            click.echo(output, err=True)
            raise SystemExit(EXIT_USAGE)

        click.echo(output)
        if settings.format != "json":
            for warning in result.warnings:
                click.echo(f"WARNING: {warning}", err=True)
        if exit_code != EXIT_OK:
            raise SystemExit(exit_code)
