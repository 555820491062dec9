"""Entry point for the ``kbcheck`` command."""

from __future__ import annotations

import click

from kbcheck import __version__
from kbcheck.commands import register_commands
from kbcheck.commands._context import AppContext
from kbcheck.config.models import PluginsConfig
from kbcheck.config.settings import KbSettings


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="kbcheck")
@click.option(
    "-c",
    "--config",
    "config_path",
    metavar="PATH",
    help="Use this kbcheck.toml instead of searching upward from the cwd.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug records to stderr.")
@click.option("--log-json", is_flag=True, help="Log as JSON lines instead of console text.")
@click.option(
    "--no-plugins",
    is_flag=True,
    help="Do not load third-party plugins from the 'kbcheck.plugins' entry-point group.",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    verbose: bool,
    log_json: bool,
    no_plugins: bool,
) -> None:
    """Check front-matter and links across a set of Markdown documents."""
    settings = KbSettings.from_cli(config_path=config_path, verbose=verbose, log_json=log_json)
    if no_plugins:
        settings = settings.model_copy(update={"plugins": PluginsConfig(entry_points=False)})
    ctx.obj = AppContext(settings)
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
