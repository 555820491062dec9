"""Command: revalidate continuously while documents change."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from kbcheck.commands._base import KbCommand

if TYPE_CHECKING:
    from kbcheck.commands._context import AppContext
    from kbcheck.services.report import Report


@click.command(
    cls=KbCommand,
    examples="""\
  kbcheck watch docs/
  kbcheck watch docs/ --schema frontmatter.yaml --interval 0.5
  kbcheck watch docs/ --format json --max-scans 1""",
)
@click.argument("root", type=click.Path(path_type=Path))
@click.option(
    "--schema",
    "schema_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Schema rules file (overrides [rules] schema_path).",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default=None,
    help="Report format.",
)
@click.option(
    "--interval",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds between polls (overrides [watch] interval).",
)
@click.option(
    "--max-scans",
    type=click.IntRange(min=1),
    default=None,
    help="Stop after this many published reports.",
)
@click.pass_obj
def watch(
    app: AppContext,
    root: Path,
    schema_path: Path | None,
    output_format: str | None,
    interval: float | None,
    max_scans: int | None,
) -> None:
    """Rescan ROOT whenever a document changes and print each new report."""
    import json

    from kbcheck.commands._context import EXIT_USAGE
    from kbcheck.domain.errors import ConfigurationError
    from kbcheck.output.renderers import render_report
    from kbcheck.services.watch import Watcher

    service = app.check_service()
    if not root.is_dir():
        click.echo(f"Error: scan root is not a directory: {root}", err=True)
        raise SystemExit(EXIT_USAGE)
    try:
        rules = service.load_rules(schema_path)
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(EXIT_USAGE) from exc

    fmt = output_format or app.settings.report.format

    def show(report: Report) -> None:
        if fmt == "json":
            click.echo(json.dumps(report.to_dict(), indent=2))
        else:
            click.echo(render_report(report, verbose=app.settings.verbose))

    watcher = Watcher(
        service,
        root,
        rules,
        interval=interval or app.settings.watch.interval,
        on_report=show,
    )
    try:
        watcher.run(max_scans=max_scans)
    except KeyboardInterrupt:
        click.echo("Stopped.", err=True)
