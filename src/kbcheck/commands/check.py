"""Command: validate a document set."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from kbcheck.commands._base import KbCommand

if TYPE_CHECKING:
    from kbcheck.commands._context import AppContext


@click.command(
    cls=KbCommand,
    examples="""\
  kbcheck check docs/
  kbcheck check docs/ --schema frontmatter.yaml
  kbcheck check docs/ --format json > report.json
  kbcheck check docs/ --fail-on warning
  kbcheck check docs/ --exclude 'drafts/**' --entry-point overview.md
  kbcheck check docs/ --workers 4""",
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
    "--fail-on",
    type=click.Choice(["error", "warning"]),
    default=None,
    help="Lowest severity that fails the run.",
)
@click.option("--include", multiple=True, help="Glob of documents to scan (repeatable).")
@click.option("--exclude", multiple=True, help="Glob of documents to skip (repeatable).")
@click.option(
    "--entry-point",
    "entry_points",
    multiple=True,
    help="Document exempt from orphan detection (repeatable).",
)
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Parallel parse workers.")
@click.pass_obj
def check(
    app: AppContext,
    root: Path,
    schema_path: Path | None,
    output_format: str | None,
    fail_on: str | None,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
    entry_points: tuple[str, ...],
    workers: int | None,
) -> None:
    """Validate front-matter and links of every document under ROOT.

    Exits 0 when clean, 1 when findings reach --fail-on, 2 on usage or
    configuration errors.
    """
    from kbcheck.commands._context import EXIT_OK
    from kbcheck.services.report import Report

    scan = app.scan_overrides(
        include=include,
        exclude=exclude,
        entry_points=entry_points,
        workers=workers,
    )
    result = app.check_service(scan).check(root, schema_path=schema_path)

    exit_code = EXIT_OK
    if result.ok:
        threshold = fail_on or app.settings.report.fail_on
        exit_code = Report.model_validate(result.data).exit_code(threshold)
    app.emit(result, output_format=output_format, exit_code=exit_code)
