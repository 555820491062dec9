"""Command: export the document link graph."""

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
  kbcheck graph docs/
  kbcheck -v graph docs/
  kbcheck graph docs/ --format json""",
)
@click.argument("root", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default=None,
    help="Output format.",
)
@click.option("--include", multiple=True, help="Glob of documents to scan (repeatable).")
@click.option("--exclude", multiple=True, help="Glob of documents to skip (repeatable).")
@click.pass_obj
def graph(
    app: AppContext,
    root: Path,
    output_format: str | None,
    include: tuple[str, ...],
    exclude: tuple[str, ...],
) -> None:
    """Show documents, resolved links and reference cycles under ROOT."""
    scan = app.scan_overrides(include=include, exclude=exclude)
    app.emit(app.check_service(scan).graph(root), output_format=output_format)
