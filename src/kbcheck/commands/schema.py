"""Command group: schema rule files."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from kbcheck.commands._base import KbGroup

if TYPE_CHECKING:
    from kbcheck.commands._context import AppContext


@click.group(
    cls=KbGroup,
    examples="""\
  kbcheck schema validate frontmatter.yaml
  kbcheck schema validate frontmatter.yaml --format json""",
)
def schema() -> None:
    """Inspect schema rule files."""


@schema.command(
    examples="""\
  kbcheck schema validate frontmatter.yaml""",
)
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "text"]),
    default=None,
    help="Output format.",
)
@click.pass_obj
def validate(app: AppContext, file: Path, output_format: str | None) -> None:
    """Load FILE and list its rules; exit 2 if it is malformed."""
    app.emit(app.check_service().validate_schema(file), output_format=output_format)
