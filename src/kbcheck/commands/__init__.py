"""Subcommand modules for kbcheck."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register every command on the root group.

    Imports are deferred so ``kbcheck --help`` stays fast.
    """
    from kbcheck.commands.check import check
    from kbcheck.commands.graph import graph
    from kbcheck.commands.schema import schema
    from kbcheck.commands.watch import watch

    cli.add_command(check)
    cli.add_command(graph)
    cli.add_command(schema)
    cli.add_command(watch)
