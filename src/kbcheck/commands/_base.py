"""Click command classes that carry usage examples.

Examples are kept out of ``--help`` and shown by an eager ``--examples``
flag instead, so help text stays one screen long.
"""

from __future__ import annotations

from typing import Any

import click


def examples_option(examples: str) -> click.Option:
    """Build the ``--examples`` flag printing *examples* and exiting 0."""

    def _print(ctx: click.Context, _param: click.Parameter, requested: bool) -> None:
        if requested and not ctx.resilient_parsing:
            click.echo(f"Examples for '{ctx.command_path}':\n\n{examples}")
            ctx.exit(0)

    return click.Option(
        ["--examples"],
        is_flag=True,
        is_eager=True,
        expose_value=False,
        callback=_print,
        help="Show usage examples.",
    )


class KbCommand(click.Command):
    """A command accepting ``examples=`` in its decorator."""

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(examples_option(examples))


class KbGroup(click.Group):
    """A group accepting ``examples=``; its subcommands default to KbCommand."""

    command_class = KbCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.examples = examples
        if examples:
            self.params.append(examples_option(examples))
