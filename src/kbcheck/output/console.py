"""Rich Console factory and theme for kbcheck output.

Consoles render into a StringIO buffer so renderers return strings and
the CLI decides where they go. Without a terminal (tests, pipes) Rich
emits no color codes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

KB_THEME = Theme(
    {
        "kb.ok": "bold green",
        "kb.fail": "bold red",
        "kb.op": "bold cyan",
        "kb.key": "dim",
        "kb.path": "bold",
        "kb.code": "cyan",
        "kb.line": "dim",
        "kb.severity.error": "bold red",
        "kb.severity.warning": "yellow",
        "kb.severity.info": "blue",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=KB_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_severity(severity: str) -> str:
    return f"kb.severity.{severity}"
