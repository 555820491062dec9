"""Front-matter parsing and rendering.

A front-matter block starts with a ``---`` line at the very top of the
file and ends at the next ``---`` line in column 0. Everything between is
YAML; everything after the closing line is the body, kept verbatim.

Delimiter detection is a small state machine
(``seen-open -> parsing-keys -> seen-close``) rather than a string search:
a ``---`` line that continues a still-open quoted scalar is content.
Quotes are tracked only where they open a value (``key: "...``,
``- '...``); lines inside a block scalar (``key: |``) and plain
continuation lines are literal text.
"""

from __future__ import annotations

import re
from enum import Enum
from io import StringIO
from typing import Any

from ruamel.yaml import YAML
from ruamel.yaml.error import MarkedYAMLError, YAMLError

from kbcheck.domain.errors import ParseError

_DELIMITER = "---"

# ``key: `` or one or more ``- `` sequence markers (optionally followed by a key).
_VALUE_LEAD = r"""(?:(?:-\s+)+(?:[^"'\s#][^#]*?:\s+)?|(?:-\s+)*[^"'\s#-][^#]*?:\s+)"""

# A quote character opening a scalar value: ``key: "...``, ``- '...``.
_VALUE_QUOTE = re.compile(rf"""^\s*{_VALUE_LEAD}(["'])""")

# A value introduced by a block-scalar indicator: ``key: |``, ``- >-``.
_BLOCK_SCALAR = re.compile(rf"""^(\s*){_VALUE_LEAD}[|>][-+0-9]*\s*(?:#.*)?$""")


class _State(Enum):
    SEEN_OPEN = "seen-open"
    PARSING_KEYS = "parsing-keys"
    SEEN_CLOSE = "seen-close"


def _new_yaml() -> YAML:
    """Create a fresh round-trip YAML parser.

    ruamel.yaml's YAML object is stateful; a failed load or dump can leave
    a shared instance unusable, so each call gets its own.
    """
    y = YAML()
    y.preserve_quotes = True
    y.default_flow_style = False
    return y


def _is_delimiter(line: str) -> bool:
    return line.rstrip() == _DELIMITER


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip(" "))


def _open_quote_after(line: str, open_quote: str | None) -> str | None:
    """Return the quote character still open at the end of *line*, if any."""
    i = 0
    if open_quote is None:
        match = _VALUE_QUOTE.match(line)
        if match is None:
            return None
        open_quote = match.group(1)
        i = match.end()

    n = len(line)
    while i < n:
        ch = line[i]
        if open_quote == '"' and ch == "\\":
            i += 2
            continue
        if ch == open_quote:
            # '' is an escaped quote inside a single-quoted scalar
            if open_quote == "'" and i + 1 < n and line[i + 1] == "'":
                i += 2
                continue
            return None
        i += 1
    return open_quote


def _to_plain(value: Any) -> Any:
    """Convert ruamel round-trip containers and scalars to plain Python values."""
    if isinstance(value, dict):
        return {str(k): _to_plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_plain(v) for v in value]
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return float(value)
    if isinstance(value, str):
        return str(value)
    # dates and timestamps stay as parsed
    return value


def split_frontmatter(text: str, path: str = "<string>") -> tuple[str | None, str]:
    """Split *text* into ``(yaml_block, body)``.

    ``yaml_block`` is None when the text has no opening delimiter.

    Raises:
        ParseError: The opening delimiter has no matching closing line.
    """
    normalized = text.replace("\r\n", "\n")
    lines = normalized.split("\n")
    if not _is_delimiter(lines[0].lstrip("\ufeff")):
        return None, text

    state = _State.SEEN_OPEN
    open_quote: str | None = None
    # indentation of the key owning the current block scalar
    block_indent: int | None = None
    close_idx = 0
    for idx, line in enumerate(lines[1:], start=1):
        if block_indent is not None:
            if not line.strip() or _indent(line) > block_indent:
                state = _State.PARSING_KEYS
                continue
            block_indent = None
        if open_quote is None and _is_delimiter(line):
            state = _State.SEEN_CLOSE
            close_idx = idx
            break
        state = _State.PARSING_KEYS
        if open_quote is None:
            block = _BLOCK_SCALAR.match(line)
            if block is not None:
                block_indent = len(block.group(1))
                continue
        open_quote = _open_quote_after(line, open_quote)

    if state is not _State.SEEN_CLOSE:
        raise ParseError(path, 1, "front-matter block opened here is never closed")

    yaml_block = "\n".join(lines[1:close_idx])
    body = "\n".join(lines[close_idx + 1 :])
    return yaml_block, body


def parse_frontmatter(text: str, path: str = "<string>") -> tuple[dict[str, Any], str]:
    """Parse front-matter and body from markdown *text*.

    Returns:
        A ``(front_matter, body)`` tuple. Without an opening ``---`` line
        the mapping is empty and the body is *text* unchanged.

    Raises:
        ParseError: Unterminated block, invalid YAML, or a block that is
            not a mapping. ``line`` is 1-based within the file.
    """
    yaml_block, body = split_frontmatter(text, path)
    if yaml_block is None:
        return {}, body

    try:
        loaded = _new_yaml().load(yaml_block)
    except MarkedYAMLError as exc:
        mark = exc.problem_mark or exc.context_mark
        line = mark.line + 2 if mark is not None else 1
        reason = exc.problem or exc.context or "invalid YAML"
        raise ParseError(path, line, f"invalid front-matter YAML: {reason}") from exc
    except YAMLError as exc:
        raise ParseError(path, 1, f"invalid front-matter YAML: {exc}") from exc

    if loaded is None:
        return {}, body
    if not isinstance(loaded, dict):
        msg = f"front-matter must be a mapping, got {type(loaded).__name__}"
        raise ParseError(path, 2, msg)
    return _to_plain(loaded), body


def render_frontmatter(front_matter: dict[str, Any], body: str) -> str:
    """Render *front_matter* and *body* back into markdown text.

    Keys are emitted in mapping order. An empty mapping still produces the
    delimiter pair so the result parses back to the same ``(mapping, body)``.
    """
    if not front_matter:
        return f"{_DELIMITER}\n{_DELIMITER}\n{body}"
    buf = StringIO()
    _new_yaml().dump(dict(front_matter), buf)
    return f"{_DELIMITER}\n{buf.getvalue()}{_DELIMITER}\n{body}"
