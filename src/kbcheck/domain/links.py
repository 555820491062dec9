"""Link extraction and resolution.

Pure functions, no filesystem access. Extraction runs per document in the
first scan phase; resolution runs only after every document path is known.

Only relative references to documents count as links: inline
``[text](target)`` links and ``[label]: target`` definitions whose target
ends in a document extension, ends in ``/``, or names a directory holding
an index document. Fenced code blocks and inline code spans are skipped
(code examples are not navigation), as are URLs with a scheme and
same-page ``#anchors``.
"""

from __future__ import annotations

import posixpath
import re
from collections.abc import Collection, Iterator, Sequence
from dataclasses import dataclass
from enum import StrEnum
from pathlib import PurePosixPath
from urllib.parse import unquote

DEFAULT_EXTENSIONS: tuple[str, ...] = (".md", ".markdown", ".mdx")
DEFAULT_INDEX_NAMES: tuple[str, ...] = ("index.md", "README.md")

_FENCE = re.compile(r"^ {0,3}(`{3,}|~{3,})")
_CODE_SPAN = re.compile(r"(`+)(?!`).*?(?<!`)\1(?!`)")
# [text](target "title"): text may hold one level of nested brackets,
# target may hold balanced parentheses or be wrapped in <...>.
_INLINE_LINK = re.compile(
    r"(!?)\[(?:[^\[\]]|\[[^\[\]]*\])*\]"
    r"\(\s*(<[^<>\n]*>|(?:[^()\s]|\([^()\s]*\))*)"
    r"""(?:\s+(?:"[^"]*"|'[^']*'|\([^()]*\)))?\s*\)"""
)
_REFERENCE_DEF = re.compile(r"^ {0,3}\[[^\]]+\]:\s*(<[^<>]*>|\S+)")
_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


class LinkKind(StrEnum):
    """How a link target is to be resolved."""

    DOCUMENT = "document"  # ends in a document extension
    DIRECTORY = "directory"  # ends in "/", must hold an index document
    BARE = "bare"  # no extension; a link only if a directory index exists


@dataclass(frozen=True)
class Link:
    """A relative reference extracted from a document body."""

    target: str  # decoded target without #fragment or ?query
    line: int  # 1-based line in the source file
    kind: LinkKind = LinkKind.DOCUMENT


@dataclass(frozen=True)
class Edge:
    """A resolved link between two scanned documents."""

    source: str
    target: str


def normalize_target(raw: str) -> str | None:
    """Strip wrapping, fragment and query from *raw*.

    Returns None for targets that are never links: empty targets, same-page
    anchors, protocol-relative URLs and anything with a URL scheme.
    """
    target = raw.strip()
    if target.startswith("<") and target.endswith(">"):
        target = target[1:-1].strip()
    if not target or target.startswith(("#", "//")) or _SCHEME.match(target):
        return None
    target = target.split("#", 1)[0].split("?", 1)[0]
    return unquote(target) or None


def classify_target(
    target: str,
    extensions: Collection[str] = DEFAULT_EXTENSIONS,
) -> LinkKind | None:
    """Decide whether *target* can name a document, and how."""
    if target.endswith("/"):
        return LinkKind.DIRECTORY
    suffix = PurePosixPath(target).suffix.lower()
    if suffix in extensions:
        return LinkKind.DOCUMENT
    if not suffix:
        return LinkKind.BARE
    return None


def _navigable_lines(body: str) -> Iterator[tuple[int, str]]:
    """Yield ``(offset, line)`` for lines outside fenced code blocks."""
    fence: str | None = None
    for offset, line in enumerate(body.split("\n")):
        match = _FENCE.match(line)
        if fence is None:
            if match:
                fence = match.group(1)
                continue
            yield offset, line
        elif match and match.group(1)[0] == fence[0] and len(match.group(1)) >= len(fence):
            if not line[match.end() :].strip():
                fence = None


def extract_links(
    body: str,
    *,
    extensions: Collection[str] = DEFAULT_EXTENSIONS,
    first_line: int = 1,
) -> list[Link]:
    """Extract candidate document links from *body* in reading order.

    Args:
        body: Markdown text with the front-matter already removed.
        extensions: Suffixes (lower-case, with dot) that mark a document.
        first_line: File line number of the first body line, so that
            link lines point into the original file.
    """
    normalized = body.replace("\r\n", "\n")
    links: list[Link] = []
    for offset, line in _navigable_lines(normalized):
        text = _CODE_SPAN.sub("", line)
        # images (group 1 == "!") are never navigation
        raws = [m.group(2) for m in _INLINE_LINK.finditer(text) if not m.group(1)]
        ref = _REFERENCE_DEF.match(text)
        if ref:
            raws.append(ref.group(1))
        for raw in raws:
            target = normalize_target(raw)
            if target is None:
                continue
            kind = classify_target(target, extensions)
            if kind is None:
                continue
            links.append(Link(target=target, line=first_line + offset, kind=kind))
    return links


def _candidates(resolved: str, kind: LinkKind, index_names: Sequence[str]) -> list[str]:
    if kind is LinkKind.DOCUMENT:
        return [resolved]
    if resolved == ".":
        return list(index_names)
    return [f"{resolved}/{name}" for name in index_names]


def resolve_links(
    source: str,
    links: Sequence[Link],
    known_paths: Collection[str],
    *,
    index_names: Sequence[str] = DEFAULT_INDEX_NAMES,
) -> tuple[list[Edge], list[Link]]:
    """Resolve *links* of the document at *source* against *known_paths*.

    Targets resolve relative to the source document's directory; a leading
    ``/`` makes them relative to the scan root. Targets escaping the root
    never resolve.

    Returns:
        ``(edges, unresolved)``. Edges are distinct and never point back at
        *source*. ``unresolved`` holds the first link to each distinct
        resolved path. Bare targets without a directory index are not
        links and appear in neither list.
    """
    base = posixpath.dirname(source)
    edges: list[Edge] = []
    seen_edges: set[str] = set()
    unresolved: list[Link] = []
    seen_unresolved: set[str] = set()

    for link in links:
        if link.target.startswith("/"):
            joined = link.target.lstrip("/") or "."
        else:
            joined = posixpath.join(base, link.target)
        resolved = posixpath.normpath(joined)

        hit: str | None = None
        if resolved != ".." and not resolved.startswith("../"):
            hit = next(
                (c for c in _candidates(resolved, link.kind, index_names) if c in known_paths),
                None,
            )

        if hit is not None:
            if hit != source and hit not in seen_edges:
                seen_edges.add(hit)
                edges.append(Edge(source=source, target=hit))
            continue
        if link.kind is LinkKind.BARE:
            continue
        if resolved not in seen_unresolved:
            seen_unresolved.add(resolved)
            unresolved.append(link)

    return edges, unresolved
