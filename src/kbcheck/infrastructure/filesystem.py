"""File discovery and reading for a scan root.

Discovery walks the root once, keeps files matching an include glob, and
drops anything under a skipped directory or matching an exclude glob.
Returned paths are POSIX strings relative to the root, sorted, so scans
are deterministic across platforms.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_INCLUDE: tuple[str, ...] = ("**/*.md", "**/*.markdown", "**/*.mdx")

# Directories never scanned.
SKIP_DIRS = frozenset({".git", ".hg", ".svn", "node_modules", ".venv", "__pycache__"})


@dataclass(frozen=True)
class SourceFile:
    """Raw input for one document: its scan-relative path and text.

    ``text`` is None when the file could not be read; ``read_error`` then
    says why.
    """

    path: str
    text: str | None
    read_error: str | None = None


def matches_glob(rel_path: str, pattern: str) -> bool:
    """Match a POSIX relative path against a shell-style glob.

    ``*`` also crosses ``/``. A leading ``**/`` matches zero or more
    directories, so ``**/*.md`` matches ``README.md`` at the root too.
    """
    if fnmatchcase(rel_path, pattern):
        return True
    return pattern.startswith("**/") and fnmatchcase(rel_path, pattern[3:])


def find_documents(
    root: Path,
    *,
    include: Sequence[str] = DEFAULT_INCLUDE,
    exclude: Sequence[str] = (),
) -> list[str]:
    """Discover document files under *root*.

    Raises:
        NotADirectoryError: *root* is not a directory.
    """
    if not root.is_dir():
        msg = f"Not a directory: {root}"
        raise NotADirectoryError(msg)

    results: list[str] = []
    for path in root.rglob("*"):
        rel = path.relative_to(root)
        if any(part in SKIP_DIRS for part in rel.parts[:-1]):
            continue
        if not path.is_file():
            continue
        rel_posix = rel.as_posix()
        if not any(matches_glob(rel_posix, pattern) for pattern in include):
            continue
        if any(matches_glob(rel_posix, pattern) for pattern in exclude):
            continue
        results.append(rel_posix)
    return sorted(results)


def read_sources(root: Path, paths: Sequence[str]) -> list[SourceFile]:
    """Read each relative path under *root* as UTF-8 text.

    Unreadable files are returned with ``text=None`` instead of raising so
    one bad file never aborts a scan.
    """
    sources: list[SourceFile] = []
    for rel in paths:
        try:
            text = (root / rel).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", rel, exc)
            sources.append(SourceFile(path=rel, text=None, read_error=str(exc)))
            continue
        sources.append(SourceFile(path=rel, text=text))
    return sources


def snapshot(root: Path, paths: Sequence[str]) -> dict[str, tuple[int, int]]:
    """Return ``{path: (mtime_ns, size)}`` used by watch mode to detect changes."""
    stamps: dict[str, tuple[int, int]] = {}
    for rel in paths:
        try:
            stat = (root / rel).stat()
        except OSError:
            continue
        stamps[rel] = (stat.st_mtime_ns, stat.st_size)
    return stamps
