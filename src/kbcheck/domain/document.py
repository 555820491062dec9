"""Document: the parsed unit for one discovered file.

Created once per file at scan start and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from kbcheck.domain.links import Link


@dataclass(frozen=True, eq=False)
class Document:
    """A parsed document.

    Attributes:
        path: POSIX path relative to the scan root, unique within a scan.
        front_matter: Ordered header mapping; empty when the file has none.
        body: Raw text remaining after the front-matter block is removed.
        links: Extracted relative references in body order (duplicates kept).
    """

    path: str
    front_matter: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    links: tuple[Link, ...] = ()
