"""Built-in file naming convention check.

Registered only when ``[lint] filename_pattern`` is set, for example
``filename_pattern = "[a-z0-9]+(-[a-z0-9]+)*"`` for kebab-case stems.
"""

from __future__ import annotations

import logging
import re
from pathlib import PurePosixPath
from typing import TYPE_CHECKING

import pluggy

from kbcheck.domain.findings import ValidationFinding, warning
from kbcheck.domain.types import FindingCode

if TYPE_CHECKING:
    from kbcheck.domain.document import Document

hookimpl = pluggy.HookimplMarker("kbcheck")

logger = logging.getLogger(__name__)


class FilenameConventionPlugin:
    """Warn about document file names whose stem does not match a pattern."""

    def __init__(self, pattern: str, *, exempt: tuple[str, ...] = ()) -> None:
        self._pattern = re.compile(pattern)
        self._exempt = frozenset(exempt)

    @hookimpl
    def lint_document(self, document: Document) -> list[ValidationFinding] | None:
        name = PurePosixPath(document.path)
        if name.name in self._exempt:
            return None
        if self._pattern.fullmatch(name.stem) is not None:
            return None
        logger.debug("Naming convention violation: %s", document.path)
        return [
            warning(
                document.path,
                FindingCode.FILENAME_CONVENTION,
                f"File name '{name.stem}' does not match {self._pattern.pattern!r}",
            )
        ]
