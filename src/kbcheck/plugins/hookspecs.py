"""Pluggy hook specifications for kbcheck.

``lint_document`` runs once per parsed document during the first scan
phase (possibly on a worker thread). ``post_check`` runs once per
completed report.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from kbcheck.domain.document import Document
    from kbcheck.domain.findings import ValidationFinding
    from kbcheck.services.report import Report

hookspec = pluggy.HookspecMarker("kbcheck")


class KbcheckHookSpec:
    """Hook specifications for the kbcheck plugin system."""

    @hookspec
    def lint_document(self, document: Document) -> list[ValidationFinding] | None:
        """Return extra findings for *document*.

        Findings must reference ``document.path``; others are dropped.
        """

    @hookspec
    def post_check(self, report: Report) -> None:
        """Called after a report is built."""
