"""Report Emitter: turns accumulated findings into an immutable report.

The report is a value; writing it anywhere is the caller's business.
It carries no timestamps so two runs over an unchanged document set
serialize byte-for-byte identically.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from kbcheck.domain.findings import ValidationFinding, sort_findings
from kbcheck.domain.types import SEVERITY_RANK, Severity


class Report(BaseModel):
    """Outcome of one scan."""

    model_config = {"frozen": True}

    documents_scanned: int
    counts: dict[str, int]
    edges: int = 0
    findings: tuple[ValidationFinding, ...] = ()

    def count(self, severity: Severity) -> int:
        return self.counts.get(severity.value, 0)

    def fails(self, fail_on: Severity | str = Severity.ERROR) -> bool:
        """Whether any finding is at least as severe as *fail_on*.

        ``info`` findings never fail a run.
        """
        threshold = SEVERITY_RANK[Severity(fail_on)]
        return any(
            f.severity is not Severity.INFO and SEVERITY_RANK[f.severity] <= threshold
            for f in self.findings
        )

    def exit_code(self, fail_on: Severity | str = Severity.ERROR) -> int:
        return 1 if self.fails(fail_on) else 0

    def by_document(self) -> dict[str, list[ValidationFinding]]:
        """Findings grouped by path (sorted), each group by severity then code."""
        groups: dict[str, list[ValidationFinding]] = {}
        for finding in self.findings:
            groups.setdefault(finding.document_path, []).append(finding)
        return {
            path: sorted(groups[path], key=ValidationFinding.report_key)
            for path in sorted(groups)
        }

    def to_dict(self) -> dict[str, Any]:
        """Structured form for machine consumption."""
        return self.model_dump(mode="json", exclude_none=True)


def build_report(
    documents_scanned: int,
    findings: Iterable[ValidationFinding],
    *,
    edges: int = 0,
) -> Report:
    """Build a report with stable ordering and per-severity counts."""
    ordered = sort_findings(list(findings))
    counts = {severity.value: 0 for severity in Severity}
    for finding in ordered:
        counts[finding.severity.value] += 1
    return Report(
        documents_scanned=documents_scanned,
        counts=counts,
        edges=edges,
        findings=tuple(ordered),
    )
