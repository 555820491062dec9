"""ValidationFinding: one reportable issue attached to a document.

Findings are accumulated by every pipeline stage and never raised.
INVARIANT: ``document_path`` always names a document of the current scan.
"""

from __future__ import annotations

from pydantic import BaseModel

from kbcheck.domain.types import SEVERITY_RANK, FindingCode, Severity


class ValidationFinding(BaseModel):
    """One reportable issue."""

    model_config = {"frozen": True}

    document_path: str
    severity: Severity
    code: FindingCode
    message: str
    line: int | None = None

    def sort_key(self) -> tuple[str, str, str]:
        """Stable ordering used by every stage: path, then code, then message."""
        return (self.document_path, self.code.value, self.message)

    def report_key(self) -> tuple[int, str, str]:
        """Ordering within one document for human output: severity, then code."""
        return (SEVERITY_RANK[self.severity], self.code.value, self.message)


def sort_findings(findings: list[ValidationFinding]) -> list[ValidationFinding]:
    """Return *findings* in ``(document_path, code, message)`` order."""
    return sorted(findings, key=ValidationFinding.sort_key)


def error(
    path: str, code: FindingCode, message: str, *, line: int | None = None
) -> ValidationFinding:
    return ValidationFinding(
        document_path=path, severity=Severity.ERROR, code=code, message=message, line=line
    )


def warning(
    path: str, code: FindingCode, message: str, *, line: int | None = None
) -> ValidationFinding:
    return ValidationFinding(
        document_path=path, severity=Severity.WARNING, code=code, message=message, line=line
    )


def info(path: str, code: FindingCode, message: str) -> ValidationFinding:
    return ValidationFinding(
        document_path=path, severity=Severity.INFO, code=code, message=message
    )
