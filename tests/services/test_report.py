"""Tests for Report and build_report."""

from __future__ import annotations

from kbcheck.domain.findings import ValidationFinding, error, info, warning
from kbcheck.domain.types import FindingCode, Severity
from kbcheck.services.report import Report, build_report


def _report(*findings: ValidationFinding) -> Report:
    return build_report(3, findings, edges=2)


class TestBuildReport:
    def test_counts_every_severity(self) -> None:
        report = _report(
            error("a.md", FindingCode.TYPE_MISMATCH, "m"),
            warning("a.md", FindingCode.BROKEN_LINK, "w"),
            warning("b.md", FindingCode.BROKEN_LINK, "w"),
        )
        assert report.counts == {"error": 1, "warning": 2, "info": 0}
        assert report.count(Severity.WARNING) == 2

    def test_empty(self) -> None:
        report = build_report(0, [])
        assert report.counts == {"error": 0, "warning": 0, "info": 0}
        assert report.findings == ()
        assert not report.fails()

    def test_findings_sorted(self) -> None:
        report = _report(
            warning("b.md", FindingCode.BROKEN_LINK, "x"),
            error("a.md", FindingCode.UNKNOWN_FIELD, "z"),
            error("a.md", FindingCode.MISSING_REQUIRED_FIELD, "y"),
        )
        assert [(f.document_path, f.code) for f in report.findings] == [
            ("a.md", FindingCode.MISSING_REQUIRED_FIELD),
            ("a.md", FindingCode.UNKNOWN_FIELD),
            ("b.md", FindingCode.BROKEN_LINK),
        ]

    def test_input_order_irrelevant(self) -> None:
        items = [
            warning("b.md", FindingCode.BROKEN_LINK, "x"),
            error("a.md", FindingCode.TYPE_MISMATCH, "y"),
        ]
        assert build_report(2, items) == build_report(2, list(reversed(items)))


class TestFails:
    def test_error_threshold(self) -> None:
        assert _report(error("a.md", FindingCode.TYPE_MISMATCH, "m")).fails("error")
        assert not _report(warning("a.md", FindingCode.BROKEN_LINK, "w")).fails("error")

    def test_warning_threshold(self) -> None:
        report = _report(warning("a.md", FindingCode.BROKEN_LINK, "w"))
        assert report.fails(Severity.WARNING)
        assert report.exit_code("warning") == 1
        assert report.exit_code("error") == 0

    def test_info_never_fails(self) -> None:
        report = _report(info("a.md", FindingCode.ORPHAN_DOCUMENT, "o"))
        assert not report.fails("warning")
        assert report.exit_code("warning") == 0


class TestPresentation:
    def test_by_document_orders_by_severity(self) -> None:
        report = _report(
            info("a.md", FindingCode.ORPHAN_DOCUMENT, "o"),
            warning("a.md", FindingCode.BROKEN_LINK, "w"),
            error("a.md", FindingCode.TYPE_MISMATCH, "e"),
            warning("0.md", FindingCode.BROKEN_LINK, "w"),
        )
        groups = report.by_document()
        assert list(groups) == ["0.md", "a.md"]
        assert [f.severity for f in groups["a.md"]] == [
            Severity.ERROR,
            Severity.WARNING,
            Severity.INFO,
        ]

    def test_to_dict(self) -> None:
        report = _report(
            warning("a.md", FindingCode.BROKEN_LINK, "w", line=4),
            info("b.md", FindingCode.ORPHAN_DOCUMENT, "o"),
        )
        data = report.to_dict()
        assert data["documents_scanned"] == 3
        assert data["edges"] == 2
        assert data["findings"][0] == {
            "document_path": "a.md",
            "severity": "warning",
            "code": "BROKEN_LINK",
            "message": "w",
            "line": 4,
        }
        assert "line" not in data["findings"][1]

    def test_round_trips_through_dict(self) -> None:
        report = _report(error("a.md", FindingCode.TYPE_MISMATCH, "m", line=2))
        assert Report.model_validate(report.to_dict()) == report
