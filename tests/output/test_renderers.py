"""Tests for the op-dispatched Rich renderers."""

from __future__ import annotations

from kbcheck.domain.findings import error, info, warning
from kbcheck.domain.types import FindingCode
from kbcheck.output.renderers import render_report, render_result
from kbcheck.services.report import Report, build_report
from kbcheck.services.result import ServiceError, ServiceResult


def _sample_report() -> Report:
    return build_report(
        3,
        [
            warning("a.md", FindingCode.BROKEN_LINK, "Link target '[x].md' is missing", line=4),
            error("a.md", FindingCode.MISSING_REQUIRED_FIELD, "Missing required field 'name'"),
            info("b.md", FindingCode.ORPHAN_DOCUMENT, "No other document links here"),
        ],
        edges=1,
    )


class TestRenderReport:
    def test_grouped_by_document(self) -> None:
        lines = render_report(_sample_report()).splitlines()
        assert lines[0] == "a.md"
        assert lines[1] == "  error   MISSING_REQUIRED_FIELD  Missing required field 'name'"
        assert lines[2] == "  warning BROKEN_LINK  Link target '[x].md' is missing  (line 4)"
        assert lines[3] == "b.md"
        assert lines[4] == "  info    ORPHAN_DOCUMENT  No other document links here"

    def test_summary_line(self) -> None:
        output = render_report(_sample_report())
        assert output.splitlines()[-1] == "3 documents, 1 errors, 1 warnings, 1 info, 1 links"

    def test_no_findings(self) -> None:
        output = render_report(build_report(2, []))
        assert output.splitlines()[0] == "OK  No findings."
        assert "2 documents, 0 errors" in output

    def test_no_ansi(self) -> None:
        assert "\x1b" not in render_report(_sample_report())


class TestRenderResult:
    def test_check_op(self) -> None:
        result = ServiceResult(ok=True, op="check", data=_sample_report().to_dict())
        assert render_result(result) == render_report(_sample_report())

    def test_graph_op(self) -> None:
        data = {
            "nodes": [
                {"path": "README.md", "in_degree": 1, "out_degree": 1, "entry_point": True},
                {"path": "a.md", "in_degree": 1, "out_degree": 1, "entry_point": False},
            ],
            "edges": [
                {"source": "README.md", "target": "a.md"},
                {"source": "a.md", "target": "README.md"},
            ],
            "cycles": [["README.md", "a.md"]],
        }
        output = render_result(ServiceResult(ok=True, op="graph", data=data))
        assert "README.md" in output
        assert "cycle: README.md -> a.md -> README.md" in output
        assert output.splitlines()[-1] == "2 documents, 2 links, 1 cycles"

    def test_graph_verbose_lists_edges(self) -> None:
        data = {
            "nodes": [{"path": "a.md", "in_degree": 0, "out_degree": 0, "entry_point": False}],
            "edges": [{"source": "a.md", "target": "b.md"}],
            "cycles": [],
        }
        result = ServiceResult(ok=True, op="graph", data=data)
        assert "a.md -> b.md" not in render_result(result)
        assert "a.md -> b.md" in render_result(result, verbose=True)

    def test_schema_op(self) -> None:
        data = {
            "path": "schema.yaml",
            "count": 1,
            "rules": [
                {
                    "key": "model",
                    "required": True,
                    "type": "enum",
                    "allowed_values": ["haiku", "opus"],
                    "paths": [],
                }
            ],
        }
        output = render_result(ServiceResult(ok=True, op="validate_schema", data=data))
        assert "validate_schema" in output
        assert "path: schema.yaml" in output
        assert "one of haiku, opus" in output

    def test_error_verbose_detail(self) -> None:
        result = ServiceResult(
            ok=False,
            op="check",
            error=ServiceError(code="INVALID_ROOT", message="Not a directory", detail={"root": "x"}),
        )
        assert "root: x" not in render_result(result)
        assert "root: x" in render_result(result, verbose=True)
