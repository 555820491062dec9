"""Tests for ServiceResult and ServiceError."""

import json

from kbcheck.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="check", data={"documents_scanned": 2})
        assert result.ok is True
        assert result.op == "check"
        assert result.data == {"documents_scanned": 2}
        assert result.warnings == []
        assert result.error is None

    def test_failure_helper(self) -> None:
        result = ServiceResult.failure("check", "INVALID_ROOT", "Not a directory", root="x")
        assert result.ok is False
        assert result.error == ServiceError(
            code="INVALID_ROOT", message="Not a directory", detail={"root": "x"}
        )

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="graph", data={"nodes": []}, warnings=["w"])
        payload = json.loads(result.model_dump_json(exclude_none=True))
        assert payload == {"ok": True, "op": "graph", "data": {"nodes": []}, "warnings": ["w"]}

    def test_success_helper_copies_warnings(self) -> None:
        result = ServiceResult.success("graph", {"nodes": []}, (w for w in ["a", "b"]))
        assert result.ok is True
        assert result.warnings == ["a", "b"]
