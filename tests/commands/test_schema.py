"""Tests for the schema CLI command group."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from kbcheck.cli import cli


@pytest.mark.usefixtures("_isolated_cwd")
class TestSchemaValidate:
    def test_valid_schema(self, cli_runner: CliRunner, schema_file: Path) -> None:
        result = cli_runner.invoke(cli, ["schema", "validate", str(schema_file)])
        assert result.exit_code == 0
        assert "validate_schema" in result.stdout
        assert "description" in result.stdout
        assert "one of haiku, opus, sonnet" in result.stdout

    def test_json(self, cli_runner: CliRunner, schema_file: Path) -> None:
        result = cli_runner.invoke(
            cli, ["schema", "validate", str(schema_file), "--format", "json"]
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)["data"]
        assert data["count"] == 4
        assert [rule["key"] for rule in data["rules"]] == ["name", "description", "tools", "model"]

    def test_malformed_schema(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.yaml"
        bad.write_text("rules:\n  - key: name\n    max_length: -1\n", encoding="utf-8")
        result = cli_runner.invoke(cli, ["schema", "validate", str(bad)])
        assert result.exit_code == 2
        assert "rule #1" in result.stderr

    def test_missing_file(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        result = cli_runner.invoke(cli, ["schema", "validate", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 2

    def test_group_help(self, cli_runner: CliRunner) -> None:
        result = cli_runner.invoke(cli, ["schema", "--help"])
        assert result.exit_code == 0
        assert "validate" in result.output
