"""Shared pytest fixtures and test helpers for kbcheck tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from kbcheck.config.settings import KbSettings
from kbcheck.domain.frontmatter import render_frontmatter

SCHEMA_YAML = """\
rules:
  - key: name
    required: true
    type: string
    max_length: 64
  - key: description
    required: true
    type: string
  - key: tools
    type: stringArray
  - key: model
    type: enum
    allowed_values: [sonnet, opus, haiku]
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep KBCHECK_* variables from the outer environment out of tests."""
    for key in list(os.environ):
        if key.startswith("KBCHECK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def _reset_root_handlers() -> Generator[None]:
    """Drop handlers that CLI runs bind to their captured stderr."""
    root = logging.getLogger()
    original = root.handlers[:]
    yield
    root.handlers = original


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    """Empty document root, separate from any config file in tmp_path."""
    root = tmp_path / "docs"
    root.mkdir()
    return root


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    """Schema with required name/description, optional tools and model."""
    path = tmp_path / "schema.yaml"
    path.write_text(SCHEMA_YAML, encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> KbSettings:
    """Default settings, isolated from any kbcheck.toml above tmp_path."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "kbcheck.toml").write_text("", encoding="utf-8")
    return KbSettings.from_cli(start=tmp_path)


@pytest.fixture
def _isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run CLI tests from tmp_path with an empty kbcheck.toml.

    Use via ``@pytest.mark.usefixtures("_isolated_cwd")`` on command test
    classes.
    """
    (tmp_path / "kbcheck.toml").write_text("", encoding="utf-8")
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Shared test helpers
# ---------------------------------------------------------------------------


def write_doc(
    root: Path,
    rel: str,
    body: str = "",
    front_matter: dict[str, Any] | None = None,
) -> Path:
    """Write a markdown document under *root*, creating parent directories."""
    path = root / rel
    path.parent.mkdir(parents=True, exist_ok=True)
    text = render_frontmatter(front_matter, body) if front_matter is not None else body
    path.write_text(text, encoding="utf-8")
    return path


def codes(findings: Any) -> list[str]:
    """Finding codes as plain strings, accepting models or JSON dicts."""
    return [f["code"] if isinstance(f, dict) else f.code.value for f in findings]
