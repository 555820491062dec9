"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``kbcheck.toml`` only holds
overrides. An empty (or absent) file is a valid configuration.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from kbcheck.domain.links import DEFAULT_EXTENSIONS, DEFAULT_INDEX_NAMES
from kbcheck.infrastructure.filesystem import DEFAULT_INCLUDE
from kbcheck.infrastructure.graph import DEFAULT_ENTRY_POINTS


class ScanConfig(BaseModel):
    """[scan] section."""

    model_config = {"frozen": True}

    include: tuple[str, ...] = DEFAULT_INCLUDE
    exclude: tuple[str, ...] = ()
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    index_names: tuple[str, ...] = DEFAULT_INDEX_NAMES
    entry_points: tuple[str, ...] = DEFAULT_ENTRY_POINTS
    workers: int = Field(default=1, ge=1)


class ReportConfig(BaseModel):
    """[report] section."""

    model_config = {"frozen": True}

    format: Literal["json", "text"] = "text"
    fail_on: Literal["error", "warning"] = "error"


class RulesConfig(BaseModel):
    """[rules] section.

    ``schema_path`` is resolved against the directory holding ``kbcheck.toml``.
    """

    model_config = {"frozen": True}

    schema_path: str | None = None


class LintConfig(BaseModel):
    """[lint] section."""

    model_config = {"frozen": True}

    # Regex every document file stem must fully match, e.g. kebab-case.
    filename_pattern: str | None = None
    filename_exempt: tuple[str, ...] = ("README.md", "CHANGELOG.md", "LICENSE.md")


class WatchConfig(BaseModel):
    """[watch] section."""

    model_config = {"frozen": True}

    interval: float = Field(default=1.0, gt=0)


class PluginsConfig(BaseModel):
    """[plugins] section."""

    model_config = {"frozen": True}

    entry_points: bool = True
