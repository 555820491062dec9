"""Severity levels, finding codes, and schema field types."""

from __future__ import annotations

from enum import StrEnum


class Severity(StrEnum):
    """How serious a finding is.

    ``info`` findings are reported but never fail a run.
    """

    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


# Report ordering: errors first.
SEVERITY_RANK: dict[Severity, int] = {
    Severity.ERROR: 0,
    Severity.WARNING: 1,
    Severity.INFO: 2,
}


class FindingCode(StrEnum):
    """Taxonomy of reportable issues."""

    UNPARSEABLE_DOCUMENT = "UNPARSEABLE_DOCUMENT"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    TYPE_MISMATCH = "TYPE_MISMATCH"
    INVALID_ENUM_VALUE = "INVALID_ENUM_VALUE"
    FIELD_TOO_LONG = "FIELD_TOO_LONG"
    PATTERN_MISMATCH = "PATTERN_MISMATCH"
    UNKNOWN_FIELD = "UNKNOWN_FIELD"
    BROKEN_LINK = "BROKEN_LINK"
    ORPHAN_DOCUMENT = "ORPHAN_DOCUMENT"
    REFERENCE_CYCLE = "REFERENCE_CYCLE"
    FILENAME_CONVENTION = "FILENAME_CONVENTION"


class FieldType(StrEnum):
    """Value types a schema rule can require."""

    STRING = "string"
    STRING_ARRAY = "stringArray"
    ENUM = "enum"
    INTEGER = "integer"
    BOOLEAN = "boolean"
