"""Schema rules and front-matter validation.

Rules are loaded once at startup (see :mod:`kbcheck.infrastructure.schema_loader`)
and never mutated. Validation is a pure function of
``(path, front_matter, rules)`` and returns findings sorted by
``(document_path, code, message)`` so results do not depend on mapping
iteration order.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from fnmatch import fnmatchcase
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from kbcheck.domain.findings import ValidationFinding, error, sort_findings, warning
from kbcheck.domain.types import FieldType, FindingCode

_LENGTH_TYPES = frozenset({FieldType.STRING, FieldType.STRING_ARRAY})


class SchemaRule(BaseModel):
    """Constraints for one front-matter field.

    Accepts both snake_case and camelCase spellings (``max_length`` /
    ``maxLength``, ``allowed_values`` / ``allowedValues``).
    """

    model_config = {"frozen": True, "extra": "forbid", "populate_by_name": True}

    key: str = Field(min_length=1)
    required: bool = False
    type: FieldType = FieldType.STRING
    allowed_values: frozenset[str] | None = Field(default=None, alias="allowedValues")
    max_length: int | None = Field(default=None, alias="maxLength", gt=0)
    pattern: str | None = None
    paths: tuple[str, ...] = ()

    @field_validator("pattern")
    @classmethod
    def _compile_pattern(cls, value: str | None) -> str | None:
        if value is not None:
            try:
                re.compile(value)
            except re.error as exc:
                msg = f"invalid pattern {value!r}: {exc}"
                raise ValueError(msg) from exc
        return value

    @model_validator(mode="after")
    def _check_type_options(self) -> SchemaRule:
        if self.type is FieldType.ENUM and not self.allowed_values:
            msg = f"rule {self.key!r}: enum fields need a non-empty allowed_values"
            raise ValueError(msg)
        if self.type is not FieldType.ENUM and self.allowed_values is not None:
            msg = f"rule {self.key!r}: allowed_values is only valid for enum fields"
            raise ValueError(msg)
        if self.type not in _LENGTH_TYPES and self.max_length is not None:
            msg = f"rule {self.key!r}: max_length needs a string or stringArray field"
            raise ValueError(msg)
        if self.type not in _LENGTH_TYPES and self.pattern is not None:
            msg = f"rule {self.key!r}: pattern needs a string or stringArray field"
            raise ValueError(msg)
        return self

    def applies_to(self, path: str) -> bool:
        """Whether this rule governs the document at *path*.

        Rules without ``paths`` apply everywhere; otherwise *path* must
        match one of the shell-style patterns.
        """
        if not self.paths:
            return True
        return any(fnmatchcase(path, pattern) for pattern in self.paths)


def describe_type(value: Any) -> str:
    """Human-readable YAML type name of *value*."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "list"
    if isinstance(value, dict):
        return "mapping"
    return type(value).__name__


def _matches_type(field_type: FieldType, value: Any) -> bool:
    if field_type in (FieldType.STRING, FieldType.ENUM):
        return isinstance(value, str)
    if field_type is FieldType.STRING_ARRAY:
        return isinstance(value, list) and all(isinstance(v, str) for v in value)
    if field_type is FieldType.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, bool)


def _check_strings(path: str, rule: SchemaRule, values: list[str]) -> list[ValidationFinding]:
    findings: list[ValidationFinding] = []
    for text in values:
        if rule.max_length is not None and len(text) > rule.max_length:
            findings.append(
                error(
                    path,
                    FindingCode.FIELD_TOO_LONG,
                    f"Field '{rule.key}' is {len(text)} characters; "
                    f"maximum is {rule.max_length}",
                )
            )
        if rule.pattern is not None and re.fullmatch(rule.pattern, text) is None:
            findings.append(
                error(
                    path,
                    FindingCode.PATTERN_MISMATCH,
                    f"Field '{rule.key}' value {text!r} does not match {rule.pattern!r}",
                )
            )
    return findings


def _check_value(path: str, rule: SchemaRule, value: Any) -> list[ValidationFinding]:
    if not _matches_type(rule.type, value):
        expected = rule.type.value
        if rule.type is FieldType.ENUM:
            expected = "enum (string)"
        return [
            error(
                path,
                FindingCode.TYPE_MISMATCH,
                f"Field '{rule.key}' expected {expected}, got {describe_type(value)}",
            )
        ]

    if rule.type is FieldType.ENUM:
        assert rule.allowed_values is not None
        if value not in rule.allowed_values:
            allowed = ", ".join(sorted(rule.allowed_values))
            return [
                error(
                    path,
                    FindingCode.INVALID_ENUM_VALUE,
                    f"Field '{rule.key}' value {value!r} is not one of: {allowed}",
                )
            ]
        return []
    if rule.type is FieldType.STRING:
        return _check_strings(path, rule, [value])
    if rule.type is FieldType.STRING_ARRAY:
        return _check_strings(path, rule, value)
    return []


def validate_frontmatter(
    path: str,
    front_matter: dict[str, Any],
    rules: Sequence[SchemaRule],
) -> list[ValidationFinding]:
    """Check *front_matter* of the document at *path* against *rules*.

    A key whose value is null counts as absent. Keys not declared by any
    rule produce an ``UNKNOWN_FIELD`` warning.
    """
    findings: list[ValidationFinding] = []
    declared = {rule.key for rule in rules}

    for rule in rules:
        if not rule.applies_to(path):
            continue
        value = front_matter.get(rule.key)
        if value is None:
            if rule.required:
                findings.append(
                    error(
                        path,
                        FindingCode.MISSING_REQUIRED_FIELD,
                        f"Missing required field '{rule.key}'",
                    )
                )
            continue
        findings.extend(_check_value(path, rule, value))

    for key in front_matter:
        if key not in declared:
            findings.append(
                warning(path, FindingCode.UNKNOWN_FIELD, f"Field '{key}' is not declared")
            )

    return sort_findings(findings)
