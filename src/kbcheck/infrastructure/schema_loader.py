"""Schema configuration loading.

Accepts a YAML or JSON file holding either a list of rules or a mapping
with a ``rules`` list::

    rules:
      - key: name
        required: true
        type: string
        max_length: 64
        pattern: "^[a-z0-9]+(-[a-z0-9]+)*$"
      - key: model
        type: enum
        allowed_values: [sonnet, opus, haiku]

Any problem raises :class:`ConfigurationError`; the run must not start
without a usable schema.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from kbcheck.domain.errors import ConfigurationError
from kbcheck.domain.schema import SchemaRule

logger = logging.getLogger(__name__)


def _format_validation_error(index: int, exc: ValidationError) -> str:
    parts: list[str] = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return f"rule #{index + 1}: " + "; ".join(parts)


def parse_schema(data: Any, *, source: str | None = None) -> list[SchemaRule]:
    """Build rules from already-decoded schema *data*.

    Raises:
        ConfigurationError: Wrong shape, invalid rule, or a key declared
            twice for the same set of paths.
    """
    raw_rules = data.get("rules") if isinstance(data, dict) else data
    if not isinstance(raw_rules, list):
        msg = "schema must be a list of rules or a mapping with a 'rules' list"
        raise ConfigurationError(msg, source=source)

    rules: list[SchemaRule] = []
    seen: set[tuple[str, tuple[str, ...]]] = set()
    for index, raw in enumerate(raw_rules):
        if not isinstance(raw, dict):
            msg = f"rule #{index + 1}: expected a mapping, got {type(raw).__name__}"
            raise ConfigurationError(msg, source=source)
        try:
            rule = SchemaRule.model_validate(raw)
        except ValidationError as exc:
            raise ConfigurationError(_format_validation_error(index, exc), source=source) from exc
        scope = (rule.key, tuple(sorted(rule.paths)))
        if scope in seen:
            msg = f"rule #{index + 1}: field {rule.key!r} is declared more than once"
            raise ConfigurationError(msg, source=source)
        seen.add(scope)
        rules.append(rule)
    return rules


def load_schema(path: Path) -> list[SchemaRule]:
    """Load schema rules from a YAML or JSON file at *path*."""
    source = str(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        msg = f"cannot read schema file: {exc.strerror or exc}"
        raise ConfigurationError(msg, source=source) from exc

    try:
        data = YAML(typ="safe").load(raw)
    except YAMLError as exc:
        raise ConfigurationError(f"invalid schema file: {exc}", source=source) from exc

    rules = parse_schema(data, source=source)
    logger.debug("Loaded %d schema rules from %s", len(rules), source)
    return rules
