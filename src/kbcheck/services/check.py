"""CheckService: the document set validation pipeline.

Two phases with a barrier in between:

1. Per document (independent, optionally on a thread pool): parse
   front-matter, validate it against the schema, extract links, run
   plugin lint hooks.
2. Whole set (after every document is parsed): resolve links against the
   complete path set, build the graph, detect cycles and orphans, emit
   the report.

Per-document failures become ``UNPARSEABLE_DOCUMENT`` findings; only
configuration problems stop a run.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from kbcheck.config.logging import bind_scan_context, carry_scan_context
from kbcheck.domain.document import Document
from kbcheck.domain.errors import ConfigurationError, ParseError, ScanCancelled
from kbcheck.domain.findings import ValidationFinding, error, warning
from kbcheck.domain.frontmatter import parse_frontmatter
from kbcheck.domain.links import Edge, extract_links, resolve_links
from kbcheck.domain.schema import SchemaRule, validate_frontmatter
from kbcheck.domain.types import FindingCode
from kbcheck.infrastructure.filesystem import SourceFile, find_documents, read_sources
from kbcheck.infrastructure.graph import DocumentGraph
from kbcheck.infrastructure.schema_loader import load_schema
from kbcheck.services.report import Report, build_report
from kbcheck.services.result import ServiceResult

if TYPE_CHECKING:
    from kbcheck.config.models import ScanConfig
    from kbcheck.config.settings import KbSettings
    from kbcheck.plugins.manager import PluginManager

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentOutcome:
    """Phase-one result for one source file.

    ``document`` is None when the file could not be read or parsed.
    """

    path: str
    document: Document | None
    findings: tuple[ValidationFinding, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class ScanResult:
    """Report plus the graph it was computed from."""

    report: Report
    graph: DocumentGraph
    warnings: tuple[str, ...] = ()


def _body_first_line(text: str, body: str) -> int:
    """1-based file line on which *body* starts."""
    if body is text:
        return 1
    normalized = text.replace("\r\n", "\n")
    return normalized.count("\n") - body.count("\n") + 1


def _check_cancelled(cancel: threading.Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise ScanCancelled


class CheckService:
    """Validates a document set against schema rules and link integrity.

    Args:
        settings: Effective settings.
        plugins: Plugin manager for lint hooks; None disables plugins.
        scan: Scan options overriding ``settings.scan`` (CLI flags).
    """

    def __init__(
        self,
        settings: KbSettings,
        *,
        plugins: PluginManager | None = None,
        scan: ScanConfig | None = None,
    ) -> None:
        self._settings = settings
        self._plugins = plugins
        self._scan = scan or settings.scan

    @property
    def scan_config(self) -> ScanConfig:
        """The scan options in effect."""
        return self._scan

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(self, root: Path, *, schema_path: Path | None = None) -> ServiceResult:
        """Discover, read and validate every document under *root*."""
        try:
            rules = self.load_rules(schema_path)
        except ConfigurationError as exc:
            return ServiceResult.failure("check", "CONFIGURATION_ERROR", str(exc))

        try:
            sources = self.discover(root)
        except NotADirectoryError as exc:
            return ServiceResult.failure("check", "INVALID_ROOT", str(exc), root=str(root))

        result = self.validate(sources, rules)
        return ServiceResult.success("check", result.report.to_dict(), result.warnings)

    def graph(self, root: Path) -> ServiceResult:
        """Export the document graph of *root* (schema checks are skipped)."""
        try:
            sources = self.discover(root)
        except NotADirectoryError as exc:
            return ServiceResult.failure("graph", "INVALID_ROOT", str(exc), root=str(root))

        result = self.validate(sources, None)
        graph = result.graph
        data = graph.to_dict()
        data["cycles"] = [list(cycle) for cycle in graph.find_cycles()]
        return ServiceResult.success("graph", data, result.warnings)

    def validate_schema(self, path: Path) -> ServiceResult:
        """Load the schema at *path* and describe its rules."""
        try:
            rules = load_schema(path)
        except ConfigurationError as exc:
            return ServiceResult.failure("validate_schema", "CONFIGURATION_ERROR", str(exc))
        described: list[dict[str, Any]] = []
        for rule in rules:
            entry = rule.model_dump(mode="json", exclude_none=True)
            if "allowed_values" in entry:
                entry["allowed_values"] = sorted(entry["allowed_values"])
            described.append(entry)
        return ServiceResult.success(
            "validate_schema",
            {"path": str(path), "count": len(rules), "rules": described},
        )

    # ------------------------------------------------------------------
    # Pipeline stages
    # ------------------------------------------------------------------

    def load_rules(self, schema_path: Path | None = None) -> list[SchemaRule] | None:
        """Load rules from *schema_path*, else the configured schema, else None.

        Raises:
            ConfigurationError: The schema file is missing or malformed.
        """
        path = schema_path or self._settings.schema_file()
        if path is None:
            logger.debug("No schema configured; front-matter checks skipped")
            return None
        return load_schema(path)

    def discover(self, root: Path) -> list[SourceFile]:
        """Find and read the documents under *root*."""
        bind_scan_context(str(root), workers=self._scan.workers)
        paths = find_documents(root, include=self._scan.include, exclude=self._scan.exclude)
        logger.debug("Discovered %d documents under %s", len(paths), root)
        return read_sources(root, paths)

    def parse_document(
        self,
        source: SourceFile,
        rules: Sequence[SchemaRule] | None,
    ) -> DocumentOutcome:
        """Run phase one for a single source file.

        Never raises for document content problems; they become findings.
        """
        path = source.path
        if source.text is None:
            finding = error(
                path,
                FindingCode.UNPARSEABLE_DOCUMENT,
                f"Cannot read document: {source.read_error or 'unknown error'}",
            )
            return DocumentOutcome(path=path, document=None, findings=(finding,))

        try:
            front_matter, body = parse_frontmatter(source.text, path)
        except ParseError as exc:
            logger.debug("Unparseable document %s: %s", path, exc)
            finding = error(path, FindingCode.UNPARSEABLE_DOCUMENT, exc.reason, line=exc.line)
            return DocumentOutcome(path=path, document=None, findings=(finding,))

        links = extract_links(
            body,
            extensions=self._scan.extensions,
            first_line=_body_first_line(source.text, body),
        )
        document = Document(path=path, front_matter=front_matter, body=body, links=tuple(links))

        findings: list[ValidationFinding] = []
        if rules is not None:
            findings.extend(validate_frontmatter(path, front_matter, rules))

        warnings: list[str] = []
        if self._plugins is not None:
            extra, warnings = self._plugins.lint_document(document)
            findings.extend(extra)

        return DocumentOutcome(
            path=path,
            document=document,
            findings=tuple(findings),
            warnings=tuple(warnings),
        )

    def validate(
        self,
        sources: Sequence[SourceFile],
        rules: Sequence[SchemaRule] | None,
        *,
        cancel: threading.Event | None = None,
    ) -> ScanResult:
        """Validate *sources* and build the report.

        Args:
            sources: ``(path, text)`` inputs with unique paths.
            rules: Schema rules, or None to skip front-matter checks.
            cancel: Checked between documents; once set the scan stops
                with :class:`ScanCancelled` and produces no report.

        Raises:
            ScanCancelled: *cancel* was set before the scan finished.
            ValueError: Two sources share a path.
        """
        known_paths = {source.path for source in sources}
        if len(known_paths) != len(sources):
            msg = "Source paths must be unique within a scan"
            raise ValueError(msg)

        def run(source: SourceFile) -> DocumentOutcome:
            _check_cancelled(cancel)
            return self.parse_document(source, rules)

        workers = self._scan.workers
        if workers > 1 and len(sources) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                outcomes = list(pool.map(carry_scan_context(run), sources))
        else:
            outcomes = [run(source) for source in sources]

        # Barrier: every path is known before any link is resolved.
        _check_cancelled(cancel)

        findings: list[ValidationFinding] = []
        warnings: list[str] = []
        edges: list[Edge] = []
        for outcome in outcomes:
            findings.extend(outcome.findings)
            warnings.extend(outcome.warnings)
            if outcome.document is None:
                continue
            resolved, unresolved = resolve_links(
                outcome.path,
                outcome.document.links,
                known_paths,
                index_names=self._scan.index_names,
            )
            edges.extend(resolved)
            for link in unresolved:
                findings.append(
                    warning(
                        outcome.path,
                        FindingCode.BROKEN_LINK,
                        f"Link target '{link.target}' does not resolve to a scanned document",
                        line=link.line,
                    )
                )

        graph = DocumentGraph(known_paths, edges, entry_points=self._scan.entry_points)
        findings.extend(graph.cycles())
        findings.extend(graph.orphans())

        report = build_report(len(sources), findings, edges=graph.edge_count)
        if self._plugins is not None:
            warnings.extend(self._plugins.post_check(report))

        logger.debug(
            "Scan complete: %d documents, %d findings, %d edges",
            report.documents_scanned,
            len(report.findings),
            report.edges,
        )
        return ScanResult(report=report, graph=graph, warnings=tuple(warnings))
