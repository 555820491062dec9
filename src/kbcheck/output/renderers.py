"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`;
unknown ops fall through to a generic key-value renderer. Finding
messages are rendered as :class:`~rich.text.Text`, never as markup, since
they routinely contain square brackets.
"""

from __future__ import annotations

import json as _json
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from kbcheck.output.console import create_console, get_output, style_for_severity
from kbcheck.services.report import Report

if TYPE_CHECKING:
    from collections.abc import Callable

    from rich.console import Console

    from kbcheck.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to text via Rich."""
    console = create_console()
    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)
    return get_output(console).rstrip("\n")


def render_report(report: Report, *, verbose: bool = False) -> str:
    """Human-readable summary of *report*.

    Findings are grouped by document path; within a document they are
    ordered by severity, then code.
    """
    console = create_console()
    _print_report(console, report, verbose=verbose)
    return get_output(console).rstrip("\n")


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text.assemble(("OK", "kb.ok"), (f"  {result.op}", "kb.op")))


def _field(console: Console, key: str, value: Any) -> None:
    console.print(Text.assemble((f"  {key}: ", "kb.key"), str(value)), soft_wrap=True)


def _summary_line(report: Report) -> Text:
    errors = report.counts.get("error", 0)
    warnings = report.counts.get("warning", 0)
    infos = report.counts.get("info", 0)
    return Text(
        f"{report.documents_scanned} documents, {errors} errors, "
        f"{warnings} warnings, {infos} info, {report.edges} links"
    )


def _print_report(console: Console, report: Report, *, verbose: bool = False) -> None:
    groups = report.by_document()
    if not groups:
        console.print(Text.assemble(("OK", "kb.ok"), "  No findings."))
    for path, findings in groups.items():
        console.print(Text(path, style="kb.path"), soft_wrap=True)
        for finding in findings:
            severity = finding.severity.value
            line = Text("  ")
            line.append(f"{severity:<8}", style=style_for_severity(severity))
            line.append(f"{finding.code.value}  ", style="kb.code")
            line.append(finding.message)
            if finding.line is not None:
                line.append(f"  (line {finding.line})", style="kb.line")
            console.print(line, soft_wrap=True)
    console.print()
    console.print(_summary_line(report))


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    console.print(
        Text.assemble(("ERROR", "kb.fail"), (f"  {result.op}", "kb.op"), " - ", msg),
        soft_wrap=True,
    )
    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            _field(console, k, v)


# ── Operation renderers ───────────────────────────────────────────────


def _render_check(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _print_report(console, Report.model_validate(result.data), verbose=verbose)


def _render_graph(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    nodes = result.data.get("nodes", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Document", style="kb.path")
    table.add_column("In", justify="right")
    table.add_column("Out", justify="right")
    table.add_column("Entry")
    for node in nodes:
        table.add_row(
            Text(str(node["path"])),
            str(node["in_degree"]),
            str(node["out_degree"]),
            "yes" if node.get("entry_point") else "",
        )
    console.print(table)

    if verbose:
        for edge in result.data.get("edges", []):
            console.print(Text(f"  {edge['source']} -> {edge['target']}"), soft_wrap=True)

    cycles = result.data.get("cycles", [])
    for cycle in cycles:
        console.print(Text("  cycle: " + " -> ".join([*cycle, cycle[0]])), soft_wrap=True)
    console.print(
        f"\n{len(nodes)} documents, {len(result.data.get('edges', []))} links, "
        f"{len(cycles)} cycles"
    )


def _render_schema(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    _field(console, "path", result.data.get("path", ""))
    rules = result.data.get("rules", [])
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Key", style="kb.code")
    table.add_column("Type")
    table.add_column("Required")
    table.add_column("Constraints")
    for rule in rules:
        constraints: list[str] = []
        if "max_length" in rule:
            constraints.append(f"max {rule['max_length']}")
        if "allowed_values" in rule:
            constraints.append("one of " + ", ".join(sorted(rule["allowed_values"])))
        if "pattern" in rule:
            constraints.append(f"matches {rule['pattern']}")
        if rule.get("paths"):
            constraints.append("paths " + ", ".join(rule["paths"]))
        table.add_row(
            Text(str(rule["key"])),
            Text(str(rule["type"])),
            "yes" if rule.get("required") else "",
            Text("; ".join(constraints)),
        )
    console.print(table)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Fallback renderer: status line + all data as key-value pairs."""
    _status_line(console, result)
    for key, value in result.data.items():
        if isinstance(value, (dict, list)):
            _field(console, key, _json.dumps(value, separators=(",", ":")))
        else:
            _field(console, key, value)


# ── Dispatch table ────────────────────────────────────────────────────

_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "check": _render_check,
    "graph": _render_graph,
    "validate_schema": _render_schema,
}
