"""DocumentGraph: NetworkX digraph of scanned documents and resolved links.

Built once per scan, after every document has been parsed and every link
resolved. Nodes are keyed by scan-relative path; there are no object
references between documents.
Cycle and orphan reports are findings, never exceptions.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from typing import Any

import networkx as nx

from kbcheck.domain.findings import ValidationFinding, info, sort_findings, warning
from kbcheck.domain.links import Edge
from kbcheck.domain.types import FindingCode
from kbcheck.infrastructure.filesystem import matches_glob

type _Graph = nx.DiGraph

DEFAULT_ENTRY_POINTS: tuple[str, ...] = ("README.md", "index.md")


class _Visit(Enum):
    UNVISITED = 0
    IN_PROGRESS = 1
    DONE = 2


def _canonical_cycle(stack: Sequence[str]) -> tuple[str, ...]:
    """Rotate *stack* so that it starts at its lexicographically smallest path."""
    start = stack.index(min(stack))
    return tuple(stack[start:]) + tuple(stack[:start])


class DocumentGraph:
    """Directed graph of documents with cycle and orphan detection.

    Args:
        paths: Every document path of the scan (isolated ones included).
        edges: Resolved links. Edges to unknown paths are rejected.
        entry_points: Globs naming documents that may have no inbound
            links (typically a root index).
    """

    def __init__(
        self,
        paths: Iterable[str],
        edges: Iterable[Edge] = (),
        *,
        entry_points: Sequence[str] = DEFAULT_ENTRY_POINTS,
    ) -> None:
        self._entry_points = tuple(entry_points)
        g: _Graph = nx.DiGraph()
        g.add_nodes_from(sorted(paths))
        for edge in edges:
            if edge.source not in g or edge.target not in g:
                msg = f"Edge {edge.source} -> {edge.target} references an unknown document"
                raise ValueError(msg)
            g.add_edge(edge.source, edge.target)
        self._graph = g

    @property
    def graph(self) -> _Graph:
        return self._graph

    @property
    def edge_count(self) -> int:
        return self._graph.number_of_edges()

    def is_entry_point(self, path: str) -> bool:
        return any(matches_glob(path, pattern) for pattern in self._entry_points)

    def orphans(self) -> list[ValidationFinding]:
        """Documents nothing links to, excluding entry points (severity info)."""
        findings: list[ValidationFinding] = []
        for node in sorted(self._graph.nodes):
            if self._graph.in_degree(node) == 0 and not self.is_entry_point(node):
                findings.append(
                    info(
                        node,
                        FindingCode.ORPHAN_DOCUMENT,
                        "No other document links here",
                    )
                )
        return findings

    def find_cycles(self) -> list[tuple[str, ...]]:
        """Return each distinct cycle once, rotated to start at its smallest path.

        Iterative depth-first search with three visitation states; an edge
        into an in-progress node closes a cycle along the current stack.
        Nodes and successors are visited in sorted order.
        """
        state = {node: _Visit.UNVISITED for node in self._graph.nodes}
        found: dict[tuple[str, ...], None] = {}

        for root in sorted(self._graph.nodes):
            if state[root] is not _Visit.UNVISITED:
                continue
            stack: list[str] = [root]
            iters = [iter(sorted(self._graph.successors(root)))]
            state[root] = _Visit.IN_PROGRESS
            while stack:
                nxt = next(iters[-1], None)
                if nxt is None:
                    state[stack.pop()] = _Visit.DONE
                    iters.pop()
                    continue
                if state[nxt] is _Visit.IN_PROGRESS:
                    cycle = stack[stack.index(nxt) :]
                    found.setdefault(_canonical_cycle(cycle), None)
                elif state[nxt] is _Visit.UNVISITED:
                    state[nxt] = _Visit.IN_PROGRESS
                    stack.append(nxt)
                    iters.append(iter(sorted(self._graph.successors(nxt))))

        return sorted(found)

    def cycles(self) -> list[ValidationFinding]:
        """One ``REFERENCE_CYCLE`` warning per cycle, on its smallest path."""
        findings = [
            warning(
                cycle[0],
                FindingCode.REFERENCE_CYCLE,
                "Reference cycle: " + " -> ".join((*cycle, cycle[0])),
            )
            for cycle in self.find_cycles()
        ]
        return sort_findings(findings)

    def to_dict(self) -> dict[str, Any]:
        """Plain node/edge export, sorted."""
        return {
            "nodes": [
                {
                    "path": node,
                    "in_degree": self._graph.in_degree(node),
                    "out_degree": self._graph.out_degree(node),
                    "entry_point": self.is_entry_point(node),
                }
                for node in sorted(self._graph.nodes)
            ],
            "edges": [
                {"source": source, "target": target}
                for source, target in sorted(self._graph.edges)
            ],
        }
