"""Graph model — upgrade nodes, prerequisite edges and build-time validation.

A ``GraphModel`` is built once per panel activation from a list of upgrade
definitions and is never mutated afterwards. Only prerequisite references
that resolve to a defined node become edges; everything else is reported as a
``Diagnostic`` and logged, never raised.
"""

from __future__ import annotations

import enum
import logging
from collections import deque
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

import networkx as nx

logger = logging.getLogger(__name__)


# ─── Nodes ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class UpgradeNode:
    """One upgrade in the dependency graph.

    ``prerequisite_ids`` keeps definition order and may name ids that do not
    exist; those are dropped by ``build_graph``.
    """

    id: str
    name: str = ""
    prerequisite_ids: tuple[str, ...] = ()

    @property
    def label(self) -> str:
        return self.name or self.id


def _coerce_node(definition: object) -> UpgradeNode:
    """Accept UpgradeNode, any object with id/name/prerequisite_ids, or a mapping."""
    if isinstance(definition, UpgradeNode):
        return definition

    if isinstance(definition, Mapping):
        node_id = definition.get("id") or ""
        name = definition.get("name") or ""
        prereqs = prerequisites_field(definition)
    else:
        node_id = getattr(definition, "id", "") or ""
        name = getattr(definition, "name", "") or ""
        prereqs = getattr(definition, "prerequisite_ids", ()) or ()

    return UpgradeNode(id=str(node_id), name=str(name), prerequisite_ids=coerce_ids(prereqs))


def prerequisites_field(row: Mapping) -> object:
    """Prerequisite list from a table row under any of its accepted keys."""
    return row.get("prerequisiteIds") or row.get("prerequisite_ids") or row.get("requires") or ()


def coerce_ids(value: object) -> tuple[str, ...]:
    """Normalise a prerequisite field: a bare string is one id, None entries are dropped."""
    if not value:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(str(p) for p in value if p is not None)


# ─── Diagnostics ──────────────────────────────────────────────────────────────


class DiagnosticKind(enum.Enum):
    UNKNOWN_PREREQUISITE = "unknown_prerequisite"
    CYCLIC_DEPENDENCY = "cyclic_dependency"
    DUPLICATE_IDENTIFIER = "duplicate_identifier"


_ERROR_KINDS = {DiagnosticKind.CYCLIC_DEPENDENCY}


@dataclass(frozen=True)
class Diagnostic:
    """A build-time anomaly. Surfaced to the operator, never to the player."""

    kind: DiagnosticKind
    node_id: str
    message: str
    prerequisite_id: str | None = None

    @property
    def is_error(self) -> bool:
        return self.kind in _ERROR_KINDS


@dataclass
class ValidationReport:
    """All diagnostics collected while building one ``GraphModel``."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def ok(self) -> bool:
        """True when the layout built from this model is fully validated."""
        return not self.errors

    def by_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.kind == kind]

    def add(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        if diagnostic.is_error:
            logger.error(diagnostic.message)
        else:
            logger.warning(diagnostic.message)


# ─── Graph Model ──────────────────────────────────────────────────────────────


class GraphModel:
    """Immutable-per-build view of upgrade nodes and their existing edges.

    Attributes:
        nodes: id → UpgradeNode, in definition order.
        digraph: networkx DiGraph with an edge prerequisite → dependent for
            every prerequisite reference that resolved to a node.
        cyclic: ids that lie on a cycle or depend on one.
        report: diagnostics collected during the build.
    """

    def __init__(
        self,
        nodes: dict[str, UpgradeNode],
        digraph: nx.DiGraph,
        cyclic: frozenset[str],
        report: ValidationReport,
    ) -> None:
        self.nodes = nodes
        self.digraph = digraph
        self.cyclic = cyclic
        self.report = report

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self):
        return iter(self.nodes.values())

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def prerequisites(self, node_id: str) -> list[str]:
        """Existing prerequisites of ``node_id`` in definition order."""
        return [p for p in _unique(self.nodes[node_id].prerequisite_ids) if p in self.nodes]

    def dependents(self, node_id: str) -> list[str]:
        """Nodes listing ``node_id`` as an existing prerequisite, in definition order."""
        return list(self.digraph.successors(node_id))

    def edges(self) -> list[tuple[str, str]]:
        """Every existing (prerequisite, dependent) pair, dependents in definition order."""
        return [(p, d) for d in self.nodes for p in self.prerequisites(d)]

    def in_degree(self, node_id: str) -> int:
        return self.digraph.in_degree(node_id)

    @classmethod
    def build(cls, definitions: Iterable[object]) -> GraphModel:
        return build_graph(definitions)


def _unique(ids: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for i in ids:
        if i and i not in seen:
            seen.add(i)
            out.append(i)
    return out


def kahn_order(digraph: nx.DiGraph, roots_first: Iterable[str]) -> tuple[list[str], set[str]]:
    """Peel zero-in-degree nodes off ``digraph``.

    Returns (visit order, ids whose in-degree never reached zero). The initial
    queue follows ``roots_first`` so the visit order is deterministic.
    """
    in_deg: dict[str, int] = {n: digraph.in_degree(n) for n in digraph.nodes}
    queue: deque[str] = deque(n for n in roots_first if in_deg[n] == 0)
    order: list[str] = []

    while queue:
        node = queue.popleft()
        order.append(node)
        for dep in digraph.successors(node):
            in_deg[dep] -= 1
            if in_deg[dep] == 0:
                queue.append(dep)

    stuck = {n for n, deg in in_deg.items() if deg > 0}
    return order, stuck


def build_graph(definitions: Iterable[object]) -> GraphModel:
    """Build a ``GraphModel`` from upgrade definitions.

    Never raises on bad data: unknown prerequisites and cycles are recorded in
    ``model.report`` and logged. An empty input yields an empty model.
    """
    report = ValidationReport()
    nodes: dict[str, UpgradeNode] = {}

    for definition in definitions:
        node = _coerce_node(definition)
        if not node.id:
            continue
        if node.id in nodes:
            report.add(
                Diagnostic(
                    kind=DiagnosticKind.DUPLICATE_IDENTIFIER,
                    node_id=node.id,
                    message=f"Upgrade '{node.id}' is defined more than once; keeping the last definition.",
                )
            )
            # Re-insert so the surviving definition takes the later slot.
            del nodes[node.id]
        nodes[node.id] = node

    digraph: nx.DiGraph = nx.DiGraph()
    digraph.add_nodes_from(nodes)

    for node in nodes.values():
        for req_id in _unique(node.prerequisite_ids):
            if req_id not in nodes:
                report.add(
                    Diagnostic(
                        kind=DiagnosticKind.UNKNOWN_PREREQUISITE,
                        node_id=node.id,
                        prerequisite_id=req_id,
                        message=f"Upgrade '{node.id}' requires missing id '{req_id}'.",
                    )
                )
                continue
            digraph.add_edge(req_id, node.id)

    _, stuck = kahn_order(digraph, nodes)
    for node_id in nodes:
        if node_id in stuck:
            report.add(
                Diagnostic(
                    kind=DiagnosticKind.CYCLIC_DEPENDENCY,
                    node_id=node_id,
                    message=f"Cycle involving upgrade '{node_id}'; pinned to layer 0.",
                )
            )

    logger.debug(
        "built upgrade graph: %d nodes, %d edges, %d diagnostics",
        len(nodes),
        digraph.number_of_edges(),
        len(report.diagnostics),
    )
    return GraphModel(nodes=nodes, digraph=digraph, cyclic=frozenset(stuck), report=report)
