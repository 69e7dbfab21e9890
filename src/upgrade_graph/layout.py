"""Layout module — layered layout pipeline for upgrade dependency graphs.

Phases:
  1. Graph model + validation (``model``)
  2. Layer assignment (``layering``)
  3. Crossing reduction (``crossing`` — median heuristic)
  4. Coordinate assignment (this file)
  5. Edge geometry (this file — straight segments, recomputed on demand)

Layout output is plain data; renderers consume it.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from upgrade_graph.config import LayoutConfig
from upgrade_graph.crossing import minimise_crossings
from upgrade_graph.layering import LayerAssignment
from upgrade_graph.model import Diagnostic, GraphModel, build_graph

logger = logging.getLogger(__name__)


# ─── Geometry Types ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Point:
    """A 2D point in panel coordinates (origin at the top-centre anchor)."""

    x: float
    y: float


@dataclass
class PlacedNode:
    """A positioned node in the layout."""

    id: str
    label: str
    layer: int
    order: int
    x: float
    y: float

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class Edge:
    """A straight prerequisite → dependent segment between two node centres."""

    prerequisite: str
    dependent: str
    start: Point
    end: Point


# ─── Coordinate Assignment ────────────────────────────────────────────────────


def place_nodes(
    ordering: list[list[str]],
    model: GraphModel,
    layer_spacing: float,
    node_spacing: float,
) -> list[PlacedNode]:
    """Assign (x, y) coordinates to every node in ``ordering``.

    Layers grow downward: y = -layer * layer_spacing. Each row of k nodes is
    centred on x = 0: the node at position i gets x = (i - (k - 1) / 2) *
    node_spacing.
    """
    nodes: list[PlacedNode] = []
    for layer_idx, layer_nodes in enumerate(ordering):
        k = len(layer_nodes)
        y = -layer_idx * layer_spacing
        for order, node_id in enumerate(layer_nodes):
            nodes.append(
                PlacedNode(
                    id=node_id,
                    label=model.nodes[node_id].label,
                    layer=layer_idx,
                    order=order,
                    x=(order - (k - 1) / 2) * node_spacing,
                    y=y,
                )
            )
    return nodes


# ─── Edge Geometry ────────────────────────────────────────────────────────────


def route_edges(model: GraphModel, placed: Iterable[PlacedNode]) -> list[Edge]:
    """Build one straight ``Edge`` per existing prerequisite reference.

    Endpoints are read from the current node coordinates every call; nothing
    is cached. References to unknown ids never reach the model, so they never
    produce an edge.
    """
    node_map: dict[str, PlacedNode] = {n.id: n for n in placed}
    edges: list[Edge] = []
    for prereq, dependent in model.edges():
        from_node = node_map.get(prereq)
        to_node = node_map.get(dependent)
        if from_node is None or to_node is None:
            continue
        edges.append(
            Edge(
                prerequisite=prereq,
                dependent=dependent,
                start=from_node.position,
                end=to_node.position,
            )
        )
    return edges


# ─── Full Layout Pipeline ─────────────────────────────────────────────────────


@dataclass
class GraphLayout:
    """Everything one build produces. Owned by a single view until the next build."""

    model: GraphModel
    layers: LayerAssignment
    ordering: list[list[str]]
    nodes: list[PlacedNode]
    config: LayoutConfig = field(default_factory=LayoutConfig)

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self.model.report.diagnostics

    @property
    def is_degraded(self) -> bool:
        """True when cycles forced fallback placement for some nodes."""
        return bool(self.layers.degraded)

    def node(self, node_id: str) -> PlacedNode:
        for n in self.nodes:
            if n.id == node_id:
                return n
        raise KeyError(node_id)

    def edges(self) -> list[Edge]:
        """Current edge geometry, recomputed from node coordinates."""
        return route_edges(self.model, self.nodes)


class LayoutEngine:
    """Runs model → layers → ordering → coordinates for one build."""

    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()

    def build(self, definitions: Iterable[object]) -> GraphLayout:
        return self.layout_model(build_graph(definitions))

    def layout_model(self, model: GraphModel) -> GraphLayout:
        cfg = self.config
        la = LayerAssignment.assign(model)
        ordering = minimise_crossings(model, la, passes=cfg.crossing_passes, tie_break=cfg.tie_break)
        nodes = place_nodes(ordering, model, cfg.layer_spacing, cfg.node_spacing)
        logger.debug("laid out %d node(s) in %d layer(s)", len(nodes), la.layer_count)
        return GraphLayout(model=model, layers=la, ordering=ordering, nodes=nodes, config=cfg)


def full_layout(
    definitions: Iterable[object],
    config: LayoutConfig | None = None,
) -> tuple[list[PlacedNode], list[Edge]]:
    """Run the full layout pipeline and return positioned nodes + edges."""
    result = LayoutEngine(config).build(definitions)
    return result.nodes, result.edges()
