"""Tests for layout.py — coordinate assignment, edge geometry and the full pipeline.

Covers:
  - place_nodes (centred rows, layers growing downward)
  - route_edges (straight segments, recomputed from current coordinates)
  - LayoutEngine / GraphLayout (diamond, unknown reference, cycle containment)
  - determinism across builds
"""

from __future__ import annotations

import pytest

from upgrade_graph.config import LAYER_SPACING, NODE_SPACING, LayoutConfig
from upgrade_graph.economy import DEFAULT_UPGRADES
from upgrade_graph.layout import (
    Edge,
    LayoutEngine,
    PlacedNode,
    Point,
    full_layout,
    place_nodes,
    route_edges,
)
from upgrade_graph.model import DiagnosticKind, UpgradeNode, build_graph

# ─── Helpers ──────────────────────────────────────────────────────────────────


def node(node_id: str, *requires: str, name: str = "") -> UpgradeNode:
    return UpgradeNode(id=node_id, name=name, prerequisite_ids=tuple(requires))


def diamond() -> list[UpgradeNode]:
    return [node("A"), node("B", "A"), node("C", "A"), node("D", "B", "C")]


def by_id(nodes: list[PlacedNode]) -> dict[str, PlacedNode]:
    return {n.id: n for n in nodes}


# ─── PlacedNode / Edge Dataclass Tests ────────────────────────────────────────


class TestGeometryTypes:
    def test_placed_node_position(self):
        """PlacedNode.position returns its coordinate as a Point."""
        n = PlacedNode(id="A", label="A", layer=1, order=0, x=5.0, y=-64.0)
        assert n.position == Point(5.0, -64.0)

    def test_edge_equality(self):
        """Two Edges with the same fields are equal."""
        e1 = Edge("A", "B", Point(0, 0), Point(0, -64))
        e2 = Edge("A", "B", Point(0, 0), Point(0, -64))
        assert e1 == e2

    def test_constants_exported(self):
        """Spacing defaults match the upgrade panel."""
        assert LAYER_SPACING == 64.0
        assert NODE_SPACING == 52.0


# ─── place_nodes Tests ────────────────────────────────────────────────────────


class TestPlaceNodes:
    def test_single_node_at_origin(self):
        """A lone node sits at (0, 0)."""
        model = build_graph([node("A")])
        placed = place_nodes([["A"]], model, 64, 52)
        assert placed == [PlacedNode(id="A", label="A", layer=0, order=0, x=0.0, y=0.0)]

    def test_layers_grow_downward(self):
        """y = -layer * layer_spacing."""
        model = build_graph([node("A"), node("B", "A"), node("C", "B")])
        placed = by_id(place_nodes([["A"], ["B"], ["C"]], model, 10, 52))
        assert placed["A"].y == 0
        assert placed["B"].y == -10
        assert placed["C"].y == -20

    def test_rows_centred(self):
        """A row of k nodes is centred on x = 0 with node_spacing between neighbours."""
        model = build_graph([node("A"), node("B"), node("C")])
        placed = by_id(place_nodes([["A", "B", "C"]], model, 64, 50))
        assert [placed[i].x for i in "ABC"] == [-50.0, 0.0, 50.0]

    def test_even_row_centred(self):
        """An even row straddles x = 0."""
        model = build_graph([node("A"), node("B")])
        placed = by_id(place_nodes([["A", "B"]], model, 64, 52))
        assert placed["A"].x == -26.0
        assert placed["B"].x == 26.0

    def test_order_and_label(self):
        """order is the position within the layer; label comes from the model."""
        model = build_graph([node("A", name="Alpha"), node("B")])
        placed = by_id(place_nodes([["B", "A"]], model, 64, 52))
        assert placed["B"].order == 0
        assert placed["A"].order == 1
        assert placed["A"].label == "Alpha"

    def test_empty(self):
        """No layers → no nodes."""
        assert place_nodes([], build_graph([]), 64, 52) == []


# ─── route_edges Tests ────────────────────────────────────────────────────────


class TestRouteEdges:
    def test_straight_segment_between_centres(self):
        """Edge endpoints are the prerequisite's and dependent's coordinates."""
        model = build_graph([node("A"), node("B", "A")])
        placed = place_nodes([["A"], ["B"]], model, 64, 52)
        assert route_edges(model, placed) == [Edge("A", "B", Point(0.0, 0.0), Point(0.0, -64.0))]

    def test_recomputed_from_current_coordinates(self):
        """Moving a node moves its edges on the next call."""
        model = build_graph([node("A"), node("B", "A")])
        placed = place_nodes([["A"], ["B"]], model, 64, 52)
        placed[1].x = 100.0
        (edge,) = route_edges(model, placed)
        assert edge.end == Point(100.0, -64.0)

    def test_unknown_prerequisite_has_no_edge(self):
        """X → missing Z produces no edge."""
        model = build_graph([node("X", "Z")])
        placed = place_nodes([["X"]], model, 64, 52)
        assert route_edges(model, placed) == []


# ─── Full Pipeline Tests ──────────────────────────────────────────────────────


class TestLayoutEngine:
    def test_diamond(self):
        """A on top, B and C side by side, D at the bottom centre."""
        result = LayoutEngine().build(diamond())
        placed = by_id(result.nodes)
        assert result.layers.layers == {"A": 0, "B": 1, "C": 1, "D": 2}
        assert result.ordering == [["A"], ["B", "C"], ["D"]]
        assert (placed["A"].x, placed["A"].y) == (0.0, 0.0)
        assert (placed["B"].x, placed["B"].y) == (-26.0, -64.0)
        assert (placed["C"].x, placed["C"].y) == (26.0, -64.0)
        assert (placed["D"].x, placed["D"].y) == (0.0, -128.0)
        assert len(result.edges()) == 4
        assert not result.is_degraded

    def test_custom_spacing(self):
        """LayoutConfig spacing is honoured."""
        engine = LayoutEngine(LayoutConfig(layer_spacing=100, node_spacing=10))
        placed = by_id(engine.build(diamond()).nodes)
        assert placed["D"].y == -200
        assert placed["C"].x == 5

    def test_unknown_prerequisite_scenario(self):
        """X requires missing Z → layer 0, one diagnostic, no edge."""
        result = LayoutEngine().build([node("X", "Z")])
        assert result.node("X").layer == 0
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.UNKNOWN_PREREQUISITE]
        assert result.edges() == []

    def test_cycle_scenario(self):
        """P ↔ Q plus R → three placed nodes, all on layer 0, two diagnostics."""
        result = LayoutEngine().build([node("P", "Q"), node("Q", "P"), node("R")])
        assert len(result.nodes) == 3
        assert {n.layer for n in result.nodes} == {0}
        cyc = [d for d in result.diagnostics if d.kind == DiagnosticKind.CYCLIC_DEPENDENCY]
        assert sorted(d.node_id for d in cyc) == ["P", "Q"]
        assert result.is_degraded

    @pytest.mark.parametrize("n", [0, 1, 5])
    def test_cycle_containment(self, n):
        """A cyclic pair plus N well-formed nodes → N + 2 placed nodes, 2 cycle diagnostics."""
        defs = [node("P", "Q"), node("Q", "P")]
        defs += [node(f"N{i}", f"N{i - 1}") if i else node("N0") for i in range(n)]
        result = LayoutEngine().build(defs)
        assert len(result.nodes) == n + 2
        cyc = [d for d in result.diagnostics if d.kind == DiagnosticKind.CYCLIC_DEPENDENCY]
        assert len(cyc) == 2

    def test_empty_graph(self):
        """No definitions → empty layout, no diagnostics."""
        result = LayoutEngine().build([])
        assert result.nodes == []
        assert result.edges() == []
        assert result.diagnostics == []

    def test_node_lookup_missing(self):
        """node() raises KeyError for unknown ids."""
        with pytest.raises(KeyError):
            LayoutEngine().build(diamond()).node("nope")

    def test_full_layout_helper(self):
        """full_layout returns (nodes, edges)."""
        nodes, edges = full_layout(diamond())
        assert len(nodes) == 4
        assert len(edges) == 4


class TestDeterminism:
    def test_identical_builds(self):
        """Same input, same config → identical ordering and coordinates."""
        first = LayoutEngine().build(DEFAULT_UPGRADES)
        second = LayoutEngine().build(DEFAULT_UPGRADES)
        assert first.ordering == second.ordering
        assert first.nodes == second.nodes
        assert first.edges() == second.edges()

    def test_every_default_upgrade_placed(self):
        """All 22 shipped upgrades are placed exactly once."""
        result = LayoutEngine().build(DEFAULT_UPGRADES)
        assert sorted(n.id for n in result.nodes) == sorted(d.id for d in DEFAULT_UPGRADES)
        assert result.model.report.ok


class TestLayoutConfig:
    @pytest.mark.parametrize(
        "kwargs",
        [{"layer_spacing": 0}, {"node_spacing": -1}, {"crossing_passes": -1}],
    )
    def test_invalid_config_rejected(self, kwargs):
        """Non-positive spacing or negative pass count raise ValueError."""
        with pytest.raises(ValueError):
            LayoutConfig(**kwargs)

    def test_replace(self):
        """replace() returns a modified copy."""
        cfg = LayoutConfig().replace(crossing_passes=8)
        assert cfg.crossing_passes == 8
        assert LayoutConfig().crossing_passes == 4
