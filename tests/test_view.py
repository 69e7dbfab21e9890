"""Tests for view.py — build / refresh / activate lifecycle of the upgrade panel."""

from __future__ import annotations

import pytest

from upgrade_graph.economy import DEFAULT_UPGRADES, Economy, UpgradeDefinition
from upgrade_graph.layout import Point
from upgrade_graph.state import EdgeVisualState, NodeVisualState
from upgrade_graph.view import UpgradeGraphView

# ─── Helpers ──────────────────────────────────────────────────────────────────


def diamond_table() -> list[UpgradeDefinition]:
    return [
        UpgradeDefinition("A", "Alpha", 1),
        UpgradeDefinition("B", "Bravo", 2, ("A",)),
        UpgradeDefinition("C", "Charlie", 2, ("A",)),
        UpgradeDefinition("D", "Delta", 5, ("B", "C")),
    ]


def built_view(gold: int = 0) -> tuple[UpgradeGraphView, Economy]:
    eco = Economy(diamond_table(), gold=gold)
    view = UpgradeGraphView()
    view.build(eco.definitions.values(), eco, eco.purchase)
    return view, eco


# ─── Lifecycle ────────────────────────────────────────────────────────────────


class TestBuild:
    def test_frame_has_every_node_and_edge(self):
        """build() returns a frame with all nodes and existing edges."""
        view, _ = built_view()
        assert sorted(n.id for n in view.frame.nodes) == ["A", "B", "C", "D"]
        assert len(view.frame.edges) == 4

    def test_frame_carries_labels_and_costs(self):
        """Node views expose label and cost for the renderer."""
        view, _ = built_view()
        d = view.frame.node("D")
        assert d.label == "Delta"
        assert d.cost == 5
        assert d.layer == 2

    def test_rebuild_discards_previous(self):
        """A second build replaces the first wholesale."""
        view, eco = built_view()
        first = view.layout
        view.build([UpgradeDefinition("Solo", "Solo", 1)], eco)
        assert view.layout is not first
        assert [n.id for n in view.frame.nodes] == ["Solo"]

    def test_refresh_before_build(self):
        """refresh() without a build is a programming error."""
        with pytest.raises(RuntimeError):
            UpgradeGraphView().refresh()

    def test_clear(self):
        """clear() drops the build."""
        view, _ = built_view()
        view.clear()
        assert not view.is_built
        with pytest.raises(RuntimeError):
            view.activate("A")


class TestRefresh:
    def test_state_follows_economy(self):
        """Purchases outside the view show up on the next refresh."""
        view, eco = built_view(gold=10)
        assert view.frame.node("A").state is NodeVisualState.AVAILABLE
        eco.purchase("A")
        assert view.frame.node("A").state is NodeVisualState.AVAILABLE  # stale until refresh
        frame = view.refresh()
        assert frame.node("A").state is NodeVisualState.UNLOCKED
        assert frame.node("B").state is NodeVisualState.AVAILABLE
        assert frame.edge("A", "B").state is EdgeVisualState.SATISFIED

    def test_refresh_keeps_layout(self):
        """Refresh re-projects state without re-running layout."""
        view, eco = built_view(gold=10)
        layout = view.layout
        eco.purchase("A")
        view.refresh()
        assert view.layout is layout

    def test_edges_track_node_coordinates(self):
        """Edge endpoints are re-read from node coordinates on refresh."""
        view, _ = built_view()
        view.layout.node("B").x = 300.0
        frame = view.refresh()
        assert frame.edge("A", "B").end == Point(300.0, -64.0)

    def test_interactable_needs_gold(self):
        """Available nodes turn interactable once affordable."""
        view, eco = built_view(gold=0)
        assert not view.frame.node("A").interactable
        eco.add_gold(1)
        assert view.refresh().node("A").interactable


class TestActivate:
    def test_forwards_available_affordable(self):
        """Clicking an available, affordable node purchases it via the callback."""
        view, eco = built_view(gold=1)
        assert view.activate("A")
        assert eco.is_purchased("A")
        assert view.frame.node("A").state is NodeVisualState.UNLOCKED

    def test_ignores_locked(self):
        """Clicking a locked node does nothing."""
        clicked: list[str] = []
        eco = Economy(diamond_table(), gold=100)
        view = UpgradeGraphView()
        view.build(eco.definitions.values(), eco, clicked.append)
        assert not view.activate("D")
        assert clicked == []

    def test_ignores_unaffordable(self):
        """Clicking an available node without enough gold does nothing."""
        view, eco = built_view(gold=0)
        assert not view.activate("A")
        assert not eco.is_purchased("A")

    def test_ignores_unknown(self):
        """Unknown ids are ignored."""
        view, _ = built_view(gold=100)
        assert not view.activate("nope")

    def test_without_callback_reports_nothing_forwarded(self):
        """With no activation callback, a purchasable click returns False and buys nothing."""
        eco = Economy(diamond_table(), gold=10)
        view = UpgradeGraphView()
        view.build(eco.definitions.values(), eco)
        assert not view.activate("A")
        assert not eco.is_purchased("A")

    def test_full_default_progression(self):
        """The shipped table can be bought out root-first through the view."""
        eco = Economy(DEFAULT_UPGRADES, gold=10_000)
        view = UpgradeGraphView()
        view.build(DEFAULT_UPGRADES, eco, eco.purchase)
        for layer in view.layout.ordering:
            for node_id in layer:
                assert view.activate(node_id), node_id
        assert eco.purchased == {d.id for d in DEFAULT_UPGRADES}
        assert all(e.state is EdgeVisualState.SATISFIED for e in view.frame.edges)
