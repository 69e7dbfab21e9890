"""upgrade_graph — layered layout and state projection for upgrade dependency graphs."""

from upgrade_graph.api import layout_upgrades, render_svg
from upgrade_graph.config import LayoutConfig, StyleConfig, TieBreak
from upgrade_graph.economy import DEFAULT_UPGRADES, Economy, UpgradeDefinition
from upgrade_graph.layout import Edge, GraphLayout, LayoutEngine, PlacedNode, Point
from upgrade_graph.model import Diagnostic, DiagnosticKind, GraphModel, UpgradeNode, ValidationReport, build_graph
from upgrade_graph.state import EdgeVisualState, NodeVisualState, PurchaseStateProvider, StateProjector, project
from upgrade_graph.view import GraphFrame, UpgradeGraphView

__all__ = [
    "DEFAULT_UPGRADES",
    "Diagnostic",
    "DiagnosticKind",
    "Economy",
    "Edge",
    "EdgeVisualState",
    "GraphFrame",
    "GraphLayout",
    "GraphModel",
    "LayoutConfig",
    "LayoutEngine",
    "NodeVisualState",
    "PlacedNode",
    "Point",
    "PurchaseStateProvider",
    "StateProjector",
    "StyleConfig",
    "TieBreak",
    "UpgradeDefinition",
    "UpgradeGraphView",
    "UpgradeNode",
    "ValidationReport",
    "build_graph",
    "layout_upgrades",
    "project",
    "render_svg",
]
