"""Public API — one-call helpers over the layout engine and view."""

from __future__ import annotations

from collections.abc import Iterable

from upgrade_graph.config import LayoutConfig, StyleConfig
from upgrade_graph.layout import GraphLayout, LayoutEngine
from upgrade_graph.renderers.svg import SvgRenderer
from upgrade_graph.state import PurchaseStateProvider
from upgrade_graph.view import UpgradeGraphView


def layout_upgrades(definitions: Iterable[object], config: LayoutConfig | None = None) -> GraphLayout:
    """Lay out an upgrade table without any economy state."""
    return LayoutEngine(config).build(definitions)


def render_svg(
    definitions: Iterable[object],
    provider: PurchaseStateProvider,
    config: LayoutConfig | None = None,
    style: StyleConfig | None = None,
) -> str:
    """Lay out ``definitions``, project ``provider`` state and render SVG."""
    view = UpgradeGraphView(LayoutEngine(config), SvgRenderer(style))
    view.build(definitions, provider)
    return view.render()
