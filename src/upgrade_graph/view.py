"""Upgrade panel binding: build on show, refresh on economy change, forward clicks.

The view owns exactly one ``GraphLayout`` at a time. ``build`` discards the
previous one wholesale; ``refresh`` only re-projects state and re-reads edge
endpoints.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from upgrade_graph.layout import GraphLayout, LayoutEngine, Point
from upgrade_graph.renderers.base import Renderer
from upgrade_graph.state import EdgeVisualState, NodeVisualState, ProjectedState, PurchaseStateProvider, project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeView:
    """What a renderer needs to draw one node."""

    id: str
    label: str
    x: float
    y: float
    layer: int
    state: NodeVisualState
    interactable: bool
    cost: int


@dataclass(frozen=True)
class EdgeView:
    prerequisite: str
    dependent: str
    start: Point
    end: Point
    state: EdgeVisualState


@dataclass
class GraphFrame:
    """One refresh worth of render data."""

    nodes: list[NodeView] = field(default_factory=list)
    edges: list[EdgeView] = field(default_factory=list)

    def node(self, node_id: str) -> NodeView:
        for n in self.nodes:
            if n.id == node_id:
                return n
        raise KeyError(node_id)

    def edge(self, prerequisite: str, dependent: str) -> EdgeView:
        for e in self.edges:
            if e.prerequisite == prerequisite and e.dependent == dependent:
                return e
        raise KeyError((prerequisite, dependent))


def compose_frame(layout: GraphLayout, state: ProjectedState, provider: PurchaseStateProvider) -> GraphFrame:
    nodes = [
        NodeView(
            id=n.id,
            label=n.label,
            x=n.x,
            y=n.y,
            layer=n.layer,
            state=state.nodes[n.id],
            interactable=state.is_purchasable(n.id),
            cost=provider.cost(n.id),
        )
        for n in layout.nodes
    ]
    edges = [
        EdgeView(
            prerequisite=e.prerequisite,
            dependent=e.dependent,
            start=e.start,
            end=e.end,
            state=state.edges[(e.prerequisite, e.dependent)],
        )
        for e in layout.edges()
    ]
    return GraphFrame(nodes=nodes, edges=edges)


class UpgradeGraphView:
    """Drives one upgrade panel.

    Usage::

        view = UpgradeGraphView()
        view.build(definitions, economy, economy.purchase)  # panel shown
        view.refresh()                                      # economy changed
        view.activate("U3")                                 # node clicked
    """

    def __init__(self, engine: LayoutEngine | None = None, renderer: Renderer | None = None) -> None:
        self.engine = engine or LayoutEngine()
        self.renderer = renderer
        self.layout: GraphLayout | None = None
        self.frame: GraphFrame | None = None
        self._provider: PurchaseStateProvider | None = None
        self._on_activate: Callable[[str], object] | None = None
        self._state: ProjectedState | None = None

    @property
    def is_built(self) -> bool:
        return self.layout is not None

    def build(
        self,
        definitions: Iterable[object],
        provider: PurchaseStateProvider,
        on_activate: Callable[[str], object] | None = None,
    ) -> GraphFrame:
        """Lay out ``definitions`` from scratch and project current state."""
        self.clear()
        self._provider = provider
        self._on_activate = on_activate
        self.layout = self.engine.build(definitions)
        if not self.layout.model.report.ok:
            errors = self.layout.model.report.errors
            logger.warning("upgrade graph built with %d error(s); layout is degraded", len(errors))
        return self.refresh()

    def refresh(self) -> GraphFrame:
        """Re-query the provider and rebuild node/edge visual state."""
        layout, provider = self._require_built()
        self._state = project(layout.model, provider)
        self.frame = compose_frame(layout, self._state, provider)
        return self.frame

    def activate(self, node_id: str) -> bool:
        """Handle a click on ``node_id``.

        Forwards the id to the activation callback only when the node is
        Available and affordable, then refreshes. Returns whether the
        callback was invoked.
        """
        layout, provider = self._require_built()
        if not project(layout.model, provider).is_purchasable(node_id):
            logger.debug("ignored activation of %r: not purchasable", node_id)
            return False
        if self._on_activate is None:
            logger.debug("ignored activation of %r: no activation callback", node_id)
            return False
        self._on_activate(node_id)
        self.refresh()
        return True

    def render(self) -> str:
        if self.renderer is None:
            raise RuntimeError("no renderer configured")
        self._require_built()
        return self.renderer.render(self.frame)

    def clear(self) -> None:
        """Drop the current build (panel torn down)."""
        self.layout = None
        self.frame = None
        self._state = None
        self._provider = None
        self._on_activate = None

    def _require_built(self) -> tuple[GraphLayout, PurchaseStateProvider]:
        if self.layout is None or self._provider is None:
            raise RuntimeError("upgrade graph has not been built")
        return self.layout, self._provider
