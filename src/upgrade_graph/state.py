"""State projection — map economy state onto nodes and edges.

Layout is computed once per build; this runs on every economy change and
does no layout work.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Protocol

from upgrade_graph.model import GraphModel


class PurchaseStateProvider(Protocol):
    """Read-only view of the economy the engine needs."""

    def is_purchased(self, upgrade_id: str) -> bool: ...

    def cost(self, upgrade_id: str) -> int: ...

    def current_balance(self) -> int: ...


class NodeVisualState(enum.Enum):
    LOCKED = "locked"  # prerequisites unmet
    AVAILABLE = "available"  # can purchase
    UNLOCKED = "unlocked"  # already purchased


class EdgeVisualState(enum.Enum):
    SATISFIED = "satisfied"
    UNSATISFIED = "unsatisfied"


@dataclass
class ProjectedState:
    """Visual state for one refresh."""

    nodes: dict[str, NodeVisualState] = field(default_factory=dict)
    edges: dict[tuple[str, str], EdgeVisualState] = field(default_factory=dict)
    purchasable: frozenset[str] = frozenset()

    def is_purchasable(self, node_id: str) -> bool:
        return node_id in self.purchasable


def node_state(model: GraphModel, provider: PurchaseStateProvider, node_id: str) -> NodeVisualState:
    if provider.is_purchased(node_id):
        return NodeVisualState.UNLOCKED
    if all(provider.is_purchased(p) for p in model.prerequisites(node_id)):
        return NodeVisualState.AVAILABLE
    return NodeVisualState.LOCKED


def project(model: GraphModel, provider: PurchaseStateProvider) -> ProjectedState:
    """Derive node and edge states from ``provider``.

    A node is purchasable when Available and the balance covers its cost.
    Edges are Satisfied exactly when their prerequisite is Unlocked.
    """
    nodes = {node_id: node_state(model, provider, node_id) for node_id in model.nodes}

    edges = {
        (p, d): EdgeVisualState.SATISFIED if nodes[p] is NodeVisualState.UNLOCKED else EdgeVisualState.UNSATISFIED
        for p, d in model.edges()
    }

    balance = provider.current_balance()
    purchasable = frozenset(
        node_id
        for node_id, state in nodes.items()
        if state is NodeVisualState.AVAILABLE and balance >= provider.cost(node_id)
    )
    return ProjectedState(nodes=nodes, edges=edges, purchasable=purchasable)


class StateProjector:
    """Binds a model to a provider so callers can re-project cheaply."""

    def __init__(self, model: GraphModel, provider: PurchaseStateProvider) -> None:
        self.model = model
        self.provider = provider

    def project(self) -> ProjectedState:
        return project(self.model, self.provider)
