"""Layer assignment — rank each upgrade by its longest prerequisite chain."""

from __future__ import annotations

import logging

from upgrade_graph.model import GraphModel, kahn_order

logger = logging.getLogger(__name__)


class LayerAssignment:
    """Result of layer assignment: each node is assigned a layer (rank).

    Layer 0 holds the roots. For every edge p → d outside ``degraded``,
    ``layers[d] > layers[p]``.

    Attributes:
        layers: Maps node id → layer index.
        layer_count: Total number of layers (0 for an empty graph).
        degraded: Nodes that could not be ordered (cycles) and were pinned to
            layer 0. Their placement is diagnostic only.
    """

    def __init__(
        self,
        layers: dict[str, int],
        layer_count: int,
        degraded: frozenset[str] = frozenset(),
    ) -> None:
        self.layers = layers
        self.layer_count = layer_count
        self.degraded = degraded

    def __getitem__(self, node_id: str) -> int:
        return self.layers[node_id]

    def members(self, layer: int) -> list[str]:
        return [n for n, lyr in self.layers.items() if lyr == layer]

    @classmethod
    def assign(cls, model: GraphModel) -> LayerAssignment:
        """Assign layers with Kahn's algorithm.

        On dequeue a node's layer is 1 + the max layer of its existing
        prerequisites, or 0 with none. Every prerequisite is dequeued before
        its dependents, so the max is always over final values.
        """
        order, stuck = kahn_order(model.digraph, model.nodes)

        layers: dict[str, int] = {}
        for node_id in order:
            prereq_layers = [layers[p] for p in model.digraph.predecessors(node_id)]
            layers[node_id] = max(prereq_layers) + 1 if prereq_layers else 0

        for node_id in model.nodes:
            if node_id in stuck:
                layers[node_id] = 0

        # Keep definition order so callers can iterate deterministically.
        layers = {node_id: layers[node_id] for node_id in model.nodes}
        layer_count = (max(layers.values()) + 1) if layers else 0

        if stuck:
            logger.debug("%d upgrade(s) pinned to layer 0 by a cycle", len(stuck))

        return cls(layers=layers, layer_count=layer_count, degraded=frozenset(stuck))


def assign_layers(model: GraphModel) -> LayerAssignment:
    return LayerAssignment.assign(model)
