"""Crossing reduction — median heuristic over alternating layer sweeps.

Exact crossing minimisation is NP-hard for layered graphs; this produces a
"good enough" ordering in a fixed number of passes.
"""

from __future__ import annotations

import logging

import networkx as nx

from upgrade_graph.config import CROSSING_PASSES, TieBreak
from upgrade_graph.layering import LayerAssignment
from upgrade_graph.model import GraphModel

logger = logging.getLogger(__name__)


def initial_ordering(la: LayerAssignment) -> list[list[str]]:
    """Group nodes by layer, each layer sorted by id for reproducible output."""
    ordering: list[list[str]] = [[] for _ in range(la.layer_count)]
    for node_id in sorted(la.layers):
        ordering[la.layers[node_id]].append(node_id)
    return ordering


def median_position(neighbors: list[str], index: dict[str, int], layer_size: int) -> float:
    """Median index of ``neighbors`` found in ``index``.

    Nodes with no neighbour in the adjacent layer sit at the neutral midpoint
    ``layer_size / 2``. An even count averages the two middle indices.
    """
    positions = sorted(index[nb] for nb in neighbors if nb in index)
    if not positions:
        return layer_size * 0.5
    m = len(positions) // 2
    if len(positions) % 2 == 1:
        return float(positions[m])
    return (positions[m - 1] + positions[m]) * 0.5


def _sort_layer(layer: list[str], medians: dict[str, float], tie_break: TieBreak) -> None:
    if tie_break is TieBreak.STABLE:
        layer.sort(key=lambda n: medians[n])
    else:
        layer.sort(key=lambda n: (medians[n], n))


def minimise_crossings(
    model: GraphModel,
    la: LayerAssignment,
    passes: int = CROSSING_PASSES,
    tie_break: TieBreak = TieBreak.IDENTIFIER,
) -> list[list[str]]:
    """Order the nodes of each layer to reduce edge crossings.

    Each pass is a forward sweep (layer 1 upward, keyed on the median position
    of a node's prerequisites in the previous layer) followed by a backward
    sweep (second-to-last layer downward, keyed on the median position of its
    dependents in the next layer). The ordering is refined in place across
    passes, never rebuilt.

    Returns a list[list[str]] — one inner list per layer.
    """
    if passes < 0:
        raise ValueError(f"passes must be >= 0, got {passes}")

    ordering = initial_ordering(la)
    layer_count = len(ordering)
    debug = logger.isEnabledFor(logging.DEBUG)
    before = 0
    if debug:
        before = count_crossings(ordering, model.digraph)

    for _pass in range(passes):
        # Forward sweep: prerequisites in the previous layer.
        for layer_idx in range(1, layer_count):
            prev_ids = ordering[layer_idx - 1]
            prev = {nid: i for i, nid in enumerate(prev_ids)}
            medians = {
                nid: median_position(model.prerequisites(nid), prev, len(prev_ids)) for nid in ordering[layer_idx]
            }
            _sort_layer(ordering[layer_idx], medians, tie_break)

        # Backward sweep: dependents in the next layer.
        for layer_idx in range(layer_count - 2, -1, -1):
            next_ids = ordering[layer_idx + 1]
            nxt = {nid: i for i, nid in enumerate(next_ids)}
            medians = {
                nid: median_position(model.dependents(nid), nxt, len(next_ids)) for nid in ordering[layer_idx]
            }
            _sort_layer(ordering[layer_idx], medians, tie_break)

    if debug:
        logger.debug(
            "crossing reduction: %d -> %d crossings after %d pass(es)",
            before,
            count_crossings(ordering, model.digraph),
            passes,
        )
    return ordering


def count_crossings(ordering: list[list[str]], graph: nx.DiGraph) -> int:
    """Count edge crossings between consecutive layers (inversion count heuristic)."""
    total = 0
    for l_idx in range(len(ordering) - 1):
        tgt_pos: dict[str, int] = {nid: i for i, nid in enumerate(ordering[l_idx + 1])}
        edges: list[tuple[int, int]] = []
        for sp, src_id in enumerate(ordering[l_idx]):
            if src_id in graph:
                for nb in graph.successors(src_id):
                    if nb in tgt_pos:
                        edges.append((sp, tgt_pos[nb]))
        for i in range(len(edges)):
            for j in range(i + 1, len(edges)):
                ei, ej = edges[i], edges[j]
                if (ei[0] < ej[0] and ei[1] > ej[1]) or (ei[0] > ej[0] and ei[1] < ej[1]):
                    total += 1
    return total
