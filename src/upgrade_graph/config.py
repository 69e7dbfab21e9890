"""Layout and style configuration.

Defaults mirror the upgrade panel the engine was built for: 64px between
dependency layers, 52px between nodes in a row, four crossing-reduction
passes with ties broken by identifier.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace

# ─── Defaults ────────────────────────────────────────────────────────────────

LAYER_SPACING: float = 64.0
NODE_SPACING: float = 52.0
CROSSING_PASSES: int = 4

NODE_WIDTH: int = 48
NODE_HEIGHT: int = 36
EDGE_WIDTH: float = 5.0


class TieBreak(enum.Enum):
    """How the crossing reducer orders two nodes with the same median."""

    IDENTIFIER = "identifier"  # lexicographic on node id
    STABLE = "stable"  # keep current relative position


@dataclass(frozen=True)
class LayoutConfig:
    """Knobs for one layout build."""

    layer_spacing: float = LAYER_SPACING
    node_spacing: float = NODE_SPACING
    crossing_passes: int = CROSSING_PASSES
    tie_break: TieBreak = TieBreak.IDENTIFIER

    def __post_init__(self) -> None:
        if self.layer_spacing <= 0:
            raise ValueError(f"layer_spacing must be positive, got {self.layer_spacing}")
        if self.node_spacing <= 0:
            raise ValueError(f"node_spacing must be positive, got {self.node_spacing}")
        if self.crossing_passes < 0:
            raise ValueError(f"crossing_passes must be >= 0, got {self.crossing_passes}")

    def replace(self, **changes: object) -> LayoutConfig:
        return replace(self, **changes)


# Colours are "#rrggbb" strings plus an opacity, ready for SVG attributes.


@dataclass(frozen=True)
class StyleConfig:
    """Colours and sizes used by renderers."""

    unlocked_color: str = "#66cc66"
    available_color: str = "#e6e680"
    locked_color: str = "#808080"
    edge_satisfied_color: str = "#80e680"
    edge_satisfied_opacity: float = 0.8
    edge_unsatisfied_color: str = "#998080"
    edge_unsatisfied_opacity: float = 0.6
    edge_width: float = EDGE_WIDTH
    node_width: int = NODE_WIDTH
    node_height: int = NODE_HEIGHT
    font_size: int = 11
    font_family: str = "sans-serif"
    padding: int = 20
