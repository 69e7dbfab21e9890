"""Base renderer protocol."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from upgrade_graph.view import GraphFrame


class Renderer(Protocol):
    """Protocol that all renderers must implement."""

    def render(self, frame: GraphFrame) -> str:
        """Render one frame of the upgrade graph to an output string."""
        ...
