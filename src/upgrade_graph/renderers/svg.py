"""SVG renderer — renders a GraphFrame to an SVG string."""

from __future__ import annotations

from upgrade_graph.config import StyleConfig
from upgrade_graph.layout import Point
from upgrade_graph.state import EdgeVisualState, NodeVisualState
from upgrade_graph.view import EdgeView, GraphFrame, NodeView

# ─── Helpers ────────────────────────────────────────────────────────────────


def _escape(s: str) -> str:
    return s.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def _num(v: float) -> str:
    """Compact number formatting: 12.0 → "12", 12.345 → "12.35"."""
    v = round(v, 2)
    if v == 0:
        return "0"
    return f"{v:g}"


class _Canvas:
    """Maps panel coordinates (y up, origin top-centre) to SVG pixels (y down)."""

    def __init__(self, frame: GraphFrame, style: StyleConfig) -> None:
        half_w = style.node_width / 2
        half_h = style.node_height / 2
        xs = [n.x for n in frame.nodes]
        ys = [-n.y for n in frame.nodes]
        self.min_x = min(xs) - half_w
        self.min_y = min(ys) - half_h
        self.width = max(xs) + half_w - self.min_x + 2 * style.padding
        self.height = max(ys) + half_h - self.min_y + 2 * style.padding
        self.padding = style.padding

    def px(self, x: float) -> float:
        return self.padding + x - self.min_x

    def py(self, y: float) -> float:
        return self.padding + (-y) - self.min_y

    def point(self, p: Point) -> tuple[str, str]:
        return _num(self.px(p.x)), _num(self.py(p.y))


# ─── Node / Edge Rendering ──────────────────────────────────────────────────


def _node_fill(state: NodeVisualState, style: StyleConfig) -> str:
    if state is NodeVisualState.UNLOCKED:
        return style.unlocked_color
    if state is NodeVisualState.AVAILABLE:
        return style.available_color
    return style.locked_color


def _render_node(nv: NodeView, canvas: _Canvas, style: StyleConfig) -> str:
    w, h = style.node_width, style.node_height
    cx, cy = canvas.px(nv.x), canvas.py(nv.y)
    x, y = cx - w / 2, cy - h / 2
    fill = _node_fill(nv.state, style)
    cls = f"node {nv.state.value}" + (" interactable" if nv.interactable else "")
    font = f'font-family="{style.font_family}" font-size="{style.font_size}"'
    return (
        f'<g class="{cls}" data-id="{_escape(nv.id)}">\n'
        f'<rect x="{_num(x)}" y="{_num(y)}" width="{w}" height="{h}" rx="4" '
        f'fill="{fill}" stroke="black" stroke-width="1"/>\n'
        f'<text x="{_num(cx)}" y="{_num(cy)}" dominant-baseline="central" text-anchor="middle" {font}>'
        f"{_escape(nv.label)}</text>\n"
        "</g>"
    )


def _render_edge(ev: EdgeView, canvas: _Canvas, style: StyleConfig) -> str:
    if ev.state is EdgeVisualState.SATISFIED:
        color, opacity = style.edge_satisfied_color, style.edge_satisfied_opacity
    else:
        color, opacity = style.edge_unsatisfied_color, style.edge_unsatisfied_opacity
    x1, y1 = canvas.point(ev.start)
    x2, y2 = canvas.point(ev.end)
    return (
        f'<line class="edge {ev.state.value}" x1="{x1}" y1="{y1}" x2="{x2}" y2="{y2}" '
        f'stroke="{color}" stroke-opacity="{_num(opacity)}" stroke-width="{_num(style.edge_width)}"/>'
    )


# ─── Public Renderer ────────────────────────────────────────────────────────


class SvgRenderer:
    """SVG renderer — consumes a GraphFrame, produces an SVG string."""

    def __init__(self, style: StyleConfig | None = None) -> None:
        self.style = style or StyleConfig()

    def render(self, frame: GraphFrame) -> str:
        if not frame.nodes:
            return ""

        style = self.style
        canvas = _Canvas(frame, style)
        svg_w, svg_h = _num(canvas.width), _num(canvas.height)

        parts = [
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{svg_w}" height="{svg_h}" viewBox="0 0 {svg_w} {svg_h}">',
            f'<rect width="{svg_w}" height="{svg_h}" fill="white"/>',
        ]

        # Edges behind nodes, sorted for deterministic output
        for ev in sorted(frame.edges, key=lambda e: (e.prerequisite, e.dependent)):
            parts.append(_render_edge(ev, canvas, style))

        # Nodes (on top)
        for nv in frame.nodes:
            parts.append(_render_node(nv, canvas, style))

        parts.append("</svg>")
        return "\n".join(parts)
