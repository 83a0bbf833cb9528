# plotly_surface.py
import plotly.graph_objects as go
from PyQt5.QtCore import QPointF

from utils_geom import (
    axis_controls, box_boundary_point, cubic_bezier_points, loop_points
)

EDGE_COLOR = "rgba(60,60,60,1)"
BOX_BORDER = "#2B7CE9"
CHAR_W = 7.5        # rough px per label character, for box sizing and arrow clipping
BOX_H = 26.0
LOOP_RADIUS = 18.0


def box_half_size(label: str):
    return max(24.0, 0.5 * (len(label) * CHAR_W + 16.0)), BOX_H * 0.5


class PlotlySurface:
    """
    Display surface for the web app. Each draw() rebuilds ``self.figure``
    from the network's current positions; release() drops it.
    """

    def __init__(self, height: int = 600):
        self.height = height
        self.figure = None
        self.draw_count = 0

    def release(self):
        self.figure = None

    def draw(self, network):
        graph = network.graph
        pos = network.positions
        smooth = network.edge_style()
        axis = smooth.get("forceDirection") if smooth else None
        roundness = float(smooth.get("roundness", 0.4)) if smooth else 0.0

        fig = go.Figure()

        # --- Edges ---
        for e in graph.edges:
            p1 = pos.get(e.source)
            p2 = pos.get(e.target)
            if p1 is None or p2 is None:
                continue
            if e.isLoop():
                xs, ys = loop_points(p1, LOOP_RADIUS)
                tail = QPointF(xs[-3], ys[-3])
                tip = QPointF(xs[-1], ys[-1])
            elif axis:
                c1, c2 = axis_controls(p1, p2, axis, roundness)
                xs, ys = cubic_bezier_points(p1, c1, c2, p2, steps=24)
                hw, hh = box_half_size(e.target)
                tip = box_boundary_point(p2, c2, hw, hh)
                tail = c2
            else:
                xs, ys = [p1.x(), p2.x()], [p1.y(), p2.y()]
                hw, hh = box_half_size(e.target)
                tip = box_boundary_point(p2, p1, hw, hh)
                tail = p1
            fig.add_trace(go.Scatter(
                x=xs, y=ys,
                mode="lines",
                line=dict(color=EDGE_COLOR, width=1),
                hoverinfo="skip",
                showlegend=False,
            ))
            fig.add_annotation(
                x=tip.x(), y=tip.y(), ax=tail.x(), ay=tail.y(),
                xref="x", yref="y", axref="x", ayref="y",
                showarrow=True, arrowhead=2, arrowsize=1.2, arrowwidth=1,
                arrowcolor=EDGE_COLOR, text="",
            )

        # --- Nodes ---
        nodes = [n for n in graph.getNodes() if n.getName() in pos]
        fig.add_trace(go.Scatter(
            x=[pos[n.getName()].x() for n in nodes],
            y=[pos[n.getName()].y() for n in nodes],
            mode="markers+text",
            text=[n.getLabel() for n in nodes],
            textposition="middle center",
            textfont=dict(color=[n.getTextColor() for n in nodes]),
            marker=dict(
                symbol="square",
                size=[max(28, int(2 * box_half_size(n.getLabel())[0])) for n in nodes],
                color=[n.getFill() for n in nodes],
                line=dict(width=1, color=BOX_BORDER),
            ),
            hovertext=[f"{n.getName()} ({n.getKind()})" for n in nodes],
            hoverinfo="text",
            showlegend=False,
        ))

        # Screen y grows downward in the layout; flip so "top-down" reads top-down
        fig.update_yaxes(scaleanchor="x", scaleratio=1, autorange="reversed")
        fig.update_layout(
            margin=dict(l=20, r=20, t=10, b=10),
            xaxis=dict(visible=False), yaxis=dict(visible=False),
            dragmode="pan", height=self.height,
            plot_bgcolor="#ffffff",
        )
        self.figure = fig
        self.draw_count += 1
        return fig
