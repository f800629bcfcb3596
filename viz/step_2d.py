from __future__ import annotations

import numpy as np
import plotly.graph_objects as go

from perlin.core import fade
from worldgen.biomes import BiomeClassifier, candidate_cells

_CORNER_XY = {
    "c00": (0.0, 0.0),
    "c10": (1.0, 0.0),
    "c01": (0.0, 1.0),
    "c11": (1.0, 1.0),
}


def _transparent(fig: go.Figure, *, height: int, title: str | None = None) -> None:
    fig.update_layout(
        title=title,
        margin=dict(l=0, r=0, t=40 if title else 0, b=0),
        height=height,
        paper_bgcolor="rgba(0,0,0,0)",
        plot_bgcolor="rgba(0,0,0,0)",
        legend=dict(orientation="h"),
    )


def perlin2d_cell_figure(debug: dict) -> go.Figure:
    """One lattice cell: corners, gradients, dot products and the query point."""

    xf = float(debug["relative"]["xf"])
    yf = float(debug["relative"]["yf"])
    corners = debug["corners"]

    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=[0, 1, 1, 0, 0],
            y=[0, 0, 1, 1, 0],
            mode="lines",
            line=dict(color="rgba(255,255,255,0.6)", width=2),
            showlegend=False,
            hoverinfo="skip",
        )
    )
    fig.add_trace(
        go.Scatter(
            x=[cx for cx, _ in _CORNER_XY.values()],
            y=[cy for _, cy in _CORNER_XY.values()],
            mode="markers+text",
            marker=dict(size=10, color="rgba(255,255,255,0.9)"),
            text=[
                f"{key} dot={float(corners[key]['dot']):.3f}" for key in _CORNER_XY
            ],
            textposition="top center",
            showlegend=False,
        )
    )
    fig.add_trace(
        go.Scatter(
            x=[xf],
            y=[yf],
            mode="markers+text",
            marker=dict(size=12, color="#ffb000"),
            text=[f"noise={float(debug['noise']):.4f}"],
            textposition="bottom center",
            showlegend=False,
        )
    )

    # Gradient arrows; diag4 gradients have length sqrt(2), so scale them down.
    arrow_scale = 0.25
    annotations = []
    for key, (cx, cy) in _CORNER_XY.items():
        c = corners[key]
        annotations.append(
            dict(
                x=cx + float(c["gx"]) * arrow_scale,
                y=cy + float(c["gy"]) * arrow_scale,
                ax=cx,
                ay=cy,
                xref="x",
                yref="y",
                axref="x",
                ayref="y",
                showarrow=True,
                arrowhead=2,
                arrowwidth=2,
                arrowcolor="rgba(0, 200, 255, 0.9)",
                text="",
            )
        )

    fig.update_layout(annotations=annotations)
    _transparent(fig, height=420)
    fig.update_xaxes(range=[-0.4, 1.4], visible=False)
    fig.update_yaxes(range=[-0.4, 1.4], visible=False, scaleanchor="x")
    return fig


def scanline_series_from_debug(debug: dict, *, steps: int = 256) -> dict:
    """Noise along x in [0, 1) of the debug point's cell, y held fixed.

    Rebuilt from the corner gradients in `debug`, so it matches
    `Perlin2D.noise` on the same row of the cell.
    """

    steps = max(8, int(steps))
    yf = float(debug["relative"]["yf"])
    v = float(debug["fade"]["v"])
    g = {k: (float(c["gx"]), float(c["gy"])) for k, c in debug["corners"].items()}

    t = np.linspace(0.0, 1.0, steps, endpoint=False, dtype=np.float64)
    u = fade(t)

    d00 = g["c00"][0] * t + g["c00"][1] * yf
    d10 = g["c10"][0] * (t - 1.0) + g["c10"][1] * yf
    d01 = g["c01"][0] * t + g["c01"][1] * (yf - 1.0)
    d11 = g["c11"][0] * (t - 1.0) + g["c11"][1] * (yf - 1.0)

    x_lerp0 = d00 + u * (d10 - d00)
    x_lerp1 = d01 + u * (d11 - d01)
    return {
        "t": t,
        "xf": float(debug["relative"]["xf"]),
        "noise": x_lerp0 + v * (x_lerp1 - x_lerp0),
    }


def scanline_figure(series: dict) -> go.Figure:
    fig = go.Figure()
    fig.add_trace(
        go.Scatter(
            x=series["t"],
            y=series["noise"],
            mode="lines",
            line=dict(color="rgba(255,255,255,0.85)", width=2),
            name="noise",
        )
    )
    fig.add_vline(x=float(series["xf"]), line_width=2, line_dash="dot", line_color="#ffb000")
    _transparent(fig, height=260, title="Scanline: noise(x, y_fixed) within one cell")
    fig.update_xaxes(range=[0, 1])
    return fig


def biome_candidates_figure(classifier: BiomeClassifier, x: float, y: float) -> go.Figure:
    """The four candidate origins of (x, y), the distorted query and the winner."""

    s = classifier.settings
    x = float(x)
    y = float(y)
    dx, dy = classifier.distortion(np.float64(x), np.float64(y))
    qx = x + float(dx)
    qy = y + float(dy)
    winner = classifier.nearest_origin(x, y)

    fig = go.Figure()
    for i, j in dict.fromkeys(candidate_cells(x, y, s.separation)):
        o = classifier.origin(i, j)
        r, g, b = o.biome.rgb
        chosen = (o.cell_x, o.cell_y) == (winner.cell_x, winner.cell_y)
        fig.add_trace(
            go.Scatter(
                x=[o.x],
                y=[o.y],
                mode="markers+text",
                marker=dict(
                    size=18 if chosen else 12,
                    color=f"rgb({r},{g},{b})",
                    line=dict(color="#ffb000" if chosen else "white", width=3 if chosen else 1),
                ),
                text=[f"({i},{j}) {o.biome.name}"],
                textposition="top center",
                name=f"cell ({i},{j})",
            )
        )
        fig.add_trace(
            go.Scatter(
                x=[qx, o.x],
                y=[qy, o.y],
                mode="lines",
                line=dict(
                    color="rgba(255,176,0,0.9)" if chosen else "rgba(255,255,255,0.3)",
                    dash="solid" if chosen else "dot",
                ),
                showlegend=False,
                hoverinfo="skip",
            )
        )

    fig.add_trace(
        go.Scatter(
            x=[x, qx],
            y=[y, qy],
            mode="lines+markers",
            marker=dict(size=[8, 12], color=["white", "#ffb000"], symbol=["circle", "x"]),
            line=dict(color="rgba(0, 200, 255, 0.9)", width=2),
            name="query -> distorted",
        )
    )

    _transparent(fig, height=420, title=f"Nearest origin: {winner.biome.name}")
    fig.update_yaxes(scaleanchor="x", autorange="reversed")
    return fig
