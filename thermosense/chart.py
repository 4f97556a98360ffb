"""
Chart coordinate mapping for the battery vs ambient trend.

Observations are mapped into a fixed drawing area (pixels, y pointing down)
against a fixed vertical temperature domain, so the scale never jumps as data
arrives. Values outside the domain land outside the padded area on purpose;
nothing is clipped here.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import matplotlib.pyplot as plt
from matplotlib.patches import Rectangle

from thermosense.buffer import Observation


Point = Tuple[float, float]

DEVICE_COLOR = "#93c5fd"
AMBIENT_COLOR = "#8fa1c1"
GRID_COLOR = "#1f2a44"
BACKGROUND = "#0b1220"
PLOT_AREA = "#0f172a"
TEXT_COLOR = "#e6edf6"


@dataclass(frozen=True)
class ChartGeometry:
    width: float = 700.0
    height: float = 240.0
    pad: float = 30.0
    y_min: float = 20.0
    y_max: float = 55.0
    grid_c: Tuple[float, ...] = (20.0, 30.0, 40.0, 50.0)

    def __post_init__(self) -> None:
        if self.y_max <= self.y_min:
            raise ValueError(f"y_max ({self.y_max}) must be above y_min ({self.y_min})")

    @property
    def view_w(self) -> float:
        return self.width - 2.0 * self.pad

    @property
    def view_h(self) -> float:
        return self.height - 2.0 * self.pad

    def x_position(self, i: int, n: int) -> float:
        # n == 1 sits on the left edge
        return self.pad + (i / max(1, n - 1)) * self.view_w

    def y_position(self, v: float) -> float:
        # inverted: drawing y grows downward, temperature grows upward
        return self.pad + (1.0 - (v - self.y_min) / (self.y_max - self.y_min)) * self.view_h

    def polyline(self, values: Sequence[float]) -> List[Point]:
        n = len(values)
        return [(self.x_position(i, n), self.y_position(float(v))) for i, v in enumerate(values)]


@dataclass(frozen=True)
class GridLine:
    value_c: float
    x0: float
    x1: float
    y: float


@dataclass(frozen=True)
class ChartPaths:
    geometry: ChartGeometry
    device: List[Point] = field(default_factory=list)
    ambient: List[Point] = field(default_factory=list)
    grid: List[GridLine] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.device


def svg_path(points: Sequence[Point]) -> str:
    """SVG path data, 'M x y L x y ...'; empty for no points."""
    return " ".join(
        f"{'M' if i == 0 else 'L'} {x:g} {y:g}" for i, (x, y) in enumerate(points)
    )


def grid_lines(geometry: ChartGeometry) -> List[GridLine]:
    g = geometry
    return [GridLine(value_c=float(v), x0=g.pad, x1=g.pad + g.view_w, y=g.y_position(v)) for v in g.grid_c]


def build_chart(observations: Sequence[Observation], geometry: ChartGeometry = ChartGeometry()) -> ChartPaths:
    """Map an ordered observation window to the device and ambient polylines."""
    return ChartPaths(
        geometry=geometry,
        device=geometry.polyline([o.device_temp_c for o in observations]),
        ambient=geometry.polyline([o.ambient_temp_c for o in observations]),
        grid=grid_lines(geometry),
    )


def render_figure(chart: ChartPaths, *, title: str = "Battery vs Ambient (last ~5 min)"):
    """Draw the mapped coordinates with matplotlib. Caller closes the figure."""
    g = chart.geometry
    fig, ax = plt.subplots(figsize=(g.width / 100.0, g.height / 100.0), dpi=100)
    fig.patch.set_facecolor(BACKGROUND)
    ax.set_facecolor(BACKGROUND)

    ax.add_patch(Rectangle((g.pad, g.pad), g.view_w, g.view_h, facecolor=PLOT_AREA, edgecolor=GRID_COLOR))

    for gl in chart.grid:
        ax.plot([gl.x0, gl.x1], [gl.y, gl.y], color=GRID_COLOR, linestyle=(0, (4, 6)), linewidth=1)
        ax.text(6, gl.y + 4, f"{gl.value_c:g}°C", fontsize=8, color=AMBIENT_COLOR)

    if not chart.is_empty:
        ax_x, ax_y = zip(*chart.ambient)
        dv_x, dv_y = zip(*chart.device)
        ax.plot(ax_x, ax_y, color=AMBIENT_COLOR, linestyle=(0, (6, 6)), linewidth=2, label="Ambient °C")
        ax.plot(dv_x, dv_y, color=DEVICE_COLOR, linewidth=2, label="Battery °C")
        ax.legend(loc="upper left", fontsize=8, facecolor=PLOT_AREA, edgecolor=GRID_COLOR, labelcolor=TEXT_COLOR)

    ax.set_xlim(0, g.width)
    ax.set_ylim(g.height, 0)
    ax.set_axis_off()
    ax.set_title(title, color=TEXT_COLOR, fontsize=10)
    fig.tight_layout()
    return fig


def render_svg(chart: ChartPaths) -> str:
    """Standalone SVG document for the chart."""
    g = chart.geometry
    parts = [
        f'<svg xmlns="http://www.w3.org/2000/svg" width="100%" viewBox="0 0 {g.width:g} {g.height:g}">',
        f'<rect x="0" y="0" width="{g.width:g}" height="{g.height:g}" fill="{BACKGROUND}" rx="12"/>',
        f'<rect x="{g.pad:g}" y="{g.pad:g}" width="{g.view_w:g}" height="{g.view_h:g}" '
        f'fill="{PLOT_AREA}" stroke="{GRID_COLOR}" rx="8"/>',
    ]
    for gl in chart.grid:
        parts.append(
            f'<line x1="{gl.x0:g}" x2="{gl.x1:g}" y1="{gl.y:g}" y2="{gl.y:g}" '
            f'stroke="{GRID_COLOR}" stroke-dasharray="4 6"/>'
        )
        parts.append(f'<text x="6" y="{gl.y + 4:g}" font-size="11" fill="{AMBIENT_COLOR}">{gl.value_c:g}°C</text>')
    if not chart.is_empty:
        parts.append(
            f'<path d="{svg_path(chart.ambient)}" fill="none" stroke="{AMBIENT_COLOR}" '
            f'stroke-width="2" stroke-dasharray="6 6"/>'
        )
        parts.append(f'<path d="{svg_path(chart.device)}" fill="none" stroke="{DEVICE_COLOR}" stroke-width="2"/>')
    parts.append("</svg>")
    return "\n".join(parts)
