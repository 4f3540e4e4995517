"""Vector chart rendering.

Computes pie-slice and line-chart geometry by hand and emits self-contained
SVG markup (plus an HTML legend for pie charts). Rendered markup is memoized
per build in a ChartCache keyed by a hash of the chart inputs.
"""

from __future__ import annotations

import hashlib
import json
import math
from collections.abc import Sequence
from html import escape

from pydantic import BaseModel

from report_engine.models import (
    ChartKind,
    ChartSpec,
    DistributionPoint,
    ThemeColors,
    TimeSeriesPoint,
)
from report_engine.observability import get_logger

from .formatting import FormatCache, to_fixed

logger = get_logger(__name__)

PIE_START_ANGLE = -90.0
PIE_RADIUS_INSET = 20
LINE_MARGINS = {"top": 20, "right": 20, "bottom": 40, "left": 60}
GRIDLINE_COUNT = 6
MAX_AXIS_LABELS = 8

NO_DATA_TEXT = "No data available"


def _num(value: float) -> str:
    """Compact, deterministic coordinate text (at most two decimals)."""
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text in ("", "-0") else text


# =============================================================================
# Geometry
# =============================================================================


class PieSlice(BaseModel):
    """Geometry of one pie slice; angles in degrees, 0 pointing right."""

    label: str
    value: float
    percentage: float
    start_angle: float
    end_angle: float
    sweep: float
    start_point: tuple[float, float]
    end_point: tuple[float, float]
    large_arc: bool
    color: str

    @property
    def is_full_circle(self) -> bool:
        return math.isclose(self.sweep, 360.0)


class PieGeometry(BaseModel):
    center: tuple[float, float]
    radius: float
    total: float
    slices: list[PieSlice]


def pie_geometry(
    points: Sequence[DistributionPoint],
    width: int,
    height: int,
    palette: Sequence[str],
) -> PieGeometry:
    """Lay slices out clockwise from 12 o'clock.

    A zero total yields no slices.
    """
    total = sum(point.value for point in points)
    cx, cy = width / 2, height / 2
    radius = min(width, height) / 2 - PIE_RADIUS_INSET

    slices: list[PieSlice] = []
    if total == 0:
        return PieGeometry(center=(cx, cy), radius=radius, total=total, slices=slices)

    current = PIE_START_ANGLE
    for index, point in enumerate(points):
        share = point.value / total
        sweep = 360 * share
        start, end = current, current + sweep
        start_rad, end_rad = math.radians(start), math.radians(end)
        slices.append(
            PieSlice(
                label=point.label,
                value=point.value,
                percentage=share * 100,
                start_angle=start,
                end_angle=end,
                sweep=sweep,
                start_point=(cx + radius * math.cos(start_rad), cy + radius * math.sin(start_rad)),
                end_point=(cx + radius * math.cos(end_rad), cy + radius * math.sin(end_rad)),
                large_arc=sweep > 180,
                color=palette[index % len(palette)],
            )
        )
        current = end

    return PieGeometry(center=(cx, cy), radius=radius, total=total, slices=slices)


class GridLine(BaseModel):
    y: float
    value: float


class PlotPoint(BaseModel):
    x: float
    y: float
    label: str
    value: float


class LineGeometry(BaseModel):
    """Plot area, gridlines, points and labelled axis positions."""

    width: int
    height: int
    left: float
    right: float
    top: float
    bottom: float
    min_value: float
    max_value: float
    gridlines: list[GridLine]
    points: list[PlotPoint]
    label_indices: list[int]


def line_geometry(
    points: Sequence[TimeSeriesPoint],
    width: int,
    height: int,
) -> LineGeometry | None:
    """Index-spaced line chart layout; ``None`` for an empty series."""
    if not points:
        return None

    left = LINE_MARGINS["left"]
    top = LINE_MARGINS["top"]
    right = width - LINE_MARGINS["right"]
    bottom = height - LINE_MARGINS["bottom"]
    plot_width = right - left
    plot_height = bottom - top

    values = [point.value for point in points]
    max_value = max(values)
    min_value = min(min(values), 0)
    value_range = (max_value - min_value) or 1

    steps = GRIDLINE_COUNT - 1
    gridlines = [
        GridLine(
            y=top + plot_height * i / steps,
            value=max_value - value_range * i / steps,
        )
        for i in range(GRIDLINE_COUNT)
    ]

    span = (len(points) - 1) or 1
    plotted = [
        PlotPoint(
            x=left + plot_width * i / span,
            y=top + plot_height - ((point.value - min_value) / value_range) * plot_height,
            label=point.label,
            value=point.value,
        )
        for i, point in enumerate(points)
    ]

    interval = math.ceil(len(points) / MAX_AXIS_LABELS)
    label_indices = list(range(0, len(points), interval))

    return LineGeometry(
        width=width,
        height=height,
        left=left,
        right=right,
        top=top,
        bottom=bottom,
        min_value=min_value,
        max_value=max_value,
        gridlines=gridlines,
        points=plotted,
        label_indices=label_indices,
    )


# =============================================================================
# Cache
# =============================================================================


class ChartCache:
    """Rendered chart markup keyed by a hash of the chart inputs."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def make_key(spec: ChartSpec, theme: ThemeColors) -> str:
        """Generate cache key from chart inputs.

        Uses SHA256 of kind, data, size, title and colours.
        """
        key_parts = {
            "kind": ChartKind(spec.kind).value,
            "data": [[point.label, point.value] for point in spec.points],
            "width": spec.width,
            "height": spec.height,
            "title": spec.title,
            "palette": list(spec.palette or theme.chart_colors),
            "theme": [theme.chart_background, theme.chart_grid, theme.chart_label, theme.text],
        }
        digest = hashlib.sha256(
            json.dumps(key_parts, sort_keys=True).encode()
        ).hexdigest()
        return f"chart:{key_parts['kind']}:{digest[:16]}"

    def get(self, key: str) -> str | None:
        cached = self._entries.get(key)
        if cached is None:
            self.misses += 1
            logger.debug("Chart cache miss", cache_key=key)
        else:
            self.hits += 1
            logger.debug("Chart cache hit", cache_key=key)
        return cached

    def set(self, key: str, markup: str) -> None:
        self._entries[key] = markup

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)


class RenderContext:
    """Memo caches owned by one document build.

    Concurrent builds must each use their own context.
    """

    def __init__(self) -> None:
        self.formats = FormatCache()
        self.charts = ChartCache()

    def clear(self) -> None:
        self.formats.clear()
        self.charts.clear()


# =============================================================================
# Rendering
# =============================================================================


class ChartRenderer:
    """Turns ChartSpecs into inline SVG markup."""

    def __init__(
        self,
        theme: ThemeColors | None = None,
        context: RenderContext | None = None,
    ):
        self.theme = theme or ThemeColors()
        self.context = context or RenderContext()

    def render(self, spec: ChartSpec) -> str:
        """Render a chart, reusing cached markup for identical inputs."""
        cache_key = ChartCache.make_key(spec, self.theme)
        cached = self.context.charts.get(cache_key)
        if cached is not None:
            return cached

        if ChartKind(spec.kind) == ChartKind.PIE:
            markup = self._render_pie(spec)
        else:
            markup = self._render_line(spec)

        self.context.charts.set(cache_key, markup)
        return markup

    def _palette(self, spec: ChartSpec) -> list[str]:
        return list(spec.palette or self.theme.chart_colors)

    def _placeholder(self, title: str) -> str:
        return (
            '<div class="chart-container">'
            f"{self._title(title)}"
            f"<p>{NO_DATA_TEXT}</p>"
            "</div>"
        )

    def _title(self, title: str) -> str:
        return f'<h3 class="chart-title">{escape(title)}</h3>' if title else ""

    def _render_pie(self, spec: ChartSpec) -> str:
        fmt = self.context.formats
        geometry = pie_geometry(spec.points, spec.width, spec.height, self._palette(spec))
        if not geometry.slices:
            return self._placeholder(spec.title)

        cx, cy = geometry.center
        r = geometry.radius
        stroke = self.theme.chart_background
        shapes: list[str] = []
        legend: list[tuple[str, str, str]] = []

        for pie_slice in geometry.slices:
            if pie_slice.is_full_circle:
                # A single 360 degree arc has coincident endpoints and draws nothing
                shapes.append(
                    f'<circle cx="{_num(cx)}" cy="{_num(cy)}" r="{_num(r)}" '
                    f'fill="{pie_slice.color}" stroke="{stroke}" stroke-width="2"/>'
                )
            elif pie_slice.sweep > 0:
                x1, y1 = pie_slice.start_point
                x2, y2 = pie_slice.end_point
                path = (
                    f"M {_num(cx)} {_num(cy)} "
                    f"L {_num(x1)} {_num(y1)} "
                    f"A {_num(r)} {_num(r)} 0 {int(pie_slice.large_arc)} 1 {_num(x2)} {_num(y2)} "
                    "Z"
                )
                shapes.append(
                    f'<path d="{path}" fill="{pie_slice.color}" '
                    f'stroke="{stroke}" stroke-width="2"/>'
                )
            legend.append(
                (
                    pie_slice.color,
                    pie_slice.label,
                    f"{fmt.count(pie_slice.value)} ({to_fixed(pie_slice.percentage, 1)}%)",
                )
            )

        return (
            '<div class="chart-container">'
            f"{self._title(spec.title)}"
            f'<svg width="{spec.width}" height="{spec.height}" '
            f'viewBox="0 0 {spec.width} {spec.height}" xmlns="http://www.w3.org/2000/svg">'
            f"{''.join(shapes)}"
            "</svg>"
            f"{self.render_legend(legend)}"
            "</div>"
        )

    def _render_line(self, spec: ChartSpec) -> str:
        fmt = self.context.formats
        geometry = line_geometry(spec.points, spec.width, spec.height)
        if geometry is None:
            return self._placeholder(spec.title)

        color = self._palette(spec)[0]
        label_color = self.theme.chart_label or self.theme.text
        parts: list[str] = []

        for line in geometry.gridlines:
            parts.append(
                f'<line x1="{_num(geometry.left)}" y1="{_num(line.y)}" '
                f'x2="{_num(geometry.right)}" y2="{_num(line.y)}" '
                f'stroke="{self.theme.chart_grid}" stroke-width="1" stroke-dasharray="2,2"/>'
                f'<text x="{_num(geometry.left - 10)}" y="{_num(line.y + 4)}" '
                f'text-anchor="end" font-size="10" fill="{label_color}">'
                f"{fmt.count(line.value)}</text>"
            )

        coords = [f"{_num(p.x)},{_num(p.y)}" for p in geometry.points]
        parts.append(
            f'<path d="M {" L ".join(coords)}" fill="none" stroke="{color}" stroke-width="2"/>'
        )
        parts.extend(
            f'<circle cx="{_num(p.x)}" cy="{_num(p.y)}" r="3" fill="{color}"/>'
            for p in geometry.points
        )

        axis_y = geometry.bottom + 20
        for index in geometry.label_indices:
            point = geometry.points[index]
            parts.append(
                f'<text x="{_num(point.x)}" y="{_num(axis_y)}" text-anchor="middle" '
                f'font-size="10" fill="{label_color}">{escape(point.label)}</text>'
            )

        parts.append(
            f'<line x1="{_num(geometry.left)}" y1="{_num(geometry.top)}" '
            f'x2="{_num(geometry.left)}" y2="{_num(geometry.bottom)}" '
            f'stroke="{self.theme.text}" stroke-width="2"/>'
            f'<line x1="{_num(geometry.left)}" y1="{_num(geometry.bottom)}" '
            f'x2="{_num(geometry.right)}" y2="{_num(geometry.bottom)}" '
            f'stroke="{self.theme.text}" stroke-width="2"/>'
        )

        return (
            '<div class="chart-container">'
            f"{self._title(spec.title)}"
            f'<svg width="{spec.width}" height="{spec.height}" '
            f'viewBox="0 0 {spec.width} {spec.height}" xmlns="http://www.w3.org/2000/svg">'
            f"{''.join(parts)}"
            "</svg>"
            "</div>"
        )

    def render_legend(self, items: Sequence[tuple[str, str, str]]) -> str:
        """Legend rows of (colour, label, formatted value)."""
        rows = "".join(
            '<div class="legend-item">'
            f'<span class="legend-color" style="background-color: {color}"></span>'
            f'<span class="legend-label">{escape(label)}</span>'
            f'<span class="legend-value">{value}</span>'
            "</div>"
            for color, label, value in items
        )
        return f'<div class="chart-legend">{rows}</div>'
