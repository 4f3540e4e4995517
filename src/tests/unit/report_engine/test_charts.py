"""Unit tests for chart geometry, markup and the chart cache."""

import math

import pytest

from report_engine.models import (
    ChartKind,
    ChartSpec,
    DistributionPoint,
    ThemeColors,
    TimeSeriesPoint,
)
from report_engine.services.charts import (
    ChartCache,
    ChartRenderer,
    RenderContext,
    line_geometry,
    pie_geometry,
)

PALETTE = ["#111111", "#222222", "#333333"]


def distribution(*values: float) -> list[DistributionPoint]:
    return [DistributionPoint(label=f"slice-{i}", value=v) for i, v in enumerate(values)]


def series(*values: float) -> list[TimeSeriesPoint]:
    return [TimeSeriesPoint(label=f"01/0{i + 1} 00:00", value=v) for i, v in enumerate(values)]


class TestPieGeometry:
    """Test pie slice layout."""

    @pytest.mark.parametrize(
        "values",
        [(1,), (1, 1), (3, 1, 4, 1, 5, 9, 2, 6), (0.1, 0.2, 0.7), (10, 0, 5)],
    )
    def test_sweeps_sum_to_full_circle(self, values: tuple[float, ...]) -> None:
        geometry = pie_geometry(distribution(*values), 400, 400, PALETTE)

        assert math.isclose(sum(s.sweep for s in geometry.slices), 360.0)
        assert geometry.slices[0].start_angle == -90.0
        assert math.isclose(geometry.slices[-1].end_angle, 270.0)

    def test_slices_are_contiguous(self) -> None:
        geometry = pie_geometry(distribution(2, 3, 5), 400, 400, PALETTE)
        for previous, current in zip(geometry.slices, geometry.slices[1:]):
            assert current.start_angle == previous.end_angle

    def test_centre_and_radius(self) -> None:
        geometry = pie_geometry(distribution(1), 400, 300, PALETTE)
        assert geometry.center == (200, 150)
        assert geometry.radius == 130

    def test_first_slice_starts_at_twelve_o_clock(self) -> None:
        geometry = pie_geometry(distribution(1, 3), 400, 400, PALETTE)
        x, y = geometry.slices[0].start_point
        assert math.isclose(x, 200, abs_tol=1e-9)
        assert math.isclose(y, 20)

    def test_large_arc_only_above_half(self) -> None:
        geometry = pie_geometry(distribution(3, 1), 400, 400, PALETTE)
        assert geometry.slices[0].large_arc is True
        assert geometry.slices[1].large_arc is False

        halves = pie_geometry(distribution(1, 1), 400, 400, PALETTE)
        assert [s.large_arc for s in halves.slices] == [False, False]

    def test_colours_cycle_through_palette(self) -> None:
        geometry = pie_geometry(distribution(1, 1, 1, 1, 1), 400, 400, PALETTE)
        assert [s.color for s in geometry.slices] == PALETTE + PALETTE[:2]

    def test_zero_total_has_no_slices(self) -> None:
        geometry = pie_geometry(distribution(0, 0), 400, 400, PALETTE)
        assert geometry.slices == []


class TestLineGeometry:
    """Test line chart layout."""

    def test_empty_series(self) -> None:
        assert line_geometry([], 600, 300) is None

    def test_plot_area_margins(self) -> None:
        geometry = line_geometry(series(1, 2), 600, 300)
        assert geometry is not None
        assert (geometry.left, geometry.top, geometry.right, geometry.bottom) == (60, 20, 580, 260)

    def test_index_spacing(self) -> None:
        geometry = line_geometry(series(5, 10, 0, 20, 15), 600, 300)
        xs = [p.x for p in geometry.points]
        gaps = [b - a for a, b in zip(xs, xs[1:])]
        assert xs[0] == 60
        assert xs[-1] == 580
        assert all(math.isclose(g, gaps[0]) for g in gaps)

    def test_six_gridlines_from_max_to_min(self) -> None:
        geometry = line_geometry(series(10, 50, 100), 600, 300)
        assert len(geometry.gridlines) == 6
        assert geometry.gridlines[0].value == 100
        assert geometry.gridlines[-1].value == 0
        assert geometry.gridlines[0].y == geometry.top
        assert geometry.gridlines[-1].y == geometry.bottom

    def test_range_includes_zero_for_positive_values(self) -> None:
        geometry = line_geometry(series(40, 60), 600, 300)
        assert geometry.min_value == 0
        assert geometry.points[0].y > geometry.points[1].y

    def test_negative_values_extend_range(self) -> None:
        geometry = line_geometry(series(-10, 10), 600, 300)
        assert geometry.min_value == -10
        assert geometry.points[0].y == geometry.bottom
        assert geometry.points[1].y == geometry.top

    def test_flat_zero_series(self) -> None:
        """Test a zero range does not divide by zero."""
        geometry = line_geometry(series(0, 0, 0), 600, 300)
        assert all(p.y == geometry.bottom for p in geometry.points)

    def test_single_point(self) -> None:
        geometry = line_geometry(series(7), 600, 300)
        assert geometry.points[0].x == geometry.left
        assert geometry.label_indices == [0]

    def test_axis_labels_every_ceil_n_over_8(self) -> None:
        points = [TimeSeriesPoint(label=str(i), value=i) for i in range(20)]
        geometry = line_geometry(points, 600, 300)
        assert geometry.label_indices == [0, 3, 6, 9, 12, 15, 18]


class TestChartRenderer:
    """Test SVG markup generation."""

    def test_pie_markup(self) -> None:
        renderer = ChartRenderer()
        spec = ChartSpec(kind=ChartKind.PIE, points=tuple(distribution(3, 1)), title="Split")
        markup = renderer.render(spec)

        assert markup.count("<path") == 2
        assert 'viewBox="0 0 400 400"' in markup
        assert '<h3 class="chart-title">Split</h3>' in markup
        assert "75.0%" in markup
        assert "25.0%" in markup
        assert " A 180 180 0 1 1 " in markup

    def test_single_slice_is_full_circle(self) -> None:
        markup = ChartRenderer().render(
            ChartSpec(kind=ChartKind.PIE, points=tuple(distribution(42)))
        )
        assert "<circle" in markup
        assert "<path" not in markup
        assert "100.0%" in markup

    def test_pie_zero_total_placeholder(self) -> None:
        markup = ChartRenderer().render(
            ChartSpec(kind=ChartKind.PIE, points=tuple(distribution(0, 0)), title="Empty")
        )
        assert "No data available" in markup
        assert "<svg" not in markup

    def test_line_empty_placeholder_matches_pie(self) -> None:
        renderer = ChartRenderer()
        pie = renderer.render(ChartSpec(kind=ChartKind.PIE, title="Chart"))
        line = renderer.render(ChartSpec(kind=ChartKind.LINE, title="Chart"))
        assert pie == line

    def test_line_markup(self) -> None:
        spec = ChartSpec(kind=ChartKind.LINE, points=tuple(series(1000, 2000, 1500)))
        markup = ChartRenderer().render(spec)

        assert 'viewBox="0 0 600 300"' in markup
        assert markup.count('stroke-dasharray="2,2"') == 6
        assert markup.count('r="3"') == 3
        assert ">2.0K</text>" in markup
        assert "01/01 00:00" in markup

    def test_labels_are_escaped(self) -> None:
        points = (DistributionPoint(label="<script>", value=1),)
        markup = ChartRenderer().render(ChartSpec(kind=ChartKind.PIE, points=points, title="a&b"))
        assert "<script>" not in markup
        assert "&lt;script&gt;" in markup
        assert "a&amp;b" in markup

    def test_spec_palette_overrides_theme(self) -> None:
        spec = ChartSpec(kind=ChartKind.PIE, points=tuple(distribution(1, 1)), palette=("#abcdef",))
        markup = ChartRenderer().render(spec)
        assert markup.count('fill="#abcdef"') == 2

    def test_default_palette_from_theme(self) -> None:
        theme = ThemeColors(chart_colors=["#010203"])
        markup = ChartRenderer(theme=theme).render(
            ChartSpec(kind=ChartKind.PIE, points=tuple(distribution(1, 2)))
        )
        assert 'fill="#010203"' in markup


class TestChartCache:
    """Test memoization of rendered charts."""

    def test_identical_specs_rendered_once(self) -> None:
        context = RenderContext()
        renderer = ChartRenderer(context=context)
        spec = ChartSpec(kind=ChartKind.PIE, points=tuple(distribution(1, 2, 3)))

        first = renderer.render(spec)
        second = renderer.render(ChartSpec(kind=ChartKind.PIE, points=tuple(distribution(1, 2, 3))))

        assert first == second
        assert context.charts.misses == 1
        assert context.charts.hits == 1

    def test_key_depends_on_data_and_size(self) -> None:
        theme = ThemeColors()
        base = ChartSpec(kind=ChartKind.LINE, points=tuple(series(1, 2)))
        other_data = ChartSpec(kind=ChartKind.LINE, points=tuple(series(1, 3)))
        other_size = ChartSpec(kind=ChartKind.LINE, points=tuple(series(1, 2)), width=800)

        keys = {ChartCache.make_key(s, theme) for s in (base, other_data, other_size)}
        assert len(keys) == 3

    def test_key_format(self) -> None:
        key = ChartCache.make_key(ChartSpec(kind=ChartKind.PIE), ThemeColors())
        prefix, kind, digest = key.split(":")
        assert (prefix, kind) == ("chart", "pie")
        assert len(digest) == 16

    def test_output_stable_across_renderers(self) -> None:
        """Test markup depends only on inputs, not on cache state."""
        spec = ChartSpec(kind=ChartKind.LINE, points=tuple(series(3, 1, 4, 1, 5)), title="T")
        assert ChartRenderer().render(spec) == ChartRenderer().render(spec)

    def test_clear_empties_cache(self) -> None:
        context = RenderContext()
        ChartRenderer(context=context).render(ChartSpec(kind=ChartKind.PIE))
        context.clear()
        assert len(context.charts) == 0
        assert len(context.formats) == 0
