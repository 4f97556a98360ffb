import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import pytest

from thermosense.chart import ChartGeometry, build_chart, render_figure, render_svg, svg_path

from conftest import make_observation


def test_vertical_extremes_map_to_drawing_area_edges():
    g = ChartGeometry(width=700, height=240, pad=30, y_min=20, y_max=55)
    assert g.y_position(55.0) == pytest.approx(30.0)
    assert g.y_position(20.0) == pytest.approx(240.0 - 30.0)


def test_vertical_mapping_is_monotonically_decreasing():
    g = ChartGeometry()
    ys = [g.y_position(v / 4.0) for v in range(60, 240)]
    assert all(a > b for a, b in zip(ys, ys[1:]))


def test_out_of_domain_values_are_not_clamped():
    g = ChartGeometry()
    assert g.y_position(60.0) < g.pad
    assert g.y_position(10.0) > g.height - g.pad


def test_horizontal_positions_span_padded_width():
    g = ChartGeometry(width=700, height=240, pad=30)
    xs = [g.x_position(i, 5) for i in range(5)]
    assert xs[0] == pytest.approx(30.0)
    assert xs[-1] == pytest.approx(670.0)
    assert xs == sorted(xs)


def test_single_point_sits_on_left_edge():
    g = ChartGeometry()
    assert g.x_position(0, 1) == pytest.approx(g.pad)
    assert g.polyline([35.0]) == [(pytest.approx(g.pad), pytest.approx(g.y_position(35.0)))]


def test_empty_sequence_yields_no_path():
    chart = build_chart([])
    assert chart.is_empty
    assert chart.device == [] and chart.ambient == []
    assert svg_path(chart.device) == ""
    assert len(chart.grid) == 4


def test_build_chart_series_in_chronological_order():
    obs = [make_observation(i, device_c=30.0 + i, ambient_c=25.0) for i in range(4)]
    chart = build_chart(obs)
    g = chart.geometry
    assert [p[0] for p in chart.device] == [g.x_position(i, 4) for i in range(4)]
    assert [p[1] for p in chart.device] == [g.y_position(30.0 + i) for i in range(4)]
    assert len({p[1] for p in chart.ambient}) == 1


def test_grid_lines_at_fixed_values():
    g = ChartGeometry()
    chart = build_chart([], g)
    assert [gl.value_c for gl in chart.grid] == [20.0, 30.0, 40.0, 50.0]
    for gl in chart.grid:
        assert gl.x0 == g.pad
        assert gl.x1 == g.width - g.pad
        assert gl.y == g.y_position(gl.value_c)


def test_svg_path_format():
    assert svg_path([(30.0, 210.0), (670.0, 30.0)]) == "M 30 210 L 670 30"


def test_invalid_domain_rejected():
    with pytest.raises(ValueError):
        ChartGeometry(y_min=55.0, y_max=20.0)


def test_render_svg_contains_both_series():
    obs = [make_observation(i, device_c=35.0 + i) for i in range(3)]
    svg = render_svg(build_chart(obs))
    assert svg.startswith("<svg")
    assert svg.count("<path") == 2
    assert "50°C" in svg
    assert "<path" not in render_svg(build_chart([]))


def test_render_figure_empty_and_filled():
    fig = render_figure(build_chart([]))
    plt.close(fig)

    obs = [make_observation(i, device_c=35.0 + i) for i in range(10)]
    fig = render_figure(build_chart(obs))
    labels = [ln.get_label() for ln in fig.axes[0].get_lines()]
    assert "Battery °C" in labels and "Ambient °C" in labels
    assert fig.axes[0].get_ylim()[0] > fig.axes[0].get_ylim()[1]
    plt.close(fig)
