from __future__ import annotations
import logging
import pytest
from dominate import svg as svgtags

import ringchart
from ringchart.environment import Viewport
from ringchart.optionsloader import make_label_formatter
from ringchart.pie import DEFAULT_OPTIONS, PieChart, render_pie
from utility import container, first, groups, parse_path, parse_svg, svg_roots, text_of, SVG_NS


def _chart(data, options=None, responsive=None, size=(410, 410)):
    vp = Viewport(*size)
    return render_pie(container(), data, options, responsive, environment=vp), vp


# render_pie: one group per value with generated series classes, one path and one label each.
def test_render_default_pie_structure():
    chart, _ = _chart({"series": [10, 2, 4, 3]})
    root = chart.svg
    assert root.attributes["class"] == "ct-chart-pie"

    gs = groups(root)
    assert [g.attributes["class"] for g in gs] == [
        "ct-series ct-series-a", "ct-series ct-series-b", "ct-series ct-series-c", "ct-series ct-series-d",
    ]
    for g, value in zip(gs, [10, 2, 4, 3]):
        path = first(g, svgtags.path)
        label = first(g, svgtags.text)
        assert path.attributes["class"] == "ct-slice"
        assert "style" not in path.attributes
        assert [op for op, _ in parse_path(path.attributes["d"])] == ["M", "A", "L"]
        assert label.attributes["class"] == "ct-label"
        assert label.attributes["text-anchor"] == "middle"
        assert text_of(label) == str(value)


# render_pie: pie wedges close at the center of the padded chart rect.
def test_render_pie_wedges_close_at_center():
    chart, _ = _chart([1, 1], size=(410, 210))
    # rect 400x200 from (5, 5): center (205, 105), radius 100
    for g in groups(chart.svg):
        ops = parse_path(first(g, svgtags.path).attributes["d"])
        assert ops[1][1][:2] == [100.0, 100.0]
        assert ops[2] == ("L", [205.0, 105.0])


# render_pie: first slice of a two-value pie runs 0°..180° and is labelled at 90° on half radius.
def test_render_pie_label_position():
    chart, _ = _chart([1, 1], size=(210, 210))
    g0 = groups(chart.svg)[0]
    label = first(g0, svgtags.text)
    # center (105, 105), radius 100, label radius 50 at 90° -> (155, 105)
    assert float(label.attributes["dx"]) == pytest.approx(155)
    assert float(label.attributes["dy"]) == pytest.approx(105)


# render_pie: donut paths carry the donut class, inline stroke width and stay open.
def test_render_donut_paths():
    chart, _ = _chart([20, 10, 30, 40], {"donut": True, "donut_width": 20, "show_label": False}, size=(210, 210))
    for g in groups(chart.svg):
        path = first(g, svgtags.path)
        assert path.attributes["class"] == "ct-slice ct-donut"
        assert path.attributes["style"] == "stroke-width: 20px"
        ops = parse_path(path.attributes["d"])
        assert [op for op, _ in ops] == ["M", "A"]
        # donut radius = 100 - 20/2
        assert ops[1][1][:2] == [90.0, 90.0]
        assert first(g, svgtags.text) is None


# render_pie: explicit per-datum class names replace the generated suffix.
def test_render_custom_series_classes_and_class_names():
    chart, _ = _chart(
        [{"value": 5, "class_name": "mine"}, 5],
        {"class_names": {"series": "s", "label": "lbl"}},
    )
    gs = groups(chart.svg)
    assert gs[0].attributes["class"] == "s mine"
    assert gs[1].attributes["class"] == "s s-b"
    assert first(gs[0], svgtags.text).attributes["class"] == "lbl"
    assert chart.svg.attributes["class"] == "ct-chart-pie"


# render_pie: labels come from data labels, passed through label_interpolation_fnc with the index.
def test_render_labels_use_interpolation():
    chart, _ = _chart(
        {"series": [1, 2], "labels": ["Apples", "Pears"]},
        {"label_interpolation_fnc": lambda v, i: f"{i}:{v}"},
    )
    assert [text_of(first(g, svgtags.text)) for g in groups(chart.svg)] == ["0:Apples", "1:Pears"]


# render_pie: explode direction anchors right-hand labels at start and left-hand ones at end.
def test_render_explode_anchors():
    chart, _ = _chart([1, 1], {"label_direction": "explode", "label_offset": 40})
    anchors = [first(g, svgtags.text).attributes["text-anchor"] for g in groups(chart.svg)]
    assert anchors == ["start", "end"]


# render_pie: a single value draws a 359.99° arc (large-arc flag set) instead of a degenerate circle.
def test_render_single_value_full_circle():
    chart, _ = _chart([42], {"donut": True})
    ops = parse_path(first(groups(chart.svg)[0], svgtags.path).attributes["d"])
    move, arc = ops[0][1], ops[1][1]
    assert arc[3] == 1.0
    assert move != arc[-2:]


# render_pie: a viewport resize re-renders into a fresh svg root sized from the new viewport.
def test_resize_rerenders():
    chart, vp = _chart([1, 2, 3], size=(210, 210))
    old = chart.svg
    assert chart.render_count == 1

    vp.resize(410, 410)
    assert chart.render_count == 2
    roots = svg_roots(chart.container)
    assert len(roots) == 1 and roots[0] is chart.svg and chart.svg is not old
    ops = parse_path(first(groups(chart.svg)[0], svgtags.path).attributes["d"])
    assert ops[1][1][0] == 200.0


# render_pie: responsive overrides switch labels off once the media query matches.
def test_responsive_override_applies_on_resize():
    chart, vp = _chart(
        [1, 2, 3],
        {"show_label": True},
        [("screen and (max-width: 640px)", {"show_label": False})],
        size=(1024, 768),
    )
    assert all(first(g, svgtags.text) is not None for g in groups(chart.svg))

    vp.resize(500, 500)
    assert chart.current_options["show_label"] is False
    assert all(first(g, svgtags.text) is None for g in groups(chart.svg))
    # one render from the media change, one from the resize itself
    assert chart.render_count == 3

    vp.resize(1024, 768)
    assert chart.current_options["show_label"] is True
    assert all(first(g, svgtags.text) is not None for g in groups(chart.svg))


# update: re-renders the mutated data with the same effective options object.
def test_update_after_data_mutation():
    data = {"series": [1, 1]}
    chart, _ = _chart(data)
    opts = chart.current_options
    assert len(groups(chart.svg)) == 2

    data["series"].append(2)
    chart.update()
    assert chart.current_options is opts
    gs = groups(chart.svg)
    assert len(gs) == 3
    assert gs[2].attributes["class"] == "ct-series ct-series-c"
    # the new value is half the circle: first slice now spans 0°..90°, label at 45°
    label0 = first(gs[0], svgtags.text)
    assert float(label0.attributes["dx"]) == pytest.approx(205 + 100 * 2 ** 0.5 / 2, abs=1e-3)
    assert float(label0.attributes["dy"]) == pytest.approx(205 - 100 * 2 ** 0.5 / 2, abs=1e-3)


# dispose: no more re-renders after the chart stops listening.
def test_dispose_stops_rerenders():
    chart, vp = _chart([1], responsive=[("(max-width: 100px)", {"donut": True})])
    chart.dispose()
    vp.resize(50, 50)
    assert chart.render_count == 1
    assert vp._watched == []


# render_pie: zero total and negative radius render without raising.
def test_degenerate_inputs_render(caplog):
    with caplog.at_level(logging.WARNING, logger="ringchart"):
        chart, _ = _chart([0, 0], size=(8, 8))
    assert len(groups(chart.svg)) == 2
    assert "radius 0" in caplog.text


# render_pie: malformed options and data fail immediately.
@pytest.mark.parametrize(
    "data,options,responsive,exc",
    [
        ([1], {"labelDirection": "explode"}, None, ValueError),
        ([1], {"label_direction": "up"}, None, ValueError),
        ([1], None, [("print", {"donut": "yes"})], TypeError),
        (["a"], None, None, TypeError),
    ],
)
def test_render_rejects_malformed_input(data, options, responsive, exc):
    with pytest.raises(exc):
        render_pie(container(), data, options, responsive, environment=Viewport())


# PieChart: exposes the package version and default options stay untouched by renders.
def test_version_and_defaults_untouched():
    chart, _ = _chart([1], {"class_names": {"chart": "other"}})
    assert chart.version == ringchart.__version__
    assert isinstance(chart, PieChart)
    assert DEFAULT_OPTIONS["class_names"]["chart"] == "ct-chart-pie"
    assert chart.svg.attributes["class"] == "other"


# PieChart.render: markup parses as SVG and keeps the group/path/text structure.
def test_render_markup_parses():
    chart, _ = _chart({"series": [3, 1], "labels": ["a<b", "c"]}, {"width": 300, "height": "200px"})
    root = parse_svg(chart.render())
    assert root.get("width") == "300"
    assert root.get("height") == "200px"
    gs = root.findall(f"{SVG_NS}g")
    assert len(gs) == 2
    assert gs[0].find(f"{SVG_NS}text").text == "a<b"
    assert gs[1].find(f"{SVG_NS}path").get("class") == "ct-slice"


# render_pie: a numeric label format over string data labels fails with the offending label.
def test_render_numeric_label_format_with_string_labels():
    with pytest.raises(ValueError, match="Apples"):
        _chart({"series": [1, 2], "labels": ["Apples", "Pears"]},
               {"label_interpolation_fnc": make_label_formatter("{value:.1f}")})
