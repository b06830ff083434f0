from __future__ import annotations
import pytest
from dominate import svg as svgtags

from ringchart.svgutils import alpha_numerate, create_chart_rect, create_svg, resolve_length
from utility import container, svg_roots


# alpha_numerate: spreadsheet-style suffixes, no gaps after 'z'.
@pytest.mark.parametrize(
    "n,expected",
    [(0, "a"), (1, "b"), (25, "z"), (26, "aa"), (27, "ab"), (51, "az"), (52, "ba"), (701, "zz"), (702, "aaa")],
)
def test_alpha_numerate(n, expected):
    assert alpha_numerate(n) == expected


# alpha_numerate: negative indexes are rejected.
def test_alpha_numerate_negative():
    with pytest.raises(ValueError):
        alpha_numerate(-1)


# resolve_length: None -> available, numbers and px as-is, percentages of available.
@pytest.mark.parametrize(
    "value,expected",
    [(None, 800.0), (300, 300.0), (12.5, 12.5), ("240px", 240.0), ("240", 240.0), ("50%", 400.0), (" 25 % ", 200.0)],
)
def test_resolve_length(value, expected):
    assert resolve_length(value, 800) == expected


# resolve_length: anything else is a malformed option.
@pytest.mark.parametrize("value", ["10em", "wide", "-5px"])
def test_resolve_length_rejects(value):
    with pytest.raises(ValueError):
        resolve_length(value, 800)


# create_svg: appends one root with size attrs and class; a second call replaces the first.
def test_create_svg_replaces_previous_root():
    cont = container()
    first = create_svg(cont, None, 300, "ct-chart-pie")
    first.add(svgtags.g())
    assert first.attributes["width"] == "100%"
    assert first.attributes["height"] == "300"
    assert first.attributes["class"] == "ct-chart-pie"

    second = create_svg(cont, "50%", None, "ct-chart-pie")
    roots = svg_roots(cont)
    assert len(roots) == 1
    assert roots[0] is second
    assert second is not first
    assert second.children == []
    assert second.attributes["width"] == "50%"


# create_chart_rect: padding applied on every side; y1 is the bottom edge.
def test_create_chart_rect():
    r = create_chart_rect((400, 300), 5)
    assert (r.x1, r.y1, r.x2, r.y2) == (5, 295, 395, 5)
    assert r.width() == 390
    assert r.height() == 290
