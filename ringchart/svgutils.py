# ringchart/svgutils.py
from __future__ import annotations
import re
from typing import Any, Optional, Tuple

from dominate import svg as svgtags
from dominate.dom_tag import dom_tag

from ringchart.geometry import ChartRect

SVG_NS = "http://www.w3.org/2000/svg"

_length_pat = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(px|%)?\s*$")


def alpha_numerate(n: int) -> str:
    """0 -> 'a', 25 -> 'z', 26 -> 'aa', 27 -> 'ab' (spreadsheet-style column names)."""
    if n < 0:
        raise ValueError("alpha_numerate expects n >= 0")
    out = ""
    n += 1
    while n:
        n, rem = divmod(n - 1, 26)
        out = chr(97 + rem) + out
    return out


def resolve_length(value: Any, available: float) -> float:
    """
    Pixel size for a width/height hint: None -> available, 300 or '300px' ->
    300, '50%' -> half of available.
    """
    if value is None:
        return float(available)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)
    m = _length_pat.match(str(value))
    if not m:
        raise ValueError(f"Unsupported length '{value}' (use a number, '<n>px' or '<n>%')")
    num = float(m.group(1))
    if m.group(2) == "%":
        return available * num / 100.0
    return num


def create_svg(container: dom_tag, width: Any = None, height: Any = None, class_name: Optional[str] = None) -> svgtags.svg:
    """Drop any svg root already in container and append a fresh, empty one."""
    for child in list(container.children):
        if isinstance(child, svgtags.svg):
            container.remove(child)

    root = svgtags.svg(
        width=str(width if width is not None else "100%"),
        height=str(height if height is not None else "100%"),
        xmlns=SVG_NS,
    )
    if class_name:
        root["class"] = class_name
    container.add(root)
    return root


def create_chart_rect(size: Tuple[float, float], padding: float) -> ChartRect:
    width, height = size
    return ChartRect(
        x1=padding,
        y1=height - padding,
        x2=width - padding,
        y2=padding,
    )


def render_svg(root: dom_tag, *, pretty: bool = False) -> str:
    return root.render(pretty=pretty)
