# ringchart/labels.py
from __future__ import annotations
from typing import Any, Dict

from ringchart.geometry import Point

LABEL_DIRECTIONS = ("neutral", "explode", "implode")

# (direction, label right of center) -> text-anchor
_ANCHORS: Dict[tuple, str] = {
    ("explode", True): "start",
    ("explode", False): "end",
    ("implode", True): "end",
    ("implode", False): "start",
}


def determine_anchor(center: Point, label: Point, direction: str) -> str:
    """
    Text anchor for a label. explode pushes text outwards, implode pulls it
    towards the center, anything else centres the text on the point.
    A label exactly above/below the center counts as left.
    """
    to_the_right = label.x > center.x
    return _ANCHORS.get((direction, to_the_right), "middle")


def identity_label(value: Any, index: int) -> Any:
    return value
