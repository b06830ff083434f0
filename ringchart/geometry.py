# ringchart/geometry.py
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

# Circle geometry for pie / donut / gauge charts.
# Angles are degrees, 0 = north (12 o'clock), growing clockwise.

FULL_CIRCLE_CORRECTION = 0.01  # a closed 360° arc has start == end, so draw 359.99°
HAIRLINE_OFFSET = 0.2          # overlap adjacent slices to hide antialiasing seams

Number = Union[int, float]
PathCommand = Tuple[Union[str, float], ...]


class Point(NamedTuple):
    x: float
    y: float


class AngleRange(NamedTuple):
    start: float
    end: float

    @property
    def span(self) -> float:
        return self.end - self.start

    @property
    def mid(self) -> float:
        return self.start + (self.end - self.start) / 2


@dataclass
class ChartRect:
    """
    Drawing rectangle in chart-local coordinates.
    y1 is the bottom edge and y2 the top edge (SVG y grows downwards).
    """
    x1: float
    y1: float
    x2: float
    y2: float

    def width(self) -> float:
        return self.x2 - self.x1

    def height(self) -> float:
        return self.y1 - self.y2


@dataclass
class ArcGeometry:
    start: Point
    end: Point
    large_arc: int
    commands: List[PathCommand]

    @property
    def d(self) -> str:
        return path_data(self.commands)


def compute_center(rect: ChartRect) -> Point:
    return Point(rect.x1 + rect.width() / 2, rect.y2 + rect.height() / 2)


def compute_radius(rect: ChartRect, donut: bool, donut_width: Number) -> float:
    """
    Biggest circle that fits into rect. For donuts the ring stroke is centred
    on the radius, so half the stroke width is taken off to keep the outer
    edge inside the rectangle. Never negative: a rect that is too small
    gives 0.0.
    """
    radius = min(rect.width() / 2, rect.height() / 2)
    if donut:
        radius -= float(donut_width) / 2
    return radius if radius > 0 else 0.0


def compute_label_radius(radius: float, donut: bool, label_offset: Number) -> float:
    # donut labels sit on the ring, pie labels halfway into the wedge
    base = radius if donut else radius / 2
    return base + float(label_offset)


def polar_to_cartesian(center_x: float, center_y: float, radius: float, angle_degrees: float) -> Point:
    rad = math.radians(angle_degrees)
    return Point(
        center_x + radius * math.sin(rad),
        center_y - radius * math.cos(rad),
    )


def compute_total(values: Sequence[Number], total: Optional[Number] = None) -> float:
    """Fixed total if given (and non-zero), else the plain sum of values."""
    if total:
        return float(total)
    return float(sum(values))


def compute_angle_ranges(values: Sequence[Number], total: Number, start_angle: Number = 0) -> List[AngleRange]:
    """
    Split the circle proportionally to values. Consecutive ranges are
    contiguous; a range spanning exactly 360° is shortened by
    FULL_CIRCLE_CORRECTION. With total == 0 every range has zero span.
    """
    out: List[AngleRange] = []
    start = float(start_angle)
    for value in values:
        share = float(value) / total if total else 0.0
        end = start + share * 360
        if end - start == 360:
            end -= FULL_CIRCLE_CORRECTION
        out.append(AngleRange(start, end))
        start = end
    return out


def build_arc_path(
    center: Point,
    radius: float,
    start_angle: float,
    end_angle: float,
    is_first: bool,
    is_donut: bool,
) -> List[PathCommand]:
    """
    Path commands for one slice: move to the end point, arc back to the
    start point (sweep flag 0), then close to the center for pie wedges.
    The end → start order is what makes sweep flag 0 draw the slice itself.
    """
    shifted_start = start_angle - (0 if is_first else HAIRLINE_OFFSET)
    start = polar_to_cartesian(center.x, center.y, radius, shifted_start)
    end = polar_to_cartesian(center.x, center.y, radius, end_angle)
    large_arc = 0 if end_angle - start_angle <= 180 else 1

    commands: List[PathCommand] = [
        ("M", end.x, end.y),
        ("A", radius, radius, 0, large_arc, 0, start.x, start.y),
    ]
    if not is_donut:
        commands.append(("L", center.x, center.y))
    return commands


def compute_arc_geometry(
    center: Point,
    radius: float,
    angle_range: AngleRange,
    is_first: bool,
    is_donut: bool,
) -> ArcGeometry:
    commands = build_arc_path(center, radius, angle_range.start, angle_range.end, is_first, is_donut)
    _, end_x, end_y = commands[0]
    start_x, start_y = commands[1][-2], commands[1][-1]
    return ArcGeometry(
        start=Point(start_x, start_y),
        end=Point(end_x, end_y),
        large_arc=int(commands[1][4]),
        commands=commands,
    )


def fmt_num(v: Number) -> str:
    """Compact number for SVG attributes: 3 decimals max, no trailing zeros."""
    s = f"{float(v):.3f}".rstrip("0").rstrip(".")
    if s in ("-0", ""):
        return "0"
    return s


def path_data(commands: Sequence[PathCommand]) -> str:
    parts: List[str] = []
    for cmd in commands:
        op, *args = cmd
        parts.append(str(op))
        parts.extend(fmt_num(a) for a in args)
    return " ".join(parts)
