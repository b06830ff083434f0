# ringchart/pie.py
from __future__ import annotations
from typing import Any, Dict, List, Optional, Sequence

from dominate import svg as svgtags
from dominate.dom_tag import dom_tag

from ringchart import __version__
from ringchart import logging as rlog
from ringchart.environment import Subscription, Viewport
from ringchart.geometry import (
    compute_angle_ranges,
    compute_arc_geometry,
    compute_center,
    compute_label_radius,
    compute_radius,
    compute_total,
    fmt_num,
    polar_to_cartesian,
)
from ringchart.labels import determine_anchor, identity_label
from ringchart.optionsloader import validate_options
from ringchart.responsive import Options, OptionsProvider, ResponsiveOption
from ringchart.series import ChartData, get_data_array, normalize_series
from ringchart.svgutils import alpha_numerate, create_chart_rect, create_svg, render_svg, resolve_length

# Pie, donut and gauge charts.
#
#   chart = render_pie(tags.div(), {"series": [10, 2, 4, 3]}, {"donut": True})
#   chart.update()      # after mutating the data
#   chart.dispose()     # stop following the viewport
#
# Gauge: donut + start_angle 270 + a total bigger than the sum of the series.

DEFAULT_OPTIONS: Options = {
    # fixed size as a number of px, '<n>px' or '<n>%' of the viewport; None = viewport size
    "width": None,
    "height": None,
    # padding between the svg edge and the drawing area
    "chart_padding": 5,
    "class_names": {
        "chart": "ct-chart-pie",
        "series": "ct-series",
        "slice": "ct-slice",
        "donut": "ct-donut",
        "label": "ct-label",
    },
    # degrees, 0 points north, positive values turn clockwise
    "start_angle": 0,
    # fixed reference sum; a full circle needs the series to add up to it
    "total": None,
    # draw stroked rings instead of filled wedges
    "donut": False,
    "donut_width": 60,
    "show_label": True,
    # added to the label radius; negative values move labels towards the center
    "label_offset": 0,
    "label_interpolation_fnc": identity_label,
    "label_overflow": False,
    # 'neutral', 'explode' or 'implode'
    "label_direction": "neutral",
}


def _validate_responsive(responsive_options: Optional[Sequence[ResponsiveOption]]) -> None:
    for idx, entry in enumerate(responsive_options or []):
        if isinstance(entry, (tuple, list)) and len(entry) == 2:
            validate_options(entry[1], where=f"responsive_options[{idx}]")


class PieChart:
    """
    A pie chart bound to a container tag. Renders once on creation, again
    whenever the responsive options change or the viewport is resized, and
    on update(). Every render replaces the whole svg tree.
    """

    version = __version__

    def __init__(
        self,
        container: dom_tag,
        data: ChartData,
        options: Optional[Options] = None,
        responsive_options: Optional[Sequence[ResponsiveOption]] = None,
        *,
        environment: Optional[Viewport] = None,
    ):
        validate_options(options)
        _validate_responsive(responsive_options)

        self.container = container
        self.data = data
        self.environment = environment or Viewport()
        self.svg: Optional[svgtags.svg] = None
        self.render_count = 0
        self._subscriptions: List[Subscription] = []

        self.provider = OptionsProvider(
            DEFAULT_OPTIONS, options, responsive_options, environment=self.environment,
        )
        self.current_options: Options = self.provider.current

        self._subscriptions.append(self.provider.subscribe(self._on_options_changed))
        self._subscriptions.append(self.environment.on_resize(self._on_resize))

        self.create_chart(self.current_options)

    def _on_options_changed(self, options: Options) -> None:
        self.current_options = options
        self.create_chart(options)

    def _on_resize(self, viewport: Viewport) -> None:
        # no debouncing: every resize redraws
        self.create_chart(self.current_options)

    def update(self) -> None:
        self.create_chart(self.current_options)

    def dispose(self) -> None:
        for sub in self._subscriptions:
            sub.unsubscribe()
        self._subscriptions.clear()
        self.provider.close()

    def render(self, *, pretty: bool = False) -> str:
        """Markup of the current svg tree."""
        if self.svg is None:
            return ""
        return render_svg(self.svg, pretty=pretty)

    def create_chart(self, options: Options) -> svgtags.svg:
        series = normalize_series(self.data)
        values = get_data_array(series)
        class_names: Dict[str, str] = options["class_names"]

        size = (
            resolve_length(options["width"], self.environment.width),
            resolve_length(options["height"], self.environment.height),
        )
        self.svg = create_svg(self.container, options["width"], options["height"], class_names["chart"])
        chart_rect = create_chart_rect(size, float(options["chart_padding"]))

        radius = compute_radius(chart_rect, options["donut"], options["donut_width"])
        if radius == 0.0:
            rlog.log_warn(
                f"Chart area {fmt_num(chart_rect.width())}x{fmt_num(chart_rect.height())} leaves no room "
                f"for the circle; drawing with radius 0."
            )
        label_radius = compute_label_radius(radius, options["donut"], options["label_offset"])
        center = compute_center(chart_rect)

        total = compute_total(values, options["total"])
        if total == 0 and values:
            rlog.log_debug("Series total is 0; every slice gets a zero-degree range.")
        ranges = compute_angle_ranges(values, total, options["start_angle"])

        slice_cls = class_names["slice"] + (" " + class_names["donut"] if options["donut"] else "")
        label_fnc = options["label_interpolation_fnc"]

        for i, (item, angle_range) in enumerate(zip(series, ranges)):
            series_cls = item.class_name or f"{class_names['series']}-{alpha_numerate(i)}"
            group = self.svg.add(svgtags.g(cls=f"{class_names['series']} {series_cls}"))

            arc = compute_arc_geometry(center, radius, angle_range, i == 0, options["donut"])
            path = group.add(svgtags.path(d=arc.d, cls=slice_cls))
            if options["donut"]:
                path["style"] = f"stroke-width: {fmt_num(options['donut_width'])}px"

            if options["show_label"]:
                label_pos = polar_to_cartesian(center.x, center.y, label_radius, angle_range.mid)
                raw_label = item.label if item.label is not None else item.value
                text = str(label_fnc(raw_label, i))
                group.add(svgtags.text(
                    text,
                    dx=fmt_num(label_pos.x),
                    dy=fmt_num(label_pos.y),
                    cls=class_names["label"],
                    **{"text-anchor": determine_anchor(center, label_pos, options["label_direction"])},
                ))

        self.render_count += 1
        rlog.log_fields(
            "pie render",
            n=len(series),
            total=fmt_num(total),
            radius=fmt_num(radius),
            donut=options["donut"],
            viewport=f"{fmt_num(self.environment.width)}x{fmt_num(self.environment.height)}",
        )
        return self.svg


def render_pie(
    container: dom_tag,
    data: ChartData,
    options: Optional[Options] = None,
    responsive_options: Optional[Sequence[ResponsiveOption]] = None,
    *,
    environment: Optional[Viewport] = None,
) -> PieChart:
    """
    Draw a pie chart into container and keep it in sync with the viewport.
    Returns the chart handle (version, update(), dispose()).
    """
    return PieChart(container, data, options, responsive_options, environment=environment)
