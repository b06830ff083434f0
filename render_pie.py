#!/usr/bin/env python3
import sys
import argparse
import os
import re

from dominate import tags

from ringchart import __version__
from ringchart import logging as rlog
from ringchart.environment import Viewport
from ringchart.optionsloader import OptionsLoader
from ringchart.pie import render_pie
from ringchart.series import load_data

_viewport_pat = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*[xX]\s*(\d+(?:\.\d+)?)\s*$")


def _parse_viewport(raw: str):
    m = _viewport_pat.match(raw or "")
    if not m:
        raise argparse.ArgumentTypeError(f"viewport must look like 1024x768, got '{raw}'")
    return float(m.group(1)), float(m.group(2))


def _load_config(path: str, strict: bool):
    if not path:
        return {"options": {}, "responsive": []}
    rlog.log_step("Loading chart config:", path)
    cfg = OptionsLoader(path, strict=strict).load()
    rlog.log_ok(f"Config loaded with {len(cfg['responsive'])} responsive entr(y/ies).")
    return cfg


def main(argv=None):
    p = argparse.ArgumentParser(
        description="Render a pie / donut / gauge chart to SVG."
    )
    p.add_argument("-d", "--data", required=True, help="Path to the chart data JSON (list or {series, labels})")
    p.add_argument("-c", "--config", default=None, help="Path to the chart config YAML")
    p.add_argument("-o", "--output-file", default="chart.svg", help="Output SVG path")
    p.add_argument("--viewport", type=_parse_viewport, default=(1024.0, 768.0), metavar="WxH",
                   help="Viewport size used for sizing and media queries (default: 1024x768)")
    p.add_argument("--media", choices=["screen", "print"], default="screen",
                   help="Media type used for media queries (default: screen)")
    p.add_argument("--lenient", action="store_true",
                   help="Downgrade non-fatal config problems to warnings")
    p.add_argument("--pretty", action="store_true", help="Indent the SVG output")
    p.add_argument("-v", "--verbose", action="count", default=0,
                   help="Increase log verbosity (-v, -vv)")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = p.parse_args(argv)
    rlog.setup_logging(args.verbose)

    cfg = _load_config(args.config, strict=not args.lenient)

    rlog.log_step("Reading chart data:", args.data)
    data = load_data(args.data)
    rlog.log_ok(f"{len(data['series'])} series value(s) loaded.")

    width, height = args.viewport
    viewport = Viewport(width, height, media_type=args.media)
    container = tags.div(_class="ct-chart")
    chart = render_pie(container, data, cfg["options"], cfg["responsive"], environment=viewport)

    matching = chart.provider.matching()
    if matching:
        rlog.log_info(f"    • responsive overrides applied: {', '.join(matching)}")

    out_dir = os.path.dirname(os.path.abspath(args.output_file))
    os.makedirs(out_dir, exist_ok=True)
    rlog.log_step("Writing SVG:", args.output_file)
    with open(args.output_file, "w", encoding="utf-8") as f:
        f.write(chart.render(pretty=args.pretty))
        f.write("\n")

    chart.dispose()
    rlog.log_ok("Done.")


def run(argv=None):
    try:
        main(argv)
    except Exception as e:
        rlog.log_err(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
