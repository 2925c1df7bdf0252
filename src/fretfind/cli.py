"""
cli.py
======

Command-line front-end: luthier parameters in, fret tables and drawings out.
  • Markdown (tables to stdout, the default when no file is requested),
  • SVG / DXF drawings,
  • CSV / TAB / HTML fret tables,
  • JSON (full geometry, used by the GUI preview).

USAGE EXAMPLES
--------------
# Single scale → Markdown
fretfind --strings 6 --frets 22 --scale 25.5in

# Fanned 7-string, 27" → 25.5", perpendicular at the 7th-ish point → SVG + JSON
fretfind --strings 7 --frets 24 --first-scale 25.5in --last-scale 27in \\
    --perpendicular 0.25 --nut-width 1.9in --bridge-width 2.45in \\
    --svg board.svg --json board.json

# 19-TET, mm
fretfind --unit mm --scale 648 --tones 19 --frets 30 --csv board.csv

# Scala file with a per-string tuning
fretfind --scala just.scl --tuning 0,5,10,15,19,24 --html board.html
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .builder import (
    OVERHANG_MODES,
    SPACING_MODES,
    InstrumentError,
    InstrumentSpec,
    build_guitar,
    parse_tuning,
    resolve_overhangs,
    width_from_spacing,
)
from .calculator import fret_guitar
from .config import DisplayOptions
from .outputs import (
    to_csv,
    to_dxf,
    to_html,
    to_json,
    to_markdown,
    to_svg,
    to_tab,
    write_text,
)
from .scale import Scale, et_scale, read_scala_file
from .units import UNITS, parse_len_arg, parse_len_list
from .utils import performance_logging

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def build_arg_parser():
    p = argparse.ArgumentParser(
        prog="fretfind",
        description="Fret calculator for parallel and fanned fretboards (SVG/DXF/tables)",
    )
    p.add_argument("--strings", type=int, default=6, help="Number of strings (>=2).")
    p.add_argument("--frets", type=int, default=24, help="Number of frets (>=0).")
    p.add_argument(
        "--unit", choices=list(UNITS), default="in", help="Computation/output unit."
    )

    g = p.add_argument_group("scale length")
    g.add_argument(
        "--scale",
        type=str,
        default=None,
        help='Single scale length, e.g. "25.5in" or "648mm". Default 25.5in.',
    )
    g.add_argument(
        "--first-scale",
        type=str,
        default=None,
        help="Fanned: scale length of the first string.",
    )
    g.add_argument(
        "--last-scale",
        type=str,
        default=None,
        help="Fanned: scale length of the last string.",
    )
    g.add_argument(
        "--scale-lengths",
        type=str,
        default=None,
        help='Individual lengths, one per string, e.g. "25.5in,25.75in,...".',
    )
    g.add_argument(
        "--perpendicular",
        type=float,
        default=0.5,
        help="Fanned: fraction along the strings (0=nut, 1=bridge) kept perpendicular.",
    )

    g = p.add_argument_group("string spacing")
    nut = g.add_mutually_exclusive_group()
    nut.add_argument(
        "--nut-width", type=str, default=None, help="First to last string at the nut."
    )
    nut.add_argument(
        "--nut-spacing", type=str, default=None, help="Gap between strings at the nut."
    )
    bridge = g.add_mutually_exclusive_group()
    bridge.add_argument(
        "--bridge-width",
        type=str,
        default=None,
        help="First to last string at the bridge.",
    )
    bridge.add_argument(
        "--bridge-spacing",
        type=str,
        default=None,
        help="Gap between strings at the bridge.",
    )
    g.add_argument(
        "--spacing",
        choices=list(SPACING_MODES),
        default="equal",
        help="equal: equal centre gaps; proportional: equal gaps between string edges.",
    )
    g.add_argument(
        "--gauges",
        type=str,
        default=None,
        help='Proportional spacing: one gauge per string, e.g. "0.010in,0.013in,...".',
    )

    g = p.add_argument_group("fretboard overhang")
    g.add_argument(
        "--overhang-mode",
        choices=list(OVERHANG_MODES),
        default=None,
        help="Which overhang values apply (inferred from the flags given if omitted).",
    )
    g.add_argument(
        "--overhang",
        type=str,
        default="0.09375in",
        help="Overhang past the outer strings; default for every other overhang flag.",
    )
    for flag in (
        "nut",
        "bridge",
        "first",
        "last",
        "nut-first",
        "nut-last",
        "bridge-first",
        "bridge-last",
    ):
        g.add_argument(f"--overhang-{flag}", type=str, default=None)

    g = p.add_argument_group("tuning")
    g.add_argument(
        "--tuning",
        type=str,
        default=None,
        help='Per-string offset in scale steps, e.g. "0,5,10,15,19,24".',
    )
    g.add_argument(
        "--tones", type=float, default=12, help="Equal temperament: tones per octave."
    )
    g.add_argument(
        "--octave", type=float, default=2, help="Equal temperament: octave ratio."
    )
    g.add_argument(
        "--scala", type=str, default=None, help="Use a Scala (.scl) file instead of ET."
    )

    g = p.add_argument_group("display")
    g.add_argument("--no-strings", action="store_true", help="Do not draw strings.")
    g.add_argument(
        "--no-edges", action="store_true", help="Do not draw the fretboard edges."
    )
    g.add_argument(
        "--metas", action="store_true", help="Draw the lines between strings."
    )
    g.add_argument("--bbox", action="store_true", help="Draw the bounding box.")
    g.add_argument(
        "--no-extend",
        action="store_true",
        help="Do not extend the outer frets to the fretboard edges.",
    )
    g.add_argument("--decimals", type=int, default=3, help="Decimal places for Markdown.")

    g = p.add_argument_group("outputs")
    g.add_argument("--markdown", action="store_true", help="Force Markdown to stdout.")
    g.add_argument("--svg", type=str, help="Write SVG drawing.")
    g.add_argument("--dxf", type=str, help="Write DXF drawing.")
    g.add_argument("--csv", type=str, help="Write CSV fret tables.")
    g.add_argument("--tab", type=str, help="Write tab-separated fret tables.")
    g.add_argument("--html", type=str, help="Write HTML fret tables.")
    g.add_argument("--json", type=str, help="Write JSON geometry.")
    p.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="-v for timings, -vv for engine decisions.",
    )
    return p


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def load_scale(args) -> Scale:
    if args.scala:
        try:
            return read_scala_file(args.scala)
        except OSError as e:
            raise SystemExit(f"Could not read Scala file {args.scala}: {e}")
    return et_scale(args.tones, args.octave)


def _length_mode(args) -> str:
    if args.scale_lengths:
        if args.scale or args.first_scale or args.last_scale:
            raise SystemExit("Use --scale-lengths on its own, not with other scale flags.")
        return "individual"
    if args.first_scale or args.last_scale:
        if not (args.first_scale and args.last_scale):
            raise SystemExit("Fanned frets need both --first-scale and --last-scale.")
        if args.scale:
            raise SystemExit("Use --scale OR --first-scale/--last-scale, not both.")
        return "multiple"
    return "single"


def _overhang_mode(args) -> str:
    if args.overhang_mode:
        return args.overhang_mode
    if any(
        (
            args.overhang_nut_first,
            args.overhang_nut_last,
            args.overhang_bridge_first,
            args.overhang_bridge_last,
        )
    ):
        return "all"
    nutbridge = args.overhang_nut or args.overhang_bridge
    firstlast = args.overhang_first or args.overhang_last
    if nutbridge and firstlast:
        raise SystemExit(
            "Use --overhang-nut/--overhang-bridge OR --overhang-first/--overhang-last, "
            "or give the four corner overhangs."
        )
    if nutbridge:
        return "nutbridge"
    if firstlast:
        return "firstlast"
    return "equal"


def _width(width: Optional[str], spacing: Optional[str], default: str, args) -> float:
    if spacing:
        return width_from_spacing(parse_len_arg(spacing, args.unit), args.strings)
    return parse_len_arg(width or default, args.unit)


def spec_from_args(args, scale: Scale) -> InstrumentSpec:
    """Translate parsed CLI arguments into an ``InstrumentSpec``."""
    unit = args.unit
    if args.strings < 2:
        raise SystemExit("--strings must be >= 2.")
    if args.frets < 0:
        raise SystemExit("--frets must be >= 0.")
    if not 0 <= args.perpendicular <= 1:
        raise SystemExit("--perpendicular must be in [0..1].")

    mode = _length_mode(args)

    def length(text: Optional[str], fallback: str = "25.5in") -> float:
        return parse_len_arg(text or fallback, unit)

    default = args.overhang

    def overhang(text: Optional[str]) -> float:
        return parse_len_arg(text or default, unit)

    n_first, n_last, b_first, b_last = resolve_overhangs(
        _overhang_mode(args),
        equal=overhang(None),
        nut=overhang(args.overhang_nut),
        bridge=overhang(args.overhang_bridge),
        first=overhang(args.overhang_first),
        last=overhang(args.overhang_last),
        nut_first=overhang(args.overhang_nut_first),
        nut_last=overhang(args.overhang_nut_last),
        bridge_first=overhang(args.overhang_bridge_first),
        bridge_last=overhang(args.overhang_bridge_last),
    )

    return InstrumentSpec(
        string_count=args.strings,
        fret_count=args.frets,
        scale=scale,
        tuning=parse_tuning(args.tuning) if args.tuning else (),
        units=unit,
        nut_width=_width(args.nut_width, args.nut_spacing, "1.375in", args),
        bridge_width=_width(args.bridge_width, args.bridge_spacing, "2.125in", args),
        length_mode=mode,
        scale_length=length(args.scale),
        scale_length_first=length(args.first_scale),
        scale_length_last=length(args.last_scale),
        lengths=parse_len_list(args.scale_lengths, unit) if args.scale_lengths else (),
        perpendicular_distance=args.perpendicular,
        spacing_mode=args.spacing,
        gauges=parse_len_list(args.gauges, unit) if args.gauges else (),
        nut_first=n_first,
        nut_last=n_last,
        bridge_first=b_first,
        bridge_last=b_last,
    )


def display_options(args) -> DisplayOptions:
    return DisplayOptions(
        show_strings=not args.no_strings,
        show_fretboard_edges=not args.no_edges,
        show_metas=args.metas,
        show_bounding_box=args.bbox,
        extend_frets=not args.no_extend,
    )


def main(argv: Optional[List[str]] = None):
    args = build_arg_parser().parse_args(argv)
    configure_logging(args.verbose)

    scale = load_scale(args)
    for err in scale.errors:
        print(f"⚠️  Scale: {err}", file=sys.stderr)

    try:
        with performance_logging("build guitar", logger=logger):
            spec = spec_from_args(args, scale)
            guitar = build_guitar(spec)
    except (InstrumentError, ValueError) as e:
        raise SystemExit(f"Invalid parameters: {e}")

    with performance_logging(
        "fret guitar", counter=args.strings * (args.frets + 1), logger=logger
    ):
        result = fret_guitar(guitar)
    if not result.ok:
        raise SystemExit(f"Could not compute frets: {result.reason}")

    options = display_options(args)
    writers = (
        ("SVG", args.svg, lambda: to_svg(result, options)),
        ("DXF", args.dxf, lambda: to_dxf(result, options)),
        ("CSV", args.csv, lambda: to_csv(result)),
        ("TAB", args.tab, lambda: to_tab(result)),
        ("HTML", args.html, lambda: to_html(result)),
        ("JSON", args.json, lambda: to_json(result)),
    )
    did_any_file = False
    for label, path, render in writers:
        if not path:
            continue
        with performance_logging(f"render {label}", logger=logger):
            text = render()
        try:
            write_text(path, text)
        except OSError as e:
            raise SystemExit(f"Could not write {label} to {path}: {e}")
        print(f"✅ {label} written to {path}")
        did_any_file = True

    if args.markdown or not did_any_file:
        print(to_markdown(result, args.decimals))


if __name__ == "__main__":
    main()
