"""
builder.py
==========

Turns luthier-level parameters (scale length(s), nut/bridge widths, string
spacing, overhangs) into the ``Guitar`` geometry the calculator consumes.

COORDINATES & CONVENTIONS
-------------------------
• y runs from the nut (small y) towards the bridge (large y).
• The first string sits on the +x side, the last string on the -x side;
  ``edge1`` is the fretboard edge beside the first string.
• Lengths modes:
    - single:     every string spans ``scale_length`` in y.
    - multiple:   first/last strings have their own scale lengths, inner
                  strings are interpolated along the nut and bridge.
    - individual: every string has its own length.
  In the fanned modes the strings are aligned so that the point at
  ``perpendicular_distance`` (0 = nut, 1 = bridge) of each outer string
  shares the same y; that fret ends up perpendicular to the centreline.
• Widths are measured between the outer strings; overhangs are measured
  from the outer strings out to the fretboard edge.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from .calculator import Guitar
from .geometry import Point, Segment
from .scale import Scale, et_scale

logger = logging.getLogger(__name__)

LENGTH_MODES = ("single", "multiple", "individual")
SPACING_MODES = ("equal", "proportional")
OVERHANG_MODES = ("equal", "nutbridge", "firstlast", "all")


class InstrumentError(ValueError):
    pass


@dataclass(frozen=True)
class InstrumentSpec:
    string_count: int = 6
    fret_count: int = 24
    scale: Scale = field(default_factory=lambda: et_scale(12, 2))
    tuning: Sequence[int] = ()
    units: str = "in"
    nut_width: float = 1.375
    bridge_width: float = 2.125
    length_mode: str = "single"
    scale_length: float = 25.0
    scale_length_first: float = 25.0
    scale_length_last: float = 25.0
    lengths: Sequence[float] = ()
    perpendicular_distance: float = 0.5
    spacing_mode: str = "equal"
    gauges: Sequence[float] = ()
    nut_first: float = 0.09375
    nut_last: float = 0.09375
    bridge_first: float = 0.09375
    bridge_last: float = 0.09375


def resolve_overhangs(
    mode: str,
    equal: float = 0.0,
    nut: float = 0.0,
    bridge: float = 0.0,
    first: float = 0.0,
    last: float = 0.0,
    nut_first: float = 0.0,
    nut_last: float = 0.0,
    bridge_first: float = 0.0,
    bridge_last: float = 0.0,
) -> Tuple[float, float, float, float]:
    """Returns (nut_first, nut_last, bridge_first, bridge_last) for an overhang mode."""
    if mode == "equal":
        return equal, equal, equal, equal
    if mode == "nutbridge":
        return nut, nut, bridge, bridge
    if mode == "firstlast":
        return first, last, first, last
    if mode == "all":
        return nut_first, nut_last, bridge_first, bridge_last
    raise InstrumentError(f"Unknown overhang mode {mode!r}; use one of {OVERHANG_MODES}.")


def width_from_spacing(spacing: float, strings: int) -> float:
    if strings < 2:
        return 0.0
    return (strings - 1) * spacing


def spacing_from_width(width: float, strings: int) -> float:
    if strings < 2:
        return 0.0
    return width / (strings - 1)


def parse_tuning(text: str) -> List[int]:
    """Comma/space separated scale-step offsets, e.g. "0,5,10,15,19,24"."""
    out = []
    for part in text.replace(",", " ").split():
        try:
            out.append(int(part))
        except ValueError:
            raise InstrumentError(f"Tuning value {part!r} is not an integer.")
    return out


def _sqrt(value: float) -> float:
    return math.sqrt(value) if value >= 0 else math.nan


def _ratio(a: float, b: float) -> float:
    return a / b if b else math.nan


def compute_offsets(
    strings: int,
    gauges: Sequence[float],
    actual_length: float,
    perp_width: float,
    spacing_mode: str,
) -> List[float]:
    """
    Distances along the nut (or bridge) from the first string to each inner
    string. `actual_length` is the along-line length of the nut, `perp_width`
    the nominal width it was built from. In proportional mode the gaps between
    strings, not their centres, are equal.
    """
    gauges = list(gauges) if spacing_mode == "proportional" else [0.0] * strings
    working_area = perp_width - sum(gauges)
    perp_gap = working_area / (strings - 1)
    scale = _ratio(actual_length, perp_width)
    offsets = [0.0]
    for i in range(1, strings - 1):
        half_adjacent = (gauges[i - 1] + gauges[i]) / 2.0
        offsets.append(offsets[i - 1] + (perp_gap + half_adjacent) * scale)
    return offsets


def _validate(spec: InstrumentSpec) -> None:
    if spec.string_count < 2:
        raise InstrumentError("At least 2 strings are required.")
    if spec.fret_count < 0:
        raise InstrumentError("Fret count must be >= 0.")
    if spec.length_mode not in LENGTH_MODES:
        raise InstrumentError(
            f"Unknown length mode {spec.length_mode!r}; use one of {LENGTH_MODES}."
        )
    if spec.spacing_mode not in SPACING_MODES:
        raise InstrumentError(
            f"Unknown spacing mode {spec.spacing_mode!r}; use one of {SPACING_MODES}."
        )
    if spec.length_mode == "individual" and len(spec.lengths) != spec.string_count:
        raise InstrumentError(
            f"Individual lengths must list exactly {spec.string_count} values."
        )
    if spec.spacing_mode == "proportional" and len(spec.gauges) != spec.string_count:
        raise InstrumentError(
            f"Proportional spacing needs exactly {spec.string_count} gauges."
        )
    if len(spec.tuning) > spec.string_count:
        raise InstrumentError(
            f"Tuning lists {len(spec.tuning)} values for {spec.string_count} strings."
        )


def build_guitar(spec: InstrumentSpec) -> Guitar:
    _validate(spec)
    fanned = spec.length_mode != "single"
    n_first, n_last = spec.nut_first, spec.nut_last
    b_first, b_last = spec.bridge_first, spec.bridge_last

    if spec.length_mode == "individual":
        length_first, length_last = spec.lengths[0], spec.lengths[-1]
    else:
        length_first, length_last = spec.scale_length_first, spec.scale_length_last

    nut_half = spec.nut_width / 2
    bridge_half = spec.bridge_width / 2
    center = max(nut_half + n_last, bridge_half + b_last)

    # outer strings, x at the nut and bridge
    snxf, sbxf = center + nut_half, center + bridge_half
    snxl, sbxl = center - nut_half, center - bridge_half

    if fanned:
        fdy = _sqrt(length_first**2 - (sbxf - snxf) ** 2)
        ldy = _sqrt(length_last**2 - (sbxl - snxl) ** 2)
    else:
        fdy = ldy = spec.scale_length

    first = Segment(Point(snxf, 0.0), Point(sbxf, fdy))
    last = Segment(Point(snxl, 0.0), Point(sbxl, ldy))

    perp_y = 0.0
    if fanned:
        fperp = spec.perpendicular_distance * fdy
        lperp = spec.perpendicular_distance * ldy
        if fdy <= ldy:
            first = first.translate(0, lperp - fperp)
            perp_y = lperp
        else:
            last = last.translate(0, fperp - lperp)
            perp_y = fperp

    nut = Segment(first.end1, last.end1)
    bridge = Segment(first.end2, last.end2)

    if fanned:
        # overhangs are given across the neck; convert to along the slanted nut/bridge
        n_first = n_first * _ratio(nut.length(), spec.nut_width)
        n_last = n_last * _ratio(nut.length(), spec.nut_width)
        b_first = b_first * _ratio(bridge.length(), spec.bridge_width)
        b_last = b_last * _ratio(bridge.length(), spec.bridge_width)

    edge1 = Segment(nut.point_at_length(-n_first), bridge.point_at_length(-b_first))
    edge2 = Segment(
        nut.point_at_length(nut.length() + n_last),
        bridge.point_at_length(bridge.length() + b_last),
    )

    if edge1.end1.y < 0 or edge2.end1.y < 0:
        move = -min(edge1.end1.y, edge2.end1.y)
        first, last = first.translate(0, move), last.translate(0, move)
        nut, bridge = nut.translate(0, move), bridge.translate(0, move)
        edge1, edge2 = edge1.translate(0, move), edge2.translate(0, move)
        perp_y += move

    nut_offsets = compute_offsets(
        spec.string_count, spec.gauges, nut.length(), spec.nut_width, spec.spacing_mode
    )
    bridge_offsets = compute_offsets(
        spec.string_count,
        spec.gauges,
        bridge.length(),
        spec.bridge_width,
        spec.spacing_mode,
    )

    strings = [first]
    for i in range(1, spec.string_count - 1):
        n = nut.point_at_length(nut_offsets[i])
        b = bridge.point_at_length(bridge_offsets[i])
        if spec.length_mode == "individual":
            dy = _sqrt(spec.lengths[i] ** 2 - (n.x - b.x) ** 2)
            shift = perp_y - spec.perpendicular_distance * dy
            n = Point(n.x, shift)
            b = Point(b.x, dy + shift)
        strings.append(Segment(n, b))
    strings.append(last)

    logger.debug(
        "build_guitar: %s lengths, %d strings, centre x=%.5f",
        spec.length_mode,
        spec.string_count,
        center,
    )
    return Guitar(
        strings=strings,
        edge1=edge1,
        edge2=edge2,
        scale=spec.scale,
        tuning=list(spec.tuning) + [0] * (spec.string_count - len(spec.tuning)),
        fret_count=spec.fret_count,
        units=spec.units,
    )
