"""
calculator.py
=============

Fret placement for arbitrary (parallel or fanned) fretboards.

INPUT
-----
A ``Guitar``: string segments (nut end -> bridge end, in order across the
neck), the two fretboard edges ``edge1``/``edge2`` (nut end -> bridge end), a
``Scale``, a per-string tuning offset in scale steps and a fret count.

ALGORITHM
---------
• nut = edge1.end1 -> edge2.end1, bridge = edge1.end2 -> edge2.end2,
  midline = nut midpoint -> bridge midpoint.
• meta lines: edge1, the lines midway between adjacent strings, edge2. The
  fretlet under string i is bounded by meta[i] and meta[i + 1].
• Fret j on string i sits between fret j-1 and the bridge end at

      ratio = 1 - (d[k] * n[k-1]) / (n[k] * d[k-1]),
      k     = ((tuning[i] + j - 1) mod tones) + 1

  where (n[k], d[k]) is scale step k. Positions accumulate fret by fret;
  there is no closed form over the whole string.
• Fretlets (``do_partials``) are only computed when every string starts on
  the nut line and ends on the bridge line. The full fret line is parallel
  to the nut when nut and bridge are parallel, otherwise it joins the points
  at the same nut-distance ratio on the first and last strings.

Numeric trouble never raises: it surfaces as NaN (or a documented 0/point
fallback) in the affected records only. A structurally incomplete guitar
is reported with an ``InvalidGuitar`` result instead of a computation.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from .geometry import INVALID_POINT, THRESHOLD, Point, Segment
from .scale import Scale, Step

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Guitar:
    strings: Sequence[Segment]
    edge1: Optional[Segment]
    edge2: Optional[Segment]
    scale: Optional[Scale]
    tuning: Optional[Sequence[int]]
    fret_count: int
    units: str = "in"


@dataclass(frozen=True)
class FretRecord:
    """One fret on one string. Fret 0 is the nut."""

    fret: Segment
    intersection: Point
    nut_dist: float
    bridge_dist: float
    p_fret_dist: float
    total_ratio: float
    width: float
    angle: float
    midline_intersection: Point
    midline_nut_dist: float
    midline_bridge_dist: float
    midline_p_fret_dist: float


@dataclass(frozen=True)
class FrettedGuitar:
    guitar: Guitar
    nut: Segment
    bridge: Segment
    midline: Segment
    meta: List[Segment]
    do_partials: bool
    parallel_frets: bool
    frets: List[List[FretRecord]]
    fret_widths: List[float]
    extended_fret_ends: List[Segment] = field(default_factory=list)

    ok = True

    @property
    def strings(self) -> Sequence[Segment]:
        return self.guitar.strings

    @property
    def edge1(self) -> Segment:
        return self.guitar.edge1

    @property
    def edge2(self) -> Segment:
        return self.guitar.edge2

    @property
    def scale(self) -> Scale:
        return self.guitar.scale

    @property
    def fret_count(self) -> int:
        return self.guitar.fret_count

    @property
    def units(self) -> str:
        return self.guitar.units


@dataclass(frozen=True)
class InvalidGuitar:
    """Returned instead of a computation when required fields are missing."""

    guitar: Optional[Guitar]
    reason: str

    ok = False


@dataclass(frozen=True)
class Extents:
    minx: float = 0.0
    maxx: float = 0.0
    miny: float = 0.0
    maxy: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def as_dict(self) -> dict:
        return {
            "minx": self.minx,
            "maxx": self.maxx,
            "miny": self.miny,
            "maxy": self.maxy,
            "width": self.width,
            "height": self.height,
        }


def _structural_problem(guitar: Optional[Guitar]) -> Optional[str]:
    if guitar is None:
        return "no guitar given"
    if not guitar.strings:
        return "no strings"
    for i, s in enumerate(guitar.strings):
        if s is None or s.end1 is None or s.end2 is None:
            return f"string {i + 1} is missing"
    if guitar.edge1 is None or guitar.edge2 is None:
        return "fretboard edge missing"
    if guitar.scale is None:
        return "scale missing"
    if guitar.tuning is None:
        return "tuning missing"
    if isinstance(guitar.fret_count, bool) or not isinstance(guitar.fret_count, int):
        return f"fret count {guitar.fret_count!r} is not an integer"
    if guitar.fret_count < 0:
        return f"fret count {guitar.fret_count} is negative"
    return None


def _tuning_offset(tuning: Sequence, i: int) -> int:
    if i >= len(tuning):
        return 0
    value = tuning[i]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return 0
    if isinstance(value, float) and not value.is_integer():
        return 0
    return int(value)


def _fret_ratio(steps: Sequence[Step], index: Optional[int]) -> float:
    """Fraction of the remaining (previous fret -> bridge) length to step over."""
    if index is None:
        return 0.0
    try:
        num, denom = steps[index]
        prev_num, prev_denom = steps[index - 1]
        ratio = 1 - (denom * prev_num) / (num * prev_denom)
    except (IndexError, ZeroDivisionError, TypeError, OverflowError):
        return 0.0
    return ratio if math.isfinite(ratio) else 0.0


def _meta_lines(guitar: Guitar) -> List[Segment]:
    strings = guitar.strings
    meta = [guitar.edge1]
    for i in range(len(strings) - 1):
        meta.append(
            Segment(
                strings[i + 1].end1.midway(strings[i].end1),
                strings[i + 1].end2.midway(strings[i].end2),
            )
        )
    meta.append(guitar.edge2)
    return meta


def _strings_touch_ends(strings, nut: Segment, bridge: Segment) -> bool:
    for s in strings:
        # NaN distances fail the comparison as well
        if not nut.distance_to_point(s.end1) <= THRESHOLD:
            return False
        if not bridge.distance_to_point(s.end2) <= THRESHOLD:
            return False
    return True


def _nut_record(
    string: Segment, left: Segment, right: Segment, midline: Segment, do_partials: bool
) -> FretRecord:
    start = string.end1
    if not do_partials:
        return FretRecord(
            fret=Segment(start, start),
            intersection=start,
            nut_dist=0.0,
            bridge_dist=string.length(),
            p_fret_dist=0.0,
            total_ratio=0.0,
            width=0.0,
            angle=math.nan,
            midline_intersection=INVALID_POINT,
            midline_nut_dist=math.nan,
            midline_bridge_dist=math.nan,
            midline_p_fret_dist=math.nan,
        )
    fretlet = Segment(left.end1, right.end1)
    mid = midline.intersect(fretlet)
    return FretRecord(
        fret=fretlet,
        intersection=start,
        nut_dist=0.0,
        bridge_dist=string.length(),
        p_fret_dist=0.0,
        total_ratio=0.0,
        width=fretlet.length(),
        angle=fretlet.angle(),
        midline_intersection=mid,
        midline_nut_dist=0.0,
        midline_bridge_dist=midline.end2.distance_to(mid),
        midline_p_fret_dist=0.0,
    )


def fret_string(
    guitar: Guitar,
    i: int,
    meta: Sequence[Segment],
    nut: Segment,
    midline: Segment,
    do_partials: bool,
    parallel_frets: bool,
) -> List[FretRecord]:
    """
    All fret records (0..fret_count) for string `i`. Reads only shared,
    immutable inputs, so strings can be computed independently.
    """
    string = guitar.strings[i]
    first, last = guitar.strings[0], guitar.strings[-1]
    steps = guitar.scale.steps
    tones = len(steps) - 1
    base = _tuning_offset(guitar.tuning, i)
    string_length = string.length()

    records = [_nut_record(string, meta[i], meta[i + 1], midline, do_partials)]
    for j in range(1, guitar.fret_count + 1):
        prev = records[j - 1]
        index = ((base + (j - 1)) % tones) + 1 if tones > 0 else None
        ratio = _fret_ratio(steps, index)
        point = Segment(prev.intersection, string.end2).point_at_ratio(ratio)

        nut_dist = string.end1.distance_to(point)
        total_ratio = nut_dist / string_length if string_length > THRESHOLD else 0.0

        if do_partials:
            if parallel_frets:
                fret_line = nut.create_parallel(point)
            else:
                fret_line = Segment(
                    first.point_at_ratio(total_ratio), last.point_at_ratio(total_ratio)
                )
            fretlet = Segment(
                fret_line.intersect(meta[i]), fret_line.intersect(meta[i + 1])
            )
            mid = midline.intersect(fretlet)
            width, angle = fretlet.length(), fretlet.angle()
            mid_nut = midline.end1.distance_to(mid)
            mid_bridge = midline.end2.distance_to(mid)
            mid_prev = prev.midline_intersection.distance_to(mid)
        else:
            fretlet = Segment(point, point)
            mid = INVALID_POINT
            width, angle = 0.0, math.nan
            mid_nut = mid_bridge = mid_prev = math.nan

        records.append(
            FretRecord(
                fret=fretlet,
                intersection=point,
                nut_dist=nut_dist,
                bridge_dist=string.end2.distance_to(point),
                p_fret_dist=prev.intersection.distance_to(point),
                total_ratio=total_ratio,
                width=width,
                angle=angle,
                midline_intersection=mid,
                midline_nut_dist=mid_nut,
                midline_bridge_dist=mid_bridge,
                midline_p_fret_dist=mid_prev,
            )
        )
    return records


def extend_fret_ends(
    guitar: Guitar, frets: List[List[FretRecord]], do_partials: bool
) -> List[Segment]:
    """
    Two segments per fret continuing the outermost fretlets to the real
    fretboard edges: (edge2 side -> last string), (first string -> edge1 side).
    """
    ends: List[Segment] = []
    if not frets or not frets[0]:
        return ends
    fret_count = guitar.fret_count
    for j in range(fret_count + 1):
        first_fret = frets[0][j].fret
        last_fret = frets[-1][j].fret
        p_right = first_fret.end1
        p_left = last_fret.end1 if last_fret.length() < THRESHOLD else last_fret.end2

        full = Segment(p_left, p_right)
        if full.length() < THRESHOLD and not do_partials:
            ends.append(Segment(p_left, p_left))
            ends.append(Segment(p_right, p_right))
        elif full.length() < THRESHOLD:
            ratio = j / fret_count if fret_count else 0.0
            ends.append(Segment(guitar.edge2.point_at_ratio(ratio), p_left))
            ends.append(Segment(p_right, guitar.edge1.point_at_ratio(ratio)))
        else:
            left = full.intersect(guitar.edge2)
            right = full.intersect(guitar.edge1)
            if not left.is_valid:
                left = p_left
            if not right.is_valid:
                right = p_right
            ends.append(Segment(left, p_left))
            ends.append(Segment(p_right, right))
    return ends


def fret_guitar(guitar: Guitar) -> Union[FrettedGuitar, InvalidGuitar]:
    """
    Compute every fret on every string. Pure: `guitar` is not modified and
    identical inputs give equal outputs.
    """
    problem = _structural_problem(guitar)
    if problem is not None:
        logger.warning("fret_guitar: invalid guitar (%s)", problem)
        return InvalidGuitar(guitar=guitar, reason=problem)

    edge1, edge2 = guitar.edge1, guitar.edge2
    nut = Segment(edge1.end1, edge2.end1)
    bridge = Segment(edge1.end2, edge2.end2)
    midline = Segment(nut.midpoint(), bridge.midpoint())
    meta = _meta_lines(guitar)

    do_partials = _strings_touch_ends(guitar.strings, nut, bridge)
    denom = (bridge.delta_y() * nut.delta_x()) - (bridge.delta_x() * nut.delta_y())
    parallel_frets = not abs(denom) > THRESHOLD
    logger.debug(
        "fret_guitar: %d strings, %d frets, do_partials=%s, parallel_frets=%s",
        len(guitar.strings),
        guitar.fret_count,
        do_partials,
        parallel_frets,
    )

    frets = [
        fret_string(guitar, i, meta, nut, midline, do_partials, parallel_frets)
        for i in range(len(guitar.strings))
    ]
    fret_widths = [
        sum(string_frets[j].width for string_frets in frets)
        for j in range(guitar.fret_count + 1)
    ]

    return FrettedGuitar(
        guitar=guitar,
        nut=nut,
        bridge=bridge,
        midline=midline,
        meta=meta,
        do_partials=do_partials,
        parallel_frets=parallel_frets,
        frets=frets,
        fret_widths=fret_widths,
        extended_fret_ends=extend_fret_ends(guitar, frets, do_partials),
    )


def get_extents(
    guitar: Union[FrettedGuitar, InvalidGuitar, None], extend_frets: bool = True
) -> Extents:
    """
    Bounding box of meta lines, frets (extended ends when requested and
    available, else fretlets), nut and bridge. NaN coordinates are ignored;
    an all-zero box means nothing drawable was found.
    """
    meta = getattr(guitar, "meta", None)
    if not meta:
        return Extents()

    segments: List[Segment] = list(meta)
    if extend_frets and guitar.extended_fret_ends:
        segments.extend(guitar.extended_fret_ends)
    else:
        segments.extend(r.fret for string_frets in guitar.frets for r in string_frets)
    segments.append(guitar.nut)
    segments.append(guitar.bridge)

    xs = [
        v for s in segments for v in (s.end1.x, s.end2.x) if math.isfinite(v)
    ]
    ys = [
        v for s in segments for v in (s.end1.y, s.end2.y) if math.isfinite(v)
    ]
    if not xs or not ys:
        return Extents()
    minx, maxx, miny, maxy = min(xs), max(xs), min(ys), max(ys)
    return Extents(
        minx=minx,
        maxx=maxx,
        miny=miny,
        maxy=maxy,
        width=maxx - minx,
        height=maxy - miny,
    )
