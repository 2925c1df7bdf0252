"""
geometry.py
===========

2-D point and line-segment algebra used by the fret calculator.

Every operation follows one rule: invalid input (NaN coordinate, degenerate
segment, parallel lines) yields NaN output, usually the ``INVALID_POINT``
sentinel. Nothing here raises for numeric reasons, so a bad scale step or an
impossible fan angle shows up as NaN in the final geometry instead of
aborting the whole fretboard.

Points and segments are immutable; ``translate`` returns a new value.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator

from .config import format_float

# Distance/determinant tolerance, in instrument units.
THRESHOLD = 1e-10


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def __str__(self) -> str:
        return f"({format_float(self.x)},{format_float(self.y)})"

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y

    @property
    def is_valid(self) -> bool:
        return not (math.isnan(self.x) or math.isnan(self.y))

    def translate(self, dx: float, dy: float) -> Point:
        return Point(self.x + dx, self.y + dy)

    def midway(self, other: Point) -> Point:
        if other is None:
            return INVALID_POINT
        return Point((other.x + self.x) * 0.5, (other.y + self.y) * 0.5)

    def distance_to(self, other: Point) -> float:
        if other is None:
            return math.nan
        return math.hypot(other.x - self.x, other.y - self.y)


INVALID_POINT = Point(math.nan, math.nan)


@dataclass(frozen=True, eq=False)
class Segment:
    """
    A directed segment ``end1 -> end2``. ``intersect`` treats both segments as
    infinite lines; the point-at helpers extrapolate outside ``[0, 1]``.
    """

    end1: Point
    end2: Point

    def __str__(self) -> str:
        return f"({self.end1}:{self.end2})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Segment):
            return NotImplemented
        return (self.end1 == other.end1 and self.end2 == other.end2) or (
            self.end1 == other.end2 and self.end2 == other.end1
        )

    def __hash__(self) -> int:
        return hash(frozenset((self.end1, self.end2)))

    @property
    def is_valid(self) -> bool:
        return self.end1.is_valid and self.end2.is_valid

    def delta_x(self) -> float:
        return self.end2.x - self.end1.x

    def delta_y(self) -> float:
        return self.end2.y - self.end1.y

    def slope(self) -> float:
        dx = self.delta_x()
        if dx == 0 or math.isnan(dx):
            return math.nan
        return self.delta_y() / dx

    def intercept(self) -> float:
        s = self.slope()
        if math.isnan(s):
            return math.nan
        return self.end2.y - self.end2.x * s

    def length(self) -> float:
        return math.hypot(self.delta_x(), self.delta_y())

    def angle(self) -> float:
        """Direction in degrees, in (-180, 180]."""
        dx, dy = self.delta_x(), self.delta_y()
        if math.isnan(dx) or math.isnan(dy):
            return math.nan
        a = math.degrees(math.atan2(dy, dx))
        return 180.0 if a == -180.0 else a

    def point_at_ratio(self, ratio: float) -> Point:
        if math.isnan(ratio) or not self.is_valid:
            return INVALID_POINT
        return Point(
            self.end1.x + ratio * self.delta_x(), self.end1.y + ratio * self.delta_y()
        )

    def point_at_length(self, length: float) -> Point:
        if math.isnan(length):
            return INVALID_POINT
        current = self.length()
        if current == 0 or math.isnan(current):
            # a point-like segment only has a point at distance zero
            return self.end1 if length == 0 and self.end1.is_valid else INVALID_POINT
        return self.point_at_ratio(length / current)

    def midpoint(self) -> Point:
        return self.point_at_ratio(0.5)

    def distance_to_point(self, point: Point) -> float:
        """Perpendicular distance from `point` to the infinite line through this segment."""
        if point is None:
            return math.nan
        length = self.length()
        if length == 0 or math.isnan(length):
            if self.end1 == self.end2:
                return self.end1.distance_to(point)
            return math.nan
        cross = (self.end2.x - self.end1.x) * (self.end1.y - point.y) - (
            self.end1.x - point.x
        ) * (self.end2.y - self.end1.y)
        return abs(cross) / length

    def create_parallel(self, point: Point) -> Segment:
        """A segment with this direction vector, ending at `point`."""
        if point is None or not self.is_valid or not point.is_valid:
            return Segment(INVALID_POINT, INVALID_POINT)
        return Segment(
            Point(point.x + self.delta_x(), point.y + self.delta_y()), point
        )

    def intersect(self, other: Segment) -> Point:
        """Crossing point of the two infinite lines, or INVALID_POINT if parallel."""
        if other is None:
            return INVALID_POINT
        x1, y1 = self.end1
        x2, y2 = self.end2
        x3, y3 = other.end1
        x4, y4 = other.end2
        if any(math.isnan(v) for v in (x1, y1, x2, y2, x3, y3, x4, y4)):
            return INVALID_POINT

        denom = (y4 - y3) * (x2 - x1) - (x4 - x3) * (y2 - y1)
        if denom == 0:
            return INVALID_POINT
        ua = ((x4 - x3) * (y1 - y3) - (y4 - y3) * (x1 - x3)) / denom
        return Point(x1 + ua * (x2 - x1), y1 + ua * (y2 - y1))

    def translate(self, dx: float, dy: float) -> Segment:
        if math.isnan(dx) or math.isnan(dy):
            return self
        return Segment(self.end1.translate(dx, dy), self.end2.translate(dx, dy))

    def to_svg_d(self, decimals: int = 5) -> str:
        if not self.is_valid:
            return "M0 0L0 0"
        x1, y1 = (format_float(v, decimals) for v in self.end1)
        x2, y2 = (format_float(v, decimals) for v in self.end2)
        return f"M{x1} {y1}L{x2} {y2}"
