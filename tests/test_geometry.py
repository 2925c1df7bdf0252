import math

import pytest

from fretfind.geometry import INVALID_POINT, Point, Segment


class TestPoint:
    def test_str_trims_trailing_zeros(self):
        assert str(Point(1.0, 2.5)) == "(1,2.5)"

    def test_translate_returns_new_point(self):
        p = Point(1, 2)
        q = p.translate(3, -1)
        assert q == Point(4, 1)
        assert p == Point(1, 2)

    def test_midway_and_distance(self):
        a, b = Point(0, 0), Point(3, 4)
        assert a.midway(b) == Point(1.5, 2)
        assert a.distance_to(b) == 5

    def test_missing_other_point(self):
        assert not Point(0, 0).midway(None).is_valid
        assert math.isnan(Point(0, 0).distance_to(None))

    def test_nan_propagates(self):
        assert math.isnan(Point(0, 0).distance_to(INVALID_POINT))
        assert not INVALID_POINT.is_valid


class TestSegment:
    def test_equality_ignores_direction(self):
        a = Segment(Point(0, 0), Point(1, 1))
        assert a == Segment(Point(1, 1), Point(0, 0))
        assert hash(a) == hash(Segment(Point(1, 1), Point(0, 0)))
        assert a != Segment(Point(0, 0), Point(1, 2))

    def test_slope_and_intercept(self):
        s = Segment(Point(0, 1), Point(2, 5))
        assert s.slope() == 2
        assert s.intercept() == 1

    def test_vertical_slope_is_nan(self):
        s = Segment(Point(1, 0), Point(1, 5))
        assert math.isnan(s.slope())
        assert math.isnan(s.intercept())

    @pytest.mark.parametrize(
        "end2, expected",
        [((1, 0), 0.0), ((0, 1), 90.0), ((-1, 0), 180.0), ((0, -1), -90.0)],
    )
    def test_angle_range(self, end2, expected):
        assert Segment(Point(0, 0), Point(*end2)).angle() == pytest.approx(expected)

    def test_point_at_ratio_extrapolates(self):
        s = Segment(Point(0, 0), Point(2, 0))
        assert s.point_at_ratio(0.5) == Point(1, 0)
        assert s.point_at_ratio(1.5) == Point(3, 0)
        assert s.point_at_ratio(-0.5) == Point(-1, 0)
        assert not s.point_at_ratio(math.nan).is_valid

    def test_point_at_length(self):
        s = Segment(Point(0, 0), Point(3, 4))
        assert s.point_at_length(10) == Point(6, 8)
        assert s.point_at_length(-5) == Point(-3, -4)

    def test_point_at_length_on_point_segment(self):
        s = Segment(Point(2, 2), Point(2, 2))
        assert s.point_at_length(0) == Point(2, 2)
        assert not s.point_at_length(1).is_valid

    def test_midpoint(self):
        assert Segment(Point(0, 0), Point(4, 2)).midpoint() == Point(2, 1)

    def test_distance_to_point(self):
        s = Segment(Point(0, 0), Point(10, 0))
        assert s.distance_to_point(Point(3, 4)) == pytest.approx(4)
        # measured to the infinite line, not the bounded segment
        assert s.distance_to_point(Point(20, -2)) == pytest.approx(2)

    def test_distance_to_point_degenerate_segment(self):
        s = Segment(Point(1, 1), Point(1, 1))
        assert s.distance_to_point(Point(4, 5)) == pytest.approx(5)

    def test_distance_to_point_nan(self):
        s = Segment(INVALID_POINT, Point(1, 1))
        assert math.isnan(s.distance_to_point(Point(0, 0)))

    def test_create_parallel(self):
        s = Segment(Point(0, 0), Point(2, 1))
        p = s.create_parallel(Point(5, 5))
        assert p.end2 == Point(5, 5)
        assert p.end1 == Point(7, 6)
        assert p.slope() == pytest.approx(s.slope())

    def test_create_parallel_invalid(self):
        s = Segment(Point(0, 0), Point(2, 1))
        assert not s.create_parallel(INVALID_POINT).is_valid
        assert not s.create_parallel(None).is_valid

    def test_intersect(self):
        a = Segment(Point(0, 0), Point(2, 2))
        b = Segment(Point(0, 2), Point(2, 0))
        assert a.intersect(b) == Point(1, 1)

    def test_intersect_treats_segments_as_lines(self):
        a = Segment(Point(0, 0), Point(1, 0))
        b = Segment(Point(5, 1), Point(5, 2))
        assert a.intersect(b) == Point(5, 0)

    def test_intersect_parallel_is_invalid(self):
        a = Segment(Point(0, 0), Point(1, 1))
        b = Segment(Point(0, 1), Point(1, 2))
        p = a.intersect(b)
        assert math.isnan(p.x) and math.isnan(p.y)

    def test_intersect_nan_is_invalid(self):
        a = Segment(Point(0, 0), Point(1, 1))
        assert not a.intersect(Segment(INVALID_POINT, Point(1, 0))).is_valid
        assert not a.intersect(None).is_valid

    def test_translate(self):
        s = Segment(Point(0, 0), Point(1, 1))
        assert s.translate(1, 2) == Segment(Point(1, 2), Point(2, 3))
        assert s.translate(math.nan, 0) is s

    def test_to_svg_d(self):
        assert Segment(Point(0, 0.5), Point(1.25, 2)).to_svg_d() == "M0 0.5L1.25 2"
        assert Segment(INVALID_POINT, Point(0, 0)).to_svg_d() == "M0 0L0 0"
