import pytest

from fretfind.calculator import Guitar
from fretfind.geometry import Point, Segment
from fretfind.scale import et_scale, scala_scale


def two_string_guitar(scale=None, tuning=(0, 0), fret_count=12, nudge=0.0):
    """
    Straight two-string neck, 25 long: strings at x=1 and x=0, edges 0.1
    outside them. `nudge` moves the second string's nut end off the nut line.
    """
    return Guitar(
        strings=[
            Segment(Point(1.0, 0.0), Point(1.0, 25.0)),
            Segment(Point(0.0, nudge), Point(0.0, 25.0)),
        ],
        edge1=Segment(Point(1.1, 0.0), Point(1.1, 25.0)),
        edge2=Segment(Point(-0.1, 0.0), Point(-0.1, 25.0)),
        scale=scale if scale is not None else et_scale(12, 2),
        tuning=list(tuning),
        fret_count=fret_count,
    )


@pytest.fixture
def guitar():
    return two_string_guitar()


@pytest.fixture
def unaligned_guitar():
    return two_string_guitar(nudge=0.01)


@pytest.fixture
def fifth_scale():
    return scala_scale("fifths\n2\n3/2\n2/1\n")
