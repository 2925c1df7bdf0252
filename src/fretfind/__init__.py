"""fretfind: fret placement for parallel and fanned fretboards in any scale."""

from .builder import InstrumentError, InstrumentSpec, build_guitar
from .calculator import (
    Extents,
    FretRecord,
    FrettedGuitar,
    Guitar,
    InvalidGuitar,
    fret_guitar,
    get_extents,
)
from .config import DisplayOptions
from .geometry import INVALID_POINT, THRESHOLD, Point, Segment
from .scale import Scale, et_scale, read_scala_file, scala_scale

__version__ = "0.1.0"

__all__ = [
    "DisplayOptions",
    "Extents",
    "FretRecord",
    "FrettedGuitar",
    "Guitar",
    "INVALID_POINT",
    "InstrumentError",
    "InstrumentSpec",
    "InvalidGuitar",
    "Point",
    "Scale",
    "Segment",
    "THRESHOLD",
    "build_guitar",
    "et_scale",
    "fret_guitar",
    "get_extents",
    "read_scala_file",
    "scala_scale",
]
