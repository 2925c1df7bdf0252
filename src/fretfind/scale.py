"""
scale.py
========

Musical scales as a sequence of frequency ratios.

``Scale.steps[0]`` is always the implicit unison ``(1, 1)``; each following
entry is the ``(numerator, denominator)`` ratio of that scale degree to the
unison, the last one normally being the octave (or other period).

Scales are built one of two ways:
  • ``et_scale(tones, octave)``: a single step ``octave ** (1/tones) : 1``
    which the fret calculator applies repeatedly.
  • ``scala_scale(text)``: the Scala ``.scl`` format (title line, tone
    count, one pitch per line as cents ``701.955``, ratio ``3/2`` or
    integer ``2``).

Problems never raise. They are appended to ``Scale.errors`` and the offending
step is stored as ``(nan, nan)`` so the step count is preserved and the
calculator can carry on with the remaining degrees.
"""

from __future__ import annotations

import logging
import math
import re
from numbers import Real
from pathlib import Path
from typing import List, Tuple, Union

logger = logging.getLogger(__name__)

Step = Tuple[float, float]

_LEADING_INT = re.compile(r"^[+-]?\d+")


class Scale:
    def __init__(self, title: str = ""):
        self.steps: List[Step] = [(1, 1)]
        self.title = title
        self.errors: List[str] = []

    def __repr__(self) -> str:
        return (
            f"Scale(title={self.title!r}, tones={self.tones}, errors={len(self.errors)})"
        )

    @property
    def tones(self) -> int:
        """Number of steps per period (the unison is not counted)."""
        return len(self.steps) - 1

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def add_error(self, message: str) -> Scale:
        logger.debug("scale %r: %s", self.title, message)
        self.errors.append(message)
        return self

    def add_step(self, num: float, denom: float) -> Scale:
        if not _is_number(num) or not _is_number(denom) or denom == 0:
            self.add_error(f"Error: Invalid step ratio {num}/{denom}")
            self.steps.append((math.nan, math.nan))
        else:
            self.steps.append((num, denom))
        return self

    def cents(self) -> List[float]:
        """Each step's size above the unison in cents (NaN for invalid steps)."""
        out = []
        for num, denom in self.steps:
            try:
                out.append(1200.0 * math.log2(num / denom))
            except (ValueError, ZeroDivisionError):
                out.append(math.nan)
        return out


def _is_number(value) -> bool:
    """A real that is not NaN and fits in a float."""
    if not isinstance(value, Real) or isinstance(value, bool):
        return False
    try:
        return not math.isnan(float(value))
    except OverflowError:
        return False


def _format_number(value) -> str:
    return f"{value:g}" if isinstance(value, float) else str(value)


def et_scale(tones: float, octave: float = 2) -> Scale:
    """Equal temperament: `tones` equal steps per `octave` (a frequency ratio)."""
    scale = Scale()
    if not _is_number(tones) or tones == 0:
        scale.add_error("Error: Number of tones must be non-zero and numeric!")
        return scale
    try:
        step = octave ** (1.0 / tones)
    except (OverflowError, ZeroDivisionError, TypeError):
        step = math.nan
    if not _is_number(step) or math.isinf(step) or step <= 0:
        scale.add_error(
            f"Error: {_format_number(octave)} cannot be divided into "
            f"{_format_number(tones)} equal steps."
        )
        return scale
    scale.add_step(step, 1)
    scale.title = (
        f"{_format_number(tones)} root of {_format_number(octave)} Equal Temperament"
    )
    return scale


def _parse_pitch(token: str, scale: Scale) -> Step:
    if "." in token:
        try:
            cents = float(token)
        except ValueError:
            scale.add_error(f'Error at "{token}": Invalid cents value.')
            return math.nan, math.nan
        try:
            ratio = 2.0 ** (cents / 1200.0)
        except OverflowError:
            ratio = math.inf
        if not math.isfinite(ratio):
            scale.add_error(f'Error at "{token}": Cents value is out of range.')
            return math.nan, math.nan
        return ratio, 1
    if "/" in token:
        parts = token.split("/")
        try:
            num, denom = int(parts[0]), int(parts[1])
        except (ValueError, IndexError):
            scale.add_error(f'Error at "{token}": Invalid ratio component.')
            return math.nan, math.nan
    else:
        try:
            num, denom = int(token), 1
        except ValueError:
            scale.add_error(f'Error at "{token}": Invalid integer value.')
            return math.nan, math.nan
    if not (_is_number(num) and _is_number(denom)):
        scale.add_error(f'Error at "{token}": Value is too large.')
        return math.nan, math.nan
    return num, denom


def scala_scale(scala_input: Union[str, None]) -> Scale:
    """
    Parse Scala (.scl) text. Best effort: every problem is recorded in
    ``errors`` and parsing continues with the next line.
    """
    scale = Scale()
    if not isinstance(scala_input, str):
        scale.add_error("Error: Scala input must be a string.")
        return scale

    lines = [
        line.strip()
        for line in scala_input.strip().splitlines()
        if not line.strip().startswith("!")
    ]
    if len(lines) < 2:
        scale.add_error("Error: Scala input is too short. Missing title or tone count.")
        return scale

    # the title may legitimately be blank
    scale.title = lines[0]
    m = _LEADING_INT.match(lines[1])
    if m is None:
        scale.add_error("Error: Expected number of tones is not a valid number.")
        return scale
    expected = int(m.group(0))

    tokens = [line.split()[0] for line in lines[2:] if line]
    if len(tokens) != expected:
        scale.add_error(
            f"Error: expected {expected} more tones but found {len(tokens)}!"
        )

    for token in tokens:
        num, denom = _parse_pitch(token, scale)
        if not (_is_number(num) and _is_number(denom)):
            # already reported by _parse_pitch
            scale.steps.append((math.nan, math.nan))
        elif num < 0 or denom < 0:
            scale.add_error(f'Error at "{token}": Negative ratios are not allowed!')
            scale.steps.append((math.nan, math.nan))
        else:
            scale.add_step(num, denom)
    return scale


def read_scala_file(path: Union[str, Path]) -> Scale:
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return scala_scale(f.read())
