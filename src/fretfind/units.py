"""
units.py
========

Length parsing with optional unit suffixes ("25.5in", "648mm", "64.8cm").
A value without a suffix is taken to be in the working unit.
"""

from __future__ import annotations

from typing import List, Tuple

UNITS = ("in", "cm", "mm")

MM_PER_UNIT = {"in": 25.4, "cm": 10.0, "mm": 1.0}

_SUFFIXES = (
    ("inches", "in"),
    ("inch", "in"),
    ("in", "in"),
    ('"', "in"),
    ("cm", "cm"),
    ("mm", "mm"),
)


def parse_length_with_unit(text: str, default_unit: str) -> Tuple[float, str]:
    t = text.strip().lower()
    for suf, unit in _SUFFIXES:
        if t.endswith(suf):
            return float(t[: -len(suf)].strip()), unit
    return float(t), default_unit


def to_unit(value: float, from_unit: str, to_unit_: str) -> float:
    if from_unit == to_unit_:
        return value
    try:
        return value * MM_PER_UNIT[from_unit] / MM_PER_UNIT[to_unit_]
    except KeyError:
        raise ValueError(f"Unsupported unit conversion: {from_unit} -> {to_unit_}")


def parse_len_arg(text: str, unit: str) -> float:
    v, u = parse_length_with_unit(text, unit)
    return to_unit(v, u, unit)


def parse_len_list(text: str, unit: str) -> List[float]:
    parts = [p for p in (x.strip() for x in text.split(",")) if p]
    return [parse_len_arg(p, unit) for p in parts]
