"""
presets.py
==========

Starter instrument presets and the mapping from a flat form/preset dict to
``fretfind`` CLI arguments. Kept free of Qt so it can be used (and tested)
without a display.

A preset is a ``Dict[str, str]``: every key is a form field name, every value
the text that field holds. Check boxes are stored as "1"/"0".
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from .config import PRESETS_PATH, load_json_file, save_json_file

Preset = Dict[str, str]

MANUAL = "None (manual)"

# field name -> CLI flag, passed through when the field is non-empty
_VALUE_FLAGS = (
    ("strings", "--strings"),
    ("frets", "--frets"),
    ("unit", "--unit"),
    ("decimals", "--decimals"),
    ("perpendicular", "--perpendicular"),
    ("nut_width", "--nut-width"),
    ("bridge_width", "--bridge-width"),
    ("spacing", "--spacing"),
    ("overhang_mode", "--overhang-mode"),
    ("overhang", "--overhang"),
    ("overhang_nut", "--overhang-nut"),
    ("overhang_bridge", "--overhang-bridge"),
    ("overhang_first", "--overhang-first"),
    ("overhang_last", "--overhang-last"),
    ("overhang_nut_first", "--overhang-nut-first"),
    ("overhang_nut_last", "--overhang-nut-last"),
    ("overhang_bridge_first", "--overhang-bridge-first"),
    ("overhang_bridge_last", "--overhang-bridge-last"),
    ("tuning", "--tuning"),
)

# check box -> (flag when checked, flag when unchecked)
_TOGGLE_FLAGS = (
    ("show_strings", None, "--no-strings"),
    ("show_edges", None, "--no-edges"),
    ("show_metas", "--metas", None),
    ("show_bbox", "--bbox", None),
    ("extend_frets", None, "--no-extend"),
)

_TOGGLE_DEFAULTS = {
    "show_strings": "1",
    "show_edges": "1",
    "show_metas": "0",
    "show_bbox": "0",
    "extend_frets": "1",
}


def default_presets() -> Dict[str, Preset]:
    """A handful of practical starter presets."""
    return {
        MANUAL: {},
        '6-String (25.5")': {
            "strings": "6",
            "frets": "22",
            "unit": "in",
            "length_mode": "single",
            "scale": "25.5in",
            "nut_width": "1.375in",
            "bridge_width": "2.125in",
            "spacing": "equal",
            "overhang_mode": "equal",
            "overhang": "0.09375in",
            "scale_source": "et",
            "tones": "12",
            "octave": "2",
        },
        '7-String Fan (25.5 → 27")': {
            "strings": "7",
            "frets": "24",
            "unit": "in",
            "length_mode": "multiple",
            "first_scale": "25.5in",
            "last_scale": "27in",
            "perpendicular": "0.25",
            "nut_width": "1.65in",
            "bridge_width": "2.45in",
            "spacing": "equal",
            "overhang_mode": "equal",
            "overhang": "0.09375in",
            "scale_source": "et",
            "tones": "12",
            "octave": "2",
        },
        "Classical (650mm)": {
            "strings": "6",
            "frets": "19",
            "unit": "mm",
            "length_mode": "single",
            "scale": "650mm",
            "nut_width": "43mm",
            "bridge_width": "58mm",
            "spacing": "equal",
            "overhang_mode": "equal",
            "overhang": "4mm",
            "scale_source": "et",
            "tones": "12",
            "octave": "2",
        },
        "19-TET Guitar": {
            "strings": "6",
            "frets": "36",
            "unit": "in",
            "length_mode": "single",
            "scale": "25.5in",
            "nut_width": "1.375in",
            "bridge_width": "2.125in",
            "spacing": "equal",
            "overhang_mode": "equal",
            "overhang": "0.09375in",
            "scale_source": "et",
            "tones": "19",
            "octave": "2",
        },
    }


def _get(preset: Preset, key: str) -> str:
    return str(preset.get(key, "") or "").strip()


def preset_to_argv(
    preset: Preset,
    svg_path: Optional[str] = None,
    json_path: Optional[str] = None,
    out_dir: Optional[Path] = None,
) -> List[str]:
    """
    Build the CLI argument list for a preset/form dict. Empty fields are
    left out so the CLI defaults apply. `svg_path`/`json_path` add the preview
    artifacts; the "export_*" check boxes add files in `out_dir`.
    """
    argv: List[str] = []
    for key, flag in _VALUE_FLAGS:
        val = _get(preset, key)
        if val:
            argv += [flag, val]

    # --- Scale length: single / fanned / per-string ---
    mode = _get(preset, "length_mode") or "single"
    if mode == "individual" and _get(preset, "scale_lengths"):
        argv += ["--scale-lengths", _get(preset, "scale_lengths")]
    elif mode == "multiple" and _get(preset, "first_scale") and _get(preset, "last_scale"):
        argv += [
            "--first-scale",
            _get(preset, "first_scale"),
            "--last-scale",
            _get(preset, "last_scale"),
        ]
    elif _get(preset, "scale"):
        argv += ["--scale", _get(preset, "scale")]

    if _get(preset, "spacing") == "proportional" and _get(preset, "gauges"):
        argv += ["--gauges", _get(preset, "gauges")]

    # --- Scale: equal temperament or Scala file ---
    if _get(preset, "scale_source") == "scala" and _get(preset, "scala_file"):
        argv += ["--scala", _get(preset, "scala_file")]
    else:
        for key, flag in (("tones", "--tones"), ("octave", "--octave")):
            if _get(preset, key):
                argv += [flag, _get(preset, key)]

    for key, on_flag, off_flag in _TOGGLE_FLAGS:
        checked = (_get(preset, key) or _TOGGLE_DEFAULTS[key]) == "1"
        flag = on_flag if checked else off_flag
        if flag:
            argv.append(flag)

    if svg_path:
        argv += ["--svg", svg_path]
    if json_path:
        argv += ["--json", json_path]
    if out_dir is not None:
        for key, flag, name in (
            ("export_csv", "--csv", "board.csv"),
            ("export_dxf", "--dxf", "board.dxf"),
            ("export_html", "--html", "board.html"),
        ):
            if _get(preset, key) == "1":
                argv += [flag, str(out_dir / name)]
    return argv


def load_presets(path: Path = PRESETS_PATH) -> Dict[str, Preset]:
    """Load the preset file; if it is missing or empty, seed it with the defaults."""
    presets = load_json_file(path, {})
    if not isinstance(presets, dict) or not presets:
        presets = default_presets()
        save_json_file(path, presets)
    return presets


def save_presets(presets: Dict[str, Preset], path: Path = PRESETS_PATH) -> bool:
    return save_json_file(path, presets)
