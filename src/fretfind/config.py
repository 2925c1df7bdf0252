"""
config.py
=========

Display options, output precision and the small JSON-backed user config that
the GUI keeps between sessions (presets + window state).
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

DEFAULT_PRECISION = 5

PRESETS_PATH = Path.home() / ".fretfind_presets.json"
CONFIG_PATH = Path.home() / ".fretfind_config.json"


def round_float(value: float, decimals: Optional[int] = None) -> float:
    p = DEFAULT_PRECISION if decimals is None else decimals
    if value is None or math.isnan(value):
        return math.nan
    if math.isinf(value):
        return value
    return round(value, p)


def format_float(value: float, decimals: Optional[int] = None) -> str:
    """Render a rounded float without trailing zeros; NaN renders as ``NaN``."""
    v = round_float(value, decimals)
    if math.isnan(v):
        return "NaN"
    text = repr(float(v))
    if text.endswith(".0"):
        text = text[:-2]
    if text == "-0":
        text = "0"
    return text


@dataclass(frozen=True)
class DisplayOptions:
    """What the renderers draw besides the frets themselves."""

    show_strings: bool = True
    show_fretboard_edges: bool = True
    show_metas: bool = False
    show_bounding_box: bool = False
    extend_frets: bool = True


def load_json_file(path: Path, default: Any) -> Any:
    """
    Read a JSON file if it exists; otherwise return `default`.
    A corrupt file is logged and treated as missing.
    """
    if not path.exists():
        return default
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return default


def save_json_file(path: Path, data: Any) -> bool:
    """
    Write a JSON file atomically (write-then-replace). Returns False on failure.
    """
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
        tmp.replace(path)
    except OSError as e:
        logger.warning("Could not save %s: %s", path, e)
        return False
    return True


def load_user_config(path: Path = CONFIG_PATH) -> dict:
    cfg = load_json_file(path, {})
    if not isinstance(cfg, dict):
        cfg = {}
    cfg.setdefault("auto_preview", True)
    cfg.setdefault("last_output_dir", str(Path.cwd()))
    cfg.setdefault("last_preset", "None (manual)")
    cfg.setdefault("win_geom", None)
    return cfg
