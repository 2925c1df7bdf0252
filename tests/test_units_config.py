import math

import pytest

from fretfind.config import (
    DisplayOptions,
    format_float,
    load_json_file,
    load_user_config,
    round_float,
    save_json_file,
)
from fretfind.units import parse_len_arg, parse_len_list, parse_length_with_unit, to_unit


class TestUnits:
    @pytest.mark.parametrize(
        "text, expected",
        [
            ("25.5in", (25.5, "in")),
            ("25.5 inches", (25.5, "in")),
            ('25.5"', (25.5, "in")),
            ("648mm", (648.0, "mm")),
            ("64.8 CM", (64.8, "cm")),
            ("25.5", (25.5, "mm")),
        ],
    )
    def test_parse_length_with_unit(self, text, expected):
        assert parse_length_with_unit(text, "mm") == expected

    def test_conversion(self):
        assert to_unit(1, "in", "mm") == pytest.approx(25.4)
        assert to_unit(64.8, "cm", "mm") == pytest.approx(648)
        assert parse_len_arg("25.4mm", "in") == pytest.approx(1)
        with pytest.raises(ValueError):
            to_unit(1, "in", "furlong")

    def test_bad_number(self):
        with pytest.raises(ValueError):
            parse_len_arg("long", "in")

    def test_list(self):
        assert parse_len_list("1in, 25.4mm,,2", "in") == pytest.approx([1, 1, 2])


class TestRounding:
    def test_round_float(self):
        assert round_float(1.23456789) == 1.23457
        assert round_float(1.23456789, 2) == 1.23
        assert math.isnan(round_float(math.nan))
        assert round_float(math.inf) == math.inf

    @pytest.mark.parametrize(
        "value, expected",
        [(1.0, "1"), (-0.0, "0"), (0.1234567, "0.12346"), (math.nan, "NaN"), (12.5, "12.5")],
    )
    def test_format_float(self, value, expected):
        assert format_float(value) == expected

    def test_display_defaults(self):
        options = DisplayOptions()
        assert options.show_strings and options.show_fretboard_edges
        assert not options.show_metas and not options.show_bounding_box
        assert options.extend_frets


class TestJsonFiles:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "presets.json"
        assert save_json_file(path, {"a": {"strings": "6"}})
        assert load_json_file(path, {}) == {"a": {"strings": "6"}}
        assert not (tmp_path / "presets.json.tmp").exists()

    def test_missing_and_corrupt(self, tmp_path):
        assert load_json_file(tmp_path / "missing.json", []) == []
        bad = tmp_path / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        assert load_json_file(bad, {"x": 1}) == {"x": 1}

    def test_save_failure_is_reported(self, tmp_path):
        assert not save_json_file(tmp_path / "no" / "such" / "dir.json", {})

    def test_user_config_defaults(self, tmp_path):
        cfg = load_user_config(tmp_path / "config.json")
        assert cfg["auto_preview"] is True
        assert cfg["last_preset"] == "None (manual)"
        assert cfg["win_geom"] is None

    def test_user_config_keeps_values(self, tmp_path):
        path = tmp_path / "config.json"
        save_json_file(path, {"auto_preview": False})
        assert load_user_config(path)["auto_preview"] is False
