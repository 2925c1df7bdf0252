import json
from pathlib import Path

from fretfind.cli import main
from fretfind.presets import (
    MANUAL,
    default_presets,
    load_presets,
    preset_to_argv,
    save_presets,
)


class TestPresetToArgv:
    def test_single_scale(self):
        argv = preset_to_argv(default_presets()['6-String (25.5")'])
        assert argv[argv.index("--scale") + 1] == "25.5in"
        assert argv[argv.index("--strings") + 1] == "6"
        assert "--first-scale" not in argv
        assert "--tones" in argv

    def test_fanned(self):
        argv = preset_to_argv(default_presets()['7-String Fan (25.5 → 27")'])
        assert argv[argv.index("--first-scale") + 1] == "25.5in"
        assert argv[argv.index("--last-scale") + 1] == "27in"
        assert "--scale" not in argv

    def test_individual_lengths(self):
        argv = preset_to_argv(
            {"length_mode": "individual", "scale_lengths": "25,25.5", "scale": "25"}
        )
        assert argv == ["--scale-lengths", "25,25.5"]

    def test_empty_fields_are_left_out(self):
        assert preset_to_argv({}) == []
        assert preset_to_argv({"strings": "  ", "frets": ""}) == []

    def test_scala_source(self):
        argv = preset_to_argv(
            {"scale_source": "scala", "scala_file": "just.scl", "tones": "12"}
        )
        assert argv == ["--scala", "just.scl"]

    def test_gauges_only_when_proportional(self):
        assert "--gauges" not in preset_to_argv({"spacing": "equal", "gauges": "1,2"})
        argv = preset_to_argv({"spacing": "proportional", "gauges": "1,2"})
        assert argv[-2:] == ["--gauges", "1,2"]

    def test_toggles(self):
        argv = preset_to_argv(
            {
                "show_strings": "0",
                "show_edges": "1",
                "show_metas": "1",
                "show_bbox": "0",
                "extend_frets": "0",
            }
        )
        assert argv == ["--no-strings", "--metas", "--no-extend"]

    def test_preview_and_exports(self):
        argv = preset_to_argv(
            {"export_csv": "1", "export_dxf": "0"},
            svg_path="p.svg",
            json_path="p.json",
            out_dir=Path("out"),
        )
        assert argv == [
            "--svg",
            "p.svg",
            "--json",
            "p.json",
            "--csv",
            str(Path("out") / "board.csv"),
        ]

    def test_presets_run_through_the_cli(self, tmp_path, capsys):
        for name, preset in default_presets().items():
            out = tmp_path / "board.json"
            main(preset_to_argv(preset, json_path=str(out)))
            data = json.loads(out.read_text(encoding="utf-8"))
            assert data["frets"], name
        assert "JSON written" in capsys.readouterr().out


class TestPresetFile:
    def test_missing_file_is_seeded(self, tmp_path):
        path = tmp_path / "presets.json"
        presets = load_presets(path)
        assert MANUAL in presets
        assert path.exists()

    def test_save_and_load(self, tmp_path):
        path = tmp_path / "presets.json"
        assert save_presets({"Mine": {"strings": "7"}}, path)
        assert load_presets(path) == {"Mine": {"strings": "7"}}
