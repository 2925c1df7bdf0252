import csv
import io
import json

import pytest

from fretfind.builder import InstrumentSpec, build_guitar
from fretfind.calculator import InvalidGuitar, fret_guitar
from fretfind.config import DisplayOptions
from fretfind.outputs import (
    FRET_COLUMNS,
    to_csv,
    to_dxf,
    to_html,
    to_json,
    to_json_dict,
    to_markdown,
    to_svg,
    to_tab,
    write_text,
)

from .conftest import two_string_guitar

INVALID = InvalidGuitar(guitar=None, reason="no strings")


@pytest.fixture
def fretted():
    return fret_guitar(two_string_guitar(fret_count=2))


@pytest.fixture
def unaligned():
    return fret_guitar(two_string_guitar(fret_count=2, nudge=0.01))


@pytest.fixture
def broken():
    """Outer string too short for its fan: NaN geometry, but computed."""
    spec = InstrumentSpec(
        string_count=4,
        fret_count=3,
        length_mode="multiple",
        scale_length_first=0.1,
        scale_length_last=25.0,
    )
    return fret_guitar(build_guitar(spec))


class TestSvg:
    def test_document(self, fretted):
        svg = to_svg(fretted)
        assert svg.startswith('<svg xmlns="http://www.w3.org/2000/svg" viewBox="-0.1 0 1.2 25"')
        assert 'height="25in" width="1.2in"' in svg
        assert svg.endswith("</svg>")
        assert svg.count('class="string"') == 2
        assert svg.count('class="edge"') == 2
        assert 'class="pfret"' in svg
        assert 'class="meta"' not in svg

    def test_options(self, fretted):
        svg = to_svg(
            fretted,
            DisplayOptions(
                show_strings=False,
                show_fretboard_edges=False,
                show_metas=True,
                show_bounding_box=True,
                extend_frets=False,
            ),
        )
        assert 'class="string"' not in svg
        assert svg.count('class="meta"') == 3
        assert '<rect x="-0.1" y="0" width="1.2" height="25" class="bbox" />' in svg
        # two strings x three frets, no extensions
        assert svg.count('class="pfret"') == 6

    def test_point_frets_without_partials(self, unaligned):
        svg = to_svg(unaligned)
        assert 'class="ifret"' in svg
        assert 'class="pfret"' not in svg

    def test_nan_geometry_is_skipped(self, broken):
        assert "NaN" not in to_svg(broken, DisplayOptions(show_metas=True))

    def test_invalid_guitar_is_an_empty_drawing(self):
        svg = to_svg(INVALID)
        assert 'viewBox="0 0 1 1"' in svg
        assert "<line" not in svg


class TestDxf:
    def test_entities(self, fretted):
        dxf = to_dxf(fretted)
        assert dxf.startswith("999\n")
        assert "0\nSECTION\n2\nENTITIES\n" in dxf
        assert dxf.endswith("0\nENDSEC\n0\nEOF\n")
        # 2 strings + 2 edges + 6 fretlets + 6 extended ends
        assert dxf.count("0\nLINE\n") == 16
        assert dxf.count("8\nSTRINGS\n") == 2
        assert dxf.count("8\nEDGES\n") == 2
        assert dxf.count("8\nFRETS\n") == 12

    def test_fretlets_are_inset(self, fretted):
        options = DisplayOptions(
            show_strings=False, show_fretboard_edges=False, extend_frets=False
        )
        dxf = to_dxf(fretted, options)
        # nut fretlet of the first string runs from x=1.1 to x=0.5
        assert "10\n1.120000\n20\n0.000000\n" in dxf
        assert "11\n0.480000\n21\n0.000000\n" in dxf

    def test_bounding_box(self, fretted):
        dxf = to_dxf(fretted, DisplayOptions(show_bounding_box=True))
        assert dxf.count("8\nBBOX\n") == 4

    def test_nan_geometry_is_skipped(self, broken):
        assert "nan" not in to_dxf(broken).lower()

    def test_invalid_guitar(self):
        assert "LINE" not in to_dxf(INVALID)


class TestTables:
    def test_csv(self, fretted):
        lines = to_csv(fretted).splitlines()
        assert lines[0] == '"Midline"'
        assert lines[1] == '"endpoints","length","angle"'
        assert '"String 1"' in lines
        assert '"String 2"' in lines
        assert any(line.startswith('"n","0",') for line in lines)
        assert any(line.startswith('"2",') for line in lines)

    def test_csv_reads_back_with_csv_module(self, fretted):
        rows = list(csv.reader(io.StringIO(to_csv(fretted))))
        assert rows[3] == []
        nut_row = rows[6]
        assert len(nut_row) == len(FRET_COLUMNS)
        # the point contains a comma but stays a single field
        assert nut_row[4] == "(1,0)"

    def test_tab_reads_back_with_csv_module(self, fretted):
        rows = list(csv.reader(io.StringIO(to_tab(fretted)), delimiter="\t"))
        assert rows[5] == FRET_COLUMNS
        assert rows[6][:2] == ["n", "0"]

    def test_tab(self, fretted):
        tab = to_tab(fretted)
        assert tab.splitlines()[1] == "endpoints\tlength\tangle"
        assert "String 2" in tab

    def test_html_with_partials(self, fretted):
        html = to_html(fretted)
        assert html.startswith("<html>")
        assert "<td>Midline</td>" in html
        assert "<td>String 2</td>" in html
        assert "partial width" in html

    def test_html_without_partials(self, unaligned):
        assert "partial width" not in to_html(unaligned)

    def test_markdown(self, fretted):
        md = to_markdown(fretted, decimals=2)
        assert md.startswith("# Fretboard Tables (Single-Scale)")
        assert "| Fret | String 1 (in) | String 2 (in) |" in md
        assert "| 0 | 0.00 | 0.00 |" in md

    def test_markdown_nan(self, broken):
        assert "NaN" in to_markdown(broken)

    @pytest.mark.parametrize("render", [to_csv, to_tab, to_markdown])
    def test_invalid_guitar_message(self, render):
        assert render(INVALID).startswith("Error:")
        assert "no strings" in render(INVALID)

    def test_invalid_guitar_html(self):
        assert to_html(INVALID).startswith("<p>Error:")


class TestJson:
    def test_fields(self, fretted):
        data = to_json_dict(fretted)
        for key in (
            "frets",
            "fretWidths",
            "midline",
            "nut",
            "bridge",
            "meta",
            "doPartials",
            "extendedFretEnds",
            "strings",
            "edge1",
            "edge2",
            "units",
            "scale",
            "extents",
        ):
            assert key in data
        assert data["doPartials"] is True
        assert len(data["frets"]) == 2
        assert len(data["frets"][0]) == 3
        assert data["frets"][0][0]["nutDist"] == 0
        assert data["scale"]["title"] == "12 root of 2 Equal Temperament"
        assert data["extents"]["height"] == 25

    def test_nan_is_null(self, broken):
        text = json.dumps(to_json_dict(broken), allow_nan=False)
        assert "null" in text

    def test_unaligned_nan_fields(self, unaligned):
        record = to_json_dict(unaligned)["frets"][0][1]
        assert record["angle"] is None
        assert record["midlineIntersection"] == {"x": None, "y": None}

    def test_invalid_guitar(self):
        assert "error" in json.loads(to_json(INVALID))

    def test_write_text(self, tmp_path, fretted):
        path = tmp_path / "board.svg"
        write_text(str(path), to_svg(fretted))
        assert path.read_text(encoding="utf-8").startswith("<svg")
