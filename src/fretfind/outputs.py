"""
outputs.py
==========

Renderers for a computed fretboard:
  • SVG (drawing, units carried in width/height),
  • DXF (LINE entities per layer, for CAD/CAM),
  • CSV / TAB (per-string fret tables),
  • HTML (neck, string and fret tables),
  • Markdown (nut-distance and fret-spacing tables for stdout),
  • JSON (the full geometry, NaN as null).

Renderers read the computed fields only and treat any NaN coordinate as
"do not draw". An ``InvalidGuitar`` renders as an error message (text
formats) or an empty drawing (SVG/DXF).
"""

from __future__ import annotations

import csv
import io
import json
import math
from typing import Iterable, List, Optional, Union

from .calculator import FrettedGuitar, InvalidGuitar, get_extents
from .config import DisplayOptions, format_float
from .geometry import Point, Segment

Result = Union[FrettedGuitar, InvalidGuitar, None]

# fret ends are pulled in by this much (inches) in DXF so slots do not touch the edges
DXF_FRET_INSET_IN = 0.02

_DXF_INSET_SCALE = {"in": 1.0, "cm": 2.54, "mm": 25.4}


def _computed(guitar: Result) -> bool:
    return isinstance(guitar, FrettedGuitar)


def _error_text(guitar: Result) -> str:
    reason = getattr(guitar, "reason", "no guitar")
    return f"Error: could not generate output due to invalid guitar data ({reason})."


def _fret_label(j: int) -> str:
    return "n" if j == 0 else str(j)


# -------------------------------------------------------------------------------------------------
# SVG
# -------------------------------------------------------------------------------------------------


def to_svg(guitar: Result, options: Optional[DisplayOptions] = None) -> str:
    options = options or DisplayOptions()
    if not _computed(guitar):
        return (
            '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 1 1" '
            'height="1" width="1" >\n</svg>'
        )

    x = get_extents(guitar, options.extend_frets)
    width = x.width if x.width > 0 else 1
    height = x.height if x.height > 0 else 1
    f = format_float
    fret_class = "pfret" if guitar.do_partials else "ifret"

    def line_el(seg: Segment, cls: str) -> str:
        return (
            f'<line x1="{f(seg.end1.x)}" x2="{f(seg.end2.x)}" '
            f'y1="{f(seg.end1.y)}" y2="{f(seg.end2.y)}" class="{cls}" />\n'
        )

    out = [
        f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="{f(x.minx)} {f(x.miny)} '
        f'{f(width)} {f(height)}" height="{f(height)}{guitar.units}" '
        f'width="{f(width)}{guitar.units}" >\n',
        '<defs><style type="text/css"><![CDATA[\n'
        "\t.string{stroke:rgb(0,0,0);stroke-width:0.2%;}\n"
        "\t.meta{stroke:rgb(221,221,221);stroke-width:0.2%;}\n"
        "\t.edge{stroke:rgb(0,0,255);stroke-width:0.2%;}\n"
        "\t.pfret{stroke:rgb(255,0,0);stroke-linecap:round;stroke-width:0.2%;}\n"
        "\t.ifret{stroke:rgb(255,0,0);stroke-linecap:round;stroke-width:0.8%;}\n"
        "\t.bbox{stroke:rgb(0,0,0);stroke-width:0.2%;fill:rgba(0,0,0,0)}\n"
        "]]></style></defs>\n",
    ]
    if options.show_strings:
        out.extend(line_el(s, "string") for s in guitar.strings if s.is_valid)
    if options.show_metas:
        out.extend(line_el(s, "meta") for s in guitar.meta if s.is_valid)
    if options.show_fretboard_edges:
        out.extend(
            line_el(s, "edge") for s in (guitar.edge1, guitar.edge2) if s.is_valid
        )
    if options.show_bounding_box:
        out.append(
            f'<rect x="{f(x.minx)}" y="{f(x.miny)}" width="{f(x.width)}" '
            f'height="{f(x.height)}" class="bbox" />\n'
        )
    for string_frets in guitar.frets:
        for record in string_frets:
            if record.fret.is_valid:
                out.append(f'<path d="{record.fret.to_svg_d()}" class="{fret_class}" />\n')
    if options.extend_frets:
        for seg in guitar.extended_fret_ends:
            if seg.is_valid:
                out.append(f'<path d="{seg.to_svg_d()}" class="{fret_class}" />\n')
    out.append("</svg>")
    return "".join(out)


# -------------------------------------------------------------------------------------------------
# DXF
# -------------------------------------------------------------------------------------------------


def to_dxf(guitar: Result, options: Optional[DisplayOptions] = None) -> str:
    options = options or DisplayOptions()
    inset = DXF_FRET_INSET_IN * _DXF_INSET_SCALE.get(getattr(guitar, "units", "in"), 1.0)

    def line_entity(seg: Segment, layer: str, shorten: bool = False) -> str:
        d = inset if shorten else 0.0
        x1, y1 = seg.end1.x + d, seg.end1.y
        x2, y2 = seg.end2.x - d, seg.end2.y
        if any(math.isnan(v) for v in (x1, y1, x2, y2)):
            return ""
        return (
            "0\nLINE\n"
            f"8\n{layer}\n62\n4\n"
            f"10\n{x1:.6f}\n20\n{y1:.6f}\n30\n0\n11\n{x2:.6f}\n21\n{y2:.6f}\n31\n0\n"
        )

    out = ["999\nDXF created by fretfind\n", "0\nSECTION\n2\nENTITIES\n"]
    if _computed(guitar):
        if options.show_strings:
            out.extend(line_entity(s, "STRINGS") for s in guitar.strings)
        if options.show_fretboard_edges:
            out.append(line_entity(guitar.edge1, "EDGES"))
            out.append(line_entity(guitar.edge2, "EDGES"))
        if options.show_metas:
            out.extend(line_entity(s, "META") for s in guitar.meta)
        if options.show_bounding_box:
            b = get_extents(guitar, options.extend_frets)
            if b.width > 0 and b.height > 0:
                corners = [
                    Point(b.minx, b.miny),
                    Point(b.minx, b.maxy),
                    Point(b.maxx, b.maxy),
                    Point(b.maxx, b.miny),
                ]
                for k in range(4):
                    out.append(
                        line_entity(Segment(corners[k], corners[(k + 1) % 4]), "BBOX")
                    )
        for string_frets in guitar.frets:
            out.extend(line_entity(r.fret, "FRETS", shorten=True) for r in string_frets)
        if options.extend_frets:
            out.extend(
                line_entity(s, "FRETS", shorten=True) for s in guitar.extended_fret_ends
            )
    out.append("0\nENDSEC\n0\nEOF\n")
    return "".join(out)


# -------------------------------------------------------------------------------------------------
# Delimited text (CSV / TAB)
# -------------------------------------------------------------------------------------------------

FRET_COLUMNS = [
    "#",
    "to nut",
    "to fret",
    "to bridge",
    "intersection point",
    "partial width",
    "angle",
    "mid to nut",
    "mid to fret",
    "mid to bridge",
    "mid intersection",
]


def to_delimited(guitar: Result, **fmtparams) -> str:
    """Midline summary then one fret table per string, written with ``csv.writer``."""
    if not _computed(guitar):
        return _error_text(guitar)
    f = format_float
    mid = guitar.midline
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", **fmtparams)
    writer.writerow(["Midline"])
    writer.writerow(["endpoints", "length", "angle"])
    writer.writerow([str(mid), f(mid.length()), f(mid.angle())])
    writer.writerow([])
    for i, string_frets in enumerate(guitar.frets):
        writer.writerow([f"String {i + 1}"])
        writer.writerow(FRET_COLUMNS)
        for j, r in enumerate(string_frets):
            writer.writerow(
                [
                    _fret_label(j),
                    f(r.nut_dist),
                    f(r.p_fret_dist),
                    f(r.bridge_dist),
                    str(r.intersection),
                    f(r.width),
                    f(r.angle),
                    f(r.midline_nut_dist),
                    f(r.midline_p_fret_dist),
                    f(r.midline_bridge_dist),
                    str(r.midline_intersection),
                ]
            )
    return buf.getvalue()


def to_csv(guitar: Result) -> str:
    return to_delimited(guitar, quoting=csv.QUOTE_ALL)


def to_tab(guitar: Result) -> str:
    return to_delimited(guitar, delimiter="\t")


# -------------------------------------------------------------------------------------------------
# HTML
# -------------------------------------------------------------------------------------------------


def _seg_row(label: str, seg: Segment) -> str:
    return (
        f"<tr><td>{label}</td><td>{seg}</td><td>{format_float(seg.length())}</td>"
        f"<td>{format_float(seg.angle())}</td></tr>"
    )


def to_html_table(guitar: Result) -> str:
    if not _computed(guitar):
        return f"<p>{_error_text(guitar)}</p>"
    f = format_float
    out = [
        '<table class="foundfrets">'
        '<tr><td colspan="4">Neck</td></tr>'
        "<tr><td> </td><td>endpoints</td><td>length</td><td>angle</td></tr>"
        + _seg_row("Nut", guitar.nut)
        + _seg_row("Edge 1", guitar.meta[0])
        + _seg_row("Midline", guitar.midline)
        + _seg_row("Edge 2", guitar.meta[-1])
        + _seg_row("Bridge", guitar.bridge)
        + "</table><br /><br />\n",
        '<table class="foundfrets">'
        '<tr><td colspan="4">Strings</td></tr>'
        "<tr><td> </td><td>endpoints</td><td>length</td><td>angle</td></tr>",
    ]
    out.extend(_seg_row(f"String {i + 1}", s) for i, s in enumerate(guitar.strings))
    out.append("</table><br /><br />\n")

    out.append('<table class="foundfrets">')
    for i, string_frets in enumerate(guitar.frets):
        out.append(
            f'<tr><td colspan="11">String {i + 1} Frets</td></tr>'
            "<tr><td>#</td><td>to nut</td><td>to fret</td><td>to bridge</td>"
            "<td>intersection point</td>"
        )
        if guitar.do_partials:
            out.append(
                "<td>partial width</td><td>angle</td><td>mid to nut</td>"
                "<td>mid to fret</td><td>mid to bridge</td><td>mid intersection</td>"
            )
        out.append("</tr>\n")
        for j, r in enumerate(string_frets):
            cells = [
                _fret_label(j),
                f(r.nut_dist),
                f(r.p_fret_dist),
                f(r.bridge_dist),
                str(r.intersection),
            ]
            if guitar.do_partials:
                cells += [
                    f(r.width),
                    f(r.angle),
                    f(r.midline_nut_dist),
                    f(r.midline_p_fret_dist),
                    f(r.midline_bridge_dist),
                    str(r.midline_intersection),
                ]
            out.append("<tr>" + "".join(f"<td>{c}</td>" for c in cells) + "</tr>\n")
    out.append("</table>")
    return "".join(out)


def to_html(guitar: Result) -> str:
    table = to_html_table(guitar)
    if not _computed(guitar):
        return table
    return (
        '<html><head><title>FretFind</title><style type="text/css">\n'
        "table.foundfrets {border-collapse: collapse;}\n"
        "table.foundfrets td {border:1px solid black;padding: 0px 5px 0px 5px;}\n"
        "</style></head><body>\n" + table + "</body></html>"
    )


# -------------------------------------------------------------------------------------------------
# Markdown
# -------------------------------------------------------------------------------------------------


def fmt_val(x: float, decimals: int) -> str:
    return "NaN" if math.isnan(x) else f"{x:.{decimals}f}"


def make_markdown_table(
    data: List[List[float]], unit: str, decimals: int, title: str
) -> str:
    S = len(data)
    F = len(data[0]) - 1
    header = ["Fret"] + [f"String {i + 1} ({unit})" for i in range(S)]
    sep = ["---"] * len(header)
    lines = [
        f"## {title}",
        "| " + " | ".join(header) + " |",
        "| " + " | ".join(sep) + " |",
    ]
    for n in range(F + 1):
        row = [str(n)] + [fmt_val(data[s][n], decimals) for s in range(S)]
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)


def to_markdown(guitar: Result, decimals: int = 3) -> str:
    if not _computed(guitar):
        return _error_text(guitar)
    positions = [[r.nut_dist for r in frets] for frets in guitar.frets]
    spacings = [[r.p_fret_dist for r in frets] for frets in guitar.frets]
    mode = "Multiscale" if not guitar.parallel_frets else "Single-Scale"
    lines = [
        f"# Fretboard Tables ({mode})",
        f"**Scale:** {guitar.scale.title or '(untitled)'}  |  "
        f"**Unit:** {guitar.units}  |  **Partial frets:** "
        f"{'yes' if guitar.do_partials else 'no'}",
        "**String lengths:** "
        + " | ".join(
            f"S{i + 1}: {fmt_val(s.length(), decimals)}"
            for i, s in enumerate(guitar.strings)
        ),
        "",
        make_markdown_table(
            positions, guitar.units, decimals, "Nut-to-Fret Positions (from nut)"
        ),
        "",
        make_markdown_table(
            spacings, guitar.units, decimals, "Per-Fret Spacings (incremental)"
        ),
    ]
    return "\n".join(lines)


# -------------------------------------------------------------------------------------------------
# JSON
# -------------------------------------------------------------------------------------------------


def _num(v: float) -> Optional[float]:
    return v if isinstance(v, (int, float)) and math.isfinite(v) else None


def _point(p: Point) -> dict:
    return {"x": _num(p.x), "y": _num(p.y)}


def _segment(s: Segment) -> dict:
    return {"end1": _point(s.end1), "end2": _point(s.end2)}


def _segments(segs: Iterable[Segment]) -> List[dict]:
    return [_segment(s) for s in segs]


def to_json_dict(guitar: Result) -> dict:
    if not _computed(guitar):
        return {"error": _error_text(guitar)}
    scale = guitar.scale
    return {
        "units": guitar.units,
        "scale": {
            "title": scale.title,
            "steps": [[_num(n), _num(d)] for n, d in scale.steps],
            "errors": list(scale.errors),
        },
        "tuning": list(guitar.guitar.tuning),
        "fretCount": guitar.fret_count,
        "strings": _segments(guitar.strings),
        "edge1": _segment(guitar.edge1),
        "edge2": _segment(guitar.edge2),
        "nut": _segment(guitar.nut),
        "bridge": _segment(guitar.bridge),
        "midline": _segment(guitar.midline),
        "meta": _segments(guitar.meta),
        "doPartials": guitar.do_partials,
        "parallelFrets": guitar.parallel_frets,
        "frets": [
            [
                {
                    "fret": _segment(r.fret),
                    "intersection": _point(r.intersection),
                    "nutDist": _num(r.nut_dist),
                    "bridgeDist": _num(r.bridge_dist),
                    "pFretDist": _num(r.p_fret_dist),
                    "totalRatio": _num(r.total_ratio),
                    "width": _num(r.width),
                    "angle": _num(r.angle),
                    "midlineIntersection": _point(r.midline_intersection),
                    "midlineNutDist": _num(r.midline_nut_dist),
                    "midlineBridgeDist": _num(r.midline_bridge_dist),
                    "midlinePFretDist": _num(r.midline_p_fret_dist),
                }
                for r in string_frets
            ]
            for string_frets in guitar.frets
        ],
        "fretWidths": [_num(w) for w in guitar.fret_widths],
        "extendedFretEnds": _segments(guitar.extended_fret_ends),
        "extents": get_extents(guitar).as_dict(),
    }


def to_json(guitar: Result, indent: int = 2) -> str:
    return json.dumps(to_json_dict(guitar), indent=indent)


def write_text(filename: str, text: str) -> None:
    with open(filename, "w", encoding="utf-8", newline="") as f:
        f.write(text)
