"""
gui.py
======

Threaded PyQt6 front-end for the ``fretfind`` CLI.

TOP HALF:
    • Zoomable + pannable SVG preview (QGraphicsView + QGraphicsSvgItem).
    • Wheel zoom at the cursor, left-drag pan.
    • Toolbar: Zoom In / Zoom Out / 100% / Fit, zoom % readout,
      Export SVG, Export Table CSV.

BOTTOM HALF:
    • Left: presets row (apply / save / delete, ~/.fretfind_presets.json),
      instrument parameters, outputs.
    • Right: fret table (distance from the nut and from the previous fret,
      per string) filled from the JSON the CLI writes, plus a log panel that
      shows the CLI's stdout/stderr (scale errors land here).

SYSTEM:
    • The CLI runs as ``python -m fretfind`` inside a QThread; the form is
      mapped to arguments by ``fretfind.presets.preset_to_argv``.
    • Regeneration is debounced: ~300 ms after the last edit.
    • Window geometry, output dir, last preset and auto-preview persist in
      ~/.fretfind_config.json.

SETUP:
    pip install fretfind
    fretfind-gui
"""

from __future__ import annotations

import csv
import json
import logging
import math
import shutil
import subprocess
import sys
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from PyQt6.QtCore import QObject, Qt, QThread, QTimer, pyqtSignal
from PyQt6.QtGui import QAction
from PyQt6.QtSvg import QSvgRenderer
from PyQt6.QtSvgWidgets import QGraphicsSvgItem
from PyQt6.QtWidgets import (
    QApplication,
    QCheckBox,
    QComboBox,
    QFileDialog,
    QGraphicsScene,
    QGraphicsView,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QSizePolicy,
    QSplitter,
    QTableWidget,
    QTableWidgetItem,
    QTextEdit,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from .builder import LENGTH_MODES, OVERHANG_MODES, SPACING_MODES
from .config import CONFIG_PATH, PRESETS_PATH, load_user_config, save_json_file
from .presets import MANUAL, Preset, load_presets, preset_to_argv, save_presets
from .units import UNITS

logger = logging.getLogger(__name__)

ZOOM_STEP = 1.15


# -------------------------------------------------------------------------------------------------
# Zoom + Pan SVG View
# -------------------------------------------------------------------------------------------------


class ZoomPanSvgView(QGraphicsView):
    """
    Preview of one SVG drawing. Wheel zooms around the cursor, left-drag
    pans. ``zoomChanged`` carries the zoom relative to the fitted view.
    """

    zoomChanged = pyqtSignal(float)

    def __init__(self, parent: Optional[QWidget] = None):
        super().__init__(QGraphicsScene(parent), parent)
        self._renderer: Optional[QSvgRenderer] = None
        self._item: Optional[QGraphicsSvgItem] = None
        self._zoom = 1.0
        self.setDragMode(QGraphicsView.DragMode.ScrollHandDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setResizeAnchor(QGraphicsView.ViewportAnchor.AnchorViewCenter)

    def _set_zoom(self, zoom: float):
        self._zoom = zoom
        self.zoomChanged.emit(zoom)

    def clear_svg(self):
        self.scene().clear()
        self._item = None
        self._renderer = None
        self.resetTransform()
        self._set_zoom(1.0)

    def load_svg_file(self, filepath: str) -> bool:
        """False if Qt cannot render the file."""
        self.clear_svg()
        renderer = QSvgRenderer(filepath)
        if not renderer.isValid():
            return False
        self._renderer = renderer
        self._item = QGraphicsSvgItem()
        self._item.setSharedRenderer(renderer)
        self.scene().addItem(self._item)
        # the drawing is in fretboard units, so the scene follows the viewBox
        self.scene().setSceneRect(renderer.viewBoxF())
        self.fit_to_view()
        return True

    def fit_to_view(self, padding: float = 0.05):
        rect = self.scene().sceneRect()
        if self._item is None or rect.isNull():
            return
        dx, dy = rect.width() * padding, rect.height() * padding
        self.fitInView(rect.adjusted(-dx, -dy, dx, dy), Qt.AspectRatioMode.KeepAspectRatio)
        self._set_zoom(1.0)

    def set_zoom_100(self):
        if self._item is not None:
            self.resetTransform()
            self.centerOn(self.scene().sceneRect().center())
            self._set_zoom(1.0)

    def zoom_by(self, factor: float):
        if self._item is not None:
            self.scale(factor, factor)
            self._set_zoom(self._zoom * factor)

    def zoom_in(self):
        self.zoom_by(ZOOM_STEP)

    def zoom_out(self):
        self.zoom_by(1.0 / ZOOM_STEP)

    def wheelEvent(self, event):
        self.zoom_by(ZOOM_STEP if event.angleDelta().y() > 0 else 1.0 / ZOOM_STEP)
        event.accept()


# -------------------------------------------------------------------------------------------------
# CLI worker (runs in a QThread)
# -------------------------------------------------------------------------------------------------


class CalcWorker(QObject):
    """
    Runs ``python -m fretfind ...`` and reports
    finished(svg_path, json_path, stdout, stderr, returncode).
    """

    finished = pyqtSignal(str, str, str, str, int)

    def __init__(self, cmd: List[str], svg_path: str, json_path: str):
        super().__init__()
        self.cmd = cmd
        self.svg_path = svg_path
        self.json_path = json_path

    def run(self):
        try:
            proc = subprocess.run(self.cmd, text=True, capture_output=True)
        except OSError as e:
            self.finished.emit(
                self.svg_path, self.json_path, "", f"[GUI] Subprocess error: {e!r}", -1
            )
            return
        self.finished.emit(
            self.svg_path,
            self.json_path,
            proc.stdout or "",
            proc.stderr or "",
            proc.returncode,
        )


# -------------------------------------------------------------------------------------------------
# Main window
# -------------------------------------------------------------------------------------------------


class FretFindGUI(QWidget):
    def __init__(self):
        super().__init__()
        self.setWindowTitle("FretFind: Live Fretboard Designer")
        self.resize(1360, 920)

        self._tmp_dir = tempfile.TemporaryDirectory(prefix="fretfind_gui_")
        self._tmp_svg = str(Path(self._tmp_dir.name) / "preview.svg")
        self._tmp_json = str(Path(self._tmp_dir.name) / "preview.json")

        self._thread: Optional[QThread] = None
        self._worker: Optional[CalcWorker] = None
        self._regen_timer = QTimer(self)
        self._regen_timer.setSingleShot(True)
        self._regen_timer.timeout.connect(self._regenerate_now)

        self._presets: Dict[str, Preset] = load_presets(PRESETS_PATH)
        self._config: Dict[str, Any] = load_user_config(CONFIG_PATH)
        # preset key -> QLineEdit / QComboBox / QCheckBox
        self._fields: Dict[str, QWidget] = {}

        self._build_ui()
        self._restore_config()
        QTimer.singleShot(150, self.queue_regeneration)

    # ------------------------------ UI Build ------------------------------

    def _build_ui(self):
        outer = QVBoxLayout(self)

        self.svg_view = ZoomPanSvgView(self)
        self.svg_view.setSizePolicy(
            QSizePolicy.Policy.Expanding, QSizePolicy.Policy.Expanding
        )
        self.svg_view.zoomChanged.connect(self._on_zoom_changed)

        self.toolbar = QToolBar("Preview Controls", self)
        self._build_toolbar(self.toolbar)
        outer.addWidget(self.toolbar)
        outer.addWidget(self.svg_view, stretch=1)

        bottom = QSplitter(Qt.Orientation.Horizontal, self)
        outer.addWidget(bottom, stretch=1)

        left = QWidget(self)
        left_layout = QVBoxLayout(left)
        left_layout.addWidget(self._build_presets_group())
        left_layout.addWidget(self._build_parameters_group())
        left_layout.addWidget(self._build_outputs_group())
        left_layout.addWidget(self._build_actions_row())
        bottom.addWidget(left)

        right = QWidget(self)
        right_layout = QVBoxLayout(right)
        title_table = QLabel("Fret Table (from nut / from previous fret)")
        title_table.setStyleSheet("font-weight:600;")
        right_layout.addWidget(title_table)
        self.table = QTableWidget(self)
        self.table.setEditTriggers(QTableWidget.EditTrigger.NoEditTriggers)
        right_layout.addWidget(self.table, stretch=1)
        title_log = QLabel("Log / Summary")
        title_log.setStyleSheet("font-weight:600;")
        right_layout.addWidget(title_log)
        self.log = QTextEdit(self)
        self.log.setReadOnly(True)
        self.log.setMinimumHeight(120)
        right_layout.addWidget(self.log)
        bottom.addWidget(right)
        bottom.setSizes([740, 620])

    def _build_toolbar(self, tb: QToolBar):
        tb.setMovable(False)
        for label, slot in (
            ("Zoom In", self.svg_view.zoom_in),
            ("Zoom Out", self.svg_view.zoom_out),
            ("100%", self.svg_view.set_zoom_100),
            ("Fit", self.svg_view.fit_to_view),
        ):
            act = QAction(label, self)
            act.triggered.connect(lambda _checked=False, s=slot: s())
            tb.addAction(act)
        tb.addSeparator()
        self.lbl_zoom = QLabel("Zoom: 100%")
        tb.addWidget(self.lbl_zoom)
        tb.addSeparator()
        act_svg = QAction("Export SVG…", self)
        act_svg.triggered.connect(self._on_export_svg)
        tb.addAction(act_svg)
        act_csv = QAction("Export Table CSV…", self)
        act_csv.triggered.connect(self._on_export_table_csv)
        tb.addAction(act_csv)

    def _build_presets_group(self) -> QGroupBox:
        g = QGroupBox("Presets")
        grid = QGridLayout(g)
        self.cb_preset = QComboBox()
        self.cb_preset.setEditable(True)
        self._refresh_preset_combo()

        btn_apply = QPushButton("Apply")
        btn_apply.setToolTip("Apply the selected preset values to the fields below.")
        btn_apply.clicked.connect(self._on_apply_preset)
        btn_save = QPushButton("Save/Update")
        btn_save.setToolTip("Save current field values under this preset name.")
        btn_save.clicked.connect(self._on_save_preset)
        btn_delete = QPushButton("Delete")
        btn_delete.clicked.connect(self._on_delete_preset)

        grid.addWidget(QLabel("Preset:"), 0, 0)
        grid.addWidget(self.cb_preset, 0, 1, 1, 2)
        grid.addWidget(btn_apply, 0, 3)
        grid.addWidget(btn_save, 0, 4)
        grid.addWidget(btn_delete, 0, 5)
        return g

    def _refresh_preset_combo(self):
        self.cb_preset.blockSignals(True)
        self.cb_preset.clear()
        self.cb_preset.addItems(sorted(self._presets.keys()))
        idx = self.cb_preset.findText(self._config.get("last_preset", MANUAL))
        if idx >= 0:
            self.cb_preset.setCurrentIndex(idx)
        self.cb_preset.blockSignals(False)

    # ------------------------------ Parameters ------------------------------

    def _line(self, key: str, default: str, tip: str) -> QLineEdit:
        w = QLineEdit(default)
        w.setToolTip(tip)
        w.textChanged.connect(self.queue_regeneration)
        self._fields[key] = w
        return w

    def _combo(self, key: str, items, tip: str) -> QComboBox:
        w = QComboBox()
        w.addItems(list(items))
        w.setToolTip(tip)
        w.currentIndexChanged.connect(self.queue_regeneration)
        self._fields[key] = w
        return w

    def _check(self, key: str, label: str, checked: bool, tip: str) -> QCheckBox:
        w = QCheckBox(label)
        w.setChecked(checked)
        w.setToolTip(tip)
        w.stateChanged.connect(self.queue_regeneration)
        self._fields[key] = w
        return w

    def _build_parameters_group(self) -> QGroupBox:
        g = QGroupBox("Instrument")
        grid = QGridLayout(g)

        rows: List[Tuple[str, QWidget, str, QWidget]] = [
            (
                "Strings:",
                self._line("strings", "6", "--strings"),
                "Frets:",
                self._line("frets", "24", "--frets"),
            ),
            (
                "Unit:",
                self._combo("unit", UNITS, "--unit"),
                "Decimals:",
                self._line("decimals", "3", "--decimals"),
            ),
            (
                "Length Mode:",
                self._combo("length_mode", LENGTH_MODES, "single / fanned / per string"),
                "Scale Length:",
                self._line("scale", "25.5in", "--scale"),
            ),
            (
                "First String:",
                self._line("first_scale", "25.5in", "--first-scale"),
                "Last String:",
                self._line("last_scale", "27in", "--last-scale"),
            ),
            (
                "Per-String Lengths:",
                self._line("scale_lengths", "", "--scale-lengths (comma list)"),
                "Perpendicular:",
                self._line("perpendicular", "0.5", "--perpendicular (0=nut, 1=bridge)"),
            ),
            (
                "Nut Width:",
                self._line("nut_width", "1.375in", "--nut-width"),
                "Bridge Width:",
                self._line("bridge_width", "2.125in", "--bridge-width"),
            ),
            (
                "Spacing:",
                self._combo("spacing", SPACING_MODES, "--spacing"),
                "Gauges:",
                self._line("gauges", "", "--gauges (proportional spacing)"),
            ),
            (
                "Overhang Mode:",
                self._combo("overhang_mode", OVERHANG_MODES, "--overhang-mode"),
                "Overhang:",
                self._line("overhang", "0.09375in", "--overhang"),
            ),
            (
                "Nut Overhang:",
                self._line("overhang_nut", "", "--overhang-nut"),
                "Bridge Overhang:",
                self._line("overhang_bridge", "", "--overhang-bridge"),
            ),
            (
                "First Overhang:",
                self._line("overhang_first", "", "--overhang-first"),
                "Last Overhang:",
                self._line("overhang_last", "", "--overhang-last"),
            ),
            (
                "Nut First:",
                self._line("overhang_nut_first", "", "--overhang-nut-first"),
                "Nut Last:",
                self._line("overhang_nut_last", "", "--overhang-nut-last"),
            ),
            (
                "Bridge First:",
                self._line("overhang_bridge_first", "", "--overhang-bridge-first"),
                "Bridge Last:",
                self._line("overhang_bridge_last", "", "--overhang-bridge-last"),
            ),
            (
                "Scale Source:",
                self._combo("scale_source", ("et", "scala"), "ET or Scala file"),
                "Tuning:",
                self._line("tuning", "", "--tuning (steps per string)"),
            ),
            (
                "Tones:",
                self._line("tones", "12", "--tones"),
                "Octave:",
                self._line("octave", "2", "--octave"),
            ),
        ]
        r = 0
        for l1, w1, l2, w2 in rows:
            grid.addWidget(QLabel(l1), r, 0)
            grid.addWidget(w1, r, 1)
            grid.addWidget(QLabel(l2), r, 2)
            grid.addWidget(w2, r, 3)
            r += 1

        grid.addWidget(QLabel("Scala File:"), r, 0)
        grid.addWidget(self._line("scala_file", "", "--scala"), r, 1, 1, 2)
        btn_scala = QPushButton("Browse…")
        btn_scala.clicked.connect(self._on_browse_scala_file)
        grid.addWidget(btn_scala, r, 3)
        r += 1

        toggles = [
            self._check("show_strings", "Strings", True, "uncheck: --no-strings"),
            self._check("show_edges", "Edges", True, "uncheck: --no-edges"),
            self._check("show_metas", "Metas", False, "--metas"),
            self._check("show_bbox", "Bounding Box", False, "--bbox"),
            self._check("extend_frets", "Extend Frets", True, "uncheck: --no-extend"),
        ]
        row = QHBoxLayout()
        for w in toggles:
            row.addWidget(w)
        grid.addLayout(row, r, 0, 1, 4)
        return g

    def _build_outputs_group(self) -> QGroupBox:
        g = QGroupBox("Outputs")
        grid = QGridLayout(g)
        self.in_out_dir = QLineEdit(str(Path.cwd()))
        self.in_out_dir.setToolTip("Destination for CSV/DXF/HTML when enabled below.")
        btn_browse = QPushButton("Browse…")
        btn_browse.clicked.connect(self._on_browse_dir)
        grid.addWidget(QLabel("Output Directory:"), 0, 0)
        grid.addWidget(self.in_out_dir, 0, 1, 1, 2)
        grid.addWidget(btn_browse, 0, 3)
        grid.addWidget(self._check("export_csv", "Write CSV", False, "--csv"), 1, 0)
        grid.addWidget(self._check("export_dxf", "Write DXF", False, "--dxf"), 1, 1)
        grid.addWidget(self._check("export_html", "Write HTML", False, "--html"), 1, 2)
        self.in_out_dir.textChanged.connect(self.queue_regeneration)
        return g

    def _build_actions_row(self) -> QWidget:
        row = QWidget(self)
        h = QHBoxLayout(row)
        h.setContentsMargins(0, 0, 0, 0)
        self.btn_generate = QPushButton("Generate Now")
        self.btn_generate.clicked.connect(self._regenerate_now)
        btn_fit = QPushButton("Fit Preview")
        btn_fit.clicked.connect(lambda: self.svg_view.fit_to_view())
        self.btn_auto = QPushButton("Auto Preview: ON")
        self.btn_auto.setCheckable(True)
        self.btn_auto.setChecked(True)
        self.btn_auto.toggled.connect(self._toggle_auto)
        btn_clear = QPushButton("Clear Log")
        btn_clear.clicked.connect(lambda: self.log.clear())
        h.addWidget(self.btn_generate)
        h.addStretch(1)
        h.addWidget(btn_fit)
        h.addWidget(self.btn_auto)
        h.addWidget(btn_clear)
        return row

    # ------------------------------ Form <-> preset ------------------------------

    def _form_values(self) -> Preset:
        values: Preset = {}
        for key, w in self._fields.items():
            if isinstance(w, QLineEdit):
                values[key] = w.text().strip()
            elif isinstance(w, QComboBox):
                values[key] = w.currentText()
            elif isinstance(w, QCheckBox):
                values[key] = "1" if w.isChecked() else "0"
        return values

    def _apply_preset_dict(self, preset: Preset):
        """Set the widgets named in `preset`; missing keys are left alone."""
        for key, val in preset.items():
            w = self._fields.get(key)
            if isinstance(w, QLineEdit):
                w.setText(val)
            elif isinstance(w, QComboBox):
                idx = w.findText(val)
                if idx >= 0:
                    w.setCurrentIndex(idx)
            elif isinstance(w, QCheckBox):
                w.setChecked(val == "1")

    # ------------------------------ Debounce + run ------------------------------

    def _toggle_auto(self, on: bool):
        self.btn_auto.setText(f"Auto Preview: {'ON' if on else 'OFF'}")
        self._config["auto_preview"] = bool(on)
        self._save_config()
        if on:
            self.queue_regeneration()

    def queue_regeneration(self):
        if not self._config.get("auto_preview", True):
            return
        self._regen_timer.start(300)

    def _build_cmd(self) -> List[str]:
        out_dir = Path(self.in_out_dir.text()).expanduser().resolve()
        values = self._form_values()
        if any(values.get(k) == "1" for k in ("export_csv", "export_dxf", "export_html")):
            try:
                out_dir.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                logger.warning("Cannot create output directory %s: %s", out_dir, e)
        return [sys.executable, "-m", "fretfind"] + preset_to_argv(
            values, svg_path=self._tmp_svg, json_path=self._tmp_json, out_dir=out_dir
        )

    def _regenerate_now(self):
        if self._thread is not None:
            return
        for path in (self._tmp_svg, self._tmp_json):
            Path(path).unlink(missing_ok=True)

        cmd = self._build_cmd()
        self.btn_generate.setEnabled(False)
        self.log.append(f"▶ Running: {' '.join(cmd)}\n")

        self._thread = QThread(self)
        self._worker = CalcWorker(cmd, self._tmp_svg, self._tmp_json)
        self._worker.moveToThread(self._thread)
        self._thread.started.connect(self._worker.run)
        self._worker.finished.connect(self._on_worker_finished)
        self._worker.finished.connect(self._thread.quit)
        self._worker.finished.connect(self._worker.deleteLater)
        self._thread.finished.connect(self._on_thread_finished)
        self._thread.start()

    def _on_worker_finished(
        self, svg_path: str, json_path: str, stdout: str, stderr: str, code: int
    ):
        if stdout.strip():
            self.log.append(stdout.strip() + "\n")
        if stderr.strip():
            self.log.append(f"⚠️ stderr:\n{stderr.strip()}\n")
        if code != 0:
            logger.warning("fretfind exited with status %d: %s", code, stderr.strip())
            self.log.append(f"⚠️ fretfind exited with status {code}.\n")

        svg = Path(svg_path)
        if svg.exists() and svg.stat().st_size > 0:
            if not self.svg_view.load_svg_file(svg_path):
                self.log.append("⚠️ Failed to render SVG.\n")
        else:
            self.svg_view.clear_svg()

        data = None
        if Path(json_path).exists():
            try:
                with open(json_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                self.log.append(f"⚠️ Failed to parse JSON: {e!r}\n")
        self._populate_table(data or {})

    def _on_thread_finished(self):
        self._thread = None
        self._worker = None
        self.btn_generate.setEnabled(True)

    # ------------------------------ Table ------------------------------

    def _populate_table(self, data: Dict[str, Any]):
        """
        Rows = fret 0..F. Columns = Fret, S1..Sn distance from the nut,
        spacer, S1..Sn distance from the previous fret.
        """
        frets = data.get("frets") or []
        unit = data.get("units", "in")
        self.table.clear()
        if not frets or not frets[0]:
            self.table.setRowCount(0)
            self.table.setColumnCount(0)
            return

        S = len(frets)
        F = len(frets[0]) - 1
        spacer = 1 + S
        self.table.setRowCount(F + 1)
        self.table.setColumnCount(2 + 2 * S)
        headers = (
            ["Fret"]
            + [f"S{i + 1} nut ({unit})" for i in range(S)]
            + [""]
            + [f"S{i + 1} gap ({unit})" for i in range(S)]
        )
        self.table.setHorizontalHeaderLabels(headers)

        def cell(v: Optional[float]) -> QTableWidgetItem:
            if v is None or (isinstance(v, float) and math.isnan(v)):
                return QTableWidgetItem("NaN")
            return QTableWidgetItem(f"{v:.3f}")

        for j in range(F + 1):
            self.table.setItem(j, 0, QTableWidgetItem("n" if j == 0 else str(j)))
            for s in range(S):
                rec = frets[s][j] if j < len(frets[s]) else {}
                self.table.setItem(j, 1 + s, cell(rec.get("nutDist")))
                self.table.setItem(j, spacer + 1 + s, cell(rec.get("pFretDist")))
            self.table.setItem(j, spacer, QTableWidgetItem(" "))
        self.table.setColumnWidth(spacer, 10)
        self.table.resizeColumnsToContents()

    def _on_export_table_csv(self):
        if self.table.rowCount() == 0:
            self.log.append("ℹ️ Table is empty; nothing to export.\n")
            return
        default_dir = self._config.get("last_output_dir", str(Path.cwd()))
        fname, _ = QFileDialog.getSaveFileName(
            self,
            "Export Table to CSV",
            str(Path(default_dir) / "fret_table.csv"),
            "CSV Files (*.csv)",
        )
        if not fname:
            return
        cols = self.table.columnCount()
        try:
            with open(fname, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f)
                writer.writerow(
                    [
                        self.table.horizontalHeaderItem(c).text()
                        if self.table.horizontalHeaderItem(c)
                        else ""
                        for c in range(cols)
                    ]
                )
                for r in range(self.table.rowCount()):
                    writer.writerow(
                        [
                            self.table.item(r, c).text() if self.table.item(r, c) else ""
                            for c in range(cols)
                        ]
                    )
        except OSError as e:
            self.log.append(f"⚠️ Failed to export CSV: {e!r}\n")
            return
        self.log.append(f"✅ Table exported to {fname}\n")

    # ------------------------------ Toolbar / pickers ------------------------------

    def _on_zoom_changed(self, z: float):
        self.lbl_zoom.setText(f"Zoom: {round(z * 100)}%")

    def _on_export_svg(self):
        src = Path(self._tmp_svg)
        if not src.exists() or src.stat().st_size == 0:
            self.log.append("ℹ️ No preview SVG to export yet.\n")
            return
        default_dir = self._config.get("last_output_dir", str(Path.cwd()))
        fname, _ = QFileDialog.getSaveFileName(
            self,
            "Export SVG",
            str(Path(default_dir) / "fretboard.svg"),
            "SVG Files (*.svg)",
        )
        if not fname:
            return
        try:
            shutil.copyfile(src, fname)
        except OSError as e:
            self.log.append(f"⚠️ Failed to export SVG: {e!r}\n")
            return
        self.log.append(f"✅ SVG exported to {fname}\n")

    def _on_browse_dir(self):
        chosen = QFileDialog.getExistingDirectory(
            self, "Choose Output Directory", self.in_out_dir.text()
        )
        if chosen:
            self.in_out_dir.setText(chosen)
            self._config["last_output_dir"] = chosen
            self._save_config()

    def _on_browse_scala_file(self):
        fname, _ = QFileDialog.getOpenFileName(
            self,
            "Choose Scala File",
            str(Path.cwd()),
            "Scala Files (*.scl);;All Files (*)",
        )
        if fname:
            self._apply_preset_dict({"scala_file": fname, "scale_source": "scala"})

    # ------------------------------ Presets ------------------------------

    def _on_apply_preset(self):
        name = self.cb_preset.currentText()
        self._apply_preset_dict(self._presets.get(name, {}))
        self._config["last_preset"] = name
        self._save_config()
        self.queue_regeneration()

    def _on_save_preset(self):
        name = self.cb_preset.currentText().strip()
        if not name or name == MANUAL:
            self.log.append("⚠️ Type a preset name in the Preset box first.\n")
            return
        preset = self._form_values()
        # export toggles are per-session, not part of an instrument
        for key in ("export_csv", "export_dxf", "export_html"):
            preset.pop(key, None)
        self._presets[name] = preset
        self._config["last_preset"] = name
        save_presets(self._presets, PRESETS_PATH)
        self._refresh_preset_combo()
        self.log.append(f"✅ Preset saved/updated: {name}\n")

    def _on_delete_preset(self):
        name = self.cb_preset.currentText().strip()
        if name in self._presets and name != MANUAL:
            del self._presets[name]
            save_presets(self._presets, PRESETS_PATH)
            self._refresh_preset_combo()
            self.log.append(f"🗑️ Preset deleted: {name}\n")

    # ------------------------------ Config persistence ------------------------------

    def _save_config(self):
        save_json_file(CONFIG_PATH, self._config)

    def _restore_config(self):
        geom = self._config.get("win_geom")
        if isinstance(geom, list) and len(geom) == 4:
            self.setGeometry(*(int(v) for v in geom))
        ap = bool(self._config.get("auto_preview", True))
        self.btn_auto.setChecked(ap)
        self.btn_auto.setText(f"Auto Preview: {'ON' if ap else 'OFF'}")
        last_dir = self._config.get("last_output_dir")
        if last_dir:
            self.in_out_dir.setText(last_dir)

    def closeEvent(self, event):
        g = self.geometry()
        self._config["win_geom"] = [g.x(), g.y(), g.width(), g.height()]
        self._save_config()
        self._tmp_dir.cleanup()
        super().closeEvent(event)


def main():
    logging.basicConfig(level=logging.WARNING, format="%(asctime)s [%(levelname)s] %(message)s")
    app = QApplication(sys.argv)
    gui = FretFindGUI()
    gui.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
