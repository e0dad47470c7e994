from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional, Sequence

from PySide6 import QtCore, QtGui, QtWidgets

from .config import Config, configure_logging
from .drives import snapshot
from .models import DriveRecord
from .render import SizeHint, TextRenderer, drive_lines

logger = logging.getLogger(__name__)

INTERNAL_COLOR = "#0a84ff"
EXTERNAL_COLOR = "#ff9f0a"
TRACK_COLOR = "#3a3a3c"
INTERNAL_ICON = "\U0001F4BB"
EXTERNAL_ICON = "\U0001F5B4"

_RING_SIZES = {SizeHint.SMALL: 80, SizeHint.MEDIUM: 120, SizeHint.LARGE: 150}


def ring_style(drive: DriveRecord) -> tuple[str, str]:
    if drive.is_internal:
        return INTERNAL_COLOR, INTERNAL_ICON
    return EXTERNAL_COLOR, EXTERNAL_ICON


class RingView(QtWidgets.QWidget):
    """Circular usage indicator for one drive."""

    def __init__(self, diameter: int = 120, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._drive: Optional[DriveRecord] = None
        self.setFixedSize(diameter, diameter)

    def set_drive(self, drive: DriveRecord) -> None:
        self._drive = drive
        self.setToolTip(drive.name)
        self.update()

    def paintEvent(self, event: object) -> None:  # type: ignore[override]
        painter = QtGui.QPainter(self)
        painter.setRenderHint(QtGui.QPainter.RenderHint.Antialiasing, True)

        ring_width = max(6, self.width() // 10)
        inset = ring_width // 2 + 2
        rect = self.rect().adjusted(inset, inset, -inset, -inset)

        track = QtGui.QPen(QtGui.QColor(TRACK_COLOR), ring_width)
        painter.setPen(track)
        painter.drawArc(rect, 0, 360 * 16)

        if self._drive is None:
            return

        color, icon = ring_style(self._drive)
        accent = QtGui.QPen(
            QtGui.QColor(color), ring_width, QtCore.Qt.PenStyle.SolidLine, QtCore.Qt.PenCapStyle.RoundCap
        )
        painter.setPen(accent)
        painter.drawArc(rect, 90 * 16, int(-360 * self._drive.used_ratio * 16))

        painter.setPen(QtGui.QColor("white"))
        font = painter.font()
        font.setPointSize(max(8, self.width() // 9))
        font.setBold(True)
        painter.setFont(font)
        text = f"{icon}\n{self._drive.used_percent}%"
        painter.drawText(self.rect(), QtCore.Qt.AlignmentFlag.AlignCenter, text)


class StorageWindow(QtWidgets.QWidget):
    def __init__(self, config: Config) -> None:
        super().__init__()
        self.config = config
        self.setWindowTitle("Storage Widget")
        self.setWindowFlag(QtCore.Qt.WindowType.WindowStaysOnTopHint, True)
        self.setStyleSheet("background-color: #1c1c1e; color: white;")
        self._drives: List[DriveRecord] = []

        self.status_label = QtWidgets.QLabel("")
        self.refresh_button = QtWidgets.QPushButton("Refresh")
        self.refresh_button.clicked.connect(self.refresh)
        self.export_json_button = QtWidgets.QPushButton("Export JSON")
        self.export_json_button.clicked.connect(self.export_json)

        header = QtWidgets.QHBoxLayout()
        header.addWidget(self.refresh_button)
        header.addWidget(self.export_json_button)
        header.addStretch(1)
        header.addWidget(self.status_label)

        self.rings = QtWidgets.QHBoxLayout()

        layout = QtWidgets.QVBoxLayout(self)
        layout.addLayout(header)
        layout.addLayout(self.rings)

        self.timer = QtCore.QTimer(self)
        self.timer.setInterval(config.refresh_minutes * 60 * 1000)
        self.timer.timeout.connect(self.refresh)
        self.timer.start()

        self.refresh()

    def _set_status(self, text: str) -> None:
        self.status_label.setText(text)

    def refresh(self) -> None:
        try:
            entry = snapshot()
        except Exception as exc:
            logger.exception("Refresh failed")
            self._set_status(f"Refresh failed: {exc}")
            return
        self.render(entry.drives, self.config.size)
        self._set_status(entry.date.strftime("Updated %H:%M"))

    def render(self, drives: Sequence[DriveRecord], size: SizeHint) -> None:
        self._drives = list(drives)
        _clear_layout(self.rings)
        for drive in self._drives:
            column = QtWidgets.QVBoxLayout()
            ring = RingView(_RING_SIZES[size])
            ring.set_drive(drive)
            column.addWidget(ring, alignment=QtCore.Qt.AlignmentFlag.AlignHCenter)
            for i, line in enumerate(drive_lines(drive, size)):
                label = QtWidgets.QLabel(line)
                if i:
                    label.setStyleSheet("color: rgba(255, 255, 255, 180);")
                column.addWidget(label, alignment=QtCore.Qt.AlignmentFlag.AlignHCenter)
            column.addStretch(1)
            self.rings.addLayout(column)

    def export_json(self) -> None:
        if not self._drives:
            self._set_status("Nothing to export. Refresh first.")
            return
        path, _ = QtWidgets.QFileDialog.getSaveFileName(
            self, "Export JSON", "storage_report.json", "JSON Files (*.json)"
        )
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                json.dump([d.to_dict() for d in self._drives], f, ensure_ascii=False, indent=2)
            self._set_status(f"Exported: {path}")
        except OSError as exc:
            self._set_status(f"Export failed: {exc}")


def _clear_layout(layout: QtWidgets.QLayout) -> None:
    while layout.count():
        item = layout.takeAt(0)
        widget = item.widget()
        if widget is not None:
            widget.deleteLater()
        elif item.layout() is not None:
            _clear_layout(item.layout())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="storage-widget", description="Disk usage rings.")
    parser.add_argument("--size", choices=[s.value for s in SizeHint], help="ring size and detail level")
    parser.add_argument("--text", action="store_true", help="print usage once and exit")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    config = Config.from_env()
    configure_logging(config.log_level)
    if args.size:
        config = config.model_copy(update={"size": SizeHint.parse(args.size)})

    if args.text:
        TextRenderer().render(snapshot().drives, config.size)
        return

    app = QtWidgets.QApplication(sys.argv[:1])
    win = StorageWindow(config)
    win.show()
    sys.exit(app.exec())
