# src/injectviz/ui/controls.py
from dataclasses import dataclass

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QVBoxLayout, QComboBox, QFrame, QLabel, QCheckBox

from injectrack.types import Period, PERIOD_DAYS


@dataclass
class WindowRequest:
    period: Period = "quarter"
    min_excludes_zero: bool = True


class ControlsPanel(QFrame):
    windowChanged = Signal(WindowRequest)

    def __init__(self, period: Period = "quarter", min_excludes_zero: bool = True):
        super().__init__()
        self.setFrameShape(QFrame.StyledPanel)
        layout = QVBoxLayout(self)
        layout.addWidget(QLabel("Period"))

        self.period = QComboBox(); self.period.addItems(list(PERIOD_DAYS))
        self.period.setCurrentText(period)
        layout.addWidget(self.period)

        self.min_excludes_zero = QCheckBox("Ignore empty days in minimum")
        self.min_excludes_zero.setChecked(min_excludes_zero)
        layout.addWidget(self.min_excludes_zero)

        # Summary readouts, filled in by the main window
        layout.addWidget(QLabel("Summary"))
        self.lbl_max = QLabel("Max: -"); layout.addWidget(self.lbl_max)
        self.lbl_min = QLabel("Min: -"); layout.addWidget(self.lbl_min)
        self.lbl_avg = QLabel("Average: -"); layout.addWidget(self.lbl_avg)
        self.lbl_counts = QLabel(""); layout.addWidget(self.lbl_counts)
        layout.addStretch(1)

        self.period.currentIndexChanged.connect(self._emit_request)
        self.min_excludes_zero.toggled.connect(self._emit_request)

    def show_summary(self, maximum: float, minimum: float, average: float, counts: str = ""):
        self.lbl_max.setText(f"Max: {maximum:.0f} mg")
        self.lbl_min.setText(f"Min: {minimum:.0f} mg")
        self.lbl_avg.setText(f"Average: {average:.0f} mg")
        self.lbl_counts.setText(counts)

    def _emit_request(self, *_):
        req = WindowRequest(period=self.period.currentText(),
                            min_excludes_zero=self.min_excludes_zero.isChecked())
        self.windowChanged.emit(req)
