# src/injectviz/ui/main_window.py
import logging
from datetime import datetime

from PySide6.QtWidgets import QMainWindow, QWidget, QHBoxLayout, QStatusBar

from injectrack import config
from injectrack.types import InjectionEvent
from injectrack.engine import compute_full_series, filter_window
from injectrack.metrics import injection_counts, summarize
from injectrack.windows import default_period
from .controls import ControlsPanel, WindowRequest
from .plots import PlotWidget

logger = logging.getLogger("injectviz")


class MainWindow(QMainWindow):
    def __init__(self, history: list[InjectionEvent]):
        super().__init__()
        self.setWindowTitle("Injection Levels")
        self.resize(1100, 680)

        self.history = list(history)
        self.as_of = datetime.now()
        # full grid computed once; switching periods only re-slices it
        self.full = compute_full_series(self.history, as_of=self.as_of)

        central = QWidget(self); self.setCentralWidget(central)
        root = QHBoxLayout(central)

        self.controls = ControlsPanel(period=default_period(self.history),
                                      min_excludes_zero=config.MIN_EXCLUDES_ZERO)
        self.plot = PlotWidget()
        root.addWidget(self.controls, 0)
        root.addWidget(self.plot, 1)

        self.status = QStatusBar(); self.setStatusBar(self.status)

        # wire events
        self.controls.windowChanged.connect(self.on_window_changed)

        # first render using current control values
        self.controls._emit_request()

    def on_window_changed(self, req: WindowRequest):
        windowed = filter_window(self.full, req.period, self.as_of)
        if windowed.is_empty:
            self.plot.clear()
            self.controls.show_summary(0.0, 0.0, 0.0)
            self.status.showMessage("No data", 5000)
            return

        self.plot.plot_series(windowed.all_series())
        stats = summarize(windowed, min_excludes_zero=req.min_excludes_zero)
        counts = injection_counts(self.history, self.as_of)
        self.controls.show_summary(
            stats.maximum, stats.minimum, stats.average,
            f"{counts['last_7_days']} injections this week, {counts['last_30_days']} in 30 days",
        )
        logger.debug("Rendered %s window: %s", req.period, stats)
        self.status.showMessage(f"{len(self.history)} injections, {len(windowed.all_series())} curves", 5000)
