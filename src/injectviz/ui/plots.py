# src/injectviz/ui/plots.py
from datetime import datetime, time

from PySide6.QtWidgets import QWidget, QVBoxLayout
import pyqtgraph as pg

from injectrack.types import TimeSeries


class PlotWidget(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QVBoxLayout(self)

        # Main plot area, dates on the x axis
        self.plot_widget = pg.PlotWidget(axisItems={"bottom": pg.DateAxisItem(orientation="bottom")})
        self.plot_widget.setLabel("left", "Level", units="mg")
        self.plot_widget.showGrid(x=True, y=True, alpha=0.3)
        self.plot_widget.addLegend()
        layout.addWidget(self.plot_widget)

        self.curves = {}  # store references for updates

    def plot_series(self, series: dict[str, TimeSeries]):
        self.plot_widget.clear()
        self.curves = {}
        for i, (label, levels) in enumerate(series.items()):
            days = sorted(levels)
            x = [datetime.combine(d, time()).timestamp() for d in days]
            y = [levels[d] for d in days]
            curve = self.plot_widget.plot(
                x, y,
                pen=pg.mkPen(pg.intColor(i, hues=max(len(series), 1)), width=2),
                name=label
            )
            self.curves[label] = curve

    def clear(self):
        self.plot_widget.clear()
        self.curves = {}
