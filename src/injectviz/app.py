# src/injectviz/app.py
import json
import logging
import sys
from pathlib import Path

from PySide6.QtWidgets import QApplication

from injectrack import config
from injectrack.types import InjectionEvent
from .ui.main_window import MainWindow

logger = logging.getLogger("injectviz")


def load_history(path: Path) -> list[InjectionEvent]:
    """Read a JSON export (a list of injection records) into events."""
    records = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(records, list):
        raise ValueError(f"{path} must contain a JSON list of injection records.")
    events = [InjectionEvent.from_record(r) for r in records if isinstance(r, dict)]
    logger.info("Loaded %d injections from %s", len(events), path)
    return events


def main(argv: list[str] | None = None) -> int:
    argv = sys.argv[1:] if argv is None else argv
    logging.basicConfig(level=config.LOG_LEVEL,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    history = load_history(Path(argv[0])) if argv else []

    app = QApplication.instance() or QApplication(sys.argv[:1])
    window = MainWindow(history)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
