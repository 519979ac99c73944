"""Desktop entry point."""

from __future__ import annotations

import sys

from PySide6.QtWidgets import QApplication

from signprep.config import load_config
from signprep.logging_setup import setup_logging
from signprep.ui.main_window import MainWindow


def main() -> int:
    config = load_config()
    logger = setup_logging(config)
    logger.info("Starting signprep")

    app = QApplication(sys.argv)
    window = MainWindow(config)
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
