"""luahint GUI entrypoint."""

from __future__ import annotations

import sys
from pathlib import Path

from PySide6 import QtWidgets

from luahint.config import LuahintSettings, load_settings
from luahint.core.app import build_context
from luahint.logging import configure_logging, get_logger
from luahint.ui.shell import MainWindow, apply_palette


def main(paths: list[Path] | None = None, level: str = "INFO") -> None:
    settings: LuahintSettings = load_settings()
    configure_logging(settings, level)
    logger = get_logger("main")

    app = QtWidgets.QApplication(sys.argv[:1])
    apply_palette(app)

    ctx = build_context(settings)
    ctx.start()

    window = MainWindow(ctx)
    window.open_paths(list(paths or []))
    window.show()
    logger.info("luahint ready")
    sys.exit(app.exec())


if __name__ == "__main__":
    main([Path(arg) for arg in sys.argv[1:]])
