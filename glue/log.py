from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler

from .config import GlueConfig

LOG_FILE_NAME = "glue.log"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(config: GlueConfig, verbose: bool = False) -> None:
    """Send ``glue`` logs to stderr and to a rotating file in the history directory.

    Stderr only shows warnings unless ``verbose`` is set; the file receives
    everything at the configured level.
    """

    root = logging.getLogger("glue")
    level = logging.DEBUG if verbose else logging.getLevelName(config.log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO
    root.setLevel(level)
    root.propagate = False
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
    root.addHandler(console)

    try:
        config.history.directory.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            config.history.directory / LOG_FILE_NAME,
            maxBytes=5 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
    except OSError as exc:
        root.warning("File logging disabled: %s", exc)
        return
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(file_handler)
