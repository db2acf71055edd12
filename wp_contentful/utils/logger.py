"""
Console and file logging for the migration.

Every module logs through a child of the ``wp_contentful`` logger.  Messages
are printed as ``[LEVEL] message`` and appended to
``reports/migration/migration.log`` so that a run can be reviewed afterwards.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

ROOT_LOGGER = "wp_contentful"
LOG_DIR = os.path.join("reports", "migration")
LOG_FILE = os.path.join(LOG_DIR, "migration.log")


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = LOG_FILE) -> logging.Logger:
    """Attach the console and file handlers to the package logger.

    Calling it again replaces the handlers, so the log file can be redirected
    (the tests point it at a temporary directory).
    """
    log = logging.getLogger(ROOT_LOGGER)
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.setLevel(level)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    log.addHandler(console)

    if log_file:
        os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
        log.addHandler(file_handler)

    return log


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package root, e.g. ``wp_contentful.parsers``."""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
