"""Logging setup.

Call ``configure_logging`` once at startup; modules log through
``logging.getLogger(__name__)`` under the ``focustimer`` hierarchy.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .paths import LOG_DIR

LOGGER_NAME = "focustimer"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: int | str = logging.INFO,
    *,
    log_dir: Path | None = None,
    console: bool = False,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """Attach file (and optionally console) handlers to the package logger.

    Handlers are named, so calling this twice does not duplicate output.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    fmt = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    file_handler_name = f"{LOGGER_NAME}:file"
    if not any(h.get_name() == file_handler_name for h in logger.handlers):
        log_dir = log_dir or LOG_DIR
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=log_dir / f"{LOGGER_NAME}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(fmt)
        handler.set_name(file_handler_name)
        logger.addHandler(handler)

    console_handler_name = f"{LOGGER_NAME}:console"
    if console and not any(h.get_name() == console_handler_name for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(fmt)
        handler.set_name(console_handler_name)
        logger.addHandler(handler)

    return logger
