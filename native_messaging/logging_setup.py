"""Logging setup for native messaging hosts.

stdout carries the framed protocol, so log records go to a
file when one is configured and to stderr otherwise. Never
to stdout.
"""
from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

LOGGER_NAME = "native_messaging"
MAX_LOG_LINES = 1000

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _truncate_log(log_file: Path, max_lines: int) -> None:
    """Keep only the last max_lines lines of an existing log."""
    if not log_file.exists():
        return
    try:
        lines = log_file.read_text().splitlines()
        if len(lines) > max_lines:
            log_file.write_text("\n".join(lines[-max_lines:]) + "\n")
    except OSError:
        pass


def setup_logging(
    log_file: Path | None = None,
    level: str = "INFO",
    *,
    max_lines: int = MAX_LOG_LINES,
) -> logging.Logger:
    """Configure the package logger. Safe to call repeatedly.

    An unwritable log file falls back to stderr.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Don't add handlers if already configured
    if logger.handlers:
        return logger

    handler: logging.Handler | None = None
    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            _truncate_log(log_file, max_lines)
            handler = logging.FileHandler(str(log_file))
        except OSError:
            handler = None
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)

    handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
