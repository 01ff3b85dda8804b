"""Logging setup shared by the command line tools."""

from __future__ import annotations

import sys
from datetime import datetime
from pathlib import Path

from loguru import logger


def configure_logging(logs_dir: Path | None, level: str = "INFO") -> Path | None:
    """
    Send loguru output to stderr and, when ``logs_dir`` is writable, to a rotating file there.

    Returns the log file path, or None when only stderr is used.
    """
    logger.remove()
    logger.add(sys.stderr, level=level, backtrace=True, diagnose=False)

    if logs_dir is None:
        return None
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning(f"File logging disabled; unable to create {logs_dir}: {exc}")
        return None

    log_file = logs_dir / f"deck_editor_{datetime.now():%Y%m%d_%H%M%S}.log"
    logger.add(log_file, level="DEBUG", rotation="5 MB", retention=5, backtrace=True, enqueue=True)
    return log_file
