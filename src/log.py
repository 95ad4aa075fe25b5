"""Logging setup for command-line and dashboard entry points."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"


def setup_logging(level: str = "INFO", log_file: str | None = None) -> logging.Logger:
    """Configure the root logger with a console handler and optional file.

    Existing root handlers are replaced so repeated calls do not duplicate
    output.

    Args:
        level:    Level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional path; parent directories are created.

    Returns:
        The configured root logger.

    Raises:
        ValueError: If level is not a logging level name.
    """
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level {level!r}.")

    root = logging.getLogger()
    root.setLevel(numeric)
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    root.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    return root
