"""Centralized logging configuration for the tilemap collapse solver.

All 'tilecollapse.*' loggers write to stderr; a rotating log file can be added on top of that.

Usage:
    from tilecollapse.logging_config import setup_logging
    setup_logging(verbose=True)  # Call once at startup
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys

from tilecollapse import constants


def setup_logging(
    log_file: Path | str | None = None,
    verbose: bool = False,
    file_level: int = logging.DEBUG,
) -> logging.Logger:
    """Configures the 'tilecollapse' logger hierarchy.

    Calling this function again replaces the previously installed handlers, so it is safe to call it once per
    application start and from tests.

    Args:
        log_file: Optional path of a log file. If given, a rotating file handler is attached.
        verbose: If True, the console shows DEBUG messages, otherwise only INFO and above.
        file_level: Level for the file handler.

    Returns:
        The configured root logger of the package.
    """
    root_logger = logging.getLogger(constants.LOGGER_NAME)
    root_logger.setLevel(logging.DEBUG)

    # Clear any existing handlers (for re-initialization).
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(logging.Formatter(fmt="%(levelname)-8s | %(name)-35s | %(message)s"))
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=constants.LOG_FILE_MAX_SIZE,
            backupCount=constants.LOG_FILE_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s.%(msecs)03d | %(levelname)-8s | %(name)-35s | %(funcName)-25s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)
        root_logger.debug("Logging to file %s", log_path.absolute())

    return root_logger
