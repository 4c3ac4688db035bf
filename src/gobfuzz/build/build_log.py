"""Logging for a gobfuzz run: console output and an optional log file."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

LOGGER_NAME = "gobfuzz"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def get_logger() -> logging.Logger:
    """Return the package root logger."""
    return logging.getLogger(LOGGER_NAME)


def configure_console(verbose: bool = False) -> logging.Handler:
    """Send gobfuzz logs to stderr (INFO, or DEBUG when verbose). Returns the handler."""
    logger = get_logger()
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    for existing in logger.handlers:
        if getattr(existing, "_gobfuzz_console", False):
            existing.setLevel(level)
            return existing
    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("go-bfuzz-build: %(message)s"))
    handler._gobfuzz_console = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return handler


@contextmanager
def build_log_context(
    log_file: Path,
    verbose: bool = False,
) -> Generator[logging.Logger, None, None]:
    """
    Attach a file handler to the gobfuzz logger for the duration of the context.
    Log file is UTF-8; format: timestamp [LEVEL] message.
    """
    logger = get_logger()
    level = logging.DEBUG if verbose else logging.INFO
    if logger.level == logging.NOTSET or logger.level > level:
        logger.setLevel(level)

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATEFMT))
    logger.addHandler(handler)

    try:
        yield logger
    finally:
        logger.removeHandler(handler)
        handler.close()
