"""loguru setup for the CLI and any embedding process.

stdlib logging (SQLAlchemy, google-cloud-firestore, grpc) is routed into
loguru so every record shares one format and one set of sinks.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from loguru import logger

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# Third-party loggers that are chatty at INFO/DEBUG.
_LIBRARY_LEVELS = {
    "sqlalchemy.engine": logging.WARNING,
    "sqlalchemy.pool": logging.WARNING,
    "google.auth": logging.WARNING,
    "google.api_core": logging.WARNING,
    "grpc": logging.WARNING,
    "urllib3": logging.WARNING,
}


class _InterceptHandler(logging.Handler):
    """Forward stdlib records to loguru, keeping the original call site."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO", log_file: str | Path | None = None) -> None:
    """Make loguru the only logging sink.

    Logs go to stderr and, when *log_file* is given, also to a file rotated
    at 10 MB (five files kept).  Call once at startup.
    """
    level = level.upper()

    logger.remove()
    logger.add(sys.stderr, level=level, format=_FORMAT)
    if log_file:
        logger.add(str(log_file), level=level, format=_FORMAT, colorize=False, rotation="10 MB", retention=5)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name, library_level in _LIBRARY_LEVELS.items():
        logging.getLogger(name).setLevel(library_level)

    logger.debug("Logging configured (level={}, file={})", level, log_file or "-")
