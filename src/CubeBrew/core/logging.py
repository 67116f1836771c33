"""Logging setup for CubeBrew.

Standalone use configures the root logger. When a host application has
already installed root handlers, only the ``cubebrew`` logger is adjusted.
"""

import logging
import logging.handlers
import os
import threading

PACKAGE_LOGGER = "cubebrew"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
# Rotate at 10 MB, keep 3 old files.
ROTATE_BYTES = 10 * 1024 * 1024
ROTATE_BACKUPS = 3

logger = logging.getLogger(PACKAGE_LOGGER)
_lock = threading.Lock()


def _resolve_level(level: str) -> int:
    numeric = logging.getLevelName(level.upper())
    if isinstance(numeric, int):
        return numeric
    logger.warning("Invalid log level '%s', defaulting to INFO", level)
    return logging.INFO


def _rotating_file_handler(log_file: str) -> logging.Handler:
    os.makedirs(os.path.dirname(log_file) or ".", exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=ROTATE_BYTES, backupCount=ROTATE_BACKUPS,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    return handler


def _logs_to(target: logging.Logger, log_file: str) -> bool:
    wanted = os.path.abspath(log_file)
    return any(getattr(h, "baseFilename", None) == wanted for h in target.handlers)


def setup_logging(level: str = "INFO", log_file: str = None, force: bool = False):
    """Route CubeBrew log records to the console and, optionally, ``log_file``.

    With ``force``, or when the root logger has no handlers yet, the root
    logger is (re)configured. Otherwise the ``cubebrew`` logger gets the
    level, and the file handler is attached to it at most once per path.
    """
    with _lock:
        numeric = _resolve_level(level)
        if force or not logging.getLogger().handlers:
            handlers = [logging.StreamHandler()]
            if log_file:
                handlers.append(_rotating_file_handler(log_file))
            logging.basicConfig(level=numeric, format=LOG_FORMAT,
                                handlers=handlers, force=force)
            return

        logger.setLevel(numeric)
        if log_file and not _logs_to(logger, log_file):
            logger.addHandler(_rotating_file_handler(log_file))
            logger.info("Also logging to %s", os.path.abspath(log_file))
