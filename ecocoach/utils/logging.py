"""Logging configuration for EcoCoach.

Package modules log through ``logging.getLogger(__name__)``, which places them
under the ``ecocoach`` logger configured here. Provider libraries log every
request at INFO, so they are held at WARNING unless DEBUG is requested.
"""

import logging
import sys
from typing import TextIO

LOGGER_NAME = "ecocoach"
HANDLER_NAME = "ecocoach-console"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LIBRARY_LOGGERS = ("LiteLLM", "httpx", "chromadb")


def _resolve_level(level: str | None) -> int:
    if level is None:
        return logging.INFO
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def _console_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == HANDLER_NAME:
            return handler
    return None


def configure_logging(
    level: str | None = None,
    *,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Configure and return the ``ecocoach`` logger.

    Calling this again only adjusts levels (and the stream, when given); the
    console handler is installed once.

    Args:
        level: Log level name. Unknown or missing names fall back to INFO.
        stream: Where records are written (defaults to stderr).

    Returns:
        The application logger.
    """
    log_level = _resolve_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    # stdout carries the CLI's JSON output
    logger.propagate = False

    handler = _console_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
    elif stream is not None and isinstance(handler, logging.StreamHandler):
        handler.setStream(stream)
    handler.setLevel(log_level)

    library_level = log_level if log_level <= logging.DEBUG else max(log_level, logging.WARNING)
    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(library_level)

    return logger


def reset_logging() -> None:
    """Undo configure_logging (useful for testing)."""
    logger = logging.getLogger(LOGGER_NAME)
    handler = _console_handler(logger)
    if handler is not None:
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True

    for name in LIBRARY_LOGGERS:
        logging.getLogger(name).setLevel(logging.NOTSET)
