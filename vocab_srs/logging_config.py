"""
Logging setup for scripts and host applications.

Library modules only create loggers; the host decides where records go.
"""

from __future__ import annotations

import logging
import sys

from pythonjsonlogger.json import JsonFormatter

LOGGER_NAME = "vocab_srs"


def configure_logging(level: str = "INFO", fmt: str = "json") -> logging.Logger:
    """
    Attach a stdout handler to the package logger.

    Safe to call repeatedly: an existing handler is replaced.

    Args:
        level: Log level name
        fmt: "json" for structured records, "text" for plain lines

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level.upper())

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    if fmt == "json":
        handler.setFormatter(JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)

    # capture warnings
    logging.captureWarnings(True)

    return logger
