"""
Logging configuration for the application.

Sets up structured logging with a consistent format.
Logging must not change program behavior.
Never logs response bodies or secrets.
"""

import logging
import sys
from typing import Optional, TextIO

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS = ("uvicorn.access", "uvicorn.error")


def configure_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Configure structured logging for the application.

    The filter logs every stage decision at INFO; set WARNING or above in
    production to keep only host call failures and startup errors.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
        stream: Output stream. Defaults to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=stream or sys.stdout,
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
