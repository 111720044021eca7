"""Logging setup for the calc_history namespace."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Configure the ``calc_history`` logger with a single stdout handler.

    Safe to call more than once: existing handlers are replaced, so a reload
    does not duplicate log lines.
    """
    logger = logging.getLogger("calc_history")
    logger.setLevel(level)

    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%H:%M:%S")
    )
    logger.addHandler(handler)
    return logger
