"""Logging configuration for the portfolio analytics engine."""

import logging
import sys

ROOT_LOGGER_NAME = "portfolio_analytics"

LOG_FORMAT = "%(asctime)s | %(name)-36s | %(levelname)-7s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logger(name: str = ROOT_LOGGER_NAME, level: str = "INFO") -> logging.Logger:
    """
    Return the engine logger *name*, attaching a stderr handler once.

    Bare names are placed under ``portfolio_analytics.`` so every engine
    logger can be tuned through the package root.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"

    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger
