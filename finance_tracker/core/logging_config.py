"""Logging setup for the API process."""
import logging
import sys

LOGGER_NAME = "finance_tracker"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Attach a single stdout handler to the package logger.

    Calling this again replaces the handler instead of stacking a second one,
    so reloads under uvicorn do not duplicate every line.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console_handler)
    logger.propagate = False
    return logger
