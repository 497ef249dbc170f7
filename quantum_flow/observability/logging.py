"""Structured logging configuration."""

import logging
import sys

LOGGER_NAME = "quantum_flow"


def setup_logging(level: str = "INFO", format_type: str = "structured") -> logging.Logger:
    """Attach a stdout handler to the quantum_flow logger and return it."""
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.INFO

    if format_type == "structured":
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    else:
        formatter = logging.Formatter('%(levelname)s - %(message)s')

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    # library logger only; the host application owns the root logger
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_level)
    logger.handlers.clear()
    logger.addHandler(handler)
    logger.propagate = False

    return logger
