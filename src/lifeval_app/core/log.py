"""Logging setup for the command line entry point."""

from __future__ import annotations

import logging

from lifeval_app.core.config import LoggingConfig

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(config: LoggingConfig) -> None:
    """Attach one stream handler to the package logger."""
    level = logging.getLevelName(config.level)
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger("lifeval_app")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
