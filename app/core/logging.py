"""
Logging configuration for Station Metrics Service
"""

import logging
import sys

from app.core.config import settings

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _level() -> int:
    return logging.DEBUG if settings.debug else logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Get a stdout logger; DEBUG when settings.debug is on, INFO otherwise."""
    logger = logging.getLogger(name)

    if not logger.handlers:
        level = _level()
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))

        logger.addHandler(handler)
        logger.setLevel(level)
        # Handled here; don't duplicate through the root handler set up in main
        logger.propagate = False

    return logger
