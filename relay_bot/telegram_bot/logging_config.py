"""
Logging configuration for the relay bot.
"""

import logging
import os
import sys

LOGGER_NAME = "relay_bot"


def setup_logging(level: str | None = None):
    """Setup logging with proper format and handlers."""

    level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()

    # Create logger
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # Create console handler with formatting
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)

    formatter = logging.Formatter(
        '[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    handler.setFormatter(formatter)

    logger.addHandler(handler)

    # Prevent propagation to root logger
    logger.propagate = False

    return logger

# Global logger instance
bot_logger = setup_logging()
