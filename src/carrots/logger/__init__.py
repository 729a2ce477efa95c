"""Logging utilities for carrots.

Usage:
    >>> from carrots.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Fetched %d releases", count)  # Use %-style formatting

Rules:
    1. Always use: logger = get_logger(__name__)
    2. Never call logging.basicConfig()
    3. Never use f-strings in log calls
    4. Handlers are ONLY attached to the 'carrots' logger
"""

import logging

from carrots.logger.config import load_log_settings, update_logger_from_config
from carrots.logger.formatters import ConsoleFormatter, colorize_level
from carrots.logger.runtime import (
    ROOT_LOGGER_NAME,
    LoggingSetupError,
    clear_logger_state,
    get_runtime,
    setup_logging,
)

__all__ = [
    "ConsoleFormatter",
    "LoggingSetupError",
    "clear_logger_state",
    "colorize_level",
    "get_logger",
    "get_runtime",
    "setup_logging",
    "update_logger_from_config",
]


def get_logger(name: str = ROOT_LOGGER_NAME) -> logging.Logger:
    """Get a logger, starting the logging runtime on first use.

    Args:
        name: Logger name, typically __name__

    Returns:
        Logger propagating to the "carrots" queue handler

    """
    if not get_runtime().started:
        console_level, file_level, log_file = load_log_settings()
        setup_logging(console_level, file_level, log_file)
    return logging.getLogger(name)
