"""
Logging utilities for the ledger sync service.

Provides standardized logger configuration.

Logging rules:
- NEVER log Supabase session tokens or API keys
- NEVER log monetary amounts or user-entered descriptions at INFO level
- Identifiers, table names, counts and verdict messages are fine
"""

import logging
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_logger(name: str, level: Optional[int] = None) -> logging.Logger:
    """
    Get a configured logger for the specified module.

    Args:
        name: Module name (typically __name__)
        level: Optional logging level (defaults to INFO)

    Returns:
        Configured logger instance

    Usage:
        >>> from ledgersync.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Sync batch finished")
    """
    logger = logging.getLogger(name)

    if level is None:
        level = logging.INFO

    logger.setLevel(level)

    # Add handler if not already configured (avoid duplicate handlers)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            fmt=LOG_FORMAT,
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    return logger
