"""Minimal logging utilities for Cotejo.

Provides a simple get_logger function that wraps the standard library logging.

Example:
    >>> from cotejo.utils.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("Parsing document")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Get a logger for the given name.

    Returns a standard library logger with the "cotejo." prefix.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger instance

    Example:
        >>> logger = get_logger("mymodule")
        >>> logger.name
        'cotejo.mymodule'
    """
    if not (name == "cotejo" or name.startswith("cotejo.")):
        name = f"cotejo.{name}"
    return logging.getLogger(name)
