"""Utility modules for Cotejo.

Provides:
- text: slugify for heading identifiers
- logger: get_logger for logging
"""

from cotejo.utils.logger import get_logger
from cotejo.utils.text import slugify

__all__ = [
    "get_logger",
    "slugify",
]
