"""Text processing utilities for Cotejo.

Example:
    >>> from cotejo.utils.text import slugify
    >>> slugify("Hello World!")
    'hello-world'
"""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s-]")
_SEPARATORS = re.compile(r"[-\s]+")


def slugify(text: str, separator: str = "-") -> str:
    """Convert heading text to an identifier with Unicode support.

    Keeps Unicode word characters (letters, digits, underscore), lowercases,
    and joins words with ``separator``.

    Args:
        text: Text to slugify
        separator: Character to use between words (default: '-')

    Returns:
        Slug (lowercase, with Unicode word chars and separators)

    Examples:
        >>> slugify("Hello World!")
        'hello-world'
        >>> slugify("Test & Code")
        'test-code'
        >>> slugify("Café")
        'café'
    """
    if not text:
        return ""
    text = text.lower().strip()
    text = _NON_WORD.sub("", text)
    text = _SEPARATORS.sub(separator, text)
    return text.strip(separator)
