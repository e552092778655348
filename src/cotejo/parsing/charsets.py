"""Character sets for O(1) classification.

All sets are frozensets for:
- O(1) membership testing (vs O(n) for strings)
- Immutability (thread-safe)
- Module-level caching (no per-call allocation)

Usage:
    from cotejo.parsing.charsets import ASCII_PUNCTUATION

    if char in ASCII_PUNCTUATION:  # O(1) lookup
        ...
"""

import unicodedata

# Characters a backslash can escape
ASCII_PUNCTUATION: frozenset[str] = frozenset("!\"#$%&'()*+,-./:;<=>?@[\\]^_`{|}~")

# Marker characters the lexer groups into runs (## ** ``` ||)
RUN_MARKERS: frozenset[str] = frozenset("#*_-`|~+")

# Marker characters the lexer always emits one at a time
SINGLE_MARKERS: frozenset[str] = frozenset("[]()!>")

MARKERS: frozenset[str] = RUN_MARKERS | SINGLE_MARKERS

# ASCII whitespace inside a line
WHITESPACE: frozenset[str] = frozenset(" \t")

# Characters that end a TEXT run
TEXT_STOP: frozenset[str] = MARKERS | WHITESPACE | frozenset("\\")

# Emphasis delimiter characters
EMPHASIS_DELIMITERS: frozenset[str] = frozenset("*_")

# Valid fence characters
FENCE_CHARS: frozenset[str] = frozenset("`~")

# List marker characters
BULLET_MARKERS: frozenset[str] = frozenset("-*+")

# Thematic break characters
THEMATIC_BREAK_CHARS: frozenset[str] = frozenset("-*_")

DIGITS: frozenset[str] = frozenset("0123456789")


def is_unicode_punctuation(char: str) -> bool:
    """Check if character is Unicode punctuation (P* or S* categories).

    Emphasis flanking rules use Unicode punctuation; ASCII punctuation is a
    subset.

    """
    if not char:
        return False
    if char in ASCII_PUNCTUATION:
        return True
    cat = unicodedata.category(char)
    return cat.startswith("P") or cat.startswith("S")


def is_unicode_whitespace(char: str) -> bool:
    """Check if character is Unicode whitespace.

    Treats the empty string as whitespace so line and run boundaries behave
    like spaces in flanking checks.

    """
    if not char:
        return True
    if char in " \t\n\r\f\v":
        return True
    return unicodedata.category(char) == "Zs"
