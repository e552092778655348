"""Lexer operating modes.

This module defines the finite state machine modes for the lexer.
"""

from __future__ import annotations

from enum import Enum, auto


class LexerMode(Enum):
    """Lexer operating modes.

    The lexer switches between modes based on context:
    - BLOCK: Ordinary lines, tokenized into text, whitespace and markers
    - FRONT_MATTER: Between the opening and closing front-matter fences,
      where lines are captured verbatim

    """

    BLOCK = auto()
    FRONT_MATTER = auto()


# Lines that open (first line only) and close a front-matter block
FRONT_MATTER_OPEN = "---"
FRONT_MATTER_CLOSE = frozenset({"---", "..."})
