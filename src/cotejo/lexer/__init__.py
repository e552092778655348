"""Line-oriented lexer for the Cotejo parser.

This package provides a window-based lexer with O(n) guaranteed performance.
The lexer scans whole lines, classifies them, emits tokens, then commits.

Architecture:
lexer/
├── __init__.py          # Re-exports Lexer, LexerMode
├── core.py              # Lexer class (mixin composition + scanning)
├── modes.py             # LexerMode enum, front-matter fence constants
└── classifiers/         # Line classification mixins
    ├── prefix.py        # Block quote / list container prefixes
    ├── fence.py         # Code fences
    └── table.py         # Table delimiter rows

Usage:
    >>> from cotejo.lexer import Lexer
    >>> tokens = list(Lexer("# Hello").tokenize())
    >>> [t.type.name for t in tokens]
    ['DELIMITER', 'WHITESPACE', 'TEXT', 'EOF']

"""

from cotejo.lexer.core import Lexer
from cotejo.lexer.modes import LexerMode

__all__ = ["Lexer", "LexerMode"]
