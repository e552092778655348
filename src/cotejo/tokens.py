"""Token and TokenType definitions for the Cotejo lexer.

The lexer produces a stream of Token objects that the block parser consumes.
Each Token has a type, an owned value, and a byte-offset span.

Thread Safety:
Token is frozen (immutable) and safe to share across threads.
TokenType is an enum (inherently immutable).

"""

from dataclasses import dataclass
from enum import Enum, auto

from cotejo.location import Span


class TokenType(Enum):
    """Token types produced by the lexer.

    Organized by category:
    - Line structure (NEWLINE, BLANK_LINE, EOF)
    - Line content (TEXT, WHITESPACE, DELIMITER)
    - Whole-line constructs recognized lexically (fences, table delimiter rows)

    """

    # Line structure
    EOF = auto()
    NEWLINE = auto()  # \n or \r\n ending a non-blank line
    BLANK_LINE = auto()  # whitespace-only line, newline included

    # Line content
    TEXT = auto()  # literal text run (or one escaped character)
    WHITESPACE = auto()  # spaces and tabs
    DELIMITER = auto()  # run of one marker character: ##, **, `, |, [ ...

    # Whole-line constructs
    FRONT_MATTER_FENCE = auto()  # --- on the first line, and its closer
    CODE_FENCE = auto()  # ``` or ~~~ (3+)
    TABLE_DELIMITER = auto()  # |---|:--:|


@dataclass(frozen=True, slots=True)
class Token:
    """A token produced by the lexer.

    Tokens are the atomic units passed from lexer to parser. They own their
    text, so nothing downstream needs the source buffer.

    Attributes:
        type: The token type (from TokenType enum)
        value: Owned text payload. For escaped TEXT this is the literal
            character without the backslash.
        start: Absolute start byte offset in source
        end: Absolute end byte offset in source
        lineno: Line number (1-indexed)
        col: Column (1-indexed, in characters)
        escaped: True for TEXT produced by a backslash escape

    """

    type: TokenType
    value: str
    start: int
    end: int
    lineno: int
    col: int
    escaped: bool = False

    def __repr__(self) -> str:
        """Compact repr for debugging."""
        val = self.value
        if len(val) > 20:
            val = val[:17] + "..."
        return f"Token({self.type.name}, {val!r}, {self.lineno}:{self.col})"

    @property
    def span(self) -> Span:
        """Source span of this token."""
        return Span(self.start, self.end, self.lineno, self.col)

    @property
    def raw(self) -> str:
        """Source text of this token (escapes restored)."""
        if self.escaped:
            return "\\" + self.value
        return self.value

    @property
    def char(self) -> str:
        """Marker character of a DELIMITER (first character otherwise)."""
        return self.value[:1]

    @property
    def run_length(self) -> int:
        """Number of marker characters in a DELIMITER run."""
        return len(self.value)

    def is_delimiter(self, char: str, run_length: int | None = None) -> bool:
        """Check for a DELIMITER of ``char`` (and optionally exact run length)."""
        if self.type is not TokenType.DELIMITER or self.value[:1] != char:
            return False
        return run_length is None or len(self.value) == run_length
