"""Line classification for the block parser.

Classification looks only at the line's own tokens; deciding what the line
means in context (does this list item continue the current list, does this
text start a table) is left to the state handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

from cotejo.parsing.charsets import BULLET_MARKERS, DIGITS, THEMATIC_BREAK_CHARS
from cotejo.parsing.lines import Line, whitespace_width
from cotejo.tokens import Token, TokenType

# Lines indented this far are not block starts
MAX_BLOCK_INDENT = 3

MAX_ORDERED_DIGITS = 9


class LineKind(Enum):
    """What a line looks like on its own."""

    BLANK = auto()
    HEADING = auto()
    CODE_FENCE = auto()
    FRONT_MATTER_FENCE = auto()
    THEMATIC_BREAK = auto()
    BLOCK_QUOTE = auto()
    LIST_ITEM = auto()
    TABLE_DELIMITER = auto()
    TEXT = auto()


@dataclass(frozen=True, slots=True)
class ListMarker:
    """A list item marker found at the start of a line.

    Attributes:
        ordered: Whether this is an ordered list marker (1. vs -)
        char: Bullet character, or the ordered delimiter ("." or ")")
        number: Item number for ordered markers
        indent: Visual column of the marker
        content_indent: Visual column where the item's content starts
        consumed: Number of line tokens making up indent, marker and spacing
        empty: True when nothing follows the marker

    """

    ordered: bool
    char: str
    number: int
    indent: int
    content_indent: int
    consumed: int
    empty: bool

    def same_list(self, other: ListMarker) -> bool:
        """Whether ``other`` continues a list started by this marker."""
        return self.ordered == other.ordered and self.char == other.char


def classify_line(line: Line, containers: bool = True) -> LineKind:
    """Classify a line.

    Args:
        line: Line to classify
        containers: Recognize block quotes and list items (False once the
            nesting limit is reached)
    """
    if line.is_blank:
        return LineKind.BLANK
    if line.indent > MAX_BLOCK_INDENT:
        return LineKind.TEXT

    first = line.first
    assert first is not None
    match first.type:
        case TokenType.CODE_FENCE:
            return LineKind.CODE_FENCE
        case TokenType.FRONT_MATTER_FENCE:
            return LineKind.FRONT_MATTER_FENCE
        case TokenType.TABLE_DELIMITER:
            return LineKind.TABLE_DELIMITER

    if heading_level(line) is not None:
        return LineKind.HEADING
    if is_thematic_break(line):
        return LineKind.THEMATIC_BREAK
    if containers:
        if first.is_delimiter(">"):
            return LineKind.BLOCK_QUOTE
        if list_marker(line) is not None:
            return LineKind.LIST_ITEM
    return LineKind.TEXT


def heading_level(line: Line) -> int | None:
    """Level of an ATX heading line, or None."""
    content = line.content
    if not content or not content[0].is_delimiter("#") or content[0].run_length > 6:
        return None
    if len(content) > 1 and content[1].type is not TokenType.WHITESPACE:
        return None
    return content[0].run_length


def is_thematic_break(line: Line) -> bool:
    """3+ of the same ``-``, ``*`` or ``_`` with only spaces between."""
    char = ""
    count = 0
    for token in line.content:
        if token.type is TokenType.WHITESPACE:
            continue
        if token.type is not TokenType.DELIMITER or token.char not in THEMATIC_BREAK_CHARS:
            return False
        if char and token.char != char:
            return False
        char = token.char
        count += token.run_length
    return count >= 3


def list_marker(line: Line) -> ListMarker | None:
    """Parse a bullet (``-``, ``*``, ``+``) or ordered (``1.``, ``1)``) marker."""
    tokens = line.tokens
    i = 0
    indent = 0
    if tokens and tokens[0].type is TokenType.WHITESPACE:
        indent = whitespace_width(tokens[0].value)
        i = 1
    if i >= len(tokens):
        return None

    token = tokens[i]
    ordered = False
    number = 1
    if token.type is TokenType.DELIMITER and token.char in BULLET_MARKERS:
        if token.run_length != 1:
            return None
        char = token.char
        width = 1
        i += 1
    elif token.type is TokenType.TEXT and not token.escaped:
        parsed = _ordered_marker(tokens, i)
        if parsed is None:
            return None
        number, char, width, i = parsed
        ordered = True
    else:
        return None

    marker_end = indent + width
    if i >= len(tokens):
        return ListMarker(ordered, char, number, indent, marker_end + 1, i, empty=True)

    spacing = tokens[i]
    if spacing.type is not TokenType.WHITESPACE:
        return None
    spaces = whitespace_width(spacing.value, marker_end)
    empty = i + 1 >= len(tokens)
    if empty or spaces > 4:
        content_indent = marker_end + 1
    else:
        content_indent = marker_end + spaces
    return ListMarker(ordered, char, number, indent, content_indent, i + 1, empty)


def _ordered_marker(tokens: tuple[Token, ...], i: int) -> tuple[int, str, int, int] | None:
    """Match ``digits.`` (one TEXT token) or ``digits`` + ``)`` at ``tokens[i]``.

    Returns:
        (number, delimiter char, marker width, index after the marker)
    """
    value = tokens[i].value
    if value.endswith(".") and _is_number(value[:-1]):
        return int(value[:-1]), ".", len(value), i + 1
    if _is_number(value) and i + 1 < len(tokens) and tokens[i + 1].is_delimiter(")", 1):
        return int(value), ")", len(value) + 1, i + 2
    return None


def _is_number(text: str) -> bool:
    return 0 < len(text) <= MAX_ORDERED_DIGITS and all(c in DIGITS for c in text)


def task_marker(line: Line) -> tuple[bool, int] | None:
    """Match ``[ ]``, ``[x]`` or ``[X]`` followed by whitespace or end of line.

    Returns:
        (checked, number of tokens to drop including the following space)
    """
    tokens = line.content
    offset = len(line.tokens) - len(tokens)
    if len(tokens) < 3 or not tokens[0].is_delimiter("["):
        return None
    inner = tokens[1]
    if inner.type is TokenType.WHITESPACE and inner.value == " ":
        checked = False
    elif inner.type is TokenType.TEXT and not inner.escaped and inner.value in ("x", "X"):
        checked = True
    else:
        return None
    if not tokens[2].is_delimiter("]"):
        return None
    if len(tokens) == 3:
        return checked, offset + 3
    if tokens[3].type is not TokenType.WHITESPACE:
        return None
    return checked, offset + 4
