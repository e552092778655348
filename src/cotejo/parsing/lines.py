"""Line view over the token stream.

The block parser works line by line. A Line is the tuple of content tokens
of one source line (its NEWLINE kept aside), plus the bookkeeping needed to
strip container prefixes without losing absolute positions: stripping a
block-quote marker or a list item's indentation yields a new Line whose
tokens still carry their original byte offsets.

Thread Safety:
Line is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from cotejo.location import Span
from cotejo.tokens import Token, TokenType

TAB_STOP = 4


def whitespace_width(text: str, column: int = 0) -> int:
    """Visual width of leading whitespace, expanding tabs to the next stop."""
    width = column
    for char in text:
        if char == " ":
            width += 1
        elif char == "\t":
            width += TAB_STOP - (width % TAB_STOP)
        else:
            break
    return width - column


@dataclass(frozen=True, slots=True)
class Line:
    """One source line as seen by a block parser at some nesting level.

    Attributes:
        tokens: Content tokens (WHITESPACE, TEXT, DELIMITER, fences ...)
        lineno: Source line number (1-indexed)
        start: Byte offset where this view of the line begins
        end: Byte offset just past the last content token
        newline: The NEWLINE token ending the line, if any

    """

    tokens: tuple[Token, ...]
    lineno: int
    start: int
    end: int
    newline: Token | None = None

    @property
    def is_blank(self) -> bool:
        return all(t.type is TokenType.WHITESPACE for t in self.tokens)

    @property
    def indent(self) -> int:
        """Visual width of the leading whitespace."""
        if self.tokens and self.tokens[0].type is TokenType.WHITESPACE:
            return whitespace_width(self.tokens[0].value)
        return 0

    @property
    def content(self) -> tuple[Token, ...]:
        """Tokens with leading whitespace removed."""
        if self.tokens and self.tokens[0].type is TokenType.WHITESPACE:
            return self.tokens[1:]
        return self.tokens

    @property
    def first(self) -> Token | None:
        """First non-whitespace token."""
        content = self.content
        return content[0] if content else None

    @property
    def span(self) -> Span:
        """Span from the first non-whitespace token to the end of the line."""
        first = self.first
        if first is None:
            return Span(self.end, self.end, self.lineno, 1)
        return Span(first.start, self.end, self.lineno, first.col)

    def raw(self) -> str:
        """Source text of the line (escapes restored)."""
        return "".join(t.raw for t in self.tokens)

    def has_delimiter(self, char: str) -> bool:
        return any(t.is_delimiter(char) for t in self.tokens)

    def drop(self, count: int) -> Line:
        """Line without its first ``count`` tokens."""
        rest = self.tokens[count:]
        start = rest[0].start if rest else self.end
        return Line(rest, self.lineno, start, self.end, self.newline)

    def strip_indent(self, columns: int) -> Line:
        """Remove up to ``columns`` visual columns of leading whitespace.

        A tab that is only partly consumed leaves its remaining columns as
        spaces.
        """
        if columns <= 0 or not self.tokens or self.tokens[0].type is not TokenType.WHITESPACE:
            return self
        ws = self.tokens[0]
        width = 0
        for i, char in enumerate(ws.value):
            step = 1 if char == " " else TAB_STOP - (width % TAB_STOP)
            if width + step > columns:
                remainder = " " * (width + step - columns) + ws.value[i + 1 :]
                token = Token(
                    TokenType.WHITESPACE,
                    remainder,
                    ws.start + i,
                    ws.end,
                    ws.lineno,
                    ws.col + i,
                )
                return Line((token, *self.tokens[1:]), self.lineno, token.start, self.end, self.newline)
            width += step
            if width == columns:
                return self.drop_whitespace_prefix(i + 1)
        return self.drop(1)

    def drop_whitespace_prefix(self, chars: int) -> Line:
        """Remove the first ``chars`` characters of the leading whitespace token."""
        ws = self.tokens[0]
        if chars >= len(ws.value):
            return self.drop(1)
        token = Token(
            TokenType.WHITESPACE,
            ws.value[chars:],
            ws.start + chars,
            ws.end,
            ws.lineno,
            ws.col + chars,
        )
        return Line((token, *self.tokens[1:]), self.lineno, token.start, self.end, self.newline)

    def lstrip(self) -> Line:
        """Line without leading whitespace."""
        if self.tokens and self.tokens[0].type is TokenType.WHITESPACE:
            return self.drop(1)
        return self


def build_lines(tokens: Iterable[Token]) -> list[Line]:
    """Group a token stream into Lines.

    BLANK_LINE tokens become lines holding at most one WHITESPACE token, so a
    blank line and a line of spaces inside a container look the same.
    """
    lines: list[Line] = []
    current: list[Token] = []
    line_start = 0
    lineno = 1

    def flush(newline: Token | None, end: int) -> None:
        lines.append(Line(tuple(current), lineno, line_start, end, newline))
        current.clear()

    for token in tokens:
        match token.type:
            case TokenType.EOF:
                if current:
                    flush(None, current[-1].end)
            case TokenType.NEWLINE:
                end = current[-1].end if current else token.start
                flush(token, end)
            case TokenType.BLANK_LINE:
                whitespace = token.value.rstrip("\r\n")
                content: tuple[Token, ...] = ()
                end = token.start + len(whitespace)
                if whitespace:
                    content = (
                        Token(
                            TokenType.WHITESPACE,
                            whitespace,
                            token.start,
                            end,
                            token.lineno,
                            1,
                        ),
                    )
                lines.append(Line(content, token.lineno, token.start, end))
            case _:
                if not current:
                    line_start = token.start
                    lineno = token.lineno
                current.append(token)
    return lines
