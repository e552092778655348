"""Line-oriented lexer with O(n) guaranteed performance.

Implements a window-based approach: find the end of the line, classify it,
emit its tokens, then commit. Every step advances by at least one line, so
tokenization always terminates.

No regex in the hot path. The lexer never fails: anything it does not
recognize becomes TEXT.

Thread Safety:
Lexer instances are single-use. Create one per source string.
All state is instance-local; no shared mutable state.

"""

from __future__ import annotations

from collections.abc import Iterator
from itertools import accumulate

from cotejo.lexer.classifiers import (
    FenceClassifierMixin,
    PrefixClassifierMixin,
    TableClassifierMixin,
)
from cotejo.lexer.modes import FRONT_MATTER_CLOSE, FRONT_MATTER_OPEN, LexerMode
from cotejo.parsing.charsets import (
    ASCII_PUNCTUATION,
    RUN_MARKERS,
    SINGLE_MARKERS,
    TEXT_STOP,
    WHITESPACE,
)
from cotejo.tokens import Token, TokenType

_BOM = "\ufeff"


def _utf8_len(text: str) -> int:
    """Byte length of ``text`` in UTF-8 (lone surrogates never raise)."""
    if text.isascii():
        return len(text)
    return len(text.encode("utf-8", "surrogatepass"))


class Lexer(
    PrefixClassifierMixin,
    FenceClassifierMixin,
    TableClassifierMixin,
):
    """Line-oriented lexer producing a lazy token stream.

    Usage:
            >>> lexer = Lexer("# Hello\\n\\nWorld")
            >>> for token in lexer.tokenize():
            ...     print(token)
        Token(DELIMITER, '#', 1:1)
        Token(WHITESPACE, ' ', 1:2)
        Token(TEXT, 'Hello', 1:3)
        Token(NEWLINE, '\\n', 1:8)
        Token(BLANK_LINE, '\\n', 2:1)
        Token(TEXT, 'World', 3:1)
        Token(EOF, '', 3:6)

    Thread Safety:
        Lexer instances are single-use. Create one per source string.
        All state is instance-local; no shared mutable state.

    """

    __slots__ = (
        "_source",
        "_source_len",
        "_pos",
        "_byte_pos",
        "_lineno",
        "_mode",
        "_eof_col",
        # Per-line state
        "_line_byte_offsets",
        "_line_byte_base",
    )

    def __init__(self, source: str) -> None:
        """Initialize lexer with source text.

        Args:
            source: Markdown source text
        """
        self._source = source
        self._source_len = len(source)
        self._pos = 0
        self._byte_pos = 0
        self._lineno = 1
        self._mode = LexerMode.BLOCK
        self._eof_col = 1
        self._line_byte_offsets: list[int] | None = None
        self._line_byte_base = 0

    def tokenize(self) -> Iterator[Token]:
        """Tokenize source into token stream.

        Yields:
            Token objects one at a time, ending with exactly one EOF

        Complexity: O(n) where n = len(source)
        Memory: O(1) iterator (tokens yielded, not accumulated)
        """
        if self._source.startswith(_BOM):
            self._pos = 1
            self._byte_pos = _utf8_len(_BOM)

        source_len = self._source_len
        while self._pos < source_len:
            yield from self._scan_line()

        yield Token(
            TokenType.EOF,
            "",
            self._byte_pos,
            self._byte_pos,
            self._lineno,
            self._eof_col,
        )

    # =========================================================================
    # Line scanning
    # =========================================================================

    def _scan_line(self) -> Iterator[Token]:
        """Scan one line, emit its tokens, and commit past its newline."""
        source = self._source
        line_start = self._pos
        newline_idx = source.find("\n", line_start)
        line_end = newline_idx if newline_idx != -1 else self._source_len

        content_end = line_end
        if content_end > line_start and source[content_end - 1] == "\r":
            content_end -= 1

        line = source[line_start:content_end]
        if newline_idx != -1:
            newline = source[content_end : line_end + 1]
        else:
            newline = source[content_end:line_end]

        self._begin_line(line)

        if not line.strip(" \t"):
            # Blank line: one token spanning content and newline
            yield Token(
                TokenType.BLANK_LINE,
                line + newline,
                self._line_byte_base,
                self._line_byte_base + _utf8_len(line + newline),
                self._lineno,
                1,
            )
        elif self._mode == LexerMode.FRONT_MATTER:
            yield from self._scan_front_matter_line(line)
            yield from self._emit_newline(line, newline)
        else:
            yield from self._scan_block_line(line)
            yield from self._emit_newline(line, newline)

        self._commit(line_start, line_end, newline_idx != -1, len(line))

    def _scan_block_line(self, line: str) -> Iterator[Token]:
        """Tokenize a non-blank line in BLOCK mode."""
        if self._lineno == 1 and line.rstrip() == FRONT_MATTER_OPEN:
            self._mode = LexerMode.FRONT_MATTER
            yield self._make_token(TokenType.FRONT_MATTER_FENCE, line, 0, len(FRONT_MATTER_OPEN))
            yield from self._scan_run(line, len(FRONT_MATTER_OPEN), len(line))
            return

        prefix_end = self._container_prefix_end(line)
        fence_end = self._classify_fence(line, prefix_end)
        if fence_end is not None:
            yield from self._scan_run(line, 0, prefix_end)
            yield self._make_token(TokenType.CODE_FENCE, line, prefix_end, fence_end)
            if fence_end < len(line):
                # Info string is kept verbatim
                yield self._make_token(TokenType.TEXT, line, fence_end, len(line))
            return

        quote_end = self._quote_prefix_end(line)
        if self._is_table_delimiter(line, quote_end):
            row_end = len(line.rstrip())
            yield from self._scan_run(line, 0, quote_end)
            yield self._make_token(TokenType.TABLE_DELIMITER, line, quote_end, row_end)
            yield from self._scan_run(line, row_end, len(line))
            return

        yield from self._scan_run(line, 0, len(line))

    def _scan_front_matter_line(self, line: str) -> Iterator[Token]:
        """Emit a front-matter line verbatim, or the closing fence."""
        stripped = line.rstrip()
        if stripped in FRONT_MATTER_CLOSE:
            self._mode = LexerMode.BLOCK
            yield self._make_token(TokenType.FRONT_MATTER_FENCE, line, 0, len(stripped))
            yield from self._scan_run(line, len(stripped), len(line))
            return
        yield self._make_token(TokenType.TEXT, line, 0, len(line))

    def _scan_run(self, line: str, start: int, stop: int) -> Iterator[Token]:
        """Tokenize ``line[start:stop]`` into WHITESPACE, TEXT and DELIMITER."""
        i = start
        while i < stop:
            char = line[i]

            if char in WHITESPACE:
                j = i + 1
                while j < stop and line[j] in WHITESPACE:
                    j += 1
                yield self._make_token(TokenType.WHITESPACE, line, i, j)
                i = j
                continue

            if char == "\\" and i + 1 < stop and line[i + 1] in ASCII_PUNCTUATION:
                token = self._make_token(TokenType.TEXT, line, i, i + 2)
                yield Token(
                    TokenType.TEXT,
                    line[i + 1],
                    token.start,
                    token.end,
                    token.lineno,
                    token.col,
                    escaped=True,
                )
                i += 2
                continue

            if char in RUN_MARKERS:
                j = i + 1
                while j < stop and line[j] == char:
                    j += 1
                yield self._make_token(TokenType.DELIMITER, line, i, j)
                i = j
                continue

            if char in SINGLE_MARKERS:
                yield self._make_token(TokenType.DELIMITER, line, i, i + 1)
                i += 1
                continue

            j = i + 1
            while j < stop:
                c = line[j]
                if c in TEXT_STOP:
                    if c != "\\" or (j + 1 < stop and line[j + 1] in ASCII_PUNCTUATION):
                        break
                j += 1
            yield self._make_token(TokenType.TEXT, line, i, j)
            i = j

    def _emit_newline(self, line: str, newline: str) -> Iterator[Token]:
        """Emit the NEWLINE token ending a non-blank line, if present."""
        if not newline:
            return
        start = self._byte_offset(len(line))
        yield Token(
            TokenType.NEWLINE,
            newline,
            start,
            start + len(newline),
            self._lineno,
            len(line) + 1,
        )

    # =========================================================================
    # Position tracking
    # =========================================================================

    def _begin_line(self, line: str) -> None:
        """Prepare byte-offset lookup for ``line``."""
        self._line_byte_base = self._byte_pos
        if line.isascii():
            self._line_byte_offsets = None
        else:
            self._line_byte_offsets = list(
                accumulate(
                    (_utf8_len(c) for c in line),
                    initial=0,
                )
            )

    def _byte_offset(self, index: int) -> int:
        """Absolute byte offset of character ``index`` of the current line."""
        offsets = self._line_byte_offsets
        if offsets is None:
            return self._line_byte_base + index
        return self._line_byte_base + offsets[index]

    def _commit(
        self, line_start: int, line_end: int, consumed_newline: bool, line_len: int
    ) -> None:
        """Commit position past the line (and its newline)."""
        end = line_end + 1 if consumed_newline else line_end
        self._byte_pos += _utf8_len(self._source[line_start:end])
        self._pos = end
        if consumed_newline:
            self._lineno += 1
            self._eof_col = 1
        else:
            self._eof_col = line_len + 1

    def _make_token(self, token_type: TokenType, line: str, start: int, end: int) -> Token:
        """Create a token for ``line[start:end]`` on the current line."""
        return Token(
            token_type,
            line[start:end],
            self._byte_offset(start),
            self._byte_offset(end),
            self._lineno,
            start + 1,
        )
