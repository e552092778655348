"""Core inline parsing for Cotejo parser.

Inline content is parsed from the tokens of a block's lines, in passes:

1. Flatten: join the lines into one piece list, trimming each line and
   turning line endings into soft or hard breaks
2. Flanking: decide which ``*`` / ``_`` runs can open or close emphasis,
   looking at the characters around them in the flattened text
3. Code spans: pair backtick runs of equal length
4. Links and images (LinkParsingMixin)
5. Emphasis (EmphasisMixin)

Each pass is linear in the number of pieces.

Thread Safety:
All methods are stateless or use instance-local state only.
Safe for concurrent use when each parser instance is used by one thread.

"""

from __future__ import annotations

from bisect import bisect_right
from collections.abc import Sequence

from cotejo.location import Span
from cotejo.nodes import Inline, InlineCode
from cotejo.parsing.charsets import (
    EMPHASIS_DELIMITERS,
    is_unicode_punctuation,
)
from cotejo.parsing.inline.tokens import BreakToken, NodeToken, Piece
from cotejo.parsing.lines import Line
from cotejo.tokens import Token, TokenType

# token.start -> (can_open, can_close)
type Flanking = dict[int, tuple[bool, bool]]


def flatten_lines(lines: Sequence[Line]) -> list[Piece]:
    """Join paragraph lines into a single piece list.

    Leading whitespace is dropped from every line and trailing whitespace
    from every line end. A line ending after two or more spaces, or after a
    backslash, is a hard break; any other line ending is a soft break.
    """
    pieces: list[Piece] = []
    last = len(lines) - 1
    for index, line in enumerate(lines):
        tokens = list(line.content)
        trailing: Token | None = None
        while tokens and tokens[-1].type is TokenType.WHITESPACE:
            trailing = tokens.pop()
        if index == last:
            pieces.extend(tokens)
            break

        newline = line.newline
        end = newline.end if newline is not None else line.end
        if trailing is not None:
            marker = trailing.value
            hard = marker.endswith("  ")
            start, col = trailing.start, trailing.col
        elif newline is not None:
            hard, marker = False, ""
            start, col = newline.start, newline.col
        else:
            hard, marker = False, ""
            start, col = line.end, 1

        if trailing is None and tokens:
            tail = tokens[-1]
            if tail.type is TokenType.TEXT and not tail.escaped and tail.value.endswith("\\"):
                hard = True
                marker = "\\"
                start = tail.end - 1
                col = tail.col + len(tail.value) - 1
                tokens.pop()
                if len(tail.value) > 1:
                    tokens.append(
                        Token(
                            TokenType.TEXT,
                            tail.value[:-1],
                            tail.start,
                            tail.end - 1,
                            tail.lineno,
                            tail.col,
                        )
                    )
        pieces.extend(tokens)
        pieces.append(BreakToken(hard, marker, Span(start, end, line.lineno, col)))
    return pieces


def _char_before(pieces: Sequence[Piece], index: int) -> str:
    if index == 0:
        return ""
    match pieces[index - 1]:
        case BreakToken():
            return "\n"
        case Token(type=TokenType.WHITESPACE):
            return " "
        case Token(value=value):
            return value[-1:]
    return ""


def _char_after(pieces: Sequence[Piece], index: int) -> str:
    if index + 1 >= len(pieces):
        return ""
    match pieces[index + 1]:
        case BreakToken():
            return "\n"
        case Token(type=TokenType.WHITESPACE):
            return " "
        case Token(value=value):
            return value[:1]
    return ""


def is_emphasis_run(piece: Piece) -> bool:
    return (
        isinstance(piece, Token)
        and piece.type is TokenType.DELIMITER
        and piece.char in EMPHASIS_DELIMITERS
    )


def is_backtick_run(piece: Piece) -> bool:
    if not isinstance(piece, Token) or piece.char != "`":
        return False
    return piece.type in (TokenType.DELIMITER, TokenType.CODE_FENCE)


def as_text(token: Token) -> Token:
    """A TEXT token with the same value and position."""
    return Token(TokenType.TEXT, token.value, token.start, token.end, token.lineno, token.col)


class InlineParsingCoreMixin:
    """Core inline parsing methods.

    Required Host Attributes:
        - _max_nesting: int

    Required Host Methods (from other mixins):
        - _is_left_flanking(before, after) -> bool
        - _is_right_flanking(before, after) -> bool
        - _parse_links(pieces, flanking, depth) -> list[Piece]
        - _process_emphasis(pieces, flanking, limit) -> tuple[Inline, ...]

    """

    # Required host attributes (documented, not declared, to avoid override conflicts)
    # _max_nesting: int

    def _parse_inline(self, lines: Sequence[Line], depth: int = 0) -> tuple[Inline, ...]:
        """Parse the inline content of ``lines``.

        Args:
            lines: Lines of one paragraph, heading or table cell
            depth: Container nesting depth of the block holding them
        """
        pieces = flatten_lines(lines)
        if not pieces:
            return ()

        flanking = self._compute_flanking(pieces)
        pieces = self._extract_code_spans(pieces)
        pieces = self._parse_links(pieces, flanking, depth)
        return self._process_emphasis(pieces, flanking, self._max_nesting - depth)

    def _compute_flanking(self, pieces: Sequence[Piece]) -> Flanking:
        """Opening / closing ability of every emphasis run, keyed by offset.

        ``_`` follows the intraword rule: it opens only when not right-flanking
        (or preceded by punctuation) and closes only when not left-flanking
        (or followed by punctuation).
        """
        flanking: Flanking = {}
        for index, piece in enumerate(pieces):
            if not is_emphasis_run(piece):
                continue
            assert isinstance(piece, Token)
            before = _char_before(pieces, index)
            after = _char_after(pieces, index)
            left = self._is_left_flanking(before, after)
            right = self._is_right_flanking(before, after)
            if piece.char == "_":
                can_open = left and (not right or is_unicode_punctuation(before))
                can_close = right and (not left or is_unicode_punctuation(after))
            else:
                can_open, can_close = left, right
            flanking[piece.start] = (can_open, can_close)
        return flanking

    def _extract_code_spans(self, pieces: Sequence[Piece]) -> list[Piece]:
        """Replace matched backtick runs and their content with InlineCode nodes.

        A run opens a code span if a later run of exactly the same length
        exists; otherwise it is literal text. Code span content is verbatim
        (backslash escapes included), with line endings turned into spaces.
        """
        closers: dict[int, list[int]] = {}
        for index, piece in enumerate(pieces):
            if is_backtick_run(piece):
                assert isinstance(piece, Token)
                closers.setdefault(piece.run_length, []).append(index)
        if not closers:
            return list(pieces)

        result: list[Piece] = []
        index = 0
        while index < len(pieces):
            piece = pieces[index]
            if not is_backtick_run(piece):
                result.append(piece)
                index += 1
                continue

            assert isinstance(piece, Token)
            candidates = closers[piece.run_length]
            k = bisect_right(candidates, index)
            if k == len(candidates):
                result.append(as_text(piece))
                index += 1
                continue

            close = candidates[k]
            closer = pieces[close]
            assert isinstance(closer, Token)
            code = _code_span_content(pieces[index + 1 : close])
            span = Span(piece.start, closer.end, piece.lineno, piece.col)
            result.append(NodeToken(InlineCode(span=span, code=code)))
            index = close + 1
        return result


def _code_span_content(pieces: Sequence[Piece]) -> str:
    parts = []
    for piece in pieces:
        match piece:
            case BreakToken(marker=marker):
                parts.append(marker + " ")
            case NodeToken():
                # Nothing is built before code spans
                raise AssertionError("unexpected node inside a code span")
            case Token():
                parts.append(piece.raw)
    code = "".join(parts)
    if len(code) >= 2 and code[0] == " " and code[-1] == " " and code.strip(" "):
        code = code[1:-1]
    return code


__all__ = [
    "Flanking",
    "InlineParsingCoreMixin",
    "as_text",
    "flatten_lines",
    "is_backtick_run",
    "is_emphasis_run",
]
