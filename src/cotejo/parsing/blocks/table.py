"""Table parsing for Cotejo parser.

Handles GFM-style pipe tables:

    | Header 1 | Header 2 |   <- header row (must contain a pipe)
    |----------|:--------:|   <- delimiter row (same column count)
    | Cell 1   | Cell 2   |   <- body rows

Body rows are padded or truncated to the header's column count. A line that
starts with a pipe but has no matching delimiter row is reported and parsed
as paragraph text.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from cotejo.diagnostics import Diagnostic, DiagnosticKind
from cotejo.location import Span
from cotejo.nodes import Alignment, Table, TableCell, TableRow
from cotejo.parsing.blocks.classify import MAX_BLOCK_INDENT, LineKind, classify_line
from cotejo.parsing.blocks.core import BlockCursor, BlockState
from cotejo.parsing.lines import Line
from cotejo.tokens import Token, TokenType

if TYPE_CHECKING:
    from cotejo.nodes import Inline


def parse_delimiter_row(token: Token) -> tuple[Alignment, ...] | None:
    """Parse a TABLE_DELIMITER token into column alignments.

    Delimiter format: |:---|:---:|---:|
    Returns None if a column is not ``:?-+:?``.
    """
    row = token.value.strip()
    if row.startswith("|"):
        row = row[1:]
    if row.endswith("|"):
        row = row[:-1]

    alignments: list[Alignment] = []
    for part in row.split("|"):
        part = part.strip()
        left = part.startswith(":")
        right = part.endswith(":") and len(part) > 1
        inner = part[1 if left else 0 : len(part) - 1 if right else len(part)]
        if not inner or any(c != "-" for c in inner):
            return None
        if left and right:
            alignments.append("center")
        elif left:
            alignments.append("left")
        elif right:
            alignments.append("right")
        else:
            alignments.append(None)
    return tuple(alignments)


class _Cell:
    """Tokens of one cell plus the offset to anchor an empty cell at."""

    __slots__ = ("tokens", "anchor", "col")

    def __init__(self, anchor: int, col: int) -> None:
        self.tokens: list[Token] = []
        self.anchor = anchor
        self.col = col


def split_cells(line: Line) -> list[_Cell] | None:
    """Split a row on unescaped pipes.

    Leading and trailing pipes are optional. Escaped pipes are TEXT tokens,
    so they never split. Returns None if the line has no pipe.
    """
    tokens = line.content
    while tokens and tokens[-1].type is TokenType.WHITESPACE:
        tokens = tokens[:-1]
    if not tokens or not any(t.is_delimiter("|") for t in tokens):
        return None

    cells = [_Cell(tokens[0].start, tokens[0].col)]
    for token in tokens:
        if token.is_delimiter("|"):
            for k in range(token.run_length):
                cells.append(_Cell(token.start + k + 1, token.col + k + 1))
        else:
            cells[-1].tokens.append(token)

    if tokens[0].is_delimiter("|"):
        cells.pop(0)
    if tokens[-1].is_delimiter("|"):
        cells.pop()
    return cells or None


class TableParsingMixin:
    """Mixin for GFM table parsing.

    Required Host Attributes:
        - _diagnostics: list[Diagnostic]

    Required Host Methods:
        - _parse_inline(lines, depth) -> tuple[Inline, ...]
        - _containers_allowed(cursor) -> bool

    """

    _diagnostics: list[Diagnostic]

    def _table_starts_at(self, cursor: BlockCursor, offset: int) -> bool:
        """Whether a header row at ``offset`` is followed by a matching delimiter row."""
        header = cursor.peek(offset)
        delimiter = cursor.peek(offset + 1)
        if header is None or delimiter is None or header.is_blank:
            return False
        first = header.first
        if first is None or first.type is TokenType.TABLE_DELIMITER:
            return False
        alignments = self._delimiter_alignments(delimiter)
        if alignments is None:
            return False
        cells = split_cells(header)
        return cells is not None and len(cells) == len(alignments)

    def _delimiter_alignments(self, line: Line) -> tuple[Alignment, ...] | None:
        first = line.first
        if first is None or first.type is not TokenType.TABLE_DELIMITER:
            return None
        if line.indent > MAX_BLOCK_INDENT:
            return None
        return parse_delimiter_row(first)

    def _report_malformed_table(self, line: Line) -> None:
        self._diagnostics.append(
            Diagnostic.warning(
                DiagnosticKind.MALFORMED_TABLE,
                "table row has no matching delimiter row; parsed as a paragraph",
                line.span,
            )
        )

    def _on_table(self, cursor: BlockCursor) -> BlockState:
        header = cursor.advance()
        delimiter = cursor.advance()
        alignments = self._delimiter_alignments(delimiter)
        assert alignments is not None
        containers = self._containers_allowed(cursor)

        rows = [self._make_row(header, alignments, True, cursor.depth)]
        last = header
        while (line := cursor.current) is not None:
            if line.is_blank or not line.has_delimiter("|"):
                break
            if classify_line(line, containers) is not LineKind.TEXT:
                break
            rows.append(self._make_row(line, alignments, False, cursor.depth))
            last = line
            cursor.advance()

        end = max(last.end, delimiter.end)
        span = Span(header.span.start, end, header.lineno, header.span.col)
        cursor.blocks.append(
            Table(
                span=span,
                columns=len(alignments),
                alignments=alignments,
                children=tuple(rows),
            )
        )
        return BlockState.START

    def _make_row(
        self,
        line: Line,
        alignments: Sequence[Alignment],
        is_header: bool,
        depth: int,
    ) -> TableRow:
        cells = split_cells(line) or []
        columns = len(alignments)
        nodes: list[TableCell] = []
        last = line.tokens[-1] if line.tokens else None
        end_col = last.col + len(last.raw) if last is not None else 1
        for i in range(columns):
            align = alignments[i]
            if i >= len(cells):
                # Missing cells sit empty at the end of the row
                span = Span(line.end, line.end, line.lineno, end_col)
                nodes.append(TableCell(span=span, children=(), align=align))
                continue
            nodes.append(self._make_cell(cells[i], line, align, depth))
        return TableRow(span=line.span, children=tuple(nodes), is_header=is_header)

    def _make_cell(self, cell: _Cell, line: Line, align: Alignment, depth: int) -> TableCell:
        tokens = [t for t in cell.tokens]
        while tokens and tokens[0].type is TokenType.WHITESPACE:
            tokens.pop(0)
        while tokens and tokens[-1].type is TokenType.WHITESPACE:
            tokens.pop()
        if not tokens:
            span = Span(cell.anchor, cell.anchor, line.lineno, cell.col)
            return TableCell(span=span, children=(), align=align)

        span = Span(tokens[0].start, tokens[-1].end, line.lineno, tokens[0].col)
        content = Line(tuple(tokens), line.lineno, span.start, span.end)
        children: tuple[Inline, ...] = self._parse_inline((content,), depth)
        return TableCell(span=span, children=children, align=align)
