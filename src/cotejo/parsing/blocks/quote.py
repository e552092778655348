"""Block quote parsing for Cotejo parser.

A block quote is a run of ``>``-prefixed lines. The prefix (and one
following space) is stripped and the content is parsed by a nested block
machine. Plain text lines directly after quoted text continue the quote
lazily.
"""

from __future__ import annotations

from cotejo.location import Span
from cotejo.nodes import BlockQuote
from cotejo.parsing.blocks.classify import MAX_BLOCK_INDENT, LineKind, classify_line
from cotejo.parsing.blocks.core import BlockCursor, BlockState
from cotejo.parsing.lines import Line

# Stripped lines after which an unprefixed text line continues the quote
_LAZY_KINDS = frozenset({LineKind.TEXT, LineKind.LIST_ITEM, LineKind.BLOCK_QUOTE})


def strip_quote_prefix(line: Line) -> Line | None:
    """Strip ``>`` and one optional space, or return None if not quoted."""
    if line.indent > MAX_BLOCK_INDENT:
        return None
    content = line.lstrip()
    if not content.tokens or not content.tokens[0].is_delimiter(">"):
        return None
    return content.drop(1).strip_indent(1)


class QuoteParsingMixin:
    """Mixin for block quote parsing.

    Required Host Methods:
        - _parse_blocks(lines, depth) -> tuple[Block, ...]
        - _containers_allowed(cursor) -> bool
        - _table_starts_at(cursor, offset) -> bool

    """

    def _on_block_quote(self, cursor: BlockCursor) -> BlockState:
        first = cursor.current
        assert first is not None
        lines: list[Line] = []
        last: Line = first
        lazy_ok = False
        containers = self._containers_allowed(cursor)

        while (line := cursor.current) is not None:
            stripped = strip_quote_prefix(line)
            if stripped is not None:
                lines.append(stripped)
                last = line
                lazy_ok = not stripped.is_blank and classify_line(stripped) in _LAZY_KINDS
                cursor.advance()
                continue
            if (
                lazy_ok
                and classify_line(line, containers) is LineKind.TEXT
                and not self._table_starts_at(cursor, 0)
            ):
                lines.append(line.lstrip())
                last = line
                cursor.advance()
                continue
            break

        children = self._parse_blocks(lines, cursor.depth + 1)
        span = Span(first.span.start, last.end, first.lineno, first.span.col)
        cursor.blocks.append(BlockQuote(span=span, children=children))
        return BlockState.START
