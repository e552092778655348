"""List parsing for Cotejo parser.

Each item's lines are collected with the item's content indentation
stripped, then parsed by a nested block machine. Rules:

- A line indented to the item's content column continues the item.
- A line with less indentation closes the item. A marker of the same list
  type starts the next item; anything else ends the list.
- After a blank line, only indented content or a new item keeps the list
  open. A new item after a blank line makes the list loose.
- Unindented text directly after item text continues it lazily.
- Task-list checkboxes are recognized when the filetype enables them.
"""

from __future__ import annotations

from collections.abc import Sequence

from cotejo.location import Span
from cotejo.nodes import Block, List, ListItem
from cotejo.parsing.blocks.classify import (
    LineKind,
    ListMarker,
    classify_line,
    list_marker,
    task_marker,
)
from cotejo.parsing.blocks.core import BlockCursor, BlockState
from cotejo.parsing.lines import Line

# Item lines after which an unindented text line continues the item lazily
_LAZY_KINDS = frozenset({LineKind.TEXT, LineKind.LIST_ITEM, LineKind.BLOCK_QUOTE})


def _has_blank_between(children: Sequence[Block], lines: Sequence[Line]) -> bool:
    """Whether a blank line separates two consecutive child blocks."""
    blanks = [line.start for line in lines if line.is_blank]
    if not blanks or len(children) < 2:
        return False
    for before, after in zip(children, children[1:]):
        if any(before.span.end <= offset < after.span.start for offset in blanks):
            return True
    return False


class ListParsingMixin:
    """Mixin for ordered and unordered list parsing.

    Required Host Attributes:
        - _task_lists: bool

    Required Host Methods:
        - _parse_blocks(lines, depth) -> tuple[Block, ...]
        - _containers_allowed(cursor) -> bool
        - _table_starts_at(cursor, offset) -> bool

    """

    _task_lists: bool

    def _on_list(self, cursor: BlockCursor) -> BlockState:
        first_line = cursor.current
        assert first_line is not None
        first_marker = list_marker(first_line)
        assert first_marker is not None

        marker = first_marker
        items: list[ListItem] = []
        loose = False
        containers = self._containers_allowed(cursor)

        while True:
            item, trailing_blank, internal_blank = self._parse_item(cursor, marker)
            items.append(item)
            loose = loose or internal_blank

            line = cursor.current
            if line is None or classify_line(line, containers) is not LineKind.LIST_ITEM:
                break
            next_marker = list_marker(line)
            if next_marker is None or not first_marker.same_list(next_marker):
                break
            if trailing_blank:
                loose = True
            marker = next_marker

        span = Span(
            items[0].span.start, items[-1].span.end, items[0].span.lineno, items[0].span.col
        )
        cursor.blocks.append(
            List(
                span=span,
                children=tuple(items),
                ordered=first_marker.ordered,
                start=first_marker.number,
                tight=not loose,
            )
        )
        return BlockState.START

    def _parse_item(self, cursor: BlockCursor, marker: ListMarker) -> tuple[ListItem, bool, bool]:
        """Collect and parse one list item.

        Returns:
            (item, whether blank lines followed it, whether a blank line
            separates two of its child blocks)
        """
        marker_line = cursor.advance()
        first = marker_line.drop(marker.consumed)
        checked: bool | None = None
        if self._task_lists:
            task = task_marker(first)
            if task is not None:
                checked, consumed = task
                first = first.drop(consumed)

        lines: list[Line] = [first] if first.tokens else []
        pending_blanks: list[Line] = []
        containers = self._containers_allowed(cursor)

        while (line := cursor.current) is not None:
            if line.is_blank:
                pending_blanks.append(line.strip_indent(marker.content_indent))
                cursor.advance()
                continue
            if line.indent >= marker.content_indent:
                lines.extend(pending_blanks)
                pending_blanks.clear()
                lines.append(line.strip_indent(marker.content_indent))
                cursor.advance()
                continue
            if pending_blanks:
                break
            if (
                lines
                and classify_line(lines[-1]) in _LAZY_KINDS
                and classify_line(line, containers) is LineKind.TEXT
                and not self._table_starts_at(cursor, 0)
            ):
                lines.append(line.lstrip())
                cursor.advance()
                continue
            break

        children = self._parse_blocks(lines, cursor.depth + 1)
        start = marker_line.span
        end = lines[-1].end if lines else marker_line.end
        span = Span(start.start, max(end, start.end), start.lineno, start.col)
        item = ListItem(span=span, children=children, checked=checked)
        return item, bool(pending_blanks), _has_blank_between(children, lines)
