"""Emphasis parsing for Cotejo parser.

Implements the CommonMark delimiter algorithm for emphasis and strong
emphasis over a doubly linked list of inline items:

- Each ``*`` / ``_`` run is an item with a remaining count and its
  opening / closing ability.
- Closers are visited left to right. For each one, the nearest compatible
  opener is taken from a per-character stack; a ``floor`` per (char,
  can_open, count % 3) remembers how far down previous failed searches
  went, so the stacks are never rescanned.
- A match consumes one or two characters from each side and wraps the
  items between them into an Emphasis node.
- An opener whose match would enclose a node already nested to the limit
  is dropped along with every opener before that node; none of them can
  ever match without exceeding it.

Runs left over at the end are literal text.

Thread Safety:
All methods are stateless or use instance-local state only.
Safe for concurrent use when each parser instance is used by one thread.

"""

from __future__ import annotations

from collections.abc import Sequence

from cotejo.location import Span
from cotejo.nodes import Emphasis, Inline, LineBreak, SoftBreak, Text
from cotejo.parsing.charsets import (
    is_unicode_punctuation,
    is_unicode_whitespace,
)
from cotejo.parsing.inline.core import Flanking, is_emphasis_run
from cotejo.parsing.inline.tokens import BreakToken, NodeToken, Piece
from cotejo.tokens import Token


class _Item:
    """One entry of the emphasis list: text, an emphasis run, or a node."""

    __slots__ = (
        "text",
        "char",
        "count",
        "original",
        "can_open",
        "can_close",
        "start",
        "end",
        "lineno",
        "col",
        "node",
        "depth",
        "order",
        "prev",
        "next",
    )

    def __init__(
        self,
        text: str = "",
        start: int = 0,
        end: int = 0,
        lineno: int = 1,
        col: int = 1,
        node: Inline | None = None,
    ) -> None:
        self.text = text
        self.char = ""
        self.count = 0
        self.original = 0
        self.can_open = False
        self.can_close = False
        self.start = start
        self.end = end
        self.lineno = lineno
        self.col = col
        self.node = node
        self.depth = 0
        self.order = 0
        self.prev: _Item | None = None
        self.next: _Item | None = None

    @property
    def is_run(self) -> bool:
        return bool(self.char)

    def unlink(self) -> None:
        if self.prev is not None:
            self.prev.next = self.next
        if self.next is not None:
            self.next.prev = self.prev


def _build_items(pieces: Sequence[Piece], flanking: Flanking) -> tuple[_Item, list[_Item]]:
    """Link pieces into an item list.

    Returns:
        (head sentinel, emphasis runs in source order)
    """
    head = _Item()
    tail = head
    runs: list[_Item] = []
    for piece in pieces:
        match piece:
            case BreakToken(hard=hard, span=span):
                node: Inline = LineBreak(span=span) if hard else SoftBreak(span=span)
                item = _Item(node=node)
            case NodeToken(node=node):
                item = _Item(node=node)
            case Token():
                item = _Item(piece.value, piece.start, piece.end, piece.lineno, piece.col)
                if is_emphasis_run(piece):
                    item.char = piece.char
                    item.count = item.original = piece.run_length
                    item.can_open, item.can_close = flanking.get(piece.start, (False, False))
                    item.order = len(runs)
                    runs.append(item)
        tail.next = item
        item.prev = tail
        tail = item
    return head, runs


def _too_deep(first: _Item | None, stop: _Item | None, limit: int) -> _Item | None:
    """Last item from ``first`` up to ``stop`` nested ``limit`` or more deep."""
    found = None
    item = first
    while item is not None and item is not stop:
        if item.depth >= limit:
            found = item
        item = item.next
    return found


def _to_nodes(first: _Item | None, stop: _Item | None) -> tuple[tuple[Inline, ...], int]:
    """Turn items from ``first`` up to ``stop`` into inline nodes.

    Adjacent text (including unmatched runs) merges into one Text node.

    Returns:
        (nodes, deepest emphasis nesting among them)
    """
    nodes: list[Inline] = []
    depth = 0
    text: list[str] = []
    text_start: _Item | None = None
    text_end = 0

    def flush() -> None:
        if text_start is not None:
            span = Span(text_start.start, text_end, text_start.lineno, text_start.col)
            nodes.append(Text(span=span, content="".join(text)))
            text.clear()

    item = first
    while item is not None and item is not stop:
        if item.node is not None:
            flush()
            text_start = None
            nodes.append(item.node)
            depth = max(depth, item.depth)
        elif not item.is_run or item.count:
            if text_start is None:
                text_start = item
            text.append(item.char * item.count if item.is_run else item.text)
            text_end = item.end
        item = item.next
    flush()
    return tuple(nodes), depth


class EmphasisMixin:
    """Mixin for emphasis delimiter processing.

    Implements CommonMark flanking rules and delimiter matching algorithm.

    Required Host Attributes: None

    Required Host Methods: None

    """

    def _is_left_flanking(self, before: str, after: str) -> bool:
        """Check if delimiter run is left-flanking.

        Left-flanking: not followed by whitespace, and either:
        - not followed by punctuation, OR
        - preceded by whitespace or punctuation
        """
        if is_unicode_whitespace(after):
            return False
        if not is_unicode_punctuation(after):
            return True
        return is_unicode_whitespace(before) or is_unicode_punctuation(before)

    def _is_right_flanking(self, before: str, after: str) -> bool:
        """Check if delimiter run is right-flanking.

        Right-flanking: not preceded by whitespace, and either:
        - not preceded by punctuation, OR
        - followed by whitespace or punctuation
        """
        if is_unicode_whitespace(before):
            return False
        if not is_unicode_punctuation(before):
            return True
        return is_unicode_whitespace(after) or is_unicode_punctuation(after)

    def _process_emphasis(
        self,
        pieces: Sequence[Piece],
        flanking: Flanking,
        limit: int,
    ) -> tuple[Inline, ...]:
        """Match emphasis runs in ``pieces`` and build the inline nodes.

        Args:
            pieces: Inline pieces with code spans and links already built
            flanking: Opening / closing ability of each run, by offset
            limit: Deepest emphasis nesting allowed; deeper runs stay text
        """
        head, runs = _build_items(pieces, flanking)
        openers: dict[str, list[_Item]] = {"*": [], "_": []}
        floors: dict[tuple[str, bool, int], int] = {}

        def truncate(char: str, length: int) -> None:
            del openers[char][length:]
            for key, floor in floors.items():
                if key[0] == char and floor > length:
                    floors[key] = length

        def retire_before(item: _Item) -> None:
            # Openers before ``item`` would enclose it, so they stay text
            after = item.next
            while after is not None and not after.is_run:
                after = after.next
            bound = after.order if after is not None else len(runs)
            for char, stack in openers.items():
                dead = 0
                while dead < len(stack) and stack[dead].order < bound:
                    dead += 1
                del stack[:dead]
                for key, floor in floors.items():
                    if key[0] == char:
                        floors[key] = max(0, floor - dead)

        for closer in runs:
            while closer.count and closer.can_close:
                stack = openers[closer.char]
                key = (closer.char, closer.can_open, closer.original % 3)
                position = self._find_opener(closer, stack, floors.get(key, 0))
                if position is None:
                    floors[key] = len(stack)
                    break
                opener = stack[position]
                blocker = _too_deep(opener.next, closer, limit)
                if blocker is not None:
                    retire_before(blocker)
                    break
                self._wrap(opener, closer)
                # Runs between the pair can no longer open anything
                truncate(closer.char, position + 1)
                other = "_" if closer.char == "*" else "*"
                other_stack = openers[other]
                keep = len(other_stack)
                while keep and other_stack[keep - 1].order > opener.order:
                    keep -= 1
                truncate(other, keep)
                if not opener.count:
                    truncate(closer.char, position)

            if closer.count and closer.can_open:
                openers[closer.char].append(closer)

        nodes, _ = _to_nodes(head.next, None)
        return nodes

    def _find_opener(self, closer: _Item, stack: list[_Item], floor: int) -> int | None:
        """Index in ``stack`` of the nearest opener usable by ``closer``.

        Rule of 3: if either run can both open and close, the sum of their
        original lengths must not be a multiple of 3 unless both are.
        """
        for position in range(len(stack) - 1, min(floor, len(stack)) - 1, -1):
            opener = stack[position]
            if (opener.can_close or closer.can_open) and (
                (opener.original + closer.original) % 3 == 0
                and (opener.original % 3 or closer.original % 3)
            ):
                continue
            return position
        return None

    def _wrap(self, opener: _Item, closer: _Item) -> None:
        """Wrap the items between ``opener`` and ``closer`` into Emphasis."""
        children, depth = _to_nodes(opener.next, closer)

        use = 2 if opener.count >= 2 and closer.count >= 2 else 1
        opener.count -= use
        opener.end -= use
        closer.count -= use
        start = opener.end
        end = closer.start + use
        span = Span(start, end, opener.lineno, opener.col + opener.count)
        closer.start += use
        closer.col += use

        item = _Item(node=Emphasis(span=span, children=children, strong=use == 2))
        item.depth = depth + 1
        item.prev = opener
        item.next = closer
        opener.next = item
        closer.prev = item

        if not opener.count:
            opener.unlink()
        if not closer.count:
            closer.unlink()


__all__ = ["EmphasisMixin"]
