"""Core block parsing for Cotejo parser.

Block parsing is an explicit finite-state machine. ``_parse_blocks`` runs one
machine over a sequence of Lines; container blocks (block quotes, list items)
strip their prefixes and run a fresh machine over their content lines.

States and transitions:

    START            classify the current line and pick the next state;
                     headings and thematic breaks are emitted directly
    IN_PARAGRAPH     collect lines until a blank line or an interrupting
                     block start
    IN_LIST          see ListParsingMixin
    IN_BLOCK_QUOTE   see QuoteParsingMixin
    IN_CODE_FENCE    capture lines verbatim until the closing fence
    IN_TABLE         see TableParsingMixin
    IN_FRONT_MATTER  see FrontMatterParsingMixin
    DONE             input exhausted; open constructs have been closed

Every handler consumes at least one line or moves to DONE, so parsing is
linear in the number of lines per nesting level.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import TYPE_CHECKING

from cotejo.diagnostics import Diagnostic, DiagnosticKind
from cotejo.location import Span
from cotejo.nodes import Block, CodeBlock, Heading, Paragraph, ThematicBreak
from cotejo.parsing.blocks.classify import (
    LineKind,
    classify_line,
    heading_level,
    list_marker,
)
from cotejo.parsing.lines import Line
from cotejo.text import extract_text
from cotejo.tokens import Token, TokenType
from cotejo.utils.logger import get_logger
from cotejo.utils.text import slugify

if TYPE_CHECKING:
    from cotejo.nodes import Inline

logger = get_logger(__name__)


class BlockState(Enum):
    """States of the block parsing machine."""

    START = auto()
    IN_PARAGRAPH = auto()
    IN_LIST = auto()
    IN_BLOCK_QUOTE = auto()
    IN_CODE_FENCE = auto()
    IN_TABLE = auto()
    IN_FRONT_MATTER = auto()
    DONE = auto()


@dataclass(slots=True)
class BlockCursor:
    """Position of one block machine in its lines, and the blocks emitted."""

    lines: Sequence[Line]
    depth: int = 0
    pos: int = 0
    blocks: list[Block] = field(default_factory=list)

    @property
    def current(self) -> Line | None:
        return self.lines[self.pos] if self.pos < len(self.lines) else None

    def peek(self, offset: int = 1) -> Line | None:
        index = self.pos + offset
        return self.lines[index] if index < len(self.lines) else None

    def advance(self) -> Line:
        line = self.lines[self.pos]
        self.pos += 1
        return line

    @property
    def input_end(self) -> int:
        """Where this machine's input ends.

        At the top level that is the end of the source, final newline
        included; nested machines end at their last line's content.
        """
        if not self.lines:
            return 0
        last = self.lines[-1]
        if self.depth == 0 and last.newline is not None:
            return last.newline.end
        return last.end


def _extract_explicit_id(tokens: Sequence[Token]) -> tuple[Sequence[Token], str | None]:
    """Split a trailing ``{#id}`` off heading content tokens.

    The ``{#id}`` must end the content and be preceded by whitespace. The ID
    must start with a letter and contain only letters, digits, hyphens and
    underscores.

    Returns:
        Tuple of (content tokens without the id, explicit id or None)
    """
    for i in range(len(tokens) - 1, 0, -1):
        token = tokens[i]
        if token.type is TokenType.TEXT and token.value == "{" and not token.escaped:
            break
    else:
        return tokens, None

    if tokens[i - 1].type is not TokenType.WHITESPACE:
        return tokens, None
    if i + 1 >= len(tokens) or not tokens[i + 1].is_delimiter("#", 1):
        return tokens, None

    tail = tokens[i + 2 :]
    if any(t.escaped for t in tail):
        return tokens, None
    raw = "".join(t.value for t in tail)
    if not raw.endswith("}"):
        return tokens, None
    explicit_id = raw[:-1]
    if not explicit_id or not explicit_id[0].isalpha():
        return tokens, None
    if not all(c.isalnum() or c in "-_" for c in explicit_id):
        return tokens, None
    return _rstrip(tokens[: i - 1]), explicit_id


def _rstrip(tokens: Sequence[Token]) -> Sequence[Token]:
    end = len(tokens)
    while end and tokens[end - 1].type is TokenType.WHITESPACE:
        end -= 1
    return tokens[:end]


class BlockParsingCoreMixin:
    """Block machine driver and the basic blocks.

    Required Host Attributes:
        - _diagnostics: list[Diagnostic]
        - _max_nesting: int

    Required Host Methods:
        - _parse_inline(lines, depth) -> tuple[Inline, ...]
        - _on_list(cursor) -> BlockState
        - _on_block_quote(cursor) -> BlockState
        - _on_table(cursor) -> BlockState
        - _on_front_matter(cursor) -> BlockState
        - _table_starts_at(cursor, offset) -> bool
        - _report_malformed_table(line) -> None

    """

    _diagnostics: list[Diagnostic]
    _max_nesting: int

    def _parse_blocks(
        self,
        lines: Sequence[Line],
        depth: int = 0,
        front_matter: bool = False,
    ) -> tuple[Block, ...]:
        """Run one block machine over ``lines``.

        Args:
            lines: Content lines (container prefixes already stripped)
            depth: Container nesting depth of these lines
            front_matter: Whether a leading front-matter fence is recognized

        Returns:
            The blocks found, in source order
        """
        cursor = BlockCursor(lines, depth)
        state = BlockState.START
        if front_matter and lines and classify_line(lines[0]) is LineKind.FRONT_MATTER_FENCE:
            state = BlockState.IN_FRONT_MATTER

        while state is not BlockState.DONE:
            state = self._step(state, cursor)
        return tuple(cursor.blocks)

    def _step(self, state: BlockState, cursor: BlockCursor) -> BlockState:
        """Run the handler for ``state`` and return the next state."""
        match state:
            case BlockState.START:
                return self._on_start(cursor)
            case BlockState.IN_PARAGRAPH:
                return self._on_paragraph(cursor)
            case BlockState.IN_LIST:
                return self._on_list(cursor)
            case BlockState.IN_BLOCK_QUOTE:
                return self._on_block_quote(cursor)
            case BlockState.IN_CODE_FENCE:
                return self._on_code_fence(cursor)
            case BlockState.IN_TABLE:
                return self._on_table(cursor)
            case BlockState.IN_FRONT_MATTER:
                return self._on_front_matter(cursor)
        return BlockState.DONE

    def _containers_allowed(self, cursor: BlockCursor) -> bool:
        """Block quotes and lists nest only up to the configured depth."""
        return cursor.depth < self._max_nesting

    # =========================================================================
    # START
    # =========================================================================

    def _on_start(self, cursor: BlockCursor) -> BlockState:
        line = cursor.current
        if line is None:
            return BlockState.DONE

        match classify_line(line, self._containers_allowed(cursor)):
            case LineKind.BLANK:
                cursor.advance()
                return BlockState.START
            case LineKind.HEADING:
                cursor.blocks.append(self._parse_heading(cursor.advance(), cursor.depth))
                return BlockState.START
            case LineKind.THEMATIC_BREAK | LineKind.FRONT_MATTER_FENCE:
                line = cursor.advance()
                cursor.blocks.append(ThematicBreak(span=line.span))
                return BlockState.START
            case LineKind.CODE_FENCE:
                return BlockState.IN_CODE_FENCE
            case LineKind.BLOCK_QUOTE:
                return BlockState.IN_BLOCK_QUOTE
            case LineKind.LIST_ITEM:
                return BlockState.IN_LIST

        if self._table_starts_at(cursor, 0):
            return BlockState.IN_TABLE
        first = line.first
        if first is not None and (
            first.is_delimiter("|")
            or (first.type is TokenType.TABLE_DELIMITER and first.value.startswith("|"))
        ):
            self._report_malformed_table(line)
        return BlockState.IN_PARAGRAPH

    # =========================================================================
    # Paragraph
    # =========================================================================

    def _interrupts_paragraph(self, cursor: BlockCursor, offset: int) -> bool:
        """Whether the line at ``offset`` ends an open paragraph."""
        line = cursor.peek(offset)
        if line is None:
            return True
        kind = classify_line(line, self._containers_allowed(cursor))
        match kind:
            case LineKind.BLANK | LineKind.HEADING | LineKind.THEMATIC_BREAK:
                return True
            case LineKind.CODE_FENCE | LineKind.BLOCK_QUOTE:
                return True
            case LineKind.LIST_ITEM:
                marker = list_marker(line)
                assert marker is not None
                # Only bullets and lists starting at 1 interrupt, never empty items
                return not marker.empty and (not marker.ordered or marker.number == 1)
        return self._table_starts_at(cursor, offset)

    def _on_paragraph(self, cursor: BlockCursor) -> BlockState:
        lines = [cursor.advance()]
        while cursor.current is not None and not self._interrupts_paragraph(cursor, 0):
            lines.append(cursor.advance())
        cursor.blocks.append(self._make_paragraph(lines, cursor.depth))
        return BlockState.START

    def _make_paragraph(self, lines: Sequence[Line], depth: int) -> Paragraph:
        span = Span(lines[0].span.start, lines[-1].end, lines[0].lineno, lines[0].span.col)
        return Paragraph(span=span, children=self._parse_inline(lines, depth))

    # =========================================================================
    # Heading
    # =========================================================================

    def _parse_heading(self, line: Line, depth: int) -> Heading:
        """Parse an ATX heading line.

        Closing ``#`` sequences are stripped. A trailing ``{#id}`` becomes the
        identifier; otherwise the identifier is the slug of the heading text.
        """
        level = heading_level(line)
        assert level is not None
        tokens: Sequence[Token] = _rstrip(line.content[1:])

        # Closing sequence: a run of '#' preceded by whitespace (or alone)
        if tokens and tokens[-1].is_delimiter("#"):
            if len(tokens) == 1 or tokens[-2].type is TokenType.WHITESPACE:
                tokens = _rstrip(tokens[:-1])

        tokens, explicit_id = _extract_explicit_id(tokens)
        content_line = Line(
            tuple(tokens),
            line.lineno,
            tokens[0].start if tokens else line.end,
            tokens[-1].end if tokens else line.end,
        )
        children: tuple[Inline, ...] = ()
        if tokens:
            children = self._parse_inline((content_line,), depth)

        span = line.span
        provisional = Heading(span=span, level=level, children=children)  # type: ignore[arg-type]
        identifier = explicit_id or slugify(extract_text(provisional))
        return Heading(
            span=span,
            level=level,  # type: ignore[arg-type]
            children=children,
            identifier=identifier,
            explicit_id=explicit_id is not None,
        )

    # =========================================================================
    # Code fence
    # =========================================================================

    def _on_code_fence(self, cursor: BlockCursor) -> BlockState:
        """Capture a fenced code block.

        Content is copied verbatim, minus up to the opener's indentation.
        The fence closes on a line holding only a run of the same character
        at least as long as the opener. An unclosed fence runs to the end of
        its input and is reported.
        """
        opener = cursor.advance()
        fence = opener.first
        assert fence is not None
        fence_indent = opener.indent
        info = "".join(t.raw for t in opener.content[1:]).strip()
        language = info.split()[0] if info else None

        content: list[str] = []
        closer: Line | None = None
        while (line := cursor.current) is not None:
            cursor.advance()
            if self._closes_fence(line, fence):
                closer = line
                break
            content.append(line.strip_indent(fence_indent).raw())

        code = "".join(f"{text}\n" for text in content)
        if closer is not None:
            end = closer.end
        else:
            end = max(cursor.input_end, opener.end)
            message = f"code fence opened with {fence.value!r} is never closed"
            self._diagnostics.append(
                Diagnostic.error(DiagnosticKind.UNTERMINATED_CONSTRUCT, message, opener.span)
            )
            logger.debug("Unterminated code fence at %s", opener.span)

        span = Span(opener.span.start, end, opener.lineno, opener.span.col)
        cursor.blocks.append(
            CodeBlock(
                span=span,
                code=code,
                language=language,
                fence=fence.value,
                closed=closer is not None,
            )
        )
        return BlockState.START

    def _closes_fence(self, line: Line, fence: Token) -> bool:
        first = line.first
        if first is None or line.indent > 3:
            return False
        if first.type not in (TokenType.CODE_FENCE, TokenType.DELIMITER):
            return False
        if first.char != fence.char or first.run_length < fence.run_length:
            return False
        return all(not t.value.strip() for t in line.content[1:])
