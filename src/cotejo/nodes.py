"""Typed AST nodes for Cotejo.

All AST nodes are frozen dataclasses with slots for:
- Type safety: IDE autocomplete, catch errors at dev time
- Immutability: Safe sharing across threads and workers
- Ownership: every node owns its text; nothing points into the source buffer
- Pattern matching: Python 3.10+ match statements work naturally

Node Hierarchy:
Node (base)
├── Block (block-level elements)
│   ├── Document
│   ├── FrontMatter
│   ├── Heading
│   ├── Paragraph
│   ├── List
│   ├── ListItem
│   ├── BlockQuote
│   ├── CodeBlock
│   ├── Table / TableRow / TableCell
│   └── ThematicBreak
└── Inline (inline elements)
    ├── Text
    ├── Emphasis (strong or not)
    ├── Link
    ├── Image
    ├── InlineCode
    ├── SoftBreak
    └── LineBreak

Container nodes keep their children in a ``children`` tuple, so the tree is
acyclic and single-owner by construction.

Thread Safety:
All nodes are frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import ClassVar, Literal

from cotejo.diagnostics import Diagnostic
from cotejo.location import Span


class NodeKind(Enum):
    """Stable identifiers for node kinds.

    Filetypes list the kinds they permit at the top level of a document.

    """

    DOCUMENT = "document"
    FRONT_MATTER = "front_matter"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    LIST = "list"
    LIST_ITEM = "list_item"
    BLOCK_QUOTE = "block_quote"
    CODE_BLOCK = "code_block"
    TABLE = "table"
    TABLE_ROW = "table_row"
    TABLE_CELL = "table_cell"
    THEMATIC_BREAK = "thematic_break"
    EMPHASIS = "emphasis"
    LINK = "link"
    IMAGE = "image"
    INLINE_CODE = "inline_code"
    TEXT = "text"
    SOFT_BREAK = "soft_break"
    LINE_BREAK = "line_break"


# PEP 695 type alias for decoded front-matter values
type FieldValue = str | int | float | bool | date | tuple[str, ...] | NestedValue

type Alignment = Literal["left", "center", "right"] | None


# =============================================================================
# Base Node
# =============================================================================


@dataclass(frozen=True, slots=True)
class Node:
    """Base class for all AST nodes.

    All nodes track their source span for diagnostics.

    """

    kind: ClassVar[NodeKind]

    span: Span


# =============================================================================
# Inline Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class Text(Node):
    """Plain text content.

    The most common inline node, representing literal text.

    """

    kind: ClassVar[NodeKind] = NodeKind.TEXT

    content: str


@dataclass(frozen=True, slots=True)
class Emphasis(Node):
    """Emphasized or strong text.

    Markdown: *text* / _text_ (strong=False), **text** / __text__ (strong=True)

    """

    kind: ClassVar[NodeKind] = NodeKind.EMPHASIS

    children: tuple[Inline, ...]
    strong: bool = False


@dataclass(frozen=True, slots=True)
class Link(Node):
    """Hyperlink.

    Markdown: [text](target "title")

    """

    kind: ClassVar[NodeKind] = NodeKind.LINK

    target: str
    title: str | None
    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class Image(Node):
    """Image.

    Markdown: ![alt](target "title")

    """

    kind: ClassVar[NodeKind] = NodeKind.IMAGE

    target: str
    alt: str
    title: str | None = None


@dataclass(frozen=True, slots=True)
class InlineCode(Node):
    """Inline code.

    Markdown: `code`

    """

    kind: ClassVar[NodeKind] = NodeKind.INLINE_CODE

    code: str


@dataclass(frozen=True, slots=True)
class SoftBreak(Node):
    """Soft line break (single newline in a paragraph)."""

    kind: ClassVar[NodeKind] = NodeKind.SOFT_BREAK


@dataclass(frozen=True, slots=True)
class LineBreak(Node):
    """Hard line break.

    Markdown: ``\\`` at end of line or two trailing spaces

    """

    kind: ClassVar[NodeKind] = NodeKind.LINE_BREAK


# PEP 695 type alias for inline elements
type Inline = Text | Emphasis | Link | Image | InlineCode | SoftBreak | LineBreak


# =============================================================================
# Block Nodes
# =============================================================================


@dataclass(frozen=True, slots=True)
class NestedValue:
    """A front-matter mapping or nested list, kept as flow-style YAML.

    No schema field type accepts one; it is carried so the entry can be
    reported instead of discarding the whole block.
    """

    kind: str  # "mapping", "list" or the YAML value's type name
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True, slots=True)
class FrontMatterField:
    """One decoded front-matter entry and the span of its key line."""

    key: str
    value: FieldValue
    span: Span


@dataclass(frozen=True, slots=True)
class FrontMatter(Node):
    """Front-matter block.

    Markdown:
        ---
        title: Example
        ---

    Fields are empty when the block could not be decoded.

    """

    kind: ClassVar[NodeKind] = NodeKind.FRONT_MATTER

    fields: tuple[FrontMatterField, ...]
    raw: str = ""

    def get(self, key: str) -> FrontMatterField | None:
        """Find a field by key."""
        for entry in self.fields:
            if entry.key == key:
                return entry
        return None


@dataclass(frozen=True, slots=True)
class Heading(Node):
    """ATX heading.

    Markdown: # Heading

    ``identifier`` is the explicit ``{#id}`` suffix when present, otherwise
    the slug of the heading text.

    """

    kind: ClassVar[NodeKind] = NodeKind.HEADING

    level: Literal[1, 2, 3, 4, 5, 6]
    children: tuple[Inline, ...]
    identifier: str = ""
    explicit_id: bool = False


@dataclass(frozen=True, slots=True)
class Paragraph(Node):
    """Paragraph block.

    Markdown: Text separated by blank lines

    """

    kind: ClassVar[NodeKind] = NodeKind.PARAGRAPH

    children: tuple[Inline, ...]


@dataclass(frozen=True, slots=True)
class CodeBlock(Node):
    """Fenced code block.

    Markdown: ```python ... ```

    The code is copied out of the source, so the node is self-contained.

    """

    kind: ClassVar[NodeKind] = NodeKind.CODE_BLOCK

    code: str
    language: str | None = None
    fence: str = "```"
    closed: bool = True


@dataclass(frozen=True, slots=True)
class BlockQuote(Node):
    """Block quote.

    Markdown: > quoted text

    """

    kind: ClassVar[NodeKind] = NodeKind.BLOCK_QUOTE

    children: tuple[Block, ...]


@dataclass(frozen=True, slots=True)
class ListItem(Node):
    """List item.

    Markdown: - item or 1. item

    """

    kind: ClassVar[NodeKind] = NodeKind.LIST_ITEM

    children: tuple[Block, ...]
    checked: bool | None = None  # For task lists: True/False/None


@dataclass(frozen=True, slots=True)
class List(Node):
    """Ordered or unordered list."""

    kind: ClassVar[NodeKind] = NodeKind.LIST

    children: tuple[ListItem, ...]
    ordered: bool = False
    start: int = 1  # Starting number for ordered lists
    tight: bool = True  # Tight vs loose list


@dataclass(frozen=True, slots=True)
class ThematicBreak(Node):
    """Thematic break.

    Markdown: --- or *** or ___

    """

    kind: ClassVar[NodeKind] = NodeKind.THEMATIC_BREAK


@dataclass(frozen=True, slots=True)
class TableCell(Node):
    """Table cell.

    Markdown: | cell content |

    """

    kind: ClassVar[NodeKind] = NodeKind.TABLE_CELL

    children: tuple[Inline, ...]
    align: Alignment = None


@dataclass(frozen=True, slots=True)
class TableRow(Node):
    """Table row.

    Markdown: | cell1 | cell2 |

    """

    kind: ClassVar[NodeKind] = NodeKind.TABLE_ROW

    children: tuple[TableCell, ...]
    is_header: bool = False


@dataclass(frozen=True, slots=True)
class Table(Node):
    """Table (GFM-style).

    Markdown:
        | A | B |
        |---|---|
        | 1 | 2 |

    The first row is the header row.

    """

    kind: ClassVar[NodeKind] = NodeKind.TABLE

    columns: int
    alignments: tuple[Alignment, ...]
    children: tuple[TableRow, ...]

    @property
    def header(self) -> TableRow:
        return self.children[0]

    @property
    def body(self) -> tuple[TableRow, ...]:
        return self.children[1:]


@dataclass(frozen=True, slots=True)
class Document(Node):
    """Root document node.

    Contains all top-level blocks in the document, the resolved filetype, the
    decoded front-matter mapping and any diagnostics recorded while parsing.

    """

    kind: ClassVar[NodeKind] = NodeKind.DOCUMENT

    children: tuple[Block, ...]
    filetype: str = ""
    front_matter: Mapping[str, FieldValue] = field(
        default_factory=lambda: MappingProxyType({})
    )
    diagnostics: tuple[Diagnostic, ...] = ()
    source_file: str | None = None

    @property
    def front_matter_node(self) -> FrontMatter | None:
        """The FrontMatter block, if the document starts with one."""
        if self.children and isinstance(self.children[0], FrontMatter):
            return self.children[0]
        return None


# PEP 695 type alias for block elements
type Block = (
    Document
    | FrontMatter
    | Heading
    | Paragraph
    | CodeBlock
    | BlockQuote
    | List
    | ListItem
    | ThematicBreak
    | Table
    | TableRow
    | TableCell
)
