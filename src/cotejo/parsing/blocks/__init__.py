"""Block parsing subsystem for Cotejo parser.

Provides mixins for parsing block-level content:
- Headings (ATX) and thematic breaks
- Fenced code blocks
- Paragraphs
- Block quotes
- Lists (ordered, unordered, task lists)
- Tables (GFM)
- Front matter

Architecture:
Block parsing is an explicit state machine split into logical modules:
- classify: What a single line looks like
- core: The machine, plus headings, paragraphs and code fences
- quote / list: Container blocks, parsed by recursing into the machine
- table: GFM table parsing
- front_matter: Leading YAML block

"""

from cotejo.parsing.blocks.core import BlockCursor, BlockParsingCoreMixin, BlockState
from cotejo.parsing.blocks.front_matter import FrontMatterParsingMixin
from cotejo.parsing.blocks.list import ListParsingMixin
from cotejo.parsing.blocks.quote import QuoteParsingMixin
from cotejo.parsing.blocks.table import TableParsingMixin


class BlockParsingMixin(
    BlockParsingCoreMixin,
    FrontMatterParsingMixin,
    QuoteParsingMixin,
    ListParsingMixin,
    TableParsingMixin,
):
    """Combined block parsing mixin.

    Combines all block parsing functionality into a single mixin
    that can be inherited by the Parser class.

    Required Host Attributes:
        - _diagnostics: list[Diagnostic]
        - _max_nesting: int
        - _task_lists: bool

    Required Host Methods:
        - _parse_inline(lines, depth) -> tuple[Inline, ...]
        - _resolve_filetype(name) -> Filetype | None

    """


__all__ = [
    "BlockCursor",
    "BlockParsingCoreMixin",
    "BlockParsingMixin",
    "BlockState",
    "FrontMatterParsingMixin",
    "ListParsingMixin",
    "QuoteParsingMixin",
    "TableParsingMixin",
]
