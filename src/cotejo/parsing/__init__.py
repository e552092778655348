"""Parsing subsystem for Cotejo.

- lines: Line view over the lexer's token stream
- blocks: Block-level state machine (BlockParsingMixin)
- inline: Inline content (InlineParsingMixin)

"""

from cotejo.parsing.blocks import BlockParsingMixin
from cotejo.parsing.inline import InlineParsingMixin
from cotejo.parsing.lines import Line, build_lines

__all__ = [
    "BlockParsingMixin",
    "InlineParsingMixin",
    "Line",
    "build_lines",
]
