"""Inline parsing subsystem for Cotejo parser.

Provides mixins for parsing inline content:
- Code spans (`)
- Links and images
- Emphasis and strong (*, _)
- Soft and hard line breaks

Architecture:
Uses the CommonMark delimiter algorithm for emphasis parsing.
See: https://spec.commonmark.org/0.31.2/#emphasis-and-strong-emphasis

"""

from __future__ import annotations

from cotejo.parsing.inline.core import InlineParsingCoreMixin, flatten_lines
from cotejo.parsing.inline.emphasis import EmphasisMixin
from cotejo.parsing.inline.links import LinkParsingMixin, parse_destination
from cotejo.parsing.inline.tokens import BreakToken, NodeToken, Piece


class InlineParsingMixin(
    InlineParsingCoreMixin,
    LinkParsingMixin,
    EmphasisMixin,
):
    """Combined inline parsing mixin.

    Combines all inline parsing functionality into a single mixin
    that can be inherited by the Parser class.

    Required Host Attributes:
        - _max_nesting: int

    """

    pass


__all__ = [
    # Mixins
    "InlineParsingMixin",
    "InlineParsingCoreMixin",
    "EmphasisMixin",
    "LinkParsingMixin",
    # Helpers
    "flatten_lines",
    "parse_destination",
    # Pieces
    "BreakToken",
    "NodeToken",
    "Piece",
]
