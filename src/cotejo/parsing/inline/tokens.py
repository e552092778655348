"""Typed inline pieces for Cotejo parser.

Inline parsing works on a flat list of pieces built from a block's lines:
lexer Tokens for the content itself, plus two NamedTuples for things the
lexer does not produce.

Thread Safety:
All pieces are immutable and safe to share across threads.

Usage:
from cotejo.parsing.inline.tokens import BreakToken, NodeToken, Piece

match piece:
    case BreakToken(hard=True):
        ...
    case NodeToken(node=node):
        ...

"""

from __future__ import annotations

from typing import NamedTuple

from cotejo.location import Span
from cotejo.nodes import Inline
from cotejo.tokens import Token


class BreakToken(NamedTuple):
    """Line ending inside a paragraph.

    Attributes:
        hard: True for a hard break (two trailing spaces or a backslash)
        marker: Source text removed from the end of the line (trailing
            whitespace, or the backslash); code spans put it back
        span: From the marker to the end of the newline

    """

    hard: bool
    marker: str
    span: Span


class NodeToken(NamedTuple):
    """Already-built inline node (code span, link, image).

    Attributes:
        node: The inline AST node.

    """

    node: Inline


# PEP 695 type alias for everything in an inline piece list
type Piece = Token | BreakToken | NodeToken


__all__ = [
    "BreakToken",
    "NodeToken",
    "Piece",
]
