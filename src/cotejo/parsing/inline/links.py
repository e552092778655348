"""Link and image parsing for Cotejo parser.

Handles inline links and images:
- [text](target)
- [text](target "title")
- [text](<target with spaces>)
- ![alt](src "title")

Brackets are matched with a stack as the pieces are scanned, so the
innermost link is built first. Links cannot contain other links: once a
link is built, every ``[`` still open before it is literal text. Images
may contain links.

Thread Safety:
All methods are stateless or use instance-local state only.
Safe for concurrent use when each parser instance is used by one thread.

"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cotejo.location import Span
from cotejo.nodes import Image, Link
from cotejo.parsing.inline.tokens import BreakToken, NodeToken, Piece
from cotejo.text import extract_text
from cotejo.tokens import Token

if TYPE_CHECKING:
    from cotejo.nodes import Inline
    from cotejo.parsing.inline.core import Flanking

_TITLE_QUOTES = {'"': '"', "'": "'", "(": ")"}


@dataclass(slots=True)
class _Bracket:
    """An open ``[`` (or ``![``) waiting for its ``]``."""

    index: int  # position of the opener in the output list
    token: Token
    image: bool
    active: bool = True


def _is_marker(piece: Piece, char: str) -> bool:
    return isinstance(piece, Token) and piece.is_delimiter(char)


def _match_parens(pieces: Sequence[Piece]) -> dict[int, int]:
    """Index of the ``)`` closing each ``(``; unbalanced parens are skipped."""
    matches: dict[int, int] = {}
    stack: list[int] = []
    for index, piece in enumerate(pieces):
        if _is_marker(piece, "("):
            stack.append(index)
        elif _is_marker(piece, ")") and stack:
            matches[stack.pop()] = index
    return matches


def parse_destination(pieces: Sequence[Piece]) -> tuple[str, str | None] | None:
    """Parse the inside of ``( ... )`` into (target, title).

    The target is either ``<...>`` (spaces allowed) or runs up to the first
    whitespace. An optional title follows in double quotes, single quotes or
    parentheses. Anything else after the target means this is not a link.
    """
    parts: list[str] = []
    for piece in pieces:
        match piece:
            case BreakToken():
                parts.append("\n")
            case NodeToken():
                return None
            case Token(value=value):
                parts.append(value)
    text = "".join(parts).strip()

    if text.startswith("<"):
        close = text.find(">")
        if close == -1 or "\n" in text[:close]:
            return None
        target = text[1:close]
        rest = text[close + 1 :]
        if rest and not rest[0].isspace():
            return None
    else:
        split = next((i for i, c in enumerate(text) if c.isspace()), len(text))
        target = text[:split]
        rest = text[split:]

    rest = rest.strip()
    if not rest:
        return target, None
    closing = _TITLE_QUOTES.get(rest[0])
    if closing is None or len(rest) < 2 or rest[-1] != closing:
        return None
    return target, rest[1:-1]


class LinkParsingMixin:
    """Mixin for link and image parsing.

    Required Host Attributes:
        - _max_nesting: int

    Required Host Methods:
        - _process_emphasis(pieces, flanking, limit) -> tuple[Inline, ...]

    """

    # Required host attributes (documented, not declared, to avoid override conflicts)
    # _max_nesting: int

    def _parse_links(self, pieces: Sequence[Piece], flanking: Flanking, depth: int) -> list[Piece]:
        """Replace ``[text](target)`` and ``![alt](src)`` with Link / Image nodes.

        Args:
            pieces: Inline pieces with code spans already built
            flanking: Emphasis flanking table for the whole block
            depth: Nesting depth of the block holding the pieces

        Returns:
            Pieces with links and images collapsed into NodeTokens
        """
        parens = _match_parens(pieces)
        out: list[Piece] = []
        brackets: list[_Bracket] = []

        index = 0
        while index < len(pieces):
            piece = pieces[index]
            if _is_marker(piece, "["):
                assert isinstance(piece, Token)
                previous = out[-1] if out else None
                image = (
                    isinstance(previous, Token)
                    and previous.is_delimiter("!")
                    and previous.end == piece.start
                )
                start = len(out) - 1 if image else len(out)
                brackets.append(_Bracket(start, piece, image))
                out.append(piece)
                index += 1
                continue

            if _is_marker(piece, "]") and brackets:
                assert isinstance(piece, Token)
                opener = brackets.pop()
                built = self._try_build_link(
                    opener, piece, pieces, index, parens, out, flanking, depth + len(brackets) + 1
                )
                if built is not None:
                    node, close = built
                    del out[opener.index :]
                    out.append(NodeToken(node))
                    if not opener.image:
                        for bracket in brackets:
                            bracket.active = False
                    index = close + 1
                    continue

            out.append(piece)
            index += 1
        return out

    def _try_build_link(
        self,
        opener: _Bracket,
        closer: Token,
        pieces: Sequence[Piece],
        index: int,
        parens: dict[int, int],
        out: list[Piece],
        flanking: Flanking,
        depth: int,
    ) -> tuple[Inline, int] | None:
        """Build the link closed by the ``]`` at ``pieces[index]``.

        Returns:
            (node, index of the closing paren), or None if this is not a link
        """
        if not opener.active or depth > self._max_nesting:
            return None
        paren_index = index + 1
        if paren_index >= len(pieces):
            return None
        paren = pieces[paren_index]
        if not (isinstance(paren, Token) and paren.is_delimiter("(")) or paren.start != closer.end:
            return None
        close = parens.get(paren_index)
        if close is None:
            return None
        destination = parse_destination(pieces[paren_index + 1 : close])
        if destination is None:
            return None
        target, title = destination

        end_token = pieces[close]
        assert isinstance(end_token, Token)
        first = out[opener.index]
        assert isinstance(first, Token)
        span = Span(first.start, end_token.end, first.lineno, first.col)

        inner_start = opener.index + (2 if opener.image else 1)
        children = self._process_emphasis(out[inner_start:], flanking, self._max_nesting - depth)
        if opener.image:
            alt = "".join(extract_text(child) for child in children)
            return Image(span=span, target=target, alt=alt, title=title), close
        return Link(span=span, target=target, title=title, children=children), close


__all__ = [
    "LinkParsingMixin",
    "parse_destination",
]
