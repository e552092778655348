"""Source spans for diagnostics and AST nodes.

Provides the Span dataclass locating a token or node in the original source.
Offsets are byte offsets into the UTF-8 encoding of the source, so a span stays
meaningful after the source buffer is gone.

Thread Safety:
Span is frozen (immutable) and safe to share across threads.

"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, order=True)
class Span:
    """Byte-offset span in the source buffer.

    Ordering compares ``(start, end)`` first, which is the order diagnostics
    are reported in.

    Attributes:
        start: Absolute start byte offset (inclusive)
        end: Absolute end byte offset (exclusive)
        lineno: Starting line number (1-indexed)
        col: Starting column (1-indexed, in characters)

    Examples:
        >>> span = Span(0, 7, lineno=1, col=1)
        >>> str(span)
        '1:1'

    """

    start: int
    end: int
    lineno: int = 1
    col: int = 1

    def __str__(self) -> str:
        """Format span for messages as ``line:col``."""
        return f"{self.lineno}:{self.col}"

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, other: Span) -> bool:
        """Whether ``other`` lies entirely within this span."""
        return self.start <= other.start and other.end <= self.end

    @classmethod
    def empty(cls, offset: int = 0, lineno: int = 1, col: int = 1) -> Span:
        """Zero-width span at ``offset``.

        Used for diagnostics about things that are absent (a missing field in a
        document without front matter, for example).
        """
        return cls(offset, offset, lineno, col)
