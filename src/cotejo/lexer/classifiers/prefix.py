"""Container prefix classifier mixin."""

from cotejo.parsing.charsets import BULLET_MARKERS, DIGITS, WHITESPACE


class PrefixClassifierMixin:
    """Mixin locating the end of a line's container prefix.

    Container prefixes are the leading parts of a line that open block quotes
    and list items. Fences and table delimiter rows are only recognized right
    after such a prefix.
    """

    def _quote_prefix_end(self, line: str) -> int:
        """Index after leading whitespace and ``>`` markers."""
        i = 0
        line_len = len(line)
        while i < line_len and (line[i] in WHITESPACE or line[i] == ">"):
            i += 1
        return i

    def _container_prefix_end(self, line: str) -> int:
        """Index after leading whitespace, ``>`` markers and list markers.

        Examples:
            ``"> - ```py"`` -> 4
            ``"1. text"`` -> 3
        """
        i = 0
        line_len = len(line)
        while i < line_len:
            char = line[i]
            if char in WHITESPACE or char == ">":
                i += 1
                continue
            if char in BULLET_MARKERS:
                if i + 1 < line_len and line[i + 1] in WHITESPACE:
                    i += 1
                    continue
                break
            if char in DIGITS:
                j = i
                while j < line_len and line[j] in DIGITS and j - i < 9:
                    j += 1
                if (
                    j < line_len
                    and line[j] in ".)"
                    and j + 1 < line_len
                    and line[j + 1] in WHITESPACE
                ):
                    i = j + 1
                    continue
            break
        return i
