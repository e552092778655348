"""Fenced code classifier mixin."""

from cotejo.parsing.charsets import FENCE_CHARS


class FenceClassifierMixin:
    """Mixin providing code fence classification."""

    def _classify_fence(self, line: str, start: int) -> int | None:
        """Check for a code fence at ``start``.

        A fence is a run of 3+ backticks or 3+ tildes. A backtick fence's info
        string may not contain backticks, otherwise the line is an inline code
        span.

        Args:
            line: Line content without the newline
            start: Index where the container prefix ends

        Returns:
            Index where the fence run ends, or None if not a fence.
        """
        if start >= len(line) or line[start] not in FENCE_CHARS:
            return None

        fence_char = line[start]
        end = start
        while end < len(line) and line[end] == fence_char:
            end += 1

        if end - start < 3:
            return None

        if fence_char == "`" and "`" in line[end:]:
            return None

        return end
