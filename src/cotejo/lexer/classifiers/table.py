"""Table delimiter row classifier mixin."""

_DELIMITER_ROW_CHARS = frozenset("|:- \t")


class TableClassifierMixin:
    """Mixin providing table delimiter row classification."""

    def _is_table_delimiter(self, line: str, start: int) -> bool:
        """Check whether ``line[start:]`` is a table delimiter row.

        A delimiter row uses only ``|``, ``:``, ``-`` and whitespace, with at
        least one pipe and one dash. Requiring a pipe keeps ``---`` available
        for thematic breaks and front matter.

        Examples:
            ``"|---|:-:|"`` -> True
            ``"--- | ---"`` -> True
            ``"---"`` -> False
        """
        rest = line[start:].rstrip()
        if not rest or "|" not in rest or "-" not in rest:
            return False
        return all(char in _DELIMITER_ROW_CHARS for char in rest)
