"""Diagnostics reported by the parser and the validator.

A Diagnostic is a plain immutable record: severity, a stable kind, a human
message, the source span it refers to, and optionally the subject (field
name, identifier, link target) it is about.

Example:
    >>> from cotejo.location import Span
    >>> d = Diagnostic.error(DiagnosticKind.MISSING_FIELD, "missing 'title'", Span(0, 3))
    >>> d.kind.value
    'missing-field'

"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from cotejo.location import Span


class Severity(Enum):
    """How serious a diagnostic is."""

    ERROR = "error"
    WARNING = "warning"


class DiagnosticKind(Enum):
    """Stable diagnostic identifiers."""

    # Parse time (recovered)
    UNTERMINATED_CONSTRUCT = "unterminated-construct"
    MALFORMED_FRONT_MATTER = "malformed-front-matter"
    MALFORMED_TABLE = "malformed-table"

    # Validation
    MISSING_FIELD = "missing-field"
    TYPE_MISMATCH = "type-mismatch"
    UNKNOWN_FIELD = "unknown-field"
    UNKNOWN_FILETYPE = "unknown-filetype"
    BROKEN_REFERENCE = "broken-reference"
    DUPLICATE_IDENTIFIER = "duplicate-identifier"
    HEADING_LEVEL_SKIP = "heading-level-skip"
    DISALLOWED_NODE = "disallowed-node"
    MISSING_SECTION = "missing-section"
    UNEXPECTED_SECTION = "unexpected-section"
    DEPRECATED_SECTION = "deprecated-section"
    INCOMPLETE_ACTIONS = "incomplete-actions"

    # Fatal for one document
    INVALID_ENCODING = "invalid-encoding"


@dataclass(frozen=True, slots=True)
class Diagnostic:
    """A single problem found in a document.

    Attributes:
        severity: ERROR or WARNING
        kind: Stable identifier of the problem
        message: Human-readable description
        span: Where in the source the problem is
        subject: The field, identifier or target involved, if any

    """

    severity: Severity
    kind: DiagnosticKind
    message: str
    span: Span
    subject: str | None = None

    @classmethod
    def error(
        cls, kind: DiagnosticKind, message: str, span: Span, subject: str | None = None
    ) -> Diagnostic:
        return cls(Severity.ERROR, kind, message, span, subject)

    @classmethod
    def warning(
        cls, kind: DiagnosticKind, message: str, span: Span, subject: str | None = None
    ) -> Diagnostic:
        return cls(Severity.WARNING, kind, message, span, subject)

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    def format(self, source_file: str | None = None) -> str:
        """Format as ``file:line:col: severity[kind]: message``."""
        location = f"{source_file}:{self.span}" if source_file else str(self.span)
        return f"{location}: {self.severity.value}[{self.kind.value}]: {self.message}"


def _sort_key(diagnostic: Diagnostic) -> tuple[int, int, int]:
    severity_rank = 0 if diagnostic.severity is Severity.ERROR else 1
    return (diagnostic.span.start, diagnostic.span.end, severity_rank)


def sort_diagnostics(diagnostics: Iterable[Diagnostic]) -> tuple[Diagnostic, ...]:
    """Order diagnostics by span start, then span end, errors before warnings.

    The sort is stable: diagnostics that compare equal keep discovery order.
    """
    return tuple(sorted(diagnostics, key=_sort_key))


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
    return any(d.severity is Severity.ERROR for d in diagnostics)
