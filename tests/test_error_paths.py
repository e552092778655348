"""Error-path and malformed input tests.

Tests that exercise recovery and graceful degradation for broken input.
Recoverable problems become diagnostics on the Document; only undecodable
bytes raise.
"""

import pytest

from cotejo import parse
from cotejo.diagnostics import (
    Diagnostic,
    DiagnosticKind,
    Severity,
    has_errors,
    sort_diagnostics,
)
from cotejo.location import Span
from cotejo.nodes import CodeBlock, FrontMatter, Paragraph

# =========================================================================
# Diagnostic construction and formatting
# =========================================================================


class TestDiagnosticFormatting:
    """Verify Diagnostic produces well-formatted messages."""

    def test_format_with_file(self) -> None:
        d = Diagnostic.error(DiagnosticKind.MISSING_FIELD, "missing 'title'", Span(0, 3, 4, 7))
        assert d.format("a.md") == "a.md:4:7: error[missing-field]: missing 'title'"

    def test_format_without_file(self) -> None:
        d = Diagnostic.warning(DiagnosticKind.UNKNOWN_FIELD, "field 'x'", Span(0, 3))
        assert d.format() == "1:1: warning[unknown-field]: field 'x'"

    def test_constructors(self) -> None:
        error = Diagnostic.error(DiagnosticKind.BROKEN_REFERENCE, "m", Span(0, 1), "x.md")
        warning = Diagnostic.warning(DiagnosticKind.UNEXPECTED_SECTION, "m", Span(0, 1))
        assert error.severity is Severity.ERROR and error.is_error
        assert error.subject == "x.md"
        assert warning.severity is Severity.WARNING and not warning.is_error

    def test_has_errors(self) -> None:
        warning = Diagnostic.warning(DiagnosticKind.UNKNOWN_FIELD, "m", Span(0, 1))
        error = Diagnostic.error(DiagnosticKind.UNKNOWN_FIELD, "m", Span(0, 1))
        assert not has_errors([])
        assert not has_errors([warning])
        assert has_errors([warning, error])


class TestSortDiagnostics:
    """Span order, then errors before warnings, otherwise stable."""

    def test_order(self) -> None:
        late = Diagnostic.error(DiagnosticKind.MISSING_FIELD, "late", Span(10, 12))
        wide = Diagnostic.error(DiagnosticKind.MISSING_FIELD, "wide", Span(0, 9))
        narrow = Diagnostic.error(DiagnosticKind.MISSING_FIELD, "narrow", Span(0, 2))
        warning = Diagnostic.warning(DiagnosticKind.MISSING_FIELD, "warning", Span(0, 2))
        ordered = sort_diagnostics([late, warning, wide, narrow])
        assert [d.message for d in ordered] == ["narrow", "warning", "wide", "late"]

    def test_stable(self) -> None:
        first = Diagnostic.error(DiagnosticKind.MISSING_FIELD, "first", Span(0, 1))
        second = Diagnostic.error(DiagnosticKind.TYPE_MISMATCH, "second", Span(0, 1))
        assert sort_diagnostics([first, second]) == (first, second)


# =========================================================================
# Unterminated constructs
# =========================================================================


class TestUnterminated:
    """Unclosed constructs run to the end of their container."""

    def test_code_fence_at_document_end(self) -> None:
        doc = parse("```python\nprint(1)\n")
        (block,) = doc.children
        assert isinstance(block, CodeBlock)
        assert not block.closed
        assert block.code == "print(1)\n"
        (diagnostic,) = doc.diagnostics
        assert diagnostic.kind is DiagnosticKind.UNTERMINATED_CONSTRUCT
        assert diagnostic.span.lineno == 1

    def test_code_fence_in_quote_closes_with_quote(self) -> None:
        doc = parse("> ```\n> code\n\nafter\n")
        quote, para = doc.children
        assert isinstance(para, Paragraph)
        assert [d.kind for d in doc.diagnostics] == [DiagnosticKind.UNTERMINATED_CONSTRUCT]

    def test_front_matter_swallows_document(self) -> None:
        doc = parse("---\ntitle: x\n\n# Heading\n")
        (fm,) = doc.children
        assert isinstance(fm, FrontMatter)
        assert DiagnosticKind.UNTERMINATED_CONSTRUCT in {d.kind for d in doc.diagnostics}

    def test_unclosed_inline_constructs_are_text(self) -> None:
        doc = parse("*a [b](c `d")
        assert doc.diagnostics == ()
        assert isinstance(doc.children[0], Paragraph)


# =========================================================================
# Malformed input degrades gracefully
# =========================================================================


class TestMalformedInput:
    """Broken input never raises."""

    @pytest.mark.parametrize(
        "source",
        [
            "",
            "\n\n\n",
            "#",
            "#######",
            "[",
            "](",
            "![",
            "**",
            "`",
            "|",
            "| a |\n| - | - |",
            "> ",
            "- ",
            "1.",
            "---",
            "---\n---\n---",
            "\\",
            "\r\n\r\n",
            "\t\t\t",
            "\x00",
            "\ufeff",
        ],
    )
    def test_does_not_raise(self, source: str) -> None:
        doc = parse(source)
        assert doc.span.start == 0

    def test_malformed_table_is_reported(self) -> None:
        doc = parse("| a | b |\n| - |\n| 1 | 2 |\n")
        assert DiagnosticKind.MALFORMED_TABLE in {d.kind for d in doc.diagnostics}
        assert all(isinstance(b, Paragraph) for b in doc.children)

    def test_deep_nesting_is_bounded(self) -> None:
        doc = parse("> " * 5000 + "x")
        assert doc.children

    def test_many_delimiters(self) -> None:
        doc = parse("*a " * 2000)
        assert doc.children

    def test_many_brackets(self) -> None:
        doc = parse("[" * 3000 + "]" * 3000)
        assert doc.children
