"""Tests for the high-level Cotejo API."""

import pytest

from cotejo.diagnostics import DiagnosticKind
from cotejo.location import Span


class TestParseFunction:
    """Tests for the parse() function."""

    def test_parse_heading(self) -> None:
        from cotejo import Heading, parse

        doc = parse("# Hello World")
        assert len(doc.children) == 1
        assert isinstance(doc.children[0], Heading)
        assert doc.children[0].level == 1

    def test_parse_paragraph(self) -> None:
        from cotejo import Paragraph, parse

        doc = parse("Hello World")
        assert len(doc.children) == 1
        assert isinstance(doc.children[0], Paragraph)

    def test_parse_with_source_file(self) -> None:
        from cotejo import parse

        doc = parse("# Test", source_file="test.md")
        assert doc.source_file == "test.md"

    def test_document_span_covers_source(self) -> None:
        from cotejo import parse

        doc = parse("# é\n")
        assert doc.span == Span(0, 5, 1, 1)

    def test_parse_bytes(self) -> None:
        from cotejo import parse

        assert parse("# Café".encode()) == parse("# Café")

    def test_bom_is_skipped(self) -> None:
        from cotejo import Heading, parse

        doc = parse(b"\xef\xbb\xbf# Title\n")
        (heading,) = doc.children
        assert isinstance(heading, Heading)
        assert heading.span.start == 3
        assert heading.identifier == "title"

    def test_invalid_utf8_raises(self) -> None:
        from cotejo import EncodingError, parse

        with pytest.raises(EncodingError) as exc_info:
            parse(b"ok\xff", source_file="bad.md")
        assert exc_info.value.offset == 2
        assert "bad.md" in str(exc_info.value)

    def test_empty_document(self) -> None:
        from cotejo import parse

        doc = parse("")
        assert doc.children == ()
        assert doc.diagnostics == ()
        assert doc.front_matter_node is None


class TestCheckFunction:
    """Tests for check(): parse and validate one document."""

    def test_clean_document(self) -> None:
        from cotejo import check

        result = check("# A\n\nText.\n", source_file="a.md")
        assert result.source_file == "a.md"
        assert result.document is not None
        assert result.diagnostics == ()
        assert not result.has_errors

    def test_diagnostics_include_validation(self) -> None:
        from cotejo import check

        result = check("# A\n\n### B\n")
        assert [d.kind for d in result.diagnostics] == [DiagnosticKind.HEADING_LEVEL_SKIP]
        assert result.has_errors

    def test_warnings_are_not_errors(self) -> None:
        from cotejo import check

        result = check("---\ncolor: red\n---\n")
        assert result.diagnostics
        assert not result.has_errors

    def test_invalid_encoding(self) -> None:
        from cotejo import check

        result = check(b"\xff", source_file="bad.md")
        assert result.document is None
        (diagnostic,) = result.diagnostics
        assert diagnostic.kind is DiagnosticKind.INVALID_ENCODING
        assert diagnostic.span == Span.empty(0)
        assert diagnostic.format(result.source_file) == (
            "bad.md:1:1: error[invalid-encoding]: document is not valid UTF-8 (byte 0)"
        )

    def test_invalid_encoding_offset(self) -> None:
        from cotejo import check

        (diagnostic,) = check(b"ok\xff").diagnostics
        assert diagnostic.span.start == 2

    def test_references(self) -> None:
        from cotejo import check

        source = "[a](a.md) [b](b.md)\n"
        result = check(source, references={"a.md": True})
        assert [d.subject for d in result.diagnostics] == ["b.md"]


class TestCheckMany:
    """Tests for batch checking."""

    def test_empty(self) -> None:
        from cotejo import check_many

        assert check_many([]) == []

    def test_order_preserved(self) -> None:
        from cotejo import SourceDocument, check_many

        documents = [SourceDocument(f"# Doc {i}\n", source_file=f"{i}.md") for i in range(20)]
        results = check_many(documents, max_workers=4)
        assert [r.source_file for r in results] == [f"{i}.md" for i in range(20)]
        assert [r.document.children[0].identifier for r in results] == [  # type: ignore[union-attr]
            f"doc-{i}" for i in range(20)
        ]

    def test_bare_inputs_are_wrapped(self) -> None:
        from cotejo import check_many

        results = check_many(["# A", b"# B"])
        assert [r.source_file for r in results] == [None, None]
        assert all(r.document is not None for r in results)

    def test_one_bad_document_does_not_affect_others(self) -> None:
        from cotejo import SourceDocument, check_many

        results = check_many(
            [
                SourceDocument("# Fine\n", source_file="a.md"),
                SourceDocument(b"\xff\xfe", source_file="b.md"),
                SourceDocument("# Also fine\n", source_file="c.md"),
            ]
        )
        assert [r.has_errors for r in results] == [False, True, False]
        assert results[1].document is None
        assert results[1].diagnostics[0].kind is DiagnosticKind.INVALID_ENCODING

    def test_filetype_hints(self) -> None:
        from cotejo import SourceDocument, check_many

        results = check_many([SourceDocument("# A\n", filetype="project"), SourceDocument("# A\n")])
        assert [r.document.filetype for r in results] == ["project", "note"]  # type: ignore[union-attr]
        assert results[0].has_errors
        assert not results[1].has_errors

    def test_shared_references(self) -> None:
        from cotejo import SourceDocument, check_many

        references = {"a.md": True, "b.md": True}
        documents = [
            SourceDocument("[b](b.md)\n", source_file="a.md"),
            SourceDocument("[a](a)\n", source_file="b.md"),
            SourceDocument("[z](z.md)\n", source_file="c.md"),
        ]
        results = check_many(documents, references=references)
        assert [r.has_errors for r in results] == [False, False, True]

    def test_references_are_snapshotted(self) -> None:
        from cotejo import SourceDocument, check_many

        references = {"a.md": True}
        documents = [SourceDocument("[a](a.md)\n") for _ in range(10)]
        results = check_many(documents, references=references, max_workers=4)
        references["a.md"] = False
        assert not any(r.has_errors for r in results)

    def test_concurrent_matches_sequential(self) -> None:
        from cotejo import SourceDocument, check_many

        sources = [
            "---\nfiletype: project\ntitle: P\n---\n## Goal\n\n## Actions\n\n- [ ] go\n",
            "# A\n\n### B\n\n[x](#nope)\n",
            "> quote *em* and `code`\n\n| a | b |\n| - | - |\n| 1 | 2 |\n",
            "```python\nprint(1)\n",
            "---\ntitle: [\n---\n",
        ]
        documents = [
            SourceDocument(source, source_file=f"{i}.md")
            for i, source in enumerate(sources * 10)
        ]
        sequential = check_many(documents, max_workers=1)
        concurrent = check_many(documents, max_workers=4)
        assert concurrent == sequential


class TestChecker:
    """Tests for the Checker class."""

    def test_config_overrides(self) -> None:
        from cotejo import Checker, ParseConfig

        checker = Checker(default_filetype="project", max_nesting=4)
        assert checker.config == ParseConfig(default_filetype="project", max_nesting=4)

    def test_base_config(self) -> None:
        from cotejo import Checker, ParseConfig

        checker = Checker(config=ParseConfig(default_filetype="context"), max_nesting=3)
        assert checker.config.default_filetype == "context"
        assert checker.config.max_nesting == 3

    def test_default_filetype_applies(self) -> None:
        from cotejo import Checker

        result = Checker(default_filetype="project").check("# Plan\n")
        kinds = {d.kind for d in result.diagnostics}
        assert kinds == {DiagnosticKind.MISSING_FIELD, DiagnosticKind.MISSING_SECTION}

    def test_custom_registry(self) -> None:
        from cotejo import Checker, FieldSpec, FieldType, Filetype, create_registry_with_defaults

        builder = create_registry_with_defaults()
        builder.register(Filetype("journal", fields=(FieldSpec("mood", FieldType.STRING, True),)))
        checker = Checker(default_filetype="journal", registry=builder.build())
        results = checker.check_many(["# Mon\n", "---\nmood: fine\n---\n# Tue\n"])
        assert [r.has_errors for r in results] == [True, False]

    def test_nesting_limit(self) -> None:
        from cotejo import BlockQuote, Checker

        doc = Checker(max_nesting=2).parse("> > > x")
        depth = 0
        node = doc
        while node.children and isinstance(node.children[0], BlockQuote):
            node = node.children[0]
            depth += 1
        assert depth == 2

    def test_context_is_restored(self) -> None:
        from cotejo import Checker, get_parse_config

        Checker(default_filetype="project").parse("# A")
        assert get_parse_config().default_filetype == "note"


class TestExports:
    """Tests for public exports."""

    def test_version(self) -> None:
        from cotejo import __version__

        assert __version__ == "0.1.0"

    def test_all_names_exist(self) -> None:
        import cotejo

        for name in cotejo.__all__:
            assert hasattr(cotejo, name), name

    def test_core_api(self) -> None:
        from cotejo import check, check_many, parse, validate

        assert all(callable(f) for f in (parse, validate, check, check_many))
