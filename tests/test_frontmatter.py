"""Tests for front-matter decoding and filetype resolution."""

from datetime import date

import pytest

from cotejo import parse
from cotejo.diagnostics import DiagnosticKind, Severity
from cotejo.errors import FrontMatterError
from cotejo.filetypes import PROJECT
from cotejo.frontmatter import RawEntry, build_fields, filetype_name, load_front_matter
from cotejo.location import Span
from cotejo.nodes import FrontMatter, Heading, NestedValue


# =============================================================================
# Loading
# =============================================================================


class TestLoadFrontMatter:
    """YAML loading into raw entries."""

    def test_entries_in_source_order(self) -> None:
        entries = load_front_matter("title: Hello\ntags: [a, b]\n")
        assert entries == (
            RawEntry("title", "Hello", 0),
            RawEntry("tags", ["a", "b"], 1),
        )

    def test_empty_text(self) -> None:
        assert load_front_matter("") == ()

    @pytest.mark.parametrize(
        "text",
        [
            "title: [",
            "- a\n- b",
            "just a string",
            "a: 1\na: 2",
            "1: one",
        ],
    )
    def test_rejected(self, text: str) -> None:
        with pytest.raises(FrontMatterError):
            load_front_matter(text)

    def test_duplicate_key_reports_line(self) -> None:
        with pytest.raises(FrontMatterError) as exc_info:
            load_front_matter("a: 1\nb: 2\na: 3")
        assert exc_info.value.lineno == 3

    def test_filetype_name(self) -> None:
        entries = load_front_matter("filetype: project\ntitle: x")
        assert filetype_name(entries) == "project"
        assert filetype_name(load_front_matter("filetype: 3")) is None


class TestBuildFields:
    """Normalization and schema-guided coercion."""

    SPANS = [Span(4, 10, 2, 1), Span(11, 20, 3, 1), Span(21, 30, 4, 1)]
    BLOCK = Span(0, 34, 1, 1)

    def _build(self, text: str, filetype=None):  # type: ignore[no-untyped-def]
        return build_fields(load_front_matter(text), self.SPANS, self.BLOCK, filetype)

    def test_null_drops_key(self) -> None:
        fields = self._build("a:\nb: 1")
        assert [f.key for f in fields] == ["b"]

    def test_lists_become_tuples(self) -> None:
        (field,) = self._build("tags: [a, 1, true]")
        assert field.value == ("a", "1", "true")

    def test_dates(self) -> None:
        (field,) = self._build("day: 2024-01-15")
        assert field.value == date(2024, 1, 15)

    def test_spans_follow_key_lines(self) -> None:
        fields = self._build("a: 1\nb: 2")
        assert [f.span for f in fields] == self.SPANS[:2]

    def test_string_date_coerced_by_schema(self) -> None:
        (field,) = self._build("created: '2024-01-15'", PROJECT)
        assert field.value == date(2024, 1, 15)

    def test_bad_string_date_left_as_string(self) -> None:
        (field,) = self._build("created: soon", PROJECT)
        assert field.value == "soon"

    def test_scalar_coerced_to_list_by_schema(self) -> None:
        (field,) = self._build("tags: solo", PROJECT)
        assert field.value == ("solo",)

    def test_nested_mapping_kept_as_nested_value(self) -> None:
        title, meta = self._build("title: T\nmeta:\n  a: 1")
        assert title.value == "T"
        assert meta.value == NestedValue("mapping", "{a: 1}")
        assert meta.span == self.SPANS[1]

    def test_list_of_mappings_kept_as_nested_value(self) -> None:
        (field,) = self._build("items:\n  - a: 1")
        assert field.value == NestedValue("list", "[{a: 1}]")
        assert str(field.value) == "[{a: 1}]"


# =============================================================================
# Parsing documents with front matter
# =============================================================================


class TestDocumentFrontMatter:
    """Front matter as the first block of a document."""

    def test_front_matter_block(self) -> None:
        doc = parse("---\ntitle: Hello\ntags: [a, b]\n---\n# Body\n")
        fm, heading = doc.children
        assert isinstance(fm, FrontMatter)
        assert isinstance(heading, Heading)
        assert dict(doc.front_matter) == {"title": "Hello", "tags": ("a", "b")}
        assert fm.raw == "title: Hello\ntags: [a, b]"
        assert fm.span == Span(0, 33, 1, 1)
        assert fm.get("title").span == Span(4, 16, 2, 1)
        assert doc.diagnostics == ()

    def test_front_matter_is_read_only(self) -> None:
        doc = parse("---\ntitle: x\n---\n")
        with pytest.raises(TypeError):
            doc.front_matter["title"] = "y"  # type: ignore[index]

    def test_empty_front_matter(self) -> None:
        doc = parse("---\n---\n# A")
        assert isinstance(doc.children[0], FrontMatter)
        assert doc.children[0].fields == ()
        assert doc.diagnostics == ()

    def test_only_first_line_opens_front_matter(self) -> None:
        doc = parse("\n---\ntitle: x\n---\n")
        assert doc.front_matter_node is None
        assert dict(doc.front_matter) == {}

    def test_malformed_front_matter(self) -> None:
        doc = parse("---\ntitle: [\n---\n# Still parsed\n")
        fm = doc.children[0]
        assert isinstance(fm, FrontMatter)
        assert fm.fields == ()
        assert isinstance(doc.children[1], Heading)
        (diagnostic,) = doc.diagnostics
        assert diagnostic.kind is DiagnosticKind.MALFORMED_FRONT_MATTER
        assert diagnostic.severity is Severity.ERROR
        assert diagnostic.span == fm.span

    def test_duplicate_key_is_malformed(self) -> None:
        doc = parse("---\na: 1\na: 2\n---\n")
        assert [d.kind for d in doc.diagnostics] == [DiagnosticKind.MALFORMED_FRONT_MATTER]

    def test_unterminated_front_matter(self) -> None:
        doc = parse("---\ntitle: x\n# not a heading\n")
        (fm,) = doc.children
        assert isinstance(fm, FrontMatter)
        kinds = [d.kind for d in doc.diagnostics]
        assert DiagnosticKind.UNTERMINATED_CONSTRUCT in kinds
        assert fm.span.end == doc.span.end == 29


class TestFiletypeResolution:
    """Front matter, then the caller's hint, then the configured default."""

    def test_default(self) -> None:
        assert parse("# A").filetype == "note"

    def test_hint(self) -> None:
        assert parse("# A", filetype="project").filetype == "project"

    def test_front_matter_wins_over_hint(self) -> None:
        doc = parse("---\nfiletype: context\n---\n", filetype="project")
        assert doc.filetype == "context"

    def test_unknown_name_is_kept(self) -> None:
        assert parse("---\nfiletype: recipe\n---\n").filetype == "recipe"

    def test_schema_of_declared_filetype_is_used(self) -> None:
        doc = parse("---\nfiletype: project\ncreated: '2024-02-01'\n---\n")
        assert doc.front_matter["created"] == date(2024, 2, 1)

    def test_malformed_front_matter_falls_back_to_hint(self) -> None:
        doc = parse("---\nfiletype: context\ntitle: [\n---\n", filetype="project")
        assert doc.filetype == "project"
