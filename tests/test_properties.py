"""Property-based tests for the parser and validator using Hypothesis.

Any input parses without raising, parsing is deterministic, every node
span lies inside its parent's, and batch checking matches one-at-a-time
checking.
"""

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from cotejo import Checker, SourceDocument, check, parse, validate
from cotejo.errors import EncodingError
from cotejo.nodes import Document, Heading, Node
from cotejo.serialization import from_json, to_json
from cotejo.visitor import iter_children, walk

MARKDOWNISH = st.text(alphabet="#*_-`~|:>[]()!\\ \t\n.1xé{}", max_size=200)

LINES = st.lists(
    st.sampled_from(
        [
            "# Title",
            "## Goal",
            "### Deep",
            "text *em* **strong** `code`",
            "[link](other.md) ![img](p.png)",
            "> quote",
            "- item",
            "- [ ] task",
            "1. first",
            "```",
            "| a | b |",
            "| - | - |",
            "---",
            "",
            "    indented",
        ]
    ),
    max_size=25,
).map("\n".join)


def _check_spans(node: Node, source_length: int) -> None:
    span = node.span
    assert 0 <= span.start <= span.end <= source_length
    children = iter_children(node)
    for before, after in zip(children, children[1:]):
        assert before.span.end <= after.span.start, f"{before!r} overlaps {after!r}"
    for child in children:
        assert span.contains(child.span), f"{child!r} escapes {node!r}"
        _check_spans(child, source_length)


class TestParseTotality:
    """Every input produces a Document."""

    @given(st.text(max_size=500))
    @settings(max_examples=200)
    def test_any_text(self, source: str) -> None:
        assert isinstance(parse(source), Document)

    @given(MARKDOWNISH)
    @settings(max_examples=300)
    def test_markdownish_text(self, source: str) -> None:
        doc = parse(source)
        assert isinstance(doc, Document)
        validate(doc)

    @given(st.binary(max_size=200))
    @settings(max_examples=200)
    def test_any_bytes(self, data: bytes) -> None:
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            result = check(data)
            assert result.document is None
            assert len(result.diagnostics) == 1
            return
        assert parse(data) == parse(text)

    @given(st.binary(max_size=50).filter(lambda b: b"\xff" not in b), st.binary(max_size=50))
    @settings(max_examples=100)
    def test_encoding_error_offset(self, head: bytes, tail: bytes) -> None:
        data = head + b"\xff" + tail
        try:
            parse(data)
        except EncodingError as e:
            assert e.offset <= len(head)
        else:
            raise AssertionError("expected EncodingError")


class TestTreeInvariants:
    """Structural properties of every parsed tree."""

    @given(LINES)
    @settings(max_examples=200)
    def test_spans_nest(self, source: str) -> None:
        doc = parse(source)
        _check_spans(doc, len(source.encode("utf-8")))

    @given(MARKDOWNISH)
    @settings(max_examples=200)
    def test_spans_nest_markdownish(self, source: str) -> None:
        doc = parse(source)
        _check_spans(doc, len(source.encode("utf-8")))

    @given(LINES)
    @settings(max_examples=100)
    def test_deterministic(self, source: str) -> None:
        assert parse(source) == parse(source)
        assert validate(parse(source)) == validate(parse(source))

    @given(LINES)
    @settings(max_examples=100)
    def test_heading_levels_in_range(self, source: str) -> None:
        for node in walk(parse(source)):
            if isinstance(node, Heading):
                assert 1 <= node.level <= 6

    @given(LINES)
    @settings(max_examples=100)
    def test_serialization_round_trip(self, source: str) -> None:
        doc = parse(source, filetype="project")
        assert from_json(to_json(doc)) == doc

    @given(st.integers(min_value=1, max_value=8), st.integers(min_value=0, max_value=60))
    @settings(max_examples=50)
    def test_nesting_depth_bounded(self, limit: int, depth: int) -> None:
        source = "> " * depth + "- " * depth + "x"
        doc = Checker(max_nesting=limit).parse(source)

        def container_depth(node: Node) -> int:
            children = iter_children(node)
            inner = max((container_depth(c) for c in children), default=0)
            return inner + (1 if node.kind.value in {"block_quote", "list_item"} else 0)

        assert container_depth(doc) <= limit


class TestBatchEquivalence:
    """Concurrent checking gives the same results as sequential checking."""

    @given(st.lists(LINES, max_size=12))
    @settings(max_examples=25, suppress_health_check=[HealthCheck.too_slow])
    def test_concurrent_equals_sequential(self, sources: list[str]) -> None:
        documents = [SourceDocument(s, source_file=f"{i}.md") for i, s in enumerate(sources)]
        checker = Checker(default_filetype="project")
        concurrent = checker.check_many(documents, references={"other.md": True}, max_workers=4)
        sequential = [
            checker.check(d.source, source_file=d.source_file, references={"other.md": True})
            for d in documents
        ]
        assert concurrent == sequential
