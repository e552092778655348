"""Tests for extract_text()."""

from cotejo import parse
from cotejo.location import Span
from cotejo.nodes import (
    CodeBlock,
    Emphasis,
    Image,
    InlineCode,
    LineBreak,
    Link,
    SoftBreak,
    Text,
)
from cotejo.text import extract_text

SPAN = Span(0, 0)


def _text(s: str) -> Text:
    return Text(span=SPAN, content=s)


class TestExtractTextInline:
    """extract_text on inline nodes."""

    def test_text(self) -> None:
        assert extract_text(_text("hello")) == "hello"

    def test_inline_code(self) -> None:
        assert extract_text(InlineCode(span=SPAN, code="x = 1")) == "x = 1"

    def test_emphasis(self) -> None:
        node = Emphasis(span=SPAN, children=(_text("a"), _text("b")), strong=True)
        assert extract_text(node) == "ab"

    def test_link_uses_label(self) -> None:
        node = Link(span=SPAN, target="x.md", title="T", children=(_text("label"),))
        assert extract_text(node) == "label"

    def test_image_uses_alt(self) -> None:
        assert extract_text(Image(span=SPAN, target="p.png", alt="a cat")) == "a cat"

    def test_breaks_are_spaces(self) -> None:
        assert extract_text(SoftBreak(span=SPAN)) == " "
        assert extract_text(LineBreak(span=SPAN)) == " "


class TestExtractTextBlocks:
    """extract_text on parsed blocks."""

    def test_heading(self) -> None:
        doc = parse("# Hello **World** `x`")
        assert extract_text(doc.children[0]) == "Hello World x"

    def test_paragraph_lines(self) -> None:
        doc = parse("one\ntwo")
        assert extract_text(doc.children[0]) == "one two"

    def test_code_block(self) -> None:
        node = CodeBlock(span=SPAN, code="a\nb\n", language="py")
        assert extract_text(node) == "a\nb\n"

    def test_blocks_joined_with_spaces(self) -> None:
        doc = parse("# A\n\nb\n\n> c\n\n- d\n- e\n")
        assert extract_text(doc) == "A b c d e"

    def test_front_matter_contributes_nothing(self) -> None:
        doc = parse("---\ntitle: T\n---\nbody\n")
        assert extract_text(doc) == " body"

    def test_table(self) -> None:
        doc = parse("| a | b |\n| - | - |\n| 1 | 2 |\n")
        assert extract_text(doc) == "a b 1 2"

    def test_escapes_are_resolved(self) -> None:
        doc = parse("\\*not em\\*")
        assert extract_text(doc) == "*not em*"
