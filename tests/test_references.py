"""Tests for link target classification and the reference index."""

import pytest

from cotejo.references import (
    ReferenceIndex,
    candidate_identifiers,
    is_external,
    is_well_formed,
    split_fragment,
)


class TestClassification:
    """External, well-formed and fragment targets."""

    @pytest.mark.parametrize(
        "target",
        ["https://example.com", "http://x", "mailto:a@b.c", "ftp://host/f", "//cdn.example.com/x"],
    )
    def test_external(self, target: str) -> None:
        assert is_external(target)

    @pytest.mark.parametrize("target", ["notes/a.md", "./a", "#intro", "../up.md", "b/c"])
    def test_internal(self, target: str) -> None:
        assert not is_external(target)

    @pytest.mark.parametrize(
        ("target", "expected"),
        [("a.md", True), ("", False), ("a b.md", False), ("a\tb", False), ("#x", True)],
    )
    def test_well_formed(self, target: str, expected: bool) -> None:
        assert is_well_formed(target) is expected

    def test_split_fragment(self) -> None:
        assert split_fragment("a.md#top") == ("a.md", "top")
        assert split_fragment("a.md") == ("a.md", None)
        assert split_fragment("#top") == ("", "top")
        assert split_fragment("a.md#") == ("a.md", "")


class TestCandidates:
    """Keys a target may be stored under."""

    def test_md_suffix_optional(self) -> None:
        assert candidate_identifiers("notes/a.md") == ("notes/a.md", "notes/a")
        assert candidate_identifiers("notes/a") == ("notes/a", "notes/a.md")

    def test_prefix_fragment_and_query_dropped(self) -> None:
        assert candidate_identifiers("./a.md?v=1#top") == ("a.md", "a")

    def test_percent_escapes_decoded(self) -> None:
        assert candidate_identifiers("my%20file.md") == ("my file.md", "my file")

    def test_fragment_only(self) -> None:
        assert candidate_identifiers("#top") == ()


class TestReferenceIndex:
    """Immutable snapshot lookups."""

    def test_exists(self) -> None:
        index = ReferenceIndex({"notes/a.md": True, "gone.md": False})
        assert index.exists("notes/a.md")
        assert index.exists("./notes/a#intro")
        assert not index.exists("gone.md")
        assert not index.exists("missing.md")

    def test_snapshot_is_independent(self) -> None:
        entries = {"a.md": True}
        index = ReferenceIndex.snapshot(entries)
        entries["a.md"] = False
        entries["b.md"] = True
        assert index is not None
        assert index.exists("a.md")
        assert not index.exists("b.md")

    def test_snapshot_none(self) -> None:
        assert ReferenceIndex.snapshot(None) is None

    def test_snapshot_reuses_index(self) -> None:
        index = ReferenceIndex({"a.md": True})
        assert ReferenceIndex.snapshot(index) is index

    def test_mapping_interface(self) -> None:
        index = ReferenceIndex({"a.md": 1, "b.md": 0})  # type: ignore[dict-item]
        assert dict(index) == {"a.md": True, "b.md": False}
        assert len(index) == 2
        assert "a.md" in index
        assert repr(index) == "ReferenceIndex(2 entries)"

    def test_read_only(self) -> None:
        index = ReferenceIndex({"a.md": True})
        with pytest.raises(TypeError):
            index["b.md"] = True  # type: ignore[index]
