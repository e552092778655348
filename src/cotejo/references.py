"""Reference index and link target classification.

The reference index is supplied by the caller: a read-only mapping from
identifier (usually a document path) to whether it exists. It is snapshotted
once, before any validation starts, so documents validated on worker threads
all see the same immutable view.

Example:
    >>> index = ReferenceIndex({"notes/a.md": True})
    >>> index.exists("./notes/a.md#intro")
    True
    >>> is_external("https://example.com")
    True

"""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from types import MappingProxyType
from urllib.parse import unquote

# scheme ":" per RFC 3986, plus protocol-relative "//host"
_EXTERNAL_URI = re.compile(r"^(?:[A-Za-z][A-Za-z0-9+.\-]*:|//)")

_DOCUMENT_SUFFIX = ".md"


def is_external(target: str) -> bool:
    """Whether ``target`` points outside the document set (has a URI scheme)."""
    return _EXTERNAL_URI.match(target) is not None


def is_well_formed(target: str) -> bool:
    """A usable target is non-empty and contains no whitespace.

    Whitespace only reaches a target through the ``<...>`` destination form,
    which the parser keeps as a link so it can be reported here.
    """
    return bool(target) and not any(c.isspace() for c in target)


def split_fragment(target: str) -> tuple[str, str | None]:
    """Split ``path#fragment`` into (path, fragment)."""
    path, sep, fragment = target.partition("#")
    return path, fragment if sep else None


def candidate_identifiers(target: str) -> tuple[str, ...]:
    """Index keys ``target`` may be stored under.

    The fragment and query are dropped, a leading ``./`` is removed and
    percent-escapes are decoded. A ``.md`` suffix is optional.
    """
    path, _ = split_fragment(target)
    path = path.partition("?")[0]
    while path.startswith("./"):
        path = path[2:]
    path = unquote(path)
    if not path:
        return ()
    if path.endswith(_DOCUMENT_SUFFIX):
        return (path, path[: -len(_DOCUMENT_SUFFIX)])
    return (path, path + _DOCUMENT_SUFFIX)


class ReferenceIndex(Mapping[str, bool]):
    """Immutable snapshot of identifier -> exists.

    Thread Safety:
        The snapshot is copied at construction and never mutated, so one
        index can be shared by any number of threads.

    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, bool] | None = None) -> None:
        self._entries: Mapping[str, bool] = MappingProxyType(
            {str(k): bool(v) for k, v in (entries or {}).items()}
        )

    @classmethod
    def snapshot(cls, entries: Mapping[str, bool] | None) -> ReferenceIndex | None:
        """Freeze ``entries`` (None stays None: no index supplied)."""
        if entries is None or isinstance(entries, ReferenceIndex):
            return entries
        return cls(entries)

    def exists(self, target: str) -> bool:
        """Whether any identifier ``target`` may refer to is marked existing."""
        return any(self._entries.get(key, False) for key in candidate_identifiers(target))

    def __getitem__(self, key: str) -> bool:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"ReferenceIndex({len(self)} entries)"


__all__ = [
    "ReferenceIndex",
    "candidate_identifiers",
    "is_external",
    "is_well_formed",
    "split_fragment",
]
