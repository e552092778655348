"""Front-matter decoding.

Front matter is YAML between a ``---`` first line and a closing ``---`` (or
``...``) line. Decoding happens in two steps so the filetype named inside the
block can pick the schema used to coerce it:

1. ``load_front_matter`` parses the YAML into ``RawEntry`` records
   (key, value, line) and enforces the structural rules.
2. ``build_fields`` normalizes values, applying schema-guided coercion, and
   attaches source spans.

``load_front_matter`` raises FrontMatterError for YAML that cannot be decoded;
the parser turns that into a malformed-front-matter diagnostic. Values that
are not scalars or scalar lists are kept as NestedValue for the validator
to report.

Example:
    >>> entries = load_front_matter("title: Hello\\ntags: [a, b]\\n")
    >>> [(e.key, e.value) for e in entries]
    [('title', 'Hello'), ('tags', ['a', 'b'])]

"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import yaml

from cotejo.errors import FrontMatterError
from cotejo.filetypes import FILETYPE_KEY, FieldType, Filetype
from cotejo.location import Span
from cotejo.nodes import FieldValue, FrontMatterField, NestedValue

_MERGE_TAG = "tag:yaml.org,2002:merge"


class _FrontMatterLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate mapping keys."""

    def construct_mapping(self, node: yaml.MappingNode, deep: bool = False) -> dict:
        seen: set[Any] = set()
        for key_node, _ in node.value:
            if key_node.tag == _MERGE_TAG:
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                # Unhashable key; the base constructor reports it
                continue
            if duplicate:
                raise FrontMatterError(
                    f"duplicate key {key!r}", key_node.start_mark.line + 1
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


@dataclass(frozen=True, slots=True)
class RawEntry:
    """A top-level front-matter entry before normalization.

    ``line`` is the 0-indexed line of the key within the front-matter body.
    """

    key: str
    value: Any
    line: int


def load_front_matter(text: str) -> tuple[RawEntry, ...]:
    """Parse front-matter YAML into top-level entries.

    Args:
        text: The lines between the fences, newline-joined

    Returns:
        Entries in source order (empty for an empty block)

    Raises:
        FrontMatterError: Invalid YAML, duplicate keys, a non-mapping top
            level, or non-string keys
    """
    loader = _FrontMatterLoader(text)
    try:
        node = loader.get_single_node()
        if node is None:
            return ()
        if not isinstance(node, yaml.MappingNode):
            raise FrontMatterError("front matter must be a mapping", node.start_mark.line + 1)
        data = loader.construct_document(node)
    except yaml.MarkedYAMLError as e:
        mark = e.problem_mark or e.context_mark
        lineno = mark.line + 1 if mark is not None else None
        raise FrontMatterError(e.problem or str(e), lineno) from e
    except yaml.YAMLError as e:
        raise FrontMatterError(str(e)) from e
    except (ValueError, OverflowError) as e:
        # Out-of-range timestamps and similar scalar failures
        raise FrontMatterError(str(e)) from e
    except RecursionError as e:
        raise FrontMatterError("front matter nested too deeply") from e
    finally:
        loader.dispose()

    key_lines: dict[str, int] = {}
    for key_node, _ in node.value:
        if isinstance(key_node, yaml.ScalarNode):
            key_lines.setdefault(key_node.value, key_node.start_mark.line)

    entries = []
    for key, value in data.items():
        if not isinstance(key, str):
            raise FrontMatterError(f"front matter keys must be strings, got {key!r}")
        entries.append(RawEntry(key, value, key_lines.get(key, 0)))
    return tuple(entries)


def filetype_name(entries: Sequence[RawEntry]) -> str | None:
    """The filetype named by the reserved ``filetype`` key, if it is a string."""
    for entry in entries:
        if entry.key == FILETYPE_KEY and isinstance(entry.value, str):
            return entry.value
    return None


def build_fields(
    entries: Sequence[RawEntry],
    line_spans: Sequence[Span],
    block_span: Span,
    filetype: Filetype | None = None,
) -> tuple[FrontMatterField, ...]:
    """Normalize raw entries into owned FrontMatterField records.

    Null values drop their key. Values are coerced according to the schema
    of ``filetype`` when it declares the field. Never raises.

    Args:
        entries: Output of ``load_front_matter``
        line_spans: Span of each front-matter body line, by 0-indexed line
        block_span: Span of the whole block, used when a line is unknown
        filetype: Resolved filetype (None = no coercion)
    """
    fields = []
    for entry in entries:
        spec = filetype.get_field(entry.key) if filetype is not None else None
        value = _normalize(entry.value, spec.type if spec else None)
        if value is None:
            continue
        span = line_spans[entry.line] if 0 <= entry.line < len(line_spans) else block_span
        fields.append(FrontMatterField(entry.key, value, span))
    return tuple(fields)


def _normalize(value: Any, declared: FieldType | None) -> FieldValue | None:
    """Convert a YAML value to a field value.

    Mappings and lists holding anything but scalars become NestedValue.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        value = value.date()

    if declared is FieldType.DATE and isinstance(value, str):
        try:
            return date.fromisoformat(value.strip())
        except ValueError:
            return value
    if declared is FieldType.STRING_LIST and isinstance(value, str):
        return (value,)

    if isinstance(value, bool | int | float | str | date):
        return value
    if isinstance(value, list):
        items = [_list_item(item) for item in value]
        if all(item is not None for item in items):
            return tuple(items)
        return NestedValue("list", _flow_yaml(value))
    if isinstance(value, dict):
        return NestedValue("mapping", _flow_yaml(value))
    return NestedValue(type(value).__name__, _flow_yaml(value))


def _flow_yaml(value: Any) -> str:
    return yaml.safe_dump(value, default_flow_style=True, sort_keys=False, width=2**16).strip()


def _list_item(item: Any) -> str | None:
    """Render one scalar list item as a string (None for non-scalars)."""
    match item:
        case bool():
            return "true" if item else "false"
        case datetime():
            return item.date().isoformat()
        case date():
            return item.isoformat()
        case str():
            return item
        case int() | float():
            return str(item)
        case _:
            return None
