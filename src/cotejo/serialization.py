"""Document serialization: JSON round-trip for Cotejo trees.

Converts typed nodes (and the spans, front-matter fields and diagnostics
they carry) to and from JSON-compatible dicts. Useful for:
- Caching parsed documents between runs
- Handing results to tools written in other languages
- Debugging and inspection

All output is deterministic (sorted keys) for cache-key stability.

Example:
    from cotejo import parse
    from cotejo.serialization import to_json, from_json

    doc = parse("# Hello **World**")
    json_str = to_json(doc)
    restored = from_json(json_str)
    assert doc == restored

Thread Safety:
    All functions are pure and safe to call from any thread.

"""

import json
from dataclasses import fields
from datetime import date
from types import MappingProxyType
from typing import Any

from cotejo.diagnostics import Diagnostic, DiagnosticKind, Severity
from cotejo.location import Span
from cotejo.nodes import (
    BlockQuote,
    CodeBlock,
    Document,
    Emphasis,
    FrontMatter,
    FrontMatterField,
    Heading,
    Image,
    InlineCode,
    LineBreak,
    Link,
    List,
    ListItem,
    NestedValue,
    Node,
    Paragraph,
    SoftBreak,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)

# Registry of node type names to classes for deserialization
_NODE_TYPES: dict[str, type[Node]] = {
    cls.__name__: cls
    for cls in (
        Document,
        FrontMatter,
        Heading,
        Paragraph,
        CodeBlock,
        BlockQuote,
        List,
        ListItem,
        ThematicBreak,
        Table,
        TableRow,
        TableCell,
        Text,
        Emphasis,
        Link,
        Image,
        InlineCode,
        LineBreak,
        SoftBreak,
    )
}


def to_dict(node: Node) -> dict[str, Any]:
    """Convert a node to a JSON-compatible dict.

    Includes a ``_type`` discriminator field for deserialization.
    Recursively serializes child nodes, spans, fields and diagnostics.

    Args:
        node: Any Cotejo node.

    Returns:
        Dict with ``_type`` and all node fields.

    """
    result: dict[str, Any] = {"_type": type(node).__name__}

    for f in fields(node):
        result[f.name] = _serialize_value(getattr(node, f.name))

    return result


def _serialize_value(value: Any) -> Any:
    """Serialize a single field value."""
    match value:
        case Node():
            return to_dict(value)
        case Span():
            return {
                "_type": "Span",
                "start": value.start,
                "end": value.end,
                "lineno": value.lineno,
                "col": value.col,
            }
        case FrontMatterField():
            return {
                "_type": "FrontMatterField",
                "key": value.key,
                "value": _serialize_value(value.value),
                "span": _serialize_value(value.span),
            }
        case Diagnostic():
            return {
                "_type": "Diagnostic",
                "severity": value.severity.value,
                "kind": value.kind.value,
                "message": value.message,
                "span": _serialize_value(value.span),
                "subject": value.subject,
            }
        case NestedValue():
            return {"_type": "NestedValue", "kind": value.kind, "text": value.text}
        case date():
            return {"_type": "date", "value": value.isoformat()}
        case tuple():
            return [_serialize_value(item) for item in value]
        case MappingProxyType() | dict():
            items = {str(k): _serialize_value(v) for k, v in value.items()}
            return {"_type": "Mapping", "items": items}
    # Primitives: str, int, float, bool, None
    return value


def from_dict(data: dict[str, Any]) -> Node:
    """Reconstruct a typed node from a dict.

    Uses the ``_type`` discriminator to determine the node class.

    Args:
        data: Dict with ``_type`` and node fields (as produced by to_dict).

    Returns:
        Typed node (frozen dataclass).

    Raises:
        ValueError: If ``_type`` is missing or unknown.

    """
    type_name = data.get("_type")
    if type_name is None:
        msg = "Missing '_type' field in serialized node"
        raise ValueError(msg)

    node_cls = _NODE_TYPES.get(type_name)
    if node_cls is None:
        msg = f"Unknown node type: {type_name!r}"
        raise ValueError(msg)

    kwargs: dict[str, Any] = {}
    for f in fields(node_cls):
        if f.name not in data:
            continue
        kwargs[f.name] = _deserialize_value(data[f.name])

    return node_cls(**kwargs)


def _deserialize_value(value: Any) -> Any:
    """Deserialize a single field value."""
    if isinstance(value, dict):
        match value.get("_type"):
            case None:
                return value
            case "Mapping":
                items = value["items"]
                return MappingProxyType({k: _deserialize_value(v) for k, v in items.items()})
            case "Span":
                return Span(value["start"], value["end"], value["lineno"], value["col"])
            case "FrontMatterField":
                return FrontMatterField(
                    value["key"],
                    _deserialize_value(value["value"]),
                    _deserialize_value(value["span"]),
                )
            case "Diagnostic":
                return Diagnostic(
                    Severity(value["severity"]),
                    DiagnosticKind(value["kind"]),
                    value["message"],
                    _deserialize_value(value["span"]),
                    value.get("subject"),
                )
            case "NestedValue":
                return NestedValue(value["kind"], value["text"])
            case "date":
                return date.fromisoformat(value["value"])
            case _:
                return from_dict(value)
    if isinstance(value, list):
        return tuple(_deserialize_value(item) for item in value)
    return value


def to_json(doc: Document, *, indent: int | None = None) -> str:
    """Serialize a Document to a JSON string.

    Output is deterministic (sorted keys) for cache-key stability.

    Args:
        doc: Document to serialize.
        indent: JSON indentation level (None for compact).

    Returns:
        JSON string.

    """
    return json.dumps(to_dict(doc), sort_keys=True, indent=indent)


def from_json(data: str) -> Document:
    """Deserialize a Document from a JSON string.

    Args:
        data: JSON string (as produced by to_json).

    Returns:
        Document node.

    Raises:
        ValueError: If the JSON doesn't represent a Document.

    """
    raw = json.loads(data)
    node = from_dict(raw)
    if not isinstance(node, Document):
        msg = f"Expected Document, got {type(node).__name__}"
        raise ValueError(msg)
    return node


__all__ = ["from_dict", "from_json", "to_dict", "to_json"]
