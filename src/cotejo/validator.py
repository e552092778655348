"""Document validation against filetype rules.

Validation runs every check over a finished Document and collects every
diagnostic; nothing short-circuits. Checks:

(a) front matter: required fields present, declared types respected,
    undeclared fields reported as warnings
(b) structure: top-level node kinds, level-2 sections, heading levels
(c) references: link and image targets; without a reference index only
    their form is checked
(d) uniqueness: heading identifiers

When the document's filetype is not registered, a single warning is
emitted and (a) and (b) are skipped; (c) and (d) still run.

Thread Safety:
Validator instances hold only read-only state (registry, reference index).
One instance can validate documents on any number of threads.

"""

from __future__ import annotations

from collections.abc import Iterator, Mapping

from cotejo.config import get_parse_config
from cotejo.diagnostics import Diagnostic, DiagnosticKind, sort_diagnostics
from cotejo.filetypes import FILETYPE_KEY, Filetype, FiletypeRegistry
from cotejo.location import Span
from cotejo.nodes import (
    Block,
    Document,
    FieldValue,
    Heading,
    Image,
    Link,
    ListItem,
    NestedValue,
    Node,
)
from cotejo.references import ReferenceIndex, is_external, is_well_formed, split_fragment
from cotejo.text import extract_text
from cotejo.utils.logger import get_logger
from cotejo.visitor import BaseVisitor, walk

logger = get_logger(__name__)

SECTION_LEVEL = 2


class HeadingCollector(BaseVisitor):
    """Headings in document order, each with its container depth."""

    def __init__(self) -> None:
        super().__init__()
        self.headings: list[tuple[Heading, int]] = []

    def visit_heading(self, node: Heading) -> bool:
        self.headings.append((node, self.depth))
        return True


class ReferenceCollector(BaseVisitor):
    """Links and images in document order."""

    def __init__(self) -> None:
        super().__init__()
        self.references: list[Link | Image] = []

    def visit_link(self, node: Link) -> None:
        self.references.append(node)

    def visit_image(self, node: Image) -> None:
        self.references.append(node)


def _type_name(value: FieldValue) -> str:
    if isinstance(value, NestedValue):
        return value.kind
    return type(value).__name__


def _section_items(doc: Document, filetype: Filetype) -> Iterator[ListItem]:
    """List items under the filetype's actions section, nested ones included."""
    renamed = dict(filetype.renamed_sections)
    blocks: list[Block] = []
    inside = False
    for block in doc.children:
        if isinstance(block, Heading) and block.level <= SECTION_LEVEL:
            title = extract_text(block).strip()
            inside = (
                block.level == SECTION_LEVEL
                and renamed.get(title, title) == filetype.actions_section
            )
        elif inside:
            blocks.append(block)
    for block in blocks:
        yield from (node for node in walk(block) if isinstance(node, ListItem))


def iter_headings(node: Node) -> Iterator[tuple[Heading, int]]:
    """Yield every heading in document order with its container depth.

    Block quotes and list items each add one level of depth.
    """
    yield from HeadingCollector().visit(node).headings


class Validator:
    """Validate Documents against their filetype.

    Usage:
        >>> from cotejo import parse
        >>> doc = parse("# A\\n\\n### B\\n")
        >>> [d.kind.value for d in Validator().validate(doc)]
        ['heading-level-skip']

    """

    __slots__ = ("_registry", "_references")

    def __init__(
        self,
        registry: FiletypeRegistry | None = None,
        references: Mapping[str, bool] | None = None,
    ) -> None:
        """Initialize validator.

        Args:
            registry: Filetype registry (None = the configured registry)
            references: Identifier -> exists index for link targets. None
                accepts any well-formed target.
        """
        self._registry = registry
        self._references = ReferenceIndex.snapshot(references)

    def validate(self, doc: Document) -> tuple[Diagnostic, ...]:
        """Run all checks.

        Returns:
            The document's parse diagnostics plus the validation
            diagnostics, ordered by span then severity
        """
        registry = self._registry
        if registry is None:
            registry = get_parse_config().get_registry()
        filetype = registry.get(doc.filetype)
        found: list[Diagnostic] = []

        if filetype is None:
            found.append(self._unknown_filetype(doc))
        else:
            found.extend(self._check_front_matter(doc, filetype))
            found.extend(self._check_structure(doc, filetype))
        found.extend(self._check_references(doc, filetype))
        found.extend(self._check_identifiers(doc))

        logger.debug(
            "Validated %s as %r: %d diagnostics",
            doc.source_file or "<document>",
            doc.filetype,
            len(found),
        )
        return sort_diagnostics([*doc.diagnostics, *found])

    # =========================================================================
    # Filetype
    # =========================================================================

    def _unknown_filetype(self, doc: Document) -> Diagnostic:
        span = Span.empty()
        fm = doc.front_matter_node
        if fm is not None:
            declared = fm.get(FILETYPE_KEY)
            span = declared.span if declared is not None else fm.span
        return Diagnostic.warning(
            DiagnosticKind.UNKNOWN_FILETYPE,
            f"unknown filetype {doc.filetype!r}; front matter and structure not checked",
            span,
            doc.filetype,
        )

    # =========================================================================
    # (a) Front matter
    # =========================================================================

    def _check_front_matter(self, doc: Document, filetype: Filetype) -> Iterator[Diagnostic]:
        fm = doc.front_matter_node
        anchor = fm.span if fm is not None else Span.empty()
        malformed = any(d.kind is DiagnosticKind.MALFORMED_FRONT_MATTER for d in doc.diagnostics)

        for spec in filetype.fields:
            value = doc.front_matter.get(spec.name)
            if value is None:
                # Fields of malformed front matter are unknown, not absent
                if spec.required and not malformed:
                    yield Diagnostic.error(
                        DiagnosticKind.MISSING_FIELD,
                        f"missing required field {spec.name!r}",
                        anchor,
                        spec.name,
                    )
                continue
            if not spec.type.accepts(value):
                field = fm.get(spec.name) if fm is not None else None
                yield Diagnostic.error(
                    DiagnosticKind.TYPE_MISMATCH,
                    f"field {spec.name!r} should be {spec.type.value}, "
                    f"got {_type_name(value)}",
                    field.span if field is not None else anchor,
                    spec.name,
                )

        if fm is None:
            return
        for field in fm.fields:
            if field.key == FILETYPE_KEY:
                if not isinstance(field.value, str):
                    yield Diagnostic.error(
                        DiagnosticKind.TYPE_MISMATCH,
                        f"field {FILETYPE_KEY!r} should be string, "
                        f"got {_type_name(field.value)}",
                        field.span,
                        FILETYPE_KEY,
                    )
            elif filetype.get_field(field.key) is None:
                yield Diagnostic.warning(
                    DiagnosticKind.UNKNOWN_FIELD,
                    f"field {field.key!r} is not part of the {filetype.name!r} schema",
                    field.span,
                    field.key,
                )

    # =========================================================================
    # (b) Structure
    # =========================================================================

    def _check_structure(self, doc: Document, filetype: Filetype) -> Iterator[Diagnostic]:
        renamed = dict(filetype.renamed_sections)
        sections: set[str] = set()
        for block in doc.children:
            if block.kind not in filetype.allowed_nodes:
                yield Diagnostic.error(
                    DiagnosticKind.DISALLOWED_NODE,
                    f"{block.kind.value} is not allowed in a {filetype.name!r} document",
                    block.span,
                    block.kind.value,
                )
            if isinstance(block, Heading) and block.level == SECTION_LEVEL:
                title = extract_text(block).strip()
                if title in renamed:
                    yield Diagnostic.warning(
                        DiagnosticKind.DEPRECATED_SECTION,
                        f"section {title!r} is deprecated; rename it to {renamed[title]!r}",
                        block.span,
                        title,
                    )
                    title = renamed[title]
                sections.add(title)
                allowed = filetype.allowed_sections
                if allowed is not None and title not in allowed:
                    yield Diagnostic.warning(
                        DiagnosticKind.UNEXPECTED_SECTION,
                        f"unexpected section {title!r}",
                        block.span,
                        title,
                    )

        fm = doc.front_matter_node
        anchor = fm.span if fm is not None else Span.empty()
        for title in filetype.required_sections:
            if title not in sections:
                yield Diagnostic.error(
                    DiagnosticKind.MISSING_SECTION,
                    f"missing required section {title!r}",
                    anchor,
                    title,
                )

        yield from self._check_heading_levels(doc)
        if filetype.completion_field is not None:
            yield from self._check_completion(doc, filetype)

    def _check_completion(self, doc: Document, filetype: Filetype) -> Iterator[Diagnostic]:
        """A document marked complete may not have unchecked actions."""
        field = filetype.completion_field
        if field is None or doc.front_matter.get(field) is not True:
            return
        for item in _section_items(doc, filetype):
            if item.checked is False:
                yield Diagnostic.error(
                    DiagnosticKind.INCOMPLETE_ACTIONS,
                    f"{field!r} is true but action {extract_text(item).strip()!r} is not checked",
                    item.span,
                    field,
                )

    def _check_heading_levels(self, doc: Document) -> Iterator[Diagnostic]:
        """A heading may be at most one level deeper than the previous one.

        The previous heading is the most recent one at the same or a
        shallower container depth. The first heading is never a skip.
        """
        # (depth, level) of recent headings; depths strictly increase upwards
        recent: list[tuple[int, int]] = []
        for heading, depth in iter_headings(doc):
            previous = next((level for d, level in reversed(recent) if d <= depth), None)
            if previous is not None and heading.level > previous + 1:
                yield Diagnostic.error(
                    DiagnosticKind.HEADING_LEVEL_SKIP,
                    f"heading level {heading.level} follows level {previous}",
                    heading.span,
                    heading.identifier or None,
                )
            while recent and recent[-1][0] >= depth:
                recent.pop()
            recent.append((depth, heading.level))

    # =========================================================================
    # (c) References
    # =========================================================================

    def _check_references(self, doc: Document, filetype: Filetype | None) -> Iterator[Diagnostic]:
        """Without an index only the form of a target is checked."""
        index = self._references
        resolve = index is not None and (filetype is None or filetype.resolve_references)
        identifiers = {h.identifier for h, _ in iter_headings(doc)} if index is not None else set()

        for node in ReferenceCollector().visit(doc).references:
            target = node.target
            problem: str | None = None
            if not is_well_formed(target):
                problem = "empty target" if not target else "target contains whitespace"
            elif is_external(target) or index is None:
                continue
            elif target.startswith("#"):
                if target[1:] not in identifiers:
                    problem = f"no heading with identifier {target[1:]!r}"
            elif resolve and split_fragment(target)[0]:
                if not index.exists(target):
                    problem = "target not found"
            if problem is not None:
                what = "image" if isinstance(node, Image) else "link"
                yield Diagnostic.error(
                    DiagnosticKind.BROKEN_REFERENCE,
                    f"broken {what} {target!r}: {problem}",
                    node.span,
                    target,
                )

    # =========================================================================
    # (d) Identifiers
    # =========================================================================

    def _check_identifiers(self, doc: Document) -> Iterator[Diagnostic]:
        seen: dict[str, Heading] = {}
        for heading, _ in iter_headings(doc):
            identifier = heading.identifier
            if not identifier:
                continue
            first = seen.setdefault(identifier, heading)
            if first is not heading:
                yield Diagnostic.error(
                    DiagnosticKind.DUPLICATE_IDENTIFIER,
                    f"duplicate heading identifier {identifier!r} (first at {first.span})",
                    heading.span,
                    identifier,
                )


def validate(
    doc: Document,
    *,
    references: Mapping[str, bool] | None = None,
    registry: FiletypeRegistry | None = None,
) -> tuple[Diagnostic, ...]:
    """Validate ``doc``; see Validator."""
    return Validator(registry, references).validate(doc)


__all__ = ["HeadingCollector", "ReferenceCollector", "Validator", "iter_headings", "validate"]
