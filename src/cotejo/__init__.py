"""
Cotejo: Markdown document parser and validator.

Parses a Markdown dialect into a typed, owned, immutable document tree and
validates it against per-filetype rules: front-matter schema, allowed
structure, heading hierarchy, link targets and heading identifiers.

Quick Start:
    >>> from cotejo import parse, validate
    >>> doc = parse("---\\ntitle: Hello\\n---\\n# Hello **World**\\n")
    >>> doc.front_matter["title"]
    'Hello'
    >>> validate(doc)
    ()

Batch checking:
    >>> from cotejo import SourceDocument, check_many
    >>> results = check_many([SourceDocument("# A\\n", filetype="project")])
    >>> results[0].has_errors
    True

Custom filetypes:
    >>> from cotejo import Checker, Filetype, create_registry_with_defaults
    >>>
    >>> builder = create_registry_with_defaults()
    >>> builder.register(Filetype("journal"))
    >>> checker = Checker(registry=builder.build())
"""

from collections.abc import Iterable, Mapping

from cotejo.batch import Checker, DocumentResult, SourceDocument
from cotejo.config import (
    ParseConfig,
    get_parse_config,
    parse_config_context,
    reset_parse_config,
    set_parse_config,
)
from cotejo.diagnostics import Diagnostic, DiagnosticKind, Severity, has_errors
from cotejo.errors import CotejoError, EncodingError, FrontMatterError, RegistryError
from cotejo.filetypes import (
    FieldSpec,
    FieldType,
    Filetype,
    FiletypeRegistry,
    FiletypeRegistryBuilder,
    create_default_registry,
    create_registry_with_defaults,
)
from cotejo.lexer import Lexer
from cotejo.location import Span
from cotejo.nodes import (
    Block,
    BlockQuote,
    CodeBlock,
    Document,
    Emphasis,
    FrontMatter,
    FrontMatterField,
    Heading,
    Image,
    Inline,
    InlineCode,
    LineBreak,
    Link,
    List,
    ListItem,
    NestedValue,
    Node,
    NodeKind,
    Paragraph,
    SoftBreak,
    Table,
    TableCell,
    TableRow,
    Text,
    ThematicBreak,
)
from cotejo.parser import Parser
from cotejo.references import ReferenceIndex
from cotejo.serialization import from_dict, from_json, to_dict, to_json
from cotejo.text import extract_text
from cotejo.tokens import Token, TokenType
from cotejo.validator import Validator
from cotejo.visitor import BaseVisitor, walk

__version__ = "0.1.0"


def parse(
    source: str | bytes,
    *,
    filetype: str | None = None,
    source_file: str | None = None,
) -> Document:
    """Parse a document into a typed tree.

    Uses the ParseConfig of the current context (see parse_config_context).

    Args:
        source: Document text, or UTF-8 bytes
        filetype: Filetype hint, used when front matter names none
        source_file: Optional source file path for messages

    Returns:
        Document root node, with parse diagnostics attached

    Raises:
        EncodingError: ``source`` is bytes that are not valid UTF-8

    Example:
        >>> doc = parse("# Hello **World**")
        >>> doc.children[0].identifier
        'hello-world'
    """
    return Parser(source, filetype=filetype, source_file=source_file).parse()


def validate(
    doc: Document,
    *,
    references: Mapping[str, bool] | None = None,
) -> tuple[Diagnostic, ...]:
    """Validate a parsed document against its filetype.

    Args:
        doc: Document from parse()
        references: Identifier -> exists index for link targets (None
            accepts any well-formed target)

    Returns:
        Parse and validation diagnostics, ordered by span then severity
    """
    return Validator(references=references).validate(doc)


def check(
    source: str | bytes,
    *,
    filetype: str | None = None,
    source_file: str | None = None,
    references: Mapping[str, bool] | None = None,
) -> DocumentResult:
    """Parse and validate one document with the current context's config."""
    return Checker().check(
        source, filetype=filetype, source_file=source_file, references=references
    )


def check_many(
    documents: Iterable[SourceDocument | str | bytes],
    *,
    references: Mapping[str, bool] | None = None,
    max_workers: int | None = None,
) -> list[DocumentResult]:
    """Check documents concurrently with the current context's config.

    Results keep input order. A document that is not valid UTF-8 gets a
    single invalid-encoding diagnostic; the others are unaffected.
    """
    return Checker().check_many(documents, references=references, max_workers=max_workers)


__all__ = [
    # Main API
    "parse",
    "validate",
    "check",
    "check_many",
    "Checker",
    "DocumentResult",
    "SourceDocument",
    "Parser",
    "Validator",
    "Lexer",
    "extract_text",
    # Configuration
    "ParseConfig",
    "get_parse_config",
    "set_parse_config",
    "reset_parse_config",
    "parse_config_context",
    # Filetypes
    "FieldSpec",
    "FieldType",
    "Filetype",
    "FiletypeRegistry",
    "FiletypeRegistryBuilder",
    "create_default_registry",
    "create_registry_with_defaults",
    # Diagnostics and errors
    "Diagnostic",
    "DiagnosticKind",
    "Severity",
    "has_errors",
    "CotejoError",
    "EncodingError",
    "FrontMatterError",
    "RegistryError",
    # References
    "ReferenceIndex",
    # Tokens and spans
    "Span",
    "Token",
    "TokenType",
    # Nodes
    "Block",
    "BlockQuote",
    "CodeBlock",
    "Document",
    "Emphasis",
    "FrontMatter",
    "FrontMatterField",
    "Heading",
    "Image",
    "Inline",
    "InlineCode",
    "LineBreak",
    "Link",
    "List",
    "ListItem",
    "NestedValue",
    "Node",
    "NodeKind",
    "Paragraph",
    "SoftBreak",
    "Table",
    "TableCell",
    "TableRow",
    "Text",
    "ThematicBreak",
    # Tree utilities
    "BaseVisitor",
    "walk",
    # Serialization
    "to_dict",
    "from_dict",
    "to_json",
    "from_json",
    # Version
    "__version__",
]
