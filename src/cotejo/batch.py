"""Checking documents: parse + validate, one at a time or in batches.

Each document is parsed and validated independently. The only state shared
between documents is read-only: the ParseConfig (frozen) and the reference
index, which is snapshotted before any work starts.

Usage:
    >>> checker = Checker(default_filetype="project")
    >>> results = checker.check_many(
    ...     [SourceDocument("# A\\n", source_file="a.md"), SourceDocument(b"\\xff")],
    ...     references={"a.md": True},
    ... )
    >>> [r.has_errors for r in results]
    [True, True]

Thread Safety:
    check_many runs documents on a ThreadPoolExecutor. ContextVars are not
    inherited by pool threads, so each task installs the checker's config
    itself.

"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from cotejo.config import ParseConfig, get_parse_config, parse_config_context
from cotejo.diagnostics import Diagnostic, DiagnosticKind, has_errors
from cotejo.errors import EncodingError
from cotejo.filetypes import FiletypeRegistry
from cotejo.location import Span
from cotejo.nodes import Document
from cotejo.parser import Parser
from cotejo.references import ReferenceIndex
from cotejo.utils.logger import get_logger
from cotejo.validator import Validator

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """One input to check_many.

    Attributes:
        source: Document text, or UTF-8 bytes
        filetype: Filetype hint, used when front matter names none
        source_file: Path or label for messages

    """

    source: str | bytes
    filetype: str | None = None
    source_file: str | None = None


@dataclass(frozen=True, slots=True)
class DocumentResult:
    """Outcome of checking one document.

    ``document`` is None when the document could not be decoded.
    """

    source_file: str | None
    document: Document | None
    diagnostics: tuple[Diagnostic, ...]

    @property
    def has_errors(self) -> bool:
        return has_errors(self.diagnostics)


class Checker:
    """Parse and validate documents with one fixed configuration.

    Usage:
        >>> checker = Checker()
        >>> result = checker.check("---\\nfiletype: project\\n---\\n# Plan\\n")
        >>> sorted({d.kind.value for d in result.diagnostics})
        ['missing-field', 'missing-section']

    Thread Safety:
        Holds only immutable state. Safe to share across threads.

    """

    __slots__ = ("_config",)

    def __init__(
        self,
        *,
        default_filetype: str | None = None,
        registry: FiletypeRegistry | None = None,
        max_nesting: int | None = None,
        config: ParseConfig | None = None,
    ) -> None:
        """Initialize checker.

        Args:
            default_filetype: Filetype for documents that name none
            registry: Filetype registry (None = built-in filetypes)
            max_nesting: Container / inline nesting limit
            config: Base configuration (None = the current context's);
                the other arguments override its fields
        """
        base = config or get_parse_config()
        self._config = ParseConfig(
            default_filetype=default_filetype or base.default_filetype,
            registry=registry if registry is not None else base.registry,
            max_nesting=max_nesting if max_nesting is not None else base.max_nesting,
        )

    @property
    def config(self) -> ParseConfig:
        return self._config

    def parse(
        self,
        source: str | bytes,
        *,
        filetype: str | None = None,
        source_file: str | None = None,
    ) -> Document:
        """Parse one document with this checker's configuration.

        Raises:
            EncodingError: ``source`` is bytes that are not valid UTF-8
        """
        with parse_config_context(self._config):
            return Parser(source, filetype=filetype, source_file=source_file).parse()

    def validate(
        self, doc: Document, *, references: Mapping[str, bool] | None = None
    ) -> tuple[Diagnostic, ...]:
        """Validate a parsed document; returns parse + validation diagnostics."""
        validator = Validator(self._config.get_registry(), references)
        return validator.validate(doc)

    def check(
        self,
        source: str | bytes,
        *,
        filetype: str | None = None,
        source_file: str | None = None,
        references: Mapping[str, bool] | None = None,
    ) -> DocumentResult:
        """Parse and validate one document.

        A document that is not valid UTF-8 yields a result with a single
        invalid-encoding diagnostic instead of raising.
        """
        document = SourceDocument(source, filetype, source_file)
        return self._check_one(document, ReferenceIndex.snapshot(references))

    def check_many(
        self,
        documents: Iterable[SourceDocument | str | bytes],
        *,
        references: Mapping[str, bool] | None = None,
        max_workers: int | None = None,
    ) -> list[DocumentResult]:
        """Check documents concurrently.

        Args:
            documents: Inputs; bare text or bytes are wrapped in SourceDocument
            references: Identifier -> exists index, shared read-only
            max_workers: Thread pool size (None = executor default)

        Returns:
            One result per input, in input order
        """
        inputs = [d if isinstance(d, SourceDocument) else SourceDocument(d) for d in documents]
        index = ReferenceIndex.snapshot(references)
        if not inputs:
            return []

        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            results = list(executor.map(lambda d: self._check_one(d, index), inputs))

        failed = sum(1 for r in results if r.has_errors)
        logger.debug("Checked %d documents, %d with errors", len(results), failed)
        return results

    def _check_one(self, document: SourceDocument, index: ReferenceIndex | None) -> DocumentResult:
        try:
            doc = self.parse(
                document.source,
                filetype=document.filetype,
                source_file=document.source_file,
            )
        except EncodingError as e:
            logger.warning("Skipping %s: %s", document.source_file or "<document>", e.message)
            diagnostic = Diagnostic.error(
                DiagnosticKind.INVALID_ENCODING,
                f"document is not valid UTF-8 (byte {e.offset})",
                Span.empty(e.offset),
            )
            return DocumentResult(document.source_file, None, (diagnostic,))

        return DocumentResult(
            document.source_file,
            doc,
            self.validate(doc, references=index),
        )


__all__ = ["Checker", "DocumentResult", "SourceDocument"]
