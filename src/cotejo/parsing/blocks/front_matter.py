"""Front-matter block parsing for Cotejo parser.

The lexer marks the first-line ``---`` and its closer with
FRONT_MATTER_FENCE tokens and passes the lines between through verbatim.
This mixin collects those lines, decodes them, and reports problems as
diagnostics so the body is always parsed.
"""

from __future__ import annotations

from collections.abc import Sequence

from cotejo.diagnostics import Diagnostic, DiagnosticKind
from cotejo.errors import FrontMatterError
from cotejo.frontmatter import build_fields, filetype_name, load_front_matter
from cotejo.location import Span
from cotejo.nodes import FrontMatter, FrontMatterField
from cotejo.parsing.blocks.core import BlockCursor, BlockState
from cotejo.parsing.lines import Line
from cotejo.tokens import TokenType
from cotejo.utils.logger import get_logger

logger = get_logger(__name__)


class FrontMatterParsingMixin:
    """Mixin for the leading front-matter block.

    Required Host Attributes:
        - _diagnostics: list[Diagnostic]

    Required Host Methods:
        - _resolve_filetype(name) -> Filetype | None

    """

    _diagnostics: list[Diagnostic]

    def _on_front_matter(self, cursor: BlockCursor) -> BlockState:
        opener = cursor.advance()
        body: list[Line] = []
        closer: Line | None = None
        while (line := cursor.current) is not None:
            cursor.advance()
            first = line.first
            if first is not None and first.type is TokenType.FRONT_MATTER_FENCE:
                closer = line
                break
            body.append(line)

        end = closer.end if closer is not None else max(cursor.input_end, opener.end)
        span = Span(opener.span.start, end, opener.lineno, opener.span.col)
        if closer is None:
            self._diagnostics.append(
                Diagnostic.error(
                    DiagnosticKind.UNTERMINATED_CONSTRUCT,
                    "front matter is never closed",
                    opener.span,
                )
            )
            logger.debug("Unterminated front matter at %s", opener.span)

        text = "\n".join(line.raw() for line in body)
        fields = self._decode_front_matter(text, [line.span for line in body], span)
        cursor.blocks.append(FrontMatter(span=span, fields=fields, raw=text))
        return BlockState.START

    def _decode_front_matter(
        self, text: str, line_spans: Sequence[Span], span: Span
    ) -> tuple[FrontMatterField, ...]:
        """Decode front matter, resolving the filetype it names.

        Undecodable front matter yields an empty field tuple and a diagnostic.
        """
        try:
            entries = load_front_matter(text)
        except FrontMatterError as e:
            self._report_front_matter(e, span)
            self._resolve_filetype(None)
            return ()

        filetype = self._resolve_filetype(filetype_name(entries))
        return build_fields(entries, line_spans, span, filetype)

    def _report_front_matter(self, error: FrontMatterError, span: Span) -> None:
        logger.debug("Malformed front matter at %s: %s", span, error)
        self._diagnostics.append(
            Diagnostic.error(
                DiagnosticKind.MALFORMED_FRONT_MATTER,
                f"malformed front matter: {error}",
                span,
            )
        )
