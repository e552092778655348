"""State-machine parser producing a typed, owned document tree.

Consumes the token stream from Lexer and builds frozen dataclass nodes.

Architecture:
The parser uses a mixin-based design for separation of concerns:
- `InlineParsingMixin`: Inline content (emphasis, links, code spans)
- `BlockParsingMixin`: Block-level content (paragraphs, lists, tables,
  front matter)

Thread Safety:
- Parser produces an immutable tree (frozen dataclasses)
- Configuration is read from ContextVar (thread-local)
- Safe to share the resulting Document across threads

"""

from __future__ import annotations

from types import MappingProxyType

from cotejo.config import get_parse_config
from cotejo.diagnostics import Diagnostic, sort_diagnostics
from cotejo.errors import EncodingError
from cotejo.filetypes import Filetype
from cotejo.lexer import Lexer
from cotejo.location import Span
from cotejo.nodes import Document, FrontMatter
from cotejo.parsing import BlockParsingMixin, InlineParsingMixin, build_lines
from cotejo.utils.logger import get_logger

logger = get_logger(__name__)


def decode_source(source: str | bytes, source_file: str | None = None) -> str:
    """Return ``source`` as text, decoding UTF-8 bytes.

    Raises:
        EncodingError: The bytes are not valid UTF-8
    """
    if isinstance(source, str):
        return source
    try:
        return source.decode("utf-8")
    except UnicodeDecodeError as e:
        raise EncodingError(f"invalid UTF-8: {e.reason}", e.start, source_file) from e


class Parser(
    InlineParsingMixin,
    BlockParsingMixin,
):
    """Parser for one document.

    Usage:
        >>> parser = Parser("# Hello\\n\\nWorld")
        >>> doc = parser.parse()
        >>> doc.children[0].identifier
        'hello'

    Thread Safety:
        Parser instances are single-use and not thread-safe. Create one per
        parse operation. Configuration is read from ContextVar (thread-local).
        The resulting Document is immutable and thread-safe.

    Configuration:
        The registry, default filetype and nesting limit come from the
        ParseConfig in the current context. Use parse_config_context() around
        the Parser if you need non-default configuration.

    """

    __slots__ = (
        "_source",
        "_source_file",
        "_filetype_hint",
        "_filetype",
        "_filetype_name",
        "_diagnostics",
        "_max_nesting",
        "_task_lists",
    )

    def __init__(
        self,
        source: str | bytes,
        *,
        filetype: str | None = None,
        source_file: str | None = None,
    ) -> None:
        """Initialize parser with source text.

        Args:
            source: Document text, or UTF-8 bytes
            filetype: Filetype hint, used when front matter names none
            source_file: Optional source file path for messages

        Raises:
            EncodingError: ``source`` is bytes that are not valid UTF-8
        """
        self._source = decode_source(source, source_file)
        self._source_file = source_file
        self._filetype_hint = filetype
        self._filetype: Filetype | None = None
        self._filetype_name = ""
        self._diagnostics: list[Diagnostic] = []
        self._max_nesting = get_parse_config().max_nesting
        self._task_lists = False

    def parse(self) -> Document:
        """Parse the source into a Document.

        Returns:
            Document with blocks, resolved filetype, decoded front matter
            and parse diagnostics

        Thread Safety:
            Returns an immutable tree (frozen dataclasses).
        """
        self._diagnostics = []
        self._resolve_filetype(None)

        tokens = list(Lexer(self._source).tokenize())
        lines = build_lines(tokens)
        blocks = self._parse_blocks(lines, 0, front_matter=True)

        front_matter: dict = {}
        if blocks and isinstance(blocks[0], FrontMatter):
            front_matter = {f.key: f.value for f in blocks[0].fields}

        end = tokens[-1].end if tokens else 0
        return Document(
            span=Span(0, end, 1, 1),
            children=blocks,
            filetype=self._filetype_name,
            front_matter=MappingProxyType(front_matter),
            diagnostics=sort_diagnostics(self._diagnostics),
            source_file=self._source_file,
        )

    def _resolve_filetype(self, declared: str | None) -> Filetype | None:
        """Pick the document's filetype.

        Order: the front-matter ``filetype`` field, then the caller's hint,
        then the configured default. The name is kept even when the registry
        does not know it, so validation can report it.
        """
        config = get_parse_config()
        if declared:
            name, origin = declared, "front matter"
        elif self._filetype_hint:
            name, origin = self._filetype_hint, "hint"
        else:
            name, origin = config.default_filetype, "default"

        self._filetype_name = name
        self._filetype = config.get_registry().get(name)
        self._task_lists = self._filetype is not None and self._filetype.task_lists
        logger.debug(
            "Filetype %r from %s (%s)",
            name,
            origin,
            "registered" if self._filetype is not None else "unknown",
        )
        return self._filetype
