"""Exception classes for Cotejo.

Recoverable problems in a document (an unclosed fence, bad front matter, a
broken link) are reported as Diagnostics, never raised. Exceptions are kept
for conditions that abort a whole document and for programming errors.
"""

from __future__ import annotations


class CotejoError(Exception):
    """Base exception for all Cotejo errors.

    Subclass this for specific error categories.
    """

    pass


class EncodingError(CotejoError):
    """Source bytes are not valid UTF-8.

    Fatal for the document: nothing is parsed. Batch checking turns this
    into a single invalid-encoding diagnostic for that document.
    """

    def __init__(
        self,
        message: str,
        offset: int = 0,
        source_file: str | None = None,
    ) -> None:
        """Initialize encoding error.

        Args:
            message: Error description
            offset: Byte offset of the first undecodable byte
            source_file: Path to source file (optional)
        """
        self.message = message
        self.offset = offset
        self.source_file = source_file

        location = f"{source_file}: " if source_file else ""
        super().__init__(f"{location}{message} (byte {offset})")


class FrontMatterError(CotejoError):
    """Front matter could not be decoded.

    Raised by the front-matter decoder and caught by the parser, which
    records a malformed-front-matter diagnostic and keeps going.
    """

    def __init__(self, message: str, lineno: int | None = None) -> None:
        """Initialize front-matter error.

        Args:
            message: Description of the problem
            lineno: Source line of the problem (1-indexed, optional)
        """
        self.message = message
        self.lineno = lineno
        location = f"line {lineno}: " if lineno is not None else ""
        super().__init__(f"{location}{message}")


class RegistryError(CotejoError):
    """Misuse of the filetype registry.

    Raised for duplicate registrations or invalid filetype definitions.
    """

    def __init__(self, filetype: str, message: str) -> None:
        """Initialize registry error.

        Args:
            filetype: Name of the offending filetype
            message: Description of the error
        """
        self.filetype = filetype
        super().__init__(f"Filetype '{filetype}': {message}")
