"""
Errors raised by the container engine.

Every failure terminates the current operation; nothing is retried. Each class
also derives from the closest builtin so callers catching ``ValueError`` or
``EOFError`` keep working.
"""


class ChrFormatError(Exception):
    """Base class for all CHR container errors."""


class FormatTooShortError(ChrFormatError, ValueError):
    """Fewer than 16 bytes available where a header is expected."""


class NoExtractableRegionError(ChrFormatError):
    """Header declares zero CHR banks (CHR-RAM, not stored in the file)."""


class ContainerTooSmallError(ChrFormatError, ValueError):
    """Declared region extends past the end of the container."""


class NotHeaderedError(ChrFormatError):
    """Splice attempted on a headerless raw CHR payload."""


class RegionSizeMismatchError(ChrFormatError, ValueError):
    """Replacement data length differs from the existing region length."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"New CHR data size ({actual}) does not match CHR-ROM size in the ROM ({expected})"
        )
        self.expected = expected
        self.actual = actual


class UnexpectedEOFError(ChrFormatError, EOFError):
    """A bounded copy ran out of input before reaching its byte count."""


class MissingHandleError(ChrFormatError, ValueError):
    """A required source, destination or replacement handle was not supplied."""


class UnseekableSourceError(ChrFormatError, ValueError):
    """Container stream does not support random access."""
