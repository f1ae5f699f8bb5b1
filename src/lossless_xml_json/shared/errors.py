"""Exception types raised by conversion operations.

Conversions are fail-fast: the first malformed token, undecodable JSON value
or unexpected document shape aborts the whole conversion before any output
is produced.
"""

from typing import Optional


class ConversionError(Exception):
    """Base exception for all conversion failures."""


class XMLParseError(ConversionError):
    """Raised when the XML input is not a well-formed token sequence."""

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.column = column

    def __str__(self) -> str:
        message = super().__str__()
        if self.line is None:
            return message
        return f"{message} (line {self.line}, column {self.column})"


class JSONParseError(ConversionError):
    """Raised when the JSON input cannot be decoded."""

    def __init__(self, message: str, line: Optional[int] = None,
                 column: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.column = column


class DocumentShapeError(ConversionError):
    """Raised when decoded JSON does not have the shape of a converted document."""

    def __init__(self, message: str, path: str = ""):
        super().__init__(f"{message} at '{path}'" if path else message)
        self.path = path


class UnsupportedFormatError(ConversionError):
    """Raised when the conversion direction cannot be inferred from a file name."""
