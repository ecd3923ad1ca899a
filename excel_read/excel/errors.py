from __future__ import annotations

"""Error taxonomy for sheet extraction.

Every error raised while reading a sheet aborts the whole read (no partial
table). ``error_type`` is the UPPER_SNAKE label written to the error log and
``row`` (1-based) and ``sheet`` locate the error when known.
"""

__all__ = [
    "SheetReadError",
    "DocumentError",
    "NoHeaderRowError",
    "MalformedReferenceError",
    "MalformedCellError",
    "SharedStringIndexOutOfRangeError",
    "MissingColumnsError",
]


class SheetReadError(Exception):
    """Base class for errors that abort a sheet read."""

    error_type = "SHEET_READ_ERROR"

    def __init__(self, message: str, *, row: int | None = None, sheet: str | None = None) -> None:
        super().__init__(message)
        self.row = row
        self.sheet = sheet


class DocumentError(SheetReadError):
    """Raised when the .xlsx package cannot be opened or lacks a worksheet."""

    error_type = "DOCUMENT_ERROR"


class NoHeaderRowError(SheetReadError):
    """Raised when the requested header row does not exist."""

    error_type = "NO_HEADER_ROW"


class MalformedReferenceError(SheetReadError):
    """Raised when a cell reference is not letters followed by digits."""

    error_type = "MALFORMED_REFERENCE"


class MalformedCellError(SheetReadError):
    """Raised when a shared-string index, style index or date serial cannot be parsed."""

    error_type = "MALFORMED_CELL"


class SharedStringIndexOutOfRangeError(SheetReadError):
    """Raised when a shared-string index points past the end of the table."""

    error_type = "SHARED_STRING_OUT_OF_RANGE"


class MissingColumnsError(SheetReadError):
    """Raised when headers required for projection are missing from the sheet."""

    error_type = "MISSING_COLUMNS"
