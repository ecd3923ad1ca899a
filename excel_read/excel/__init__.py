"""Worksheet extraction: document access, cell decoding, header mapping, projection."""

from .columns import build_header_table, column_letters
from .dates import DateTextParser, normalize_date_fields
from .decoder import CellDecoder
from .errors import (
    DocumentError,
    MalformedCellError,
    MalformedReferenceError,
    MissingColumnsError,
    NoHeaderRowError,
    SharedStringIndexOutOfRangeError,
    SheetReadError,
)
from .projection import project_records
from .reader import SheetReader, read_excel_file
from .shared_strings import SharedStringResolver

__all__ = [
    "CellDecoder",
    "DateTextParser",
    "DocumentError",
    "MalformedCellError",
    "MalformedReferenceError",
    "MissingColumnsError",
    "NoHeaderRowError",
    "SharedStringIndexOutOfRangeError",
    "SharedStringResolver",
    "SheetReadError",
    "SheetReader",
    "build_header_table",
    "column_letters",
    "normalize_date_fields",
    "project_records",
    "read_excel_file",
]
