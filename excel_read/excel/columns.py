from __future__ import annotations

import re
from collections.abc import Iterable

from ..models.sheet_table import ColumnInfo, HeaderTable, RawCell
from .decoder import CellDecoder
from .errors import MalformedReferenceError

"""Column letter extraction and header table construction."""

__all__ = [
    "build_header_table",
    "column_letters",
]

_REFERENCE_RE = re.compile(r"([A-Za-z]+)([0-9]+)")


def column_letters(reference: str) -> str:
    """Return the column part of an "A1" style reference ("AA23" -> "AA")."""
    m = _REFERENCE_RE.fullmatch(reference)
    if not m:
        raise MalformedReferenceError(f"invalid cell reference: {reference!r}")
    return m.group(1)


def build_header_table(cells: Iterable[RawCell], decoder: CellDecoder) -> HeaderTable:
    """Decode the header row into ordered header names and column lookups.

    Duplicate header text is kept in ``headers``; in ``by_header`` the later
    column overwrites the earlier one.
    """
    headers: list[str] = []
    columns: list[ColumnInfo] = []
    by_column: dict[str, str] = {}
    by_header: dict[str, str] = {}
    for cell in cells:
        header = decoder.decode(cell) or ""
        column = column_letters(cell.reference)
        headers.append(header)
        columns.append(ColumnInfo(header=header, column=column))
        by_column[column] = header
        by_header[header] = column
    return HeaderTable(
        headers=tuple(headers),
        columns=tuple(columns),
        by_column=by_column,
        by_header=by_header,
    )
