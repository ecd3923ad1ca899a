from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from ..models.sheet_table import RawRow, SheetTable
from .columns import build_header_table, column_letters
from .decoder import CellDecoder
from .document import open_document
from .errors import NoHeaderRowError, SheetReadError
from .shared_strings import SharedStringResolver

"""Sheet reader.

指定行 (既定: 1行目) をヘッダ行として扱い、それより後の行をデータ行とする。
欠落セルは空文字で埋め、ヘッダの無い列のセルは無視する。
"""

__all__ = [
    "SheetReader",
    "read_excel_file",
]

logger = logging.getLogger(__name__)


class SheetReader:
    """Assemble header-keyed rows from raw worksheet rows.

    Parameters
    ----------
    rows: raw rows of one worksheet (ascending row number)
    decoder: CellDecoder bound to the document's shared strings and styles
    """

    def __init__(self, rows: Iterable[RawRow], decoder: CellDecoder) -> None:
        self._rows = rows
        self.decoder = decoder

    def read_sheet(self, header_row: int = 1, sheet_name: str = "") -> SheetTable:
        """Read the sheet using ``header_row`` (1-based) as the header.

        Steps:
        1. Locate the header row (NoHeaderRowError if absent)
        2. Build the column letter -> header lookup from it
        3. For every later row, default all headers to "" and overwrite with
           decoded cells whose column has a header
        Any SheetReadError aborts the read; it is re-raised with ``row`` set.
        """
        rows = list(self._rows)
        header = next((r for r in rows if r.number == header_row), None)
        if header is None:
            raise NoHeaderRowError(f"header row {header_row} not found", row=header_row)
        try:
            header_table = build_header_table(header.cells, self.decoder)
        except SheetReadError as e:
            e.row = header.number
            raise
        logger.debug("header row %d: %s", header_row, list(header_table.headers))

        data: list[dict[str, str]] = []
        dropped = 0
        for row in rows:
            if row.number <= header_row:
                continue
            values = dict.fromkeys(header_table.headers, "")
            try:
                for cell in row.cells:
                    name = header_table.header_for(column_letters(cell.reference))
                    if name is None:
                        # ヘッダ無し列は読み捨て
                        dropped += 1
                        continue
                    values[name] = self.decoder.decode(cell)
            except SheetReadError as e:
                e.row = row.number
                raise
            data.append(values)
        if dropped:
            logger.debug("ignored %d cells outside header columns", dropped)
        return SheetTable(headers=header_table.headers, rows=tuple(data), sheet_name=sheet_name)


def read_excel_file(path: Path, header_row: int = 1) -> SheetTable:
    """Read the first worksheet of an .xlsx file into a SheetTable.

    The document is opened read-only and closed before returning, also when
    decoding fails.
    """
    with open_document(path) as document:
        decoder = CellDecoder(SharedStringResolver(document.shared_strings), document.number_formats)
        try:
            table = SheetReader(document.iter_rows(), decoder).read_sheet(header_row, document.sheet_name)
        except SheetReadError as e:
            e.sheet = document.sheet_name
            raise
    logger.debug("read %s sheet=%s rows=%d", path, table.sheet_name, len(table))
    return table
