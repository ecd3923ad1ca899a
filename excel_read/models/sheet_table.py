from __future__ import annotations

from dataclasses import dataclass, field

import pandas as pd

"""SheetTable / header table models.

SheetTable is the header-keyed result of reading one worksheet. HeaderTable and
ColumnInfo are the intermediate join structures built from the header row:
data rows are addressed by the same column letters as the header cells, so the
column letter is the join key even when cells are missing or out of order.
"""

__all__ = [
    "ColumnInfo",
    "HeaderTable",
    "RawCell",
    "RawRow",
    "SheetTable",
]


@dataclass(frozen=True)
class RawCell:
    """One cell as it appears in the worksheet XML (no decoding applied)."""
    reference: str  # "A1" 形式
    value: str | None = None  # <v> テキスト (未設定なら None)
    data_type: str | None = None  # t 属性 ("s" = shared string)
    style_index: str | None = None  # s 属性 (cellXfs index)


@dataclass(frozen=True)
class RawRow:
    number: int  # 1-based row number
    cells: tuple[RawCell, ...] = ()


@dataclass(frozen=True)
class ColumnInfo:
    header: str
    column: str  # column letters, e.g. "B"


@dataclass(frozen=True)
class HeaderTable:
    """Header row decoded into lookups.

    Attributes:
        headers: header names in first-seen order (duplicates kept)
        columns: header/column pairs in header-row order
        by_column: column letters -> header name
        by_header: header name -> column letters (later duplicates win)
    """
    headers: tuple[str, ...]
    columns: tuple[ColumnInfo, ...]
    by_column: dict[str, str] = field(default_factory=dict)
    by_header: dict[str, str] = field(default_factory=dict)

    def header_for(self, column: str) -> str | None:
        return self.by_column.get(column)


@dataclass(frozen=True)
class SheetTable:
    """Header-keyed rows read from one worksheet.

    Every row maps every known header to a string; cells missing from the
    sheet are represented as ``""``, never as ``None``.
    """
    headers: tuple[str, ...]
    rows: tuple[dict[str, str], ...]
    sheet_name: str = ""

    def __len__(self) -> int:
        return len(self.rows)

    def to_dataframe(self) -> pd.DataFrame:
        """Return the rows as a DataFrame with one column per distinct header."""
        columns = list(dict.fromkeys(self.headers))
        return pd.DataFrame(list(self.rows), columns=columns)
