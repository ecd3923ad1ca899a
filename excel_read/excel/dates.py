from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

import pandas as pd

from ..models.sheet_table import SheetTable
from .decoder import format_datetime

"""Free-form date text parsing.

Used as an optional post-pass over already decoded text (e.g. a "Birthday"
column typed by hand). An unrecognized value is a normal outcome and yields
``None``; it is never an error.
"""

__all__ = [
    "DATE_PATTERNS",
    "DateTextParser",
    "normalize_date_fields",
]

# 優先順: 日/月/年 -> 月/日/年, 区切りは "/" と "."
DATE_PATTERNS: tuple[str, ...] = (
    "%d/%m/%Y %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%d/%m/%Y",
    "%m/%d/%Y %H:%M:%S",
    "%m/%d/%Y %H:%M",
    "%m/%d/%Y",
    "%d.%m.%Y %H:%M:%S",
    "%d.%m.%Y %H:%M",
    "%d.%m.%Y",
    "%m.%d.%Y %H:%M:%S",
    "%m.%d.%Y %H:%M",
    "%m.%d.%Y",
)

# pandas は実行時刻として解釈するため一般解析に渡さない
RELATIVE_DATE_WORDS = frozenset({"now", "today", "tomorrow", "yesterday"})


class DateTextParser:
    def __init__(self, patterns: Iterable[str] = DATE_PATTERNS) -> None:
        self.patterns = tuple(patterns)

    def parse(self, text: str | None) -> datetime | None:
        """Parse ``text`` with the exact patterns first, then pandas' general parser."""
        if text is None:
            return None
        text = text.strip()
        if not text:
            return None
        for pattern in self.patterns:
            try:
                return datetime.strptime(text, pattern)
            except ValueError:
                continue
        return self._parse_general(text)

    @staticmethod
    def _parse_general(text: str) -> datetime | None:
        if text.lower() in RELATIVE_DATE_WORDS:
            return None
        try:
            ts = pd.to_datetime(text, errors="coerce", dayfirst=False)
        except (ValueError, OverflowError):
            return None
        if pd.isna(ts):
            return None
        if ts.tzinfo is not None:
            ts = ts.tz_convert("UTC").tz_localize(None)
        return ts.to_pydatetime()


def normalize_date_fields(
    table: SheetTable, headers: Iterable[str], parser: DateTextParser | None = None
) -> SheetTable:
    """Return a copy of ``table`` with recognized dates in ``headers`` rewritten to ISO form.

    Values the parser does not recognize are kept unchanged.
    """
    parser = parser or DateTextParser()
    targets = [h for h in dict.fromkeys(headers) if h in table.headers]
    if not targets:
        return table
    rows: list[dict[str, str]] = []
    for row in table.rows:
        new_row = dict(row)
        for h in targets:
            parsed = parser.parse(row[h])
            if parsed is not None:
                new_row[h] = format_datetime(parsed)
        rows.append(new_row)
    return SheetTable(headers=table.headers, rows=tuple(rows), sheet_name=table.sheet_name)
