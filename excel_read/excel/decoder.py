from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime, timedelta

from ..models.sheet_table import RawCell
from .errors import MalformedCellError
from .shared_strings import SharedStringResolver

"""Cell value decoding.

Decision order for one cell:
1. no raw value          -> ""
2. t="s" (shared string) -> shared string table lookup
3. style index present   -> date serial conversion when the number format is
                            date-like, otherwise the trimmed raw text
4. anything else         -> raw text verbatim

Decoding is a pure function of (cell, shared strings, number formats).
"""

__all__ = [
    "CellDecoder",
    "DATE_FORMAT_IDS",
    "DATE_EPOCH",
    "SERIAL_EPOCH_CORRECTION_DAYS",
    "format_datetime",
    "is_date_format",
    "serial_to_datetime",
]

SHARED_STRING_TYPE = "s"
# 数値セルとして扱う t 属性 (None = 省略時は数値)
NUMERIC_TYPES = {None, "n"}

# Built-in number formats 14..19 (m/d/yyyy, d-mmm-yy, d-mmm, mmm-yy, h:mm AM/PM, h:mm:ss AM/PM)
DATE_FORMAT_IDS = range(14, 20)

# Serial 1 is 1900-01-01, so day zero is 1899-12-31. The format also counts a
# 1900-02-29 that never existed, which moves every serial after February 1900
# one more day forward. Do not "fix" this: files on disk rely on it.
SERIAL_EPOCH_CORRECTION_DAYS = 2
DATE_EPOCH = datetime(1900, 1, 1) - timedelta(days=SERIAL_EPOCH_CORRECTION_DAYS)

_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_INDEX_RE = re.compile(r"[0-9]+")
_SECONDS_PER_DAY = 86400


def is_date_format(number_format_id: int) -> bool:
    return number_format_id in DATE_FORMAT_IDS


def parse_serial(raw: str) -> float:
    """Parse a serial number using the invariant decimal convention ("." separator)."""
    text = raw.strip()
    if not _DECIMAL_RE.fullmatch(text):
        raise MalformedCellError(f"invalid numeric value: {raw!r}")
    return float(text)


def serial_to_datetime(serial: float) -> datetime:
    """Convert a date serial (days since DATE_EPOCH, fraction = time of day)."""
    try:
        # 秒単位に丸める (浮動小数の誤差で 23:59:59.999 になるのを避ける)
        return DATE_EPOCH + timedelta(seconds=round(serial * _SECONDS_PER_DAY))
    except (OverflowError, ValueError) as e:
        raise MalformedCellError(f"date serial out of range: {serial!r}") from e


def format_datetime(value: datetime) -> str:
    """Render a datetime as YYYY-MM-DD, or YYYY-MM-DD HH:MM:SS when it has a time part."""
    # strftime("%Y") は 1000 年未満をゼロ埋めしない環境がある
    day = f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
    if value.hour == 0 and value.minute == 0 and value.second == 0:
        return day
    return f"{day} {value.hour:02d}:{value.minute:02d}:{value.second:02d}"


class CellDecoder:
    """Decode RawCells into strings.

    Parameters
    ----------
    shared_strings: resolver over the document's shared string table
    number_formats: cellXfs index -> numFmtId, as read from the style table
    """

    def __init__(self, shared_strings: SharedStringResolver, number_formats: Sequence[int] = ()) -> None:
        self.shared_strings = shared_strings
        self.number_formats = number_formats

    def decode(self, cell: RawCell) -> str:
        if cell.value is None:
            return ""
        if cell.data_type == SHARED_STRING_TYPE:
            return self.shared_strings.resolve(cell.value)
        if cell.style_index is not None:
            number_format = self.number_format_for(cell.style_index)
            if is_date_format(number_format) and cell.data_type in NUMERIC_TYPES:
                return format_datetime(serial_to_datetime(parse_serial(cell.value)))
            return cell.value.strip()
        return cell.value

    def number_format_for(self, style_index: str) -> int:
        text = style_index.strip()
        if not _INDEX_RE.fullmatch(text):
            raise MalformedCellError(f"invalid style index: {style_index!r}")
        index = int(text)
        if index >= len(self.number_formats):
            raise MalformedCellError(
                f"style index {index} out of range (style table size {len(self.number_formats)})"
            )
        return self.number_formats[index]
