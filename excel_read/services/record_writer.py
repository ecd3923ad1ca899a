from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from ..models.record import ProjectedRecord

"""JSON Lines output of projected records."""

__all__ = [
    "RecordWriter",
]


class RecordWriter:
    """Append records to a JSON Lines file, one object per record.

    Each line carries the source file name next to the record fields. The
    output file is truncated on open.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.written = 0
        self._fh = None

    def __enter__(self) -> RecordWriter:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("w", encoding="utf-8")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def write(self, source: str, records: Iterable[ProjectedRecord]) -> int:
        if self._fh is None:
            raise RuntimeError("RecordWriter is not open")
        count = 0
        for record in records:
            self._fh.write(record.to_json_line(file=source) + "\n")
            count += 1
        self.written += count
        return count
