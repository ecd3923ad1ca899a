from __future__ import annotations

import re
from collections.abc import Sequence

from .errors import MalformedCellError, SharedStringIndexOutOfRangeError

"""Shared-string table lookup.

The table is owned by the document reader and passed in explicitly; the
resolver never mutates it.
"""

__all__ = [
    "SharedStringResolver",
]

_INDEX_RE = re.compile(r"[0-9]+")


class SharedStringResolver:
    def __init__(self, table: Sequence[str]) -> None:
        self._table = table

    def __len__(self) -> int:
        return len(self._table)

    def resolve(self, raw: str) -> str:
        """Return the shared string referenced by ``raw`` (a decimal index).

        Raises:
            MalformedCellError: raw is not a non-negative integer
            SharedStringIndexOutOfRangeError: index is past the end of the table
        """
        text = raw.strip()
        if not _INDEX_RE.fullmatch(text):
            raise MalformedCellError(f"invalid shared string index: {raw!r}")
        index = int(text)
        if index >= len(self._table):
            raise SharedStringIndexOutOfRangeError(
                f"shared string index {index} out of range (table size {len(self._table)})"
            )
        return self._table[index]
