from __future__ import annotations

from collections.abc import Mapping

from ..models.record import ProjectedRecord
from ..models.sheet_table import SheetTable
from .errors import MissingColumnsError

"""Projection of SheetTable rows into ProjectedRecord."""

__all__ = [
    "DEFAULT_FIELDS",
    "project_records",
]

# record attribute -> sheet header
DEFAULT_FIELDS: dict[str, str] = {
    "firstname": "Firstname",
    "lastname": "Lastname",
    "email": "Email",
}


def _optional(value: str) -> str | None:
    # 空文字 / 空白のみ -> None
    return value if value.strip() else None


def project_records(table: SheetTable, fields: Mapping[str, str] | None = None) -> list[ProjectedRecord]:
    """Build one ProjectedRecord per table row, in row order.

    Raises:
        MissingColumnsError: a mapped header does not exist in the table
    """
    mapping = {**DEFAULT_FIELDS, **(fields or {})}
    missing = set(mapping.values()) - set(table.headers)
    if missing:
        raise MissingColumnsError(f"missing columns: {sorted(missing)}", sheet=table.sheet_name or None)
    return [
        ProjectedRecord(**{attr: _optional(row[header]) for attr, header in mapping.items()})
        for row in table.rows
    ]
