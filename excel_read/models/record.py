from __future__ import annotations

import json
from dataclasses import asdict, dataclass

"""ProjectedRecord model.

The typed output row produced from a SheetTable row. Only this projection step
turns blank cells into ``None``; upstream the pipeline carries ``""``.
"""

__all__ = [
    "ProjectedRecord",
]


@dataclass(frozen=True)
class ProjectedRecord:
    firstname: str | None = None
    lastname: str | None = None
    email: str | None = None

    def to_json_line(self, **extra: str) -> str:
        """Serialize the record (plus optional context keys) as one JSON line."""
        payload = {**extra, **asdict(self)}
        return json.dumps(payload, ensure_ascii=False)
