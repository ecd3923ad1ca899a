from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models.

ProcessingResult aggregates one CLI run over a source directory; FileStat is
the per-file detail.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file extraction statistics."""
    file_name: str  # ファイル名
    status: str  # success/failed
    rows: int  # 抽出行数 (失敗時 0)
    elapsed_seconds: float  # ファイル処理時間
    error: str | None = None  # 失敗理由


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results for the SUMMARY line."""
    success_files: int
    failed_files: int
    total_rows: int  # 全ファイルの抽出レコード数
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    file_stats: list[FileStat] | None = None

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
