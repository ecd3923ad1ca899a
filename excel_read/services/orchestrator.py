from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import ExtractConfig
from ..excel.dates import normalize_date_fields
from ..excel.errors import SheetReadError
from ..excel.projection import project_records
from ..excel.reader import read_excel_file
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.processing_result import FileStat, ProcessingResult
from ..models.record import ProjectedRecord
from .progress import ProgressTracker
from .record_writer import RecordWriter

logger = logging.getLogger(__name__)

"""Run orchestration.

Scans the source directory, extracts every .xlsx file (each file is read in
one pass and either fully succeeds or fails), writes records and error log
lines, and aggregates a ProcessingResult.
"""


class ProcessingError(Exception):
    """Fatal error that stops the whole run (e.g. unreadable source directory)."""
    pass


def scan_excel_files(directory: Path) -> list[Path]:
    """Scan directory for .xlsx files (non-recursive, sorted by name).

    Raises:
        ProcessingError: If directory doesn't exist or can't be read
    """
    if not directory.exists():
        raise ProcessingError(f"Directory not found: {directory}")

    if not directory.is_dir():
        raise ProcessingError(f"Path is not a directory: {directory}")

    try:
        # "~$" で始まるのは Excel のロックファイル
        return sorted(
            p for p in directory.iterdir()
            if p.is_file() and p.suffix == ".xlsx" and not p.name.startswith("~$")
        )
    except OSError as e:
        raise ProcessingError(f"Error reading directory {directory}: {e}") from e


def extract_file(path: Path, config: ExtractConfig) -> list[ProjectedRecord]:
    """Read one file and project its rows into records."""
    table = read_excel_file(path, header_row=config.header_row)
    if config.date_fields:
        table = normalize_date_fields(table, config.date_fields)
    return project_records(table, config.fields)


def process_all(config: ExtractConfig, writer: RecordWriter | None = None,
                error_log: ErrorLogBuffer | None = None) -> ProcessingResult:
    """Extract all Excel files in the configured directory.

    1. Scan the directory for .xlsx files
    2. Extract each file; failures are logged and recorded, not fatal
    3. Write records through ``writer`` when given
    4. Return ProcessingResult with summary data

    Raises:
        ProcessingError: the source directory cannot be scanned
    """
    start_time = datetime.now(UTC)
    error_log = error_log if error_log is not None else ErrorLogBuffer()
    file_paths = scan_excel_files(Path(config.source_directory))

    file_stats: list[FileStat] = []
    total_rows = 0
    with ProgressTracker(len(file_paths)) as progress:
        for path in file_paths:
            progress.start_file(path)
            file_start = datetime.now(UTC)
            try:
                records = extract_file(path, config)
            except SheetReadError as e:
                elapsed = (datetime.now(UTC) - file_start).total_seconds()
                logger.error(f"{path.name}: {e.error_type} {e}")
                error_log.append(
                    ErrorRecord.create(
                        file=path.name,
                        sheet=e.sheet or "",
                        row=e.row if e.row is not None else -1,
                        error_type=e.error_type,
                        message=str(e),
                    )
                )
                file_stats.append(FileStat(path.name, "failed", 0, elapsed, error=str(e)))
                progress.finish_file(success=False)
                continue

            if writer is not None:
                writer.write(path.name, records)
            total_rows += len(records)
            elapsed = (datetime.now(UTC) - file_start).total_seconds()
            logger.info(f"{path.name}: rows={len(records)}")
            file_stats.append(FileStat(path.name, "success", len(records), elapsed))
            progress.finish_file(success=True, rows=len(records))

    log_path = error_log.flush()
    if log_path is not None:
        logger.info(f"error log written: {log_path}")

    end_time = datetime.now(UTC)
    elapsed = (end_time - start_time).total_seconds()
    success = sum(1 for s in file_stats if s.status == "success")
    return ProcessingResult(
        success_files=success,
        failed_files=len(file_stats) - success,
        total_rows=total_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed,
        throughput_rows_per_sec=(total_rows / elapsed) if elapsed > 0 else 0.0,
        file_stats=file_stats,
    )
