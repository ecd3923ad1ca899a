"""Domain models for the Excel read tool.

Sheet structures (raw cells, header tables, SheetTable), projected output
records and run/error bookkeeping.
"""

from .error_record import ErrorRecord
from .processing_result import FileStat, ProcessingResult
from .record import ProjectedRecord
from .sheet_table import ColumnInfo, HeaderTable, RawCell, RawRow, SheetTable

__all__ = [
    # Sheet models
    "ColumnInfo",
    "HeaderTable",
    "RawCell",
    "RawRow",
    "SheetTable",
    # Output / bookkeeping models
    "ErrorRecord",
    "FileStat",
    "ProcessingResult",
    "ProjectedRecord",
]
