from __future__ import annotations

import json
from pathlib import Path

from excel_read.logging.error_log import ErrorLogBuffer, ErrorRecord

KEYS = {"timestamp", "file", "sheet", "row", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="file.xlsx",
        sheet="Sheet1",
        row=10,
        error_type="MALFORMED_CELL",
        message="invalid shared string index: 'x'",
    )
    data = json.loads(rec.to_json_line())
    assert data["file"] == "file.xlsx"
    assert data["row"] == 10
    assert data["error_type"] == "MALFORMED_CELL"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS


def test_error_record_row_minus_one_support():
    rec = ErrorRecord.create("broken.xlsx", "", -1, "DOCUMENT_ERROR", "cannot open")
    data = json.loads(rec.to_json_line())
    assert data["row"] == -1
    assert data["sheet"] == ""


def test_error_record_non_ascii_message():
    rec = ErrorRecord.create("名簿.xlsx", "シート1", 2, "MALFORMED_CELL", "不正な値")
    line = rec.to_json_line()
    # ensure_ascii=False
    assert "名簿.xlsx" in line


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("f1.xlsx", "S", 1, "NO_HEADER_ROW", "header row 1 not found"))
    buf.append(ErrorRecord.create("f2.xlsx", "S", 3, "MALFORMED_CELL", "bad"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("logs")
    assert path.name.startswith("errors-")
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    # flush 後バッファクリア
    assert len(buf) == 0


def test_error_log_buffer_empty_flush_writes_nothing(temp_workdir: Path):
    buf = ErrorLogBuffer(logs_dir=temp_workdir / "other_logs")
    assert buf.flush() is None
    assert not (temp_workdir / "other_logs").exists()


def test_error_log_buffer_multiple_flushes(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("f.xlsx", "S", 1, "MALFORMED_CELL", "a"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("f.xlsx", "S", 2, "MALFORMED_CELL", "b"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1
