# Shared pytest fixtures
from __future__ import annotations

import tempfile
import zipfile
from collections.abc import Callable
from pathlib import Path
from xml.sax.saxutils import escape

import pytest

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
header_row: 1
fields:
  firstname: Firstname
  lastname: Lastname
  email: Email
date_fields: [Birthday]
output: ./out/records.jsonl
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "extract.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _cell_xml(cell: dict) -> str:
    attrs = ""
    for key in ("r", "t", "s"):
        if cell.get(key) is not None:
            attrs += f' {key}="{escape(str(cell[key]))}"'
    if "is" in cell:
        return f'<c{attrs} t="inlineStr"><is><t>{escape(cell["is"])}</t></is></c>'
    if cell.get("v") is None:
        return f"<c{attrs}/>"
    return f"<c{attrs}><v>{escape(str(cell['v']))}</v></c>"


def _row_xml(number: int | None, cells: list[dict]) -> str:
    r = f' r="{number}"' if number is not None else ""
    return f"<row{r}>" + "".join(_cell_xml(c) for c in cells) + "</row>"


def build_xlsx(
    path: Path,
    rows: list[tuple[int | None, list[dict]]],
    shared_strings: list[str] | None = None,
    number_formats: list[int] | None = None,
    sheet_name: str = "Sheet1",
) -> Path:
    """Write a minimal .xlsx package.

    rows: (row number or None, [cell dict]) where a cell dict has keys
    r (reference), v (raw value), t (type), s (style index) or "is" (inline text).
    number_formats: numFmtId for each cellXfs entry (style index order).
    """
    sheet = (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<worksheet xmlns="{MAIN_NS}"><sheetData>'
        + "".join(_row_xml(n, cells) for n, cells in rows)
        + "</sheetData></worksheet>"
    )
    workbook = (
        f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        f'<workbook xmlns="{MAIN_NS}" xmlns:r="{REL_NS}">'
        f'<sheets><sheet name="{escape(sheet_name)}" sheetId="1" r:id="rId1"/></sheets></workbook>'
    )
    rels = [
        '<Relationship Id="rId1" '
        'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/worksheet" '
        'Target="worksheets/sheet1.xml"/>'
    ]
    parts = {
        "xl/workbook.xml": workbook,
        "xl/worksheets/sheet1.xml": sheet,
    }
    if shared_strings is not None:
        rels.append(
            '<Relationship Id="rId2" '
            'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/sharedStrings" '
            'Target="sharedStrings.xml"/>'
        )
        parts["xl/sharedStrings.xml"] = (
            f'<sst xmlns="{MAIN_NS}" count="{len(shared_strings)}" uniqueCount="{len(shared_strings)}">'
            + "".join(f"<si><t>{escape(s)}</t></si>" for s in shared_strings)
            + "</sst>"
        )
    if number_formats is not None:
        rels.append(
            '<Relationship Id="rId3" '
            'Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" '
            'Target="styles.xml"/>'
        )
        parts["xl/styles.xml"] = (
            f'<styleSheet xmlns="{MAIN_NS}"><cellXfs count="{len(number_formats)}">'
            + "".join(f'<xf numFmtId="{n}" fontId="0" fillId="0" borderId="0" xfId="0"/>' for n in number_formats)
            + "</cellXfs></styleSheet>"
        )
    parts["xl/_rels/workbook.xml.rels"] = (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>'
        '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
        + "".join(rels)
        + "</Relationships>"
    )
    with zipfile.ZipFile(path, "w") as zf:
        for name, text in parts.items():
            zf.writestr(name, text)
    return path


@pytest.fixture()
def xlsx_factory(temp_workdir: Path) -> Callable[..., Path]:
    """Return a builder writing hand-made .xlsx files into ./data."""
    def _factory(name: str, rows, **kwargs) -> Path:
        return build_xlsx(temp_workdir / "data" / name, rows, **kwargs)
    return _factory


@pytest.fixture()
def people_xlsx(xlsx_factory) -> Path:
    """Firstname/Lastname/Email/Birthday sheet with shared strings, a sparse row and a date cell."""
    shared = ["Firstname", "Lastname", "Email", "Birthday", "Ann", "Lee", "ann@example.com", "bea@example.com"]
    rows = [
        (1, [
            {"r": "A1", "v": "0", "t": "s"},
            {"r": "B1", "v": "1", "t": "s"},
            {"r": "C1", "v": "2", "t": "s"},
            {"r": "D1", "v": "3", "t": "s"},
        ]),
        (2, [
            {"r": "A2", "v": "4", "t": "s"},
            {"r": "B2", "v": "5", "t": "s"},
            {"r": "C2", "v": "6", "t": "s"},
            {"r": "D2", "v": "44200", "s": "1"},
        ]),
        # Firstname / Lastname 欠落
        (3, [
            {"r": "C3", "v": "7", "t": "s"},
            {"r": "D3", "is": "31.12.2020"},
        ]),
    ]
    return xlsx_factory("people.xlsx", rows, shared_strings=shared, number_formats=[0, 14])


def corrupt_member(path: Path, name: str) -> Path:
    """Re-pack ``path`` deflated and flip the first bytes of member ``name``'s compressed data."""
    with zipfile.ZipFile(path) as zf:
        parts = {info.filename: zf.read(info.filename) for info in zf.infolist()}
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for part, data in parts.items():
            zf.writestr(part, data)
    with zipfile.ZipFile(path) as zf:
        info = zf.getinfo(name)
    raw = bytearray(path.read_bytes())
    # local file header: 30 bytes + file name + extra field
    offset = info.header_offset
    name_len = int.from_bytes(raw[offset + 26:offset + 28], "little")
    extra_len = int.from_bytes(raw[offset + 28:offset + 30], "little")
    start = offset + 30 + name_len + extra_len
    for i in range(min(10, info.compress_size)):
        raw[start + i] ^= 0xFF
    path.write_bytes(bytes(raw))
    return path


@pytest.fixture()
def corrupt_xlsx_member() -> Callable[[Path, str], Path]:
    return corrupt_member
