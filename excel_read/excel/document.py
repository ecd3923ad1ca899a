from __future__ import annotations

import posixpath
import zipfile
import zlib
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from xml.etree import ElementTree as ET

from ..models.sheet_table import RawCell, RawRow
from .errors import DocumentError

"""Read-only access to the parts of an .xlsx package.

Only what the sheet reader needs is exposed: the first worksheet's raw rows,
the shared string table and the cellXfs -> numFmtId style table. Values are
not decoded here.

Reference: ECMA-376 Part 1, SpreadsheetML (sheetData / sst / cellXfs).
"""

__all__ = [
    "SheetDocument",
    "open_document",
]

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
SHARED_STRINGS_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/sharedStrings"
STYLES_REL = "http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles"

WORKBOOK_PATH = "xl/workbook.xml"
WORKBOOK_RELS_PATH = "xl/_rels/workbook.xml.rels"

INLINE_STRING_TYPE = "inlineStr"

# 破損したメンバの展開時に zipfile / zlib が投げる例外
ARCHIVE_READ_ERRORS = (zipfile.BadZipFile, zlib.error, EOFError, OSError)


def _q(tag: str) -> str:
    return f"{{{MAIN_NS}}}{tag}"


def _column_name(index: int) -> str:
    # 1 -> A, 27 -> AA
    name = ""
    while index > 0:
        index, rem = divmod(index - 1, 26)
        name = chr(ord("A") + rem) + name
    return name


def _column_index(reference: str) -> int:
    index = 0
    for ch in reference:
        if not ch.isalpha():
            break
        index = index * 26 + (ord(ch.upper()) - ord("A") + 1)
    return index


def _text_of(element: ET.Element) -> str:
    # rich text (<r><t>..</t></r>) は連結。ふりがな (<rPh>) は除外
    parts: list[str] = []
    for child in element:
        if child.tag == _q("t"):
            parts.append(child.text or "")
        elif child.tag == _q("r"):
            t = child.find(_q("t"))
            if t is not None:
                parts.append(t.text or "")
    return "".join(parts)


@dataclass(frozen=True)
class SheetDocument:
    """An opened .xlsx package, valid only inside ``open_document``."""
    archive: zipfile.ZipFile
    sheet_name: str
    sheet_path: str
    shared_strings: tuple[str, ...]
    number_formats: tuple[int, ...]

    def iter_rows(self) -> Iterator[RawRow]:
        """Yield the worksheet rows in document order.

        Missing ``r`` attributes are inferred from position (previous row + 1,
        previous cell column + 1).
        """
        try:
            with self.archive.open(self.sheet_path) as stream:
                previous_row = 0
                for _, element in ET.iterparse(stream, events=("end",)):
                    if element.tag != _q("row"):
                        continue
                    r = element.get("r")
                    if r is not None and not r.isdecimal():
                        raise DocumentError(f"invalid row number {r!r} in {self.sheet_path}")
                    number = int(r) if r is not None else previous_row + 1
                    previous_row = number
                    yield RawRow(number=number, cells=tuple(self._cells(element, number)))
                    element.clear()
        except ET.ParseError as e:
            raise DocumentError(f"invalid xml in {self.sheet_path}: {e}") from e
        except ARCHIVE_READ_ERRORS as e:
            raise DocumentError(f"cannot read {self.sheet_path}: {e}") from e

    def _cells(self, row: ET.Element, number: int) -> Iterator[RawCell]:
        previous_column = 0
        for c in row.iter(_q("c")):
            reference = c.get("r")
            if reference:
                previous_column = _column_index(reference)
            else:
                previous_column += 1
                reference = f"{_column_name(previous_column)}{number}"
            data_type = c.get("t")
            if data_type == INLINE_STRING_TYPE:
                inline = c.find(_q("is"))
                value = _text_of(inline) if inline is not None else None
            else:
                v = c.find(_q("v"))
                value = v.text if v is not None else None
            yield RawCell(reference=reference, value=value, data_type=data_type, style_index=c.get("s"))


def _read_xml(archive: zipfile.ZipFile, name: str) -> ET.Element:
    try:
        return ET.fromstring(archive.read(name))
    except KeyError as e:
        raise DocumentError(f"missing package part: {name}") from e
    except ET.ParseError as e:
        raise DocumentError(f"invalid xml in {name}: {e}") from e
    except ARCHIVE_READ_ERRORS as e:
        raise DocumentError(f"cannot read {name}: {e}") from e


def _relationships(archive: zipfile.ZipFile) -> dict[str, tuple[str, str]]:
    """Workbook relationships: id -> (type, package path)."""
    rels = _read_xml(archive, WORKBOOK_RELS_PATH)
    result: dict[str, tuple[str, str]] = {}
    for rel in rels.iter(f"{{{PKG_REL_NS}}}Relationship"):
        rid = rel.get("Id")
        target = rel.get("Target")
        if not rid or not target:
            continue
        if target.startswith("/"):
            path = target.lstrip("/")
        else:
            path = posixpath.normpath(posixpath.join("xl", target))
        result[rid] = (rel.get("Type", ""), path)
    return result


def _part_of_type(rels: dict[str, tuple[str, str]], rel_type: str) -> str | None:
    for typ, path in rels.values():
        if typ == rel_type:
            return path
    return None


def _shared_strings(archive: zipfile.ZipFile, path: str | None) -> tuple[str, ...]:
    if path is None or path not in archive.namelist():
        return ()
    root = _read_xml(archive, path)
    return tuple(_text_of(si) for si in root.iter(_q("si")))


def _number_formats(archive: zipfile.ZipFile, path: str | None) -> tuple[int, ...]:
    if path is None or path not in archive.namelist():
        return ()
    root = _read_xml(archive, path)
    cell_xfs = root.find(_q("cellXfs"))
    if cell_xfs is None:
        return ()
    try:
        return tuple(int(xf.get("numFmtId", "0")) for xf in cell_xfs.findall(_q("xf")))
    except ValueError as e:
        raise DocumentError(f"invalid numFmtId in {path}: {e}") from e


@contextmanager
def open_document(path: Path) -> Iterator[SheetDocument]:
    """Open an .xlsx file read-only and yield its first worksheet.

    The archive is closed on every exit path, including decoding errors raised
    by the caller inside the ``with`` block.
    """
    try:
        archive = zipfile.ZipFile(path)
    except ARCHIVE_READ_ERRORS as e:
        raise DocumentError(f"cannot open {path}: {e}") from e
    try:
        workbook = _read_xml(archive, WORKBOOK_PATH)
        rels = _relationships(archive)
        sheets = workbook.find(_q("sheets"))
        first = sheets.find(_q("sheet")) if sheets is not None else None
        if first is None:
            raise DocumentError(f"no worksheet in {path}")
        rid = first.get(f"{{{REL_NS}}}id")
        if rid not in rels:
            raise DocumentError(f"worksheet relationship {rid!r} not found in {path}")
        sheet_path = rels[rid][1]
        if sheet_path not in archive.namelist():
            raise DocumentError(f"missing package part: {sheet_path}")
        yield SheetDocument(
            archive=archive,
            sheet_name=first.get("name", ""),
            sheet_path=sheet_path,
            shared_strings=_shared_strings(archive, _part_of_type(rels, SHARED_STRINGS_REL)),
            number_formats=_number_formats(archive, _part_of_type(rels, STYLES_REL)),
        )
    finally:
        archive.close()
