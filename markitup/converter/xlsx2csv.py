"""XLSX workbook to CSV text, one string per sheet."""

from __future__ import annotations

import csv
import io
import posixpath
import re
import zipfile
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field

from markitup.common import ConversionError

_MAIN = "{http://schemas.openxmlformats.org/spreadsheetml/2006/main}"
_REL = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"
_PKG = "{http://schemas.openxmlformats.org/package/2006/relationships}"
_CELL_REF = re.compile(r"([A-Za-z]+)")


@dataclass
class Xlsx2CsvConfig:
    """Options for the conversion."""

    delimiter: str = ","
    use_header: bool = False


@dataclass
class Xlsx2CsvResult:
    """Sheet names in workbook order and the CSV text of each sheet."""

    sheet_names: list[str] = field(default_factory=list)
    csv_data: list[str] = field(default_factory=list)

    def get_by_name(self, name: str) -> str | None:
        """Return the CSV text of the named sheet, or None."""
        for sheet_name, data in zip(self.sheet_names, self.csv_data):
            if sheet_name == name:
                return data
        return None

    def first(self) -> str | None:
        """Return the CSV text of the first sheet, or None."""
        return self.csv_data[0] if self.csv_data else None


def _parse_member(archive: zipfile.ZipFile, name: str) -> ET.Element | None:
    try:
        raw = archive.read(name)
    except KeyError:
        return None
    return ET.fromstring(raw)


def _rich_text(element: ET.Element) -> str:
    parts = []
    for child in element:
        if child.tag == _MAIN + "t":
            parts.append(child.text or "")
        elif child.tag == _MAIN + "r":
            text = child.find(_MAIN + "t")
            if text is not None:
                parts.append(text.text or "")
    return "".join(parts)


def _shared_strings(archive: zipfile.ZipFile) -> list[str]:
    root = _parse_member(archive, "xl/sharedStrings.xml")
    if root is None:
        return []
    return [_rich_text(item) for item in root.iter(_MAIN + "si")]


def _resolve_target(target: str) -> str:
    if target.startswith("/"):
        return target[1:]
    return posixpath.normpath(posixpath.join("xl", target))


def _sheet_parts(archive: zipfile.ZipFile) -> list[tuple[str, str | None]]:
    workbook = _parse_member(archive, "xl/workbook.xml")
    if workbook is None:
        raise ConversionError("Failed to open xlsx: workbook part is missing")
    rels_root = _parse_member(archive, "xl/_rels/workbook.xml.rels")
    rels = {}
    if rels_root is not None:
        rels = {
            rel.get("Id"): rel.get("Target")
            for rel in rels_root.iter(_PKG + "Relationship")
        }
    sheets = []
    for sheet in workbook.iter(_MAIN + "sheet"):
        target = rels.get(sheet.get(_REL + "id"))
        sheets.append((sheet.get("name", ""), _resolve_target(target) if target else None))
    return sheets


def _column_index(ref: str) -> int:
    match = _CELL_REF.match(ref)
    if not match:
        raise ValueError(f"invalid cell reference: {ref!r}")
    index = 0
    for letter in match.group(1).upper():
        index = index * 26 + (ord(letter) - ord("A") + 1)
    return index - 1


def _cell_value(cell: ET.Element, shared: list[str]) -> str:
    kind = cell.get("t", "n")
    if kind == "inlineStr":
        inline = cell.find(_MAIN + "is")
        return _rich_text(inline) if inline is not None else ""
    value = cell.find(_MAIN + "v")
    raw = value.text if value is not None and value.text else ""
    if kind == "s":
        if not raw:
            return ""
        try:
            return shared[int(raw)]
        except (ValueError, IndexError) as exc:
            raise ValueError(f"invalid shared string index: {raw!r}") from exc
    if kind == "b" and raw:
        return "TRUE" if raw == "1" else "FALSE"
    return raw


def _sheet_rows(root: ET.Element, shared: list[str]) -> list[list[str]]:
    rows = []
    for row in root.iter(_MAIN + "row"):
        cells: dict[int, str] = {}
        position = 0
        for cell in row.iter(_MAIN + "c"):
            ref = cell.get("r")
            position = _column_index(ref) if ref else position
            cells[position] = _cell_value(cell, shared)
            position += 1
        width = max(cells) + 1 if cells else 0
        rows.append([cells.get(col, "") for col in range(width)])
    width = max((len(row) for row in rows), default=0)
    return [row + [""] * (width - len(row)) for row in rows]


def _rows_to_csv(rows: list[list[str]], config: Xlsx2CsvConfig) -> str:
    if config.use_header and rows:
        header = rows[0]
        column_count = header.index("") if "" in header else len(header)
        rows = [row[:column_count] for row in rows]
    elif config.use_header:
        rows = []
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=config.delimiter, lineterminator="\n")
    writer.writerows(rows)
    return buffer.getvalue()


def xlsx_to_csv(data: bytes, config: Xlsx2CsvConfig | None = None) -> Xlsx2CsvResult:
    """Convert XLSX bytes to CSV text for every sheet."""
    config = config or Xlsx2CsvConfig()
    try:
        archive = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as exc:
        raise ConversionError(f"Failed to open xlsx: {exc}") from exc
    with archive:
        try:
            sheets = _sheet_parts(archive)
            shared = _shared_strings(archive)
        except ET.ParseError as exc:
            raise ConversionError(f"Failed to open xlsx: {exc}") from exc
        if not sheets:
            raise ConversionError("No sheets found in xlsx file")
        result = Xlsx2CsvResult()
        for name, part in sheets:
            try:
                root = _parse_member(archive, part) if part else None
                if root is None:
                    raise ValueError(f"Sheet '{name}' not found")
                text = _rows_to_csv(_sheet_rows(root, shared), config)
            except (ValueError, ET.ParseError, csv.Error) as exc:
                raise ConversionError(f"Failed to convert sheet '{name}': {exc}") from exc
            result.sheet_names.append(name)
            result.csv_data.append(text)
    return result


def xlsx_to_csv_simple(data: bytes) -> list[str]:
    """Return the CSV text of every sheet with default options."""
    return xlsx_to_csv(data).csv_data


def xlsx_to_csv_first_sheet(data: bytes) -> str:
    """Return the CSV text of the first sheet with default options."""
    first = xlsx_to_csv(data).first()
    if first is None:
        raise ConversionError("No sheets found")
    return first