import base64
import io
import zipfile
from pathlib import Path

import pytest

from markitup import config
from markitup.common import ConversionError
from markitup.config import Settings
from markitup.converter import xlsx2csv
from markitup.converter.audio2wav import create_wav_bytes
from markitup.core import ConverterFile, convert, convert_from_path
from markitup.generator import csv2md, html2md, pptx2md

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
HTML_BYTES = b"<html><body><h1>Title</h1><p>Hello</p></body></html>"


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    settings = Settings(model_path=Path("model"), image_path=Path(""))
    monkeypatch.setattr(config, "_settings", settings)
    return settings


def _zip(members):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, content in members.items():
            archive.writestr(name, content)
    return buffer.getvalue()


def _sheet_xml(rows):
    body = "".join(
        "<row>"
        + "".join(f'<c t="inlineStr"><is><t>{cell}</t></is></c>' for cell in row)
        + "</row>"
        for row in rows
    )
    return f'<worksheet xmlns="{MAIN_NS}"><sheetData>{body}</sheetData></worksheet>'


def _xlsx(sheets):
    sheet_entries = "".join(
        f'<sheet name="{name}" sheetId="{i}" r:id="rId{i}"/>'
        for i, name in enumerate(sheets, start=1)
    )
    rel_entries = "".join(
        f'<Relationship Id="rId{i}" Type="worksheet" Target="worksheets/sheet{i}.xml"/>'
        for i in range(1, len(sheets) + 1)
    )
    members = {
        "xl/workbook.xml": (
            f'<workbook xmlns="{MAIN_NS}" xmlns:r="{REL_NS}"><sheets>{sheet_entries}</sheets></workbook>'
        ),
        "xl/_rels/workbook.xml.rels": f'<Relationships xmlns="{PKG_NS}">{rel_entries}</Relationships>',
    }
    for i, rows in enumerate(sheets.values(), start=1):
        members[f"xl/worksheets/sheet{i}.xml"] = _sheet_xml(rows)
    return _zip(members)


def test_converter_file_path_defaults_to_none():
    file = ConverterFile(file_stream=b"abc")
    assert file.file_path is None
    assert file.file_stream == b"abc"


def test_html_is_converted_like_the_html_generator():
    result = convert(ConverterFile(file_stream=HTML_BYTES))
    assert result == html2md.run(HTML_BYTES)
    assert "Title" in result and "Hello" in result


def test_undetectable_bytes_raise():
    with pytest.raises(ConversionError, match="Could not determine file type"):
        convert(ConverterFile(file_stream=b"just some words", file_path="notes.csv"))


def test_zip_without_known_extension_is_unsupported():
    data = _zip({"a.txt": "x"})
    with pytest.raises(ConversionError, match="Unsupported file type: application/zip"):
        convert(ConverterFile(file_stream=data, file_path="archive.zip"))


def test_zip_without_path_is_unsupported():
    data = _zip({"a.txt": "x"})
    with pytest.raises(ConversionError, match="Unsupported file type"):
        convert(ConverterFile(file_stream=data))


def test_xlsx_single_sheet():
    data = _xlsx({"Data": [["name", "qty"], ["apple", "3"]]})
    result = convert(ConverterFile(file_stream=data, file_path="book.XLSX"))
    expected_table = csv2md.run(xlsx2csv.xlsx_to_csv(data).first().encode("utf-8"))
    assert result == "## Sheet: Data\n\n" + expected_table
    assert "| apple | 3 |" in result


def test_xlsx_sheets_are_separated_in_order():
    data = _xlsx({"First": [["a"], ["1"]], "Second": [["b"], ["2"]]})
    result = convert(ConverterFile(file_stream=data, file_path="book.xlsx"))
    first, second = result.split("\n\n---\n\n")
    assert first.startswith("## Sheet: First\n\n")
    assert second.startswith("## Sheet: Second\n\n")


def test_broken_xlsx_is_reported():
    data = _zip({"other.xml": "<x/>"})
    with pytest.raises(ConversionError, match="^Failed to convert XLSX: "):
        convert(ConverterFile(file_stream=data, file_path="book.xlsx"))


def test_pptx_matches_the_pptx_generator():
    slide = (
        '<p:sld xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main" '
        'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main">'
        "<p:cSld><p:spTree><p:sp><p:txBody><a:p><a:r><a:t>Hello</a:t></a:r></a:p>"
        "</p:txBody></p:sp></p:spTree></p:cSld></p:sld>"
    )
    data = _zip({"ppt/slides/slide1.xml": slide})
    result = convert(ConverterFile(file_stream=data, file_path="deck.pptx"))
    assert result == pptx2md.run(data)
    assert result.startswith("# PowerPoint Presentation\n\n## Slide 1")


def test_broken_docx_is_reported():
    data = _zip({"other.xml": "<x/>"})
    with pytest.raises(ConversionError, match="^Failed to convert DOCX: "):
        convert(ConverterFile(file_stream=data, file_path="letter.docx"))


def test_png_is_embedded_as_base64():
    result = convert(ConverterFile(file_stream=PNG_BYTES))
    encoded = base64.b64encode(PNG_BYTES).decode("ascii")
    assert result.startswith("![pic-")
    assert result.endswith(f"(data:image/png;base64,{encoded})")


def test_wav_without_recognizer_reports_model_failure():
    data = create_wav_bytes([0.0, 0.5, -0.5], 16000)
    with pytest.raises(ConversionError, match="^Failed to convert WAV: Failed to load model"):
        convert(ConverterFile(file_stream=data))


def test_undecodable_audio_is_reported():
    with pytest.raises(ConversionError, match="^Failed to convert audio to WAV: "):
        convert(ConverterFile(file_stream=b"ID3" + b"\x00" * 32))


def test_convert_from_path_reads_the_file(tmp_path):
    path = tmp_path / "page.html"
    path.write_bytes(HTML_BYTES)
    assert convert_from_path(str(path)) == html2md.run(HTML_BYTES)


def test_convert_from_path_uses_the_extension(tmp_path):
    data = _xlsx({"Data": [["x"], ["y"]]})
    path = tmp_path / "book.xlsx"
    path.write_bytes(data)
    assert convert_from_path(path).startswith("## Sheet: Data")


def test_convert_from_missing_path_raises(tmp_path):
    missing = tmp_path / "missing.html"
    with pytest.raises(ConversionError, match="Failed to read file"):
        convert_from_path(str(missing))