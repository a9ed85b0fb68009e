"""PPTX presentation to Markdown."""

from __future__ import annotations

import io
import zipfile
import xml.etree.ElementTree as ET
from collections.abc import Iterator, Mapping, Sequence

from markitup.common import ConversionError
from markitup.config import Settings, get_settings
from markitup.generator import image2md
from markitup.generator.image2md import ImageProcessingMode

_A = "{http://schemas.openxmlformats.org/drawingml/2006/main}"
_P = "{http://schemas.openxmlformats.org/presentationml/2006/main}"
_R = "{http://schemas.openxmlformats.org/officeDocument/2006/relationships}"
_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".webp")
_OPAQUE = (_P + "txBody", _A + "tbl")


def run(file_stream: bytes) -> str:
    """Convert PPTX bytes to Markdown, one section per slide."""
    try:
        archive = zipfile.ZipFile(io.BytesIO(file_stream))
    except zipfile.BadZipFile as exc:
        raise ConversionError(f"Failed to open PPTX archive: {exc}") from exc

    with archive:
        try:
            images = {
                info.filename: archive.read(info)
                for info in archive.infolist()
                if info.filename.startswith("ppt/media/")
            }
        except (zipfile.BadZipFile, OSError) as exc:
            raise ConversionError(f"Failed to read image data: {exc}") from exc

        slides = [
            name for name in archive.namelist()
            if name.startswith("ppt/slides/") and name.endswith(".xml")
        ]
        parts = ["# PowerPoint Presentation\n\n"]
        for number, name in enumerate(slides, start=1):
            parts.append(f"## Slide {number}\n\n")
            try:
                content = archive.read(name).decode("utf-8")
            except (UnicodeDecodeError, zipfile.BadZipFile, OSError) as exc:
                raise ConversionError(f"Failed to read slide content: {exc}") from exc
            parts.append(parse_slide_content(content, images))
            parts.append("\n\n---\n\n")
    return "".join(parts)


def _walk(element: ET.Element) -> Iterator[ET.Element]:
    yield element
    if element.tag in _OPAQUE:
        return
    for child in element:
        yield from _walk(child)


def parse_slide_content(xml_content: str, images: Mapping[str, bytes]) -> str:
    """Render one slide's XML: text bodies, tables and pictures."""
    try:
        root = ET.fromstring(xml_content)
    except ET.ParseError as exc:
        raise ConversionError(f"Error parsing slide XML: {exc}") from exc

    parts: list[str] = []
    for element in _walk(root):
        if element.tag == _P + "txBody":
            text = _text_body(element)
            if text.strip():
                parts.extend((text, "\n\n"))
        elif element.tag == _A + "tbl":
            parts.extend((_table(element), "\n"))
        elif element.tag == _A + "blip":
            image_md = _image(element, images)
            if image_md is not None:
                parts.extend((image_md, "\n\n"))
    return "".join(parts)


def _text_body(body: ET.Element) -> str:
    lines = []
    current = ""
    for paragraph in body.iter(_A + "p"):
        current += "".join(run.text or "" for run in paragraph.iter(_A + "t"))
        if current.strip():
            prefix = "###" if is_title_text(current) else "-"
            lines.append(f"{prefix} {current.strip()}\n")
            current = ""
    return "".join(lines)


def _table(table: ET.Element) -> str:
    rows = [
        ["".join(cell.itertext()).strip() for cell in row.iter(_A + "tc")]
        for row in table.iter(_A + "tr")
    ]
    return format_table_as_markdown(rows)


def format_table_as_markdown(rows: Sequence[Sequence[str]]) -> str:
    """Render rows as a Markdown table whose first row is the header."""
    if not rows:
        return ""
    header, *body = rows
    lines = ["|" + "".join(f" {cell} |" for cell in header), "|" + "---|" * len(header)]
    lines.extend("|" + "".join(f" {cell} |" for cell in row) for row in body)
    return "\n".join(lines) + "\n"


def is_title_text(text: str) -> bool:
    """Short text without closing punctuation or line breaks reads as a title."""
    trimmed = text.strip()
    return (
        len(trimmed.encode("utf-8")) < 100
        and not trimmed.endswith((".", "!", "?"))
        and "\n" not in trimmed
    )


def _image(element: ET.Element, images: Mapping[str, bytes]) -> str | None:
    embed_id = element.get(_R + "embed")
    if embed_id is None:
        return None
    settings = get_settings()
    mode = (
        ImageProcessingMode.SAVE_TO_FILE if settings.has_image_path else ImageProcessingMode.BASE64
    )
    for filename, data in images.items():
        if embed_id in filename or filename.endswith(_IMAGE_SUFFIXES):
            image_md = image2md.run_with_mode(data, mode)
            if settings.has_image_path:
                image_md = _adjust_image_path(image_md, settings)
            return image_md
    return f"![Image not found]({embed_id})"


def _lines(text: str) -> list[str]:
    parts = text.split("\n")
    if parts and parts[-1] == "":
        parts.pop()
    return [part.removesuffix("\r") for part in parts]


def _rewrite_line(line: str, base: str) -> str:
    if "![" not in line or "](" not in line:
        return line
    start = line.find("](") + 2
    end = line.find(")", start)
    if end < 0:
        return line
    path_part = line[start:end]
    if "/" in path_part or "\\" in path_part or not path_part.endswith(_IMAGE_SUFFIXES):
        return line
    return line.replace(f"]({path_part})", f"]({base}/{path_part})")


def _adjust_image_path(markdown: str, settings: Settings) -> str:
    base = None
    output = settings.output_path
    if output is not None and str(output) != "":
        try:
            base = str(settings.image_path.relative_to(output.parent))
        except ValueError:
            base = None
    if base is None:
        try:
            base = str(settings.image_path.resolve(strict=True))
        except OSError:
            base = str(settings.image_path)
    return "".join(_rewrite_line(line, base) + "\n" for line in _lines(markdown))