"""DOCX document to Markdown, through pandoc when it is installed."""

from __future__ import annotations

import io
import subprocess
import tempfile
import zipfile
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from pathlib import Path

from markitup.common import ConversionError
from markitup.config import Settings, get_settings
from markitup.generator import image2md
from markitup.generator.image2md import ImageProcessingMode

_W = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
_IMAGE_SUFFIXES = (".png", ".jpg", ".jpeg", ".gif", ".webp")
_DIGITS = "0123456789"


def run(file_stream: bytes) -> str:
    """Convert DOCX bytes to Markdown, preferring pandoc when it is available."""
    if is_pandoc_available():
        return run_with_pandoc(file_stream)
    return run_with_images(file_stream)


def is_pandoc_available() -> bool:
    """Return True if the pandoc program can be started."""
    try:
        subprocess.run(["pandoc", "--version"], capture_output=True, check=False)
    except OSError:
        return False
    return True


def run_with_pandoc(file_stream: bytes) -> str:
    """Convert DOCX bytes to Markdown with pandoc."""
    settings = get_settings()
    with tempfile.TemporaryDirectory() as tmp:
        input_path = Path(tmp) / "temp_input.docx"
        output_path = Path(tmp) / "temp_output.md"
        try:
            input_path.write_bytes(file_stream)
        except OSError as exc:
            raise ConversionError(f"Failed to write temporary DOCX file: {exc}") from exc

        command = [
            "pandoc", str(input_path), "-o", str(output_path), "-f", "docx", "-t", "markdown",
        ]
        if settings.has_image_path:
            command += ["--extract-media", str(settings.image_path)]
        try:
            result = subprocess.run(command, capture_output=True, check=False)
        except OSError as exc:
            raise ConversionError(f"Failed to execute pandoc: {exc}") from exc
        if result.returncode != 0:
            stderr = (result.stderr or b"").decode("utf-8", "replace")
            raise ConversionError(f"Pandoc execution failed: {stderr}")

        try:
            markdown = output_path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConversionError(f"Failed to read pandoc output: {exc}") from exc

    if settings.has_image_path:
        markdown = _relative_media_paths(markdown, settings)
    return markdown


def _relative_media_paths(markdown: str, settings: Settings) -> str:
    output = settings.output_path
    if output is None or str(output) == "":
        return markdown
    media = settings.image_path / "media"
    try:
        relative = media.relative_to(output.parent)
    except ValueError:
        return markdown
    return markdown.replace(f"]({media})", f"](./{relative})")


def run_with_images(file_stream: bytes) -> str:
    """Convert DOCX bytes to Markdown by reading the document XML directly."""
    try:
        archive = zipfile.ZipFile(io.BytesIO(file_stream))
    except zipfile.BadZipFile as exc:
        raise ConversionError(f"Failed to open DOCX archive: {exc}") from exc

    with archive:
        try:
            images = {
                info.filename: archive.read(info)
                for info in archive.infolist()
                if info.filename.startswith("word/media/")
            }
        except (zipfile.BadZipFile, OSError) as exc:
            raise ConversionError(f"Failed to read image data: {exc}") from exc
        try:
            raw = archive.read("word/document.xml")
        except (KeyError, zipfile.BadZipFile, OSError) as exc:
            raise ConversionError(f"Failed to read DOCX file: {exc}") from exc

    try:
        root = ET.fromstring(raw)
    except ET.ParseError as exc:
        raise ConversionError(f"Failed to parse DOCX file: {exc}") from exc
    body = root.find(_W + "body")
    if body is None:
        raise ConversionError("Failed to parse DOCX file: document has no body")

    parts = ["# Document\n\n"]
    for child in body:
        if child.tag == _W + "p":
            text = _paragraph(child, images)
        elif child.tag == _W + "tbl":
            text = _table(child)
        else:
            continue
        if text.strip():
            parts.extend((text, "\n\n"))
    return "".join(parts)


def _paragraph(paragraph: ET.Element, images: Mapping[str, bytes]) -> str:
    is_heading, heading_level = False, 1
    style = paragraph.find(f"{_W}pPr/{_W}pStyle")
    if style is not None:
        style_value = style.get(_W + "val")
        if style_value is not None:
            found = check_style_for_heading(style_value)
            if found is not None:
                is_heading, heading_level = found

    has_bold = False
    font_size: float | None = None
    parts: list[str] = []
    for run_element in paragraph.findall(_W + "r"):
        props = run_element.find(_W + "rPr")
        if props is not None:
            if props.find(_W + "b") is not None:
                has_bold = True
            size = props.find(_W + "sz")
            if size is not None:
                try:
                    font_size = int(size.get(_W + "val", "")) / 2.0
                except ValueError:
                    pass
        for child in run_element:
            if child.tag == _W + "t":
                parts.append(child.text or "")
            elif child.tag == _W + "drawing":
                image_md = _drawing_image(images)
                if image_md is not None:
                    parts.append(image_md)

    text = "".join(parts)
    final_heading, level = determine_heading_status(
        is_heading, heading_level, has_bold, font_size, text
    )
    if final_heading and text.strip():
        return f"{'#' * min(level, 6)} {text.strip()}"
    return text


def _drawing_image(images: Mapping[str, bytes]) -> str | None:
    settings = get_settings()
    mode = (
        ImageProcessingMode.SAVE_TO_FILE if settings.has_image_path else ImageProcessingMode.BASE64
    )
    for filename, data in images.items():
        if filename.endswith(_IMAGE_SUFFIXES):
            image_md = image2md.run_with_mode(data, mode)
            if settings.has_image_path:
                image_md = _relative_image_path(image_md, settings)
            return f"\n\n{image_md}\n\n"
    return None


def _relative_image_path(markdown: str, settings: Settings) -> str:
    output = settings.output_path
    if output is None or str(output) == "":
        return markdown
    try:
        relative = settings.image_path.relative_to(output.parent)
    except ValueError:
        return markdown
    return markdown.replace(f"]({settings.image_path})", f"](./{relative})")


def _digits_or(style_name: str, default: int) -> int:
    digits = "".join(c for c in style_name if c in _DIGITS)
    return int(digits) if digits else default


def check_style_for_heading(style_name: str) -> tuple[bool, int] | None:
    """Return (True, level) if a paragraph style names a heading, else None."""
    lower = style_name.lower()
    if lower.startswith(("heading", "title")):
        return True, _digits_or(style_name, 1)
    if lower == "title":
        return True, 1
    if "subtitle" in lower:
        return True, 2
    if "header" in lower:
        return True, _digits_or(style_name, 3)
    return None


def determine_heading_status(
    style_is_heading: bool,
    style_level: int,
    has_bold: bool,
    font_size: float | None,
    content: str,
) -> tuple[bool, int]:
    """Decide whether a paragraph is a heading, and its level, from style and formatting."""
    if style_is_heading:
        return True, style_level

    trimmed = content.strip()
    if font_size is not None:
        points = max(int(font_size), 0)
        if points >= 18:
            level = 1
        elif points >= 16:
            level = 2
        elif points >= 14:
            level = 3
        elif points >= 13:
            level = 4
        elif points >= 12:
            level = 5
        else:
            return False, 1
        if len(trimmed.encode("utf-8")) < 100 and not trimmed.endswith("."):
            return True, level

    length = len(trimmed.encode("utf-8"))
    if (
        has_bold
        and 0 < length < 80
        and not trimmed.endswith((".", "!", "?"))
        and "\n" not in trimmed
        and any(c.isalpha() for c in trimmed)
    ):
        if length < 30:
            return True, 2
        if length < 50:
            return True, 3
        return True, 4

    return False, 1


def _table(table: ET.Element) -> str:
    rows = table.findall(_W + "tr")
    if not rows:
        return ""

    def line(row: ET.Element) -> str:
        return "|" + "".join(f" {_cell_text(cell)} |" for cell in row.findall(_W + "tc")) + "\n"

    header = rows[0]
    parts = [line(header), "|" + "---|" * len(header.findall(_W + "tc")) + "\n"]
    parts.extend(line(row) for row in rows[1:])
    return "".join(parts)


def _cell_text(cell: ET.Element) -> str:
    text = ""
    for paragraph in cell.findall(_W + "p"):
        for run_element in paragraph.findall(_W + "r"):
            for item in run_element.findall(_W + "t"):
                text += item.text or ""
        if text and not text.endswith(" "):
            text += " "
    return text.strip()