"""Dispatch a file's bytes to the converter for its type."""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass

from markitup.common import ConversionError, detect_mime, mime_from_extension
from markitup.converter import xlsx2csv
from markitup.converter.audio2wav import AudioConversionError, audio_to_wav
from markitup.generator import csv2md, docx2md, html2md, image2md, pptx2md, wav2md

DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PPTX_MIME = "application/vnd.openxmlformats-officedocument.presentationml.presentation"


@dataclass
class ConverterFile:
    """The bytes of a file and, when known, the path it came from."""

    file_stream: bytes
    file_path: str | None = None


def _wrap(label: str, action: Callable[[], str]) -> str:
    try:
        return action()
    except ConversionError as exc:
        raise ConversionError(f"Failed to convert {label}: {exc}") from exc


def _wav(data: bytes) -> str:
    return _wrap("WAV", lambda: wav2md.run(data))


def _audio(data: bytes) -> str:
    try:
        wav_data = audio_to_wav(data)
    except AudioConversionError as exc:
        raise ConversionError(f"Failed to convert audio to WAV: {exc}") from exc
    return _wav(wav_data)


def _docx(data: bytes) -> str:
    return _wrap("DOCX", lambda: docx2md.run(data))


def _image(data: bytes) -> str:
    return _wrap("image", lambda: image2md.run(data))


def _pptx(data: bytes) -> str:
    return _wrap("PPTX", lambda: pptx2md.run(data))


def _xlsx(data: bytes) -> str:
    try:
        result = xlsx2csv.xlsx_to_csv(data, None)
    except ConversionError as exc:
        raise ConversionError(f"Failed to convert XLSX: {exc}") from exc

    sections = []
    for name, csv_text in zip(result.sheet_names, result.csv_data):
        try:
            markdown = csv2md.run(csv_text.encode("utf-8"))
        except ConversionError as exc:
            raise ConversionError(
                f"Failed to convert CSV for sheet '{name}': {exc}"
            ) from exc
        sections.append(f"## Sheet: {name}\n\n{markdown}")

    combined = "\n\n---\n\n".join(sections)
    if not combined:
        raise ConversionError("No sheets found in XLSX file")
    return combined


def _csv(data: bytes) -> str:
    return _wrap("CSV", lambda: csv2md.run(data))


def _html(data: bytes) -> str:
    return _wrap("HTML", lambda: html2md.run(data))


_HANDLERS: dict[str, Callable[[bytes], str]] = {
    **dict.fromkeys(("audio/x-wav", "audio/wav", "audio/wave"), _wav),
    **dict.fromkeys(
        ("audio/mpeg", "audio/mp3", "audio/flac", "audio/ogg", "audio/aac", "audio/x-m4a"),
        _audio,
    ),
    DOCX_MIME: _docx,
    **dict.fromkeys(("image/jpeg", "image/png", "image/gif"), _image),
    PPTX_MIME: _pptx,
    XLSX_MIME: _xlsx,
    **dict.fromkeys(("text/csv", "application/csv"), _csv),
    "text/html": _html,
}


def convert(file: ConverterFile) -> str:
    """Convert a file's bytes to Markdown according to its detected type."""
    mime_type = detect_mime(file.file_stream)
    if mime_type is None:
        raise ConversionError("Could not determine file type")

    if mime_type in ("application/zip", "text/plain"):
        mime_type = mime_from_extension(file.file_path) or mime_type

    handler = _HANDLERS.get(mime_type)
    if handler is None:
        raise ConversionError(f"Unsupported file type: {mime_type}")
    return handler(file.file_stream)


def convert_from_path(file_path: str | os.PathLike) -> str:
    """Read a file from disk and convert it to Markdown."""
    path = os.fspath(file_path)
    try:
        with open(path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise ConversionError(f"Failed to read file {path}: {exc}") from exc
    return convert(ConverterFile(file_stream=data, file_path=path))