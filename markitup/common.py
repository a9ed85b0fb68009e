"""Shared error type and file-type detection."""

from __future__ import annotations

from pathlib import Path


class ConversionError(Exception):
    """Raised when a document cannot be converted."""


_EXTENSION_MIME = {
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    "csv": "text/csv",
    "wav": "audio/wav",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "html": "text/html",
    "htm": "text/html",
}


def detect_mime(data: bytes) -> str | None:
    """Guess a MIME type from the leading bytes, or return None."""
    if data.startswith(b"\xff\xd8\xff"):
        return "image/jpeg"
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if data.startswith((b"GIF87a", b"GIF89a")):
        return "image/gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:4] == b"RIFF" and data[8:12] == b"WAVE":
        return "audio/x-wav"
    if data.startswith(b"PK\x03\x04"):
        return "application/zip"
    if data.startswith(b"ID3") or data[:2] in (b"\xff\xfb", b"\xff\xf3", b"\xff\xf2"):
        return "audio/mpeg"
    if data.startswith(b"fLaC"):
        return "audio/x-flac"
    if data.startswith(b"OggS"):
        return "audio/ogg"
    if data[4:11] == b"ftypM4A":
        return "audio/m4a"
    head = data[:64].lstrip().lower()
    if head.startswith((b"<!doctype html", b"<html")):
        return "text/html"
    return None


def mime_from_extension(file_path: str | None) -> str | None:
    """Map a file name's extension to a MIME type, or return None."""
    if not file_path:
        return None
    suffix = Path(file_path).suffix
    if not suffix:
        return None
    return _EXTENSION_MIME.get(suffix[1:].lower())