"""CSV to Markdown table."""

from __future__ import annotations

import csv
import io

from markitup.common import ConversionError


def _row(cells: list[str]) -> str:
    return "| " + " | ".join(cell.strip() for cell in cells) + " |\n"


def run(data: bytes) -> str:
    """Render CSV bytes (first row is the header) as a Markdown table."""
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ConversionError(f"CSV parsing error: {exc}") from exc
    try:
        records = [rec for rec in csv.reader(io.StringIO(text)) if rec]
    except csv.Error as exc:
        raise ConversionError(f"CSV parsing error: {exc}") from exc

    headers = records[0] if records else []
    parts = [_row(headers), _row(["---"] * len(headers))]
    for line, record in enumerate(records[1:], start=2):
        if headers and len(record) != len(headers):
            raise ConversionError(
                f"CSV parsing error: record {line} has {len(record)} fields, "
                f"but the header has {len(headers)}"
            )
        parts.append(_row(record))
    return "".join(parts)