"""WAV speech to a Markdown transcription."""

from __future__ import annotations

import array
import io
import sys
import wave
from collections.abc import Callable, Sequence

from markitup.common import ConversionError
from markitup.config import get_settings

NO_CONTENT = "[No valid content recognized]"

Recognizer = Callable[[Sequence[int], int], "str | None"]


def retrieve_wave_samples(stream: bytes) -> tuple[list[int], int]:
    """Read 16-bit mono WAV bytes into samples and their sample rate."""
    try:
        with wave.open(io.BytesIO(stream), "rb") as reader:
            channels = reader.getnchannels()
            if channels != 1:
                raise ConversionError(f"Mono audio required (channels: {channels})")
            width = reader.getsampwidth()
            if width != 2:
                raise ConversionError(f"16-bit depth required (depth: {width * 8})")
            sample_rate = reader.getframerate()
            frames = reader.readframes(reader.getnframes())
    except (wave.Error, EOFError) as exc:
        raise ConversionError(f"Failed to read WAV stream: {exc}") from exc

    samples = array.array("h")
    try:
        samples.frombytes(frames)
    except ValueError as exc:
        raise ConversionError(f"Failed to read samples: {exc}") from exc
    if sys.byteorder == "big":
        samples.byteswap()
    return samples.tolist(), sample_rate


def format_transcription(sample_rate: int, model_path: str, text: str) -> str:
    """Lay out a transcription as a Markdown document."""
    return (
        "# Audio Transcription\n\n"
        "## Basic Information\n"
        f"- **Sample Rate**: {sample_rate} Hz\n"
        f"- **Recognition Engine**: Vosk (Model: {model_path})\n\n"
        f"## Transcription\n{text}"
    )


def run(file_stream: bytes, recognizer: Recognizer | None = None) -> str:
    """Transcribe WAV bytes with a speech recognizer and return Markdown.

    The recognizer is called with the samples and the sample rate and returns
    the recognised text, or None when nothing was recognised.
    """
    model_path = str(get_settings().model_path)
    if recognizer is None:
        raise ConversionError(f"Failed to load model: {model_path}")

    try:
        samples, sample_rate = retrieve_wave_samples(file_stream)
    except ConversionError as exc:
        raise ConversionError(f"Failed to read audio stream: {exc}") from exc

    try:
        text = recognizer(samples, sample_rate)
    except (RuntimeError, ValueError, OSError) as exc:
        raise ConversionError(f"Failed to process audio stream: {exc}") from exc

    return format_transcription(sample_rate, model_path, NO_CONTENT if text is None else text)