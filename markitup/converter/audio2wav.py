"""Audio to 16-bit mono WAV."""

from __future__ import annotations

import array
import io
import sys
import wave
from collections.abc import Sequence


class AudioConversionError(Exception):
    """Raised when audio cannot be decoded or encoded."""


def _decode_pcm(frames: bytes, width: int) -> list[float]:
    if width == 1:
        return [(b - 128) / 128.0 for b in frames]
    if width == 2:
        values = array.array("h")
        values.frombytes(frames)
        if sys.byteorder == "big":
            values.byteswap()
        return [v / 32768.0 for v in values]
    if width in (3, 4):
        scale = float(1 << (8 * width - 1))
        return [
            int.from_bytes(frames[i:i + width], "little", signed=True) / scale
            for i in range(0, len(frames) - width + 1, width)
        ]
    raise AudioConversionError(f"unsupported sample width: {width} bytes")


def audio_to_wav(input_bytes: bytes) -> bytes:
    """Decode PCM WAV audio of any width and channel count to 16-bit mono WAV."""
    try:
        with wave.open(io.BytesIO(input_bytes), "rb") as reader:
            channels = reader.getnchannels()
            sample_rate = reader.getframerate()
            width = reader.getsampwidth()
            frames = reader.readframes(reader.getnframes())
    except (wave.Error, EOFError) as exc:
        raise AudioConversionError(f"unsupported format: {exc}") from exc
    samples = _decode_pcm(frames, width)
    if channels > 1:
        samples = convert_to_mono(samples, channels)
    return create_wav_bytes(samples, sample_rate)


def convert_to_mono(samples: Sequence[float], channels: int) -> list[float]:
    """Average interleaved frames into one channel; an incomplete last frame is dropped."""
    if channels == 1:
        return list(samples)
    whole = len(samples) - len(samples) % channels
    return [
        sum(samples[start:start + channels]) / channels
        for start in range(0, whole, channels)
    ]


def create_wav_bytes(samples: Sequence[float], sample_rate: int) -> bytes:
    """Encode float samples in [-1, 1] as 16-bit mono WAV bytes."""
    pcm = array.array("h", (int(max(-1.0, min(1.0, s)) * 32767) for s in samples))
    if sys.byteorder == "big":
        pcm.byteswap()
    buffer = io.BytesIO()
    try:
        with wave.open(buffer, "wb") as writer:
            writer.setnchannels(1)
            writer.setsampwidth(2)
            writer.setframerate(sample_rate)
            writer.writeframes(pcm.tobytes())
    except (wave.Error, OverflowError) as exc:
        raise AudioConversionError(f"encoding failed: {exc}") from exc
    return buffer.getvalue()