import io
import wave

import pytest

from markitup.converter.audio2wav import (
    AudioConversionError,
    audio_to_wav,
    convert_to_mono,
    create_wav_bytes,
)


def test_mono_conversion():
    mono = convert_to_mono([0.1, 0.2, 0.3, 0.4, 0.5, 0.6], 2)
    assert len(mono) == 3
    assert mono[0] == pytest.approx(0.15)
    assert mono[1] == pytest.approx(0.35)
    assert mono[2] == pytest.approx(0.55)


def test_mono_single_channel_is_copy():
    assert convert_to_mono([0.5, -0.5], 1) == [0.5, -0.5]


def _read(data):
    with wave.open(io.BytesIO(data), "rb") as r:
        return r.getnchannels(), r.getsampwidth(), r.getframerate(), r.readframes(r.getnframes())


def test_create_wav_clamps():
    channels, width, rate, frames = _read(create_wav_bytes([2.0, -2.0, 0.0], 8000))
    assert (channels, width, rate) == (1, 2, 8000)
    values = [int.from_bytes(frames[i:i + 2], "little", signed=True) for i in range(0, 6, 2)]
    assert values == [32767, -32767, 0]


def test_stereo_wav_becomes_mono():
    buf = io.BytesIO()
    with wave.open(buf, "wb") as w:
        w.setnchannels(2)
        w.setsampwidth(2)
        w.setframerate(16000)
        w.writeframes(b"\x00\x40\x00\x40" * 10)
    channels, _, rate, frames = _read(audio_to_wav(buf.getvalue()))
    assert (channels, rate) == (1, 16000)
    assert len(frames) == 20


def test_garbage_raises():
    with pytest.raises(AudioConversionError):
        audio_to_wav(b"not audio at all")