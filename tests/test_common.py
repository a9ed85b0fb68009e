import pytest

from markitup.common import detect_mime, mime_from_extension


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"\x89PNG\r\n\x1a\n" + b"\0" * 8, "image/png"),
        (b"\xff\xd8\xff\xe0rest", "image/jpeg"),
        (b"GIF89a....", "image/gif"),
        (b"PK\x03\x04zipdata", "application/zip"),
        (b"RIFF\0\0\0\0WAVEfmt ", "audio/x-wav"),
    ],
)
def test_detect_mime(data, expected):
    assert detect_mime(data) == expected


def test_detect_unknown():
    assert detect_mime(b"a,b\n1,2\n") is None


@pytest.mark.parametrize(
    "path, expected",
    [
        ("report.DOCX", "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
        ("data.csv", "text/csv"),
        ("page.htm", "text/html"),
        ("photo.jpeg", "image/jpeg"),
        ("noext", None),
        ("archive.tar", None),
        (None, None),
    ],
)
def test_mime_from_extension(path, expected):
    assert mime_from_extension(path) == expected