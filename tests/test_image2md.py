import base64
import re

import pytest

from markitup import config
from markitup.common import ConversionError
from markitup.generator import image2md
from markitup.generator.image2md import ImageProcessingMode

PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


@pytest.fixture
def no_ai():
    before = config.get_settings()
    config.update_settings_with_cli_args(None, None, False)
    yield
    config.update_settings_with_cli_args(before.image_path, None, before.is_ai_enpower)


def test_base64_round_trip(no_ai):
    md = image2md.run_with_mode(PNG, ImageProcessingMode.BASE64)
    match = re.fullmatch(r"!\[(pic-\d+)\]\(data:image/png;base64,(.+)\)", md)
    assert match
    assert base64.b64decode(match.group(2)) == PNG


def test_save_to_file(no_ai, tmp_path):
    config.update_settings_with_cli_args(tmp_path / "imgs", None, None)
    md = image2md.run_with_mode(PNG, ImageProcessingMode.SAVE_TO_FILE)
    match = re.fullmatch(r"!\[(pic-\d+)\]\((pic-\d+\.png)\)", md)
    assert match
    assert (tmp_path / "imgs" / match.group(2)).read_bytes() == PNG


def test_run_picks_save_mode_when_path_set(no_ai, tmp_path):
    config.update_settings_with_cli_args(tmp_path, None, None)
    assert "base64" not in image2md.run(PNG)


def test_unknown_bytes_default_to_jpeg(no_ai):
    md = image2md.run_with_mode(b"abc", ImageProcessingMode.BASE64)
    assert "data:image/jpeg;base64," in md


def test_empty_input_raises():
    with pytest.raises(ConversionError):
        image2md.run_with_mode(b"", ImageProcessingMode.BASE64)


def test_sanitize_name():
    assert image2md.sanitize_name('  a b/c:d*e?"f<g>h|i\\j ') == "a-b-c-d-e--f-g-h-i-j"


def test_generate_name_without_ai(no_ai):
    assert image2md.generate_name(PNG, "image/png").startswith("pic-")