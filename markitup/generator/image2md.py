"""Image to Markdown: inline base64 or a saved file reference."""

from __future__ import annotations

import base64
import time
from enum import Enum, auto

import requests

from markitup.common import ConversionError, detect_mime
from markitup.config import get_settings

DOUBAO_API_URL = "https://ark.cn-beijing.volces.com/api/v3/chat/completions"
DOUBAO_MODEL = "doubao-1-5-thinking-vision-pro-250428"
_PROMPT = (
    "Please analyze this image and generate a short, descriptive filename (without extension) "
    "in English. The name should be concise and describe the main subject or content of the "
    "image. Only return the filename, nothing else."
)
_EXTENSIONS = {"image/jpeg": "jpg", "image/png": "png", "image/gif": "gif", "image/webp": "webp"}
_UNSAFE = ' /\\:*?"<>|'


class ImageProcessingMode(Enum):
    BASE64 = auto()
    SAVE_TO_FILE = auto()


def _timestamp_name() -> str:
    return f"pic-{int(time.time())}"


def sanitize_name(name: str) -> str:
    """Make a generated name usable as a file name."""
    name = name.strip()
    for char in _UNSAFE:
        name = name.replace(char, "-")
    return name


def _ask_doubao(encoded: str, mime_type: str, api_key: str) -> str:
    payload = {
        "model": DOUBAO_MODEL,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": _PROMPT},
                    {"type": "image_url", "image_url": {"url": f"data:{mime_type};base64,{encoded}"}},
                ],
            }
        ],
        "max_tokens": 50,
        "temperature": 0.7,
    }
    response = requests.post(
        DOUBAO_API_URL,
        json=payload,
        headers={"Authorization": f"Bearer {api_key}", "Accept": "application/json"},
        timeout=60,
    )
    if response.status_code != 200:
        raise ConversionError(f"API request failed with status: {response.status_code}")
    try:
        content = response.json()["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError, ValueError):
        content = None
    if not isinstance(content, str):
        content = "generated-image"
    return sanitize_name(content)


def generate_name(file_stream: bytes, mime_type: str) -> str:
    """Name an image by AI description when enabled, else by timestamp."""
    settings = get_settings()
    if not settings.is_ai_enpower or not settings.doubao_api_key:
        return _timestamp_name()
    encoded = base64.b64encode(file_stream).decode("ascii")
    try:
        return _ask_doubao(encoded, mime_type, settings.doubao_api_key)
    except (requests.RequestException, ConversionError):
        return _timestamp_name()


def run_with_mode(file_stream: bytes, mode: ImageProcessingMode) -> str:
    """Produce Markdown for an image using the given mode."""
    if not file_stream:
        raise ConversionError("Input stream is empty")
    mime_type = detect_mime(file_stream) or "image/jpeg"
    extension = _EXTENSIONS.get(mime_type, "jpg")
    name = generate_name(file_stream, mime_type)

    if mode is ImageProcessingMode.BASE64:
        encoded = base64.b64encode(file_stream).decode("ascii")
        return f"![{name}](data:{mime_type};base64,{encoded})"

    settings = get_settings()
    filename = f"{name}.{extension}"
    target = settings.image_path / filename
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConversionError(f"Failed to create image directory: {exc}") from exc
    try:
        target.write_bytes(file_stream)
    except OSError as exc:
        raise ConversionError(f"Failed to save image file: {exc}") from exc
    return f"![{name}]({filename})"


def run(file_stream: bytes) -> str:
    """Produce Markdown for an image, saving it when an image path is configured."""
    mode = (
        ImageProcessingMode.SAVE_TO_FILE
        if get_settings().has_image_path
        else ImageProcessingMode.BASE64
    )
    return run_with_mode(file_stream, mode)