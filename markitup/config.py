"""Application settings: built-in defaults, an optional Config.toml and APP__* environment variables."""

from __future__ import annotations

import dataclasses
import os
import sys
import threading
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

ENV_PREFIX = "APP__"
CONFIG_FILE_NAME = "Config.toml"

_DEFAULTS: dict[str, Any] = {
    "model_path": "vosk/models/vosk-model-en-us",
    "image_path": "",
    "output_path": None,
    "is_ai_enpower": False,
    "doubao_api_key": None,
}

_TRUE = {"true", "1", "yes", "on"}
_FALSE = {"false", "0", "no", "off"}


@dataclass
class Settings:
    """Runtime configuration of the converters."""

    model_path: Path
    image_path: Path
    output_path: Path | None = None
    is_ai_enpower: bool = False
    doubao_api_key: str | None = None

    @property
    def has_image_path(self) -> bool:
        return str(self.image_path) not in ("", ".")


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid boolean value: {value!r}")


def _build(values: dict[str, Any]) -> Settings:
    output = values.get("output_path")
    image = values.get("image_path") or ""
    return Settings(
        model_path=Path(values["model_path"]),
        image_path=Path(image) if image else Path(""),
        output_path=Path(output) if output else None,
        is_ai_enpower=_to_bool(values.get("is_ai_enpower", False)),
        doubao_api_key=values.get("doubao_api_key") or None,
    )


def _default_config_file() -> Path:
    return Path(sys.argv[0] or ".").resolve().parent / CONFIG_FILE_NAME


def load_settings(config_file: str | os.PathLike | None = None) -> Settings:
    """Load settings from defaults, then a TOML file (if present), then the environment."""
    values = dict(_DEFAULTS)
    path = Path(config_file) if config_file is not None else _default_config_file()
    if path.is_file():
        with path.open("rb") as handle:
            data = tomllib.load(handle)
        values.update({k: v for k, v in data.items() if k in _DEFAULTS})
    for key, value in os.environ.items():
        if key.upper().startswith(ENV_PREFIX):
            name = key[len(ENV_PREFIX):].lower()
            if name in _DEFAULTS:
                values[name] = value
    return _build(values)


_lock = threading.RLock()
_settings: Settings | None = None


def _current() -> Settings:
    global _settings
    with _lock:
        if _settings is None:
            _settings = load_settings()
        return _settings


def get_settings() -> Settings:
    """Return a copy of the global settings, loading them on first use."""
    with _lock:
        return dataclasses.replace(_current())


def update_settings_with_cli_args(
    image_path: str | os.PathLike | None = None,
    output_path: str | os.PathLike | None = None,
    ai_enable: bool | None = None,
) -> None:
    """Override the global settings with command-line values that were given."""
    with _lock:
        settings = _current()
        if image_path is not None:
            settings.image_path = Path(image_path)
        if output_path is not None:
            settings.output_path = Path(output_path)
        if ai_enable is not None:
            settings.is_ai_enpower = ai_enable