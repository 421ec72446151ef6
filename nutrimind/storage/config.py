"""User settings stored as JSON next to the saved tokens."""

from __future__ import annotations

import json
import os
from typing import Any

from loguru import logger

from .paths import SETTINGS_FILE, atomic_write

DEFAULT_API_URL = "http://localhost:7066/api"
API_URL_ENV = "NUTRIMIND_API_URL"

DEFAULTS: dict[str, Any] = {
    "api_url": DEFAULT_API_URL,
    "timeout_seconds": 30.0,
    "refresh_skew_seconds": 30.0,
    "persist_tokens": True,
    "debug": False,
}


class AppSettings:
    """Read and write the settings file.

    Unknown keys in the file are preserved; missing keys fall back to
    :data:`DEFAULTS`.  A corrupt file is logged and treated as empty.
    ``NUTRIMIND_API_URL`` overrides the stored ``api_url`` on load but is
    never written back.
    """

    @staticmethod
    def _read() -> dict[str, Any]:
        if not SETTINGS_FILE.exists():
            return {}
        try:
            stored = json.loads(SETTINGS_FILE.read_text(encoding="utf-8"))
        except Exception as exc:
            logger.warning(f"Failed to read settings from {SETTINGS_FILE}: {exc}")
            return {}
        return stored if isinstance(stored, dict) else {}

    @classmethod
    def load(cls) -> dict[str, Any]:
        settings = {**DEFAULTS, **cls._read()}
        env_url = os.environ.get(API_URL_ENV)
        if env_url:
            settings["api_url"] = env_url
        return settings

    @staticmethod
    def save(settings: dict[str, Any]) -> None:
        atomic_write(SETTINGS_FILE, json.dumps(settings, indent=2))

    @classmethod
    def get(cls, key: str, default: Any = None) -> Any:
        return cls.load().get(key, default)

    @classmethod
    def set(cls, key: str, value: Any) -> None:
        settings = cls._read()
        settings[key] = value
        cls.save(settings)
