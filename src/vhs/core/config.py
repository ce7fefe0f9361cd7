"""Configuration via environment variables, config.json, and .env files."""

from __future__ import annotations

import json
import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vhs.core.constants import (
    CONFIG_FILE_PATH,
    DEFAULT_API_BASE_URL,
    DEFAULT_DB_PATH,
    DEFAULT_REQUEST_TIMEOUT_SEC,
    DEFAULT_SESSION_TTL_HOURS,
    DEFAULT_USER_ID,
    DEFAULT_VOICE_API_BASE_URL,
    MS_PER_HOUR,
)

# Keys that may be read from config.json
_FILE_KEYS = (
    "api_base_url",
    "voice_api_base_url",
    "user_id",
    "request_timeout",
    "session_ttl_hours",
    "log_level",
)


def _load_config_file() -> dict:
    """Read ~/.config/vhs/config.json if it exists, return as dict."""
    if not CONFIG_FILE_PATH.exists():
        return {}
    try:
        return json.loads(CONFIG_FILE_PATH.read_text())
    except (OSError, ValueError):
        return {}


def save_config(data: dict) -> Path:
    """Write config dict to ~/.config/vhs/config.json. Returns the path."""
    CONFIG_FILE_PATH.parent.mkdir(parents=True, exist_ok=True)
    CONFIG_FILE_PATH.write_text(json.dumps(data, indent=2) + "\n")
    return CONFIG_FILE_PATH


class VHSConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="VHS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Analysis service
    api_base_url: str = Field(default=DEFAULT_API_BASE_URL)
    voice_api_base_url: str = Field(default=DEFAULT_VOICE_API_BASE_URL)
    user_id: str = Field(default=DEFAULT_USER_ID)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT_SEC)

    # Durable cache
    db_path: Path = Field(default=DEFAULT_DB_PATH)
    session_ttl_hours: float = Field(default=DEFAULT_SESSION_TTL_HOURS)

    # Logging
    log_level: str = Field(default="WARNING")

    @property
    def session_ttl_ms(self) -> int:
        return int(self.session_ttl_hours * MS_PER_HOUR)


def get_config(db_path: Path | None = None) -> VHSConfig:
    """Create config with priority: env vars > config.json > defaults."""
    file_data = _load_config_file()

    # pydantic treats __init__ kwargs as highest priority, so only pass
    # config.json values for keys without an env var
    init_kwargs: dict = {}
    for key in _FILE_KEYS:
        env_name = f"VHS_{key.upper()}"
        if key in file_data and env_name not in os.environ:
            init_kwargs[key] = file_data[key]

    config = VHSConfig(**init_kwargs)

    if db_path is not None:
        config.db_path = db_path
    return config
