"""Tests for config loading: env vars > config.json > defaults."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from vhs.core.config import _load_config_file, get_config, save_config
from vhs.core.constants import DEFAULT_API_BASE_URL, DEFAULT_USER_ID, MS_PER_HOUR


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("VHS_"):
            monkeypatch.delenv(key, raising=False)


# ---------------------------------------------------------------------------
# save / load round-trip
# ---------------------------------------------------------------------------

def test_save_and_load_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    fake_config = tmp_path / "vhs" / "config.json"
    monkeypatch.setattr("vhs.core.config.CONFIG_FILE_PATH", fake_config)

    result = save_config({"api_base_url": "http://studio.local:8000", "user_id": "alice"})
    assert result == fake_config
    assert fake_config.exists()

    loaded = json.loads(fake_config.read_text())
    assert loaded["api_base_url"] == "http://studio.local:8000"
    assert loaded["user_id"] == "alice"


def test_load_config_file_missing(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("vhs.core.config.CONFIG_FILE_PATH", tmp_path / "nope.json")
    assert _load_config_file() == {}


def test_load_config_file_invalid_json(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    bad = tmp_path / "config.json"
    bad.write_text("not json {{{")
    monkeypatch.setattr("vhs.core.config.CONFIG_FILE_PATH", bad)
    assert _load_config_file() == {}


# ---------------------------------------------------------------------------
# Priority: env vars > config.json > defaults
# ---------------------------------------------------------------------------

def test_defaults_without_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("vhs.core.config.CONFIG_FILE_PATH", tmp_path / "nope.json")
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    config = get_config()
    assert config.api_base_url == DEFAULT_API_BASE_URL
    assert config.user_id == DEFAULT_USER_ID
    assert config.session_ttl_hours == 12.0
    assert config.session_ttl_ms == 12 * MS_PER_HOUR
    assert config.log_level == "WARNING"


def test_config_file_overrides_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_file = tmp_path / "config.json"
    cfg_file.write_text(json.dumps({
        "api_base_url": "http://studio.local:8000",
        "voice_api_base_url": "http://voice.local:9000",
        "user_id": "alice",
        "session_ttl_hours": 1,
        "unknown_key": "ignored",
    }))
    monkeypatch.setattr("vhs.core.config.CONFIG_FILE_PATH", cfg_file)
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)

    config = get_config()
    assert config.api_base_url == "http://studio.local:8000"
    assert config.voice_api_base_url == "http://voice.local:9000"
    assert config.user_id == "alice"
    assert config.session_ttl_ms == MS_PER_HOUR


def test_env_var_overrides_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cfg_file = tmp_path / "config.json"
    cfg_file.write_text(json.dumps({
        "api_base_url": "http://studio.local:8000",
        "user_id": "alice",
    }))
    monkeypatch.setattr("vhs.core.config.CONFIG_FILE_PATH", cfg_file)
    monkeypatch.chdir(tmp_path)
    _clear_env(monkeypatch)
    monkeypatch.setenv("VHS_USER_ID", "bob")

    config = get_config()
    # Env var wins
    assert config.user_id == "bob"
    # Config file value still applies for non-overridden fields
    assert config.api_base_url == "http://studio.local:8000"


def test_db_path_override() -> None:
    custom = Path("/tmp/test.db")
    config = get_config(db_path=custom)
    assert config.db_path == custom
