"""Shared test fixtures for llm-whiteboard."""

from __future__ import annotations

from pathlib import Path

import pytest

from llm_whiteboard.config import Config, EncryptionSettings, write_config
from llm_whiteboard.paths import HOME_ENV_VAR, encryption_key_file


@pytest.fixture(autouse=True)
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point HOME and the llm-whiteboard state dir at a temp directory."""
    user_home = tmp_path / "home"
    user_home.mkdir()
    monkeypatch.setenv("HOME", str(user_home))
    monkeypatch.setenv(HOME_ENV_VAR, str(user_home / ".llmwhiteboard"))
    return user_home


@pytest.fixture
def claude_home(home: Path) -> Path:
    """A home directory where Claude Code looks installed."""
    (home / ".claude").mkdir()
    return home


@pytest.fixture
def gemini_home(home: Path) -> Path:
    """A home directory where Gemini CLI looks installed."""
    (home / ".gemini").mkdir()
    return home


@pytest.fixture
def config() -> Config:
    """Written plaintext config."""
    cfg = Config(token="lwb_sk_test", api_url="https://api.test", machine_id="machine-1")
    write_config(cfg)
    return cfg


@pytest.fixture
def encrypted_config() -> Config:
    """Written config with encryption enabled (no key created)."""
    cfg = Config(
        token="lwb_sk_test",
        api_url="https://api.test",
        machine_id="machine-1",
        encryption=EncryptionSettings(enabled=True, key_path=str(encryption_key_file())),
    )
    write_config(cfg)
    return cfg
