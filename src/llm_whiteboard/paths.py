"""
Path constants and utilities for llm-whiteboard.

Everything lives under ~/.llmwhiteboard/ unless LLMWHITEBOARD_HOME points
somewhere else. Paths are resolved on every call so tests (and users) can
redirect HOME without re-importing.
"""

import os
from pathlib import Path

HOME_ENV_VAR = "LLMWHITEBOARD_HOME"

CONFIG_FILENAME = "config.json"
MACHINE_ID_FILENAME = "machine-id"
ENCRYPTION_KEY_FILENAME = "encryption.key"


def config_dir() -> Path:
    """Base directory for llm-whiteboard state."""
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".llmwhiteboard"


def config_file() -> Path:
    return config_dir() / CONFIG_FILENAME


def machine_id_file() -> Path:
    return config_dir() / MACHINE_ID_FILENAME


def encryption_key_file() -> Path:
    return config_dir() / ENCRYPTION_KEY_FILENAME

