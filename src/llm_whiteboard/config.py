"""
Local llm-whiteboard configuration (~/.llmwhiteboard/config.json).

Read fresh on every call; nothing is cached between operations.
"""

import json
import logging
import uuid
from dataclasses import dataclass
from typing import Any

from llm_whiteboard.errors import NotConfigured
from llm_whiteboard.fileio import write_text_atomic
from llm_whiteboard.paths import config_file, encryption_key_file, machine_id_file

logger = logging.getLogger("llm_whiteboard.config")

DEFAULT_API_URL = "https://api.llmwhiteboard.com"
CONFIG_FILE_MODE = 0o600  # holds the bearer token


@dataclass(frozen=True)
class EncryptionSettings:
    enabled: bool
    key_path: str


@dataclass(frozen=True)
class Config:
    token: str
    api_url: str
    machine_id: str
    encryption: EncryptionSettings | None = None

    @property
    def encryption_enabled(self) -> bool:
        return self.encryption is not None and self.encryption.enabled

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "token": self.token,
            "apiUrl": self.api_url,
            "machineId": self.machine_id,
        }
        if self.encryption is not None:
            data["encryption"] = {
                "enabled": self.encryption.enabled,
                "keyPath": self.encryption.key_path,
            }
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        encryption = None
        raw_encryption = data.get("encryption")
        if isinstance(raw_encryption, dict):
            encryption = EncryptionSettings(
                enabled=bool(raw_encryption.get("enabled", False)),
                key_path=str(raw_encryption.get("keyPath") or encryption_key_file()),
            )
        return cls(
            token=str(data.get("token", "")),
            api_url=str(data.get("apiUrl") or DEFAULT_API_URL).rstrip("/"),
            machine_id=str(data.get("machineId", "")),
            encryption=encryption,
        )


def read_config() -> Config | None:
    """Load config, or None if missing or unreadable."""
    path = config_file()
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        return None
    return Config.from_dict(data)


def require_config() -> Config:
    config = read_config()
    if config is None:
        raise NotConfigured()
    return config


def write_config(config: Config) -> None:
    write_text_atomic(
        config_file(), json.dumps(config.to_dict(), indent=2) + "\n", mode=CONFIG_FILE_MODE
    )


def delete_config() -> bool:
    """Remove config.json. Returns False if there was nothing to remove."""
    path = config_file()
    if not path.exists():
        return False
    path.unlink()
    return True


def get_machine_id() -> str:
    """Stable per-machine id, generated on first use."""
    path = machine_id_file()
    if path.exists():
        machine_id = path.read_text(encoding="utf-8").strip()
        if machine_id:
            return machine_id
    machine_id = str(uuid.uuid4())
    write_text_atomic(path, machine_id)
    return machine_id
