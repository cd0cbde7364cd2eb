"""
CLI adapter contract.

Each supported CLI tool gets one subclass that knows its config directory,
settings files, transcript layout, hook schema and stdin payload shape.
Pipelines only ever talk to this interface; nothing outside adapters/
branches on CliType.
"""

import json
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from llm_whiteboard.errors import HookPayloadError
from llm_whiteboard.settings import load_settings, save_settings
from llm_whiteboard.types import (
    CliType,
    HookAction,
    HookConfiguration,
    HookEntry,
    NormalizedEventType,
    NormalizedHookContext,
    SettingsScope,
)

REQUIRED_HOOK_FIELDS = ("hook_event_name", "session_id")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def optional_str(raw: dict[str, Any], key: str) -> str | None:
    """Field as a string, or None when absent or not a string."""
    value = raw.get(key)
    return value if isinstance(value, str) else None


def optional_dict(raw: dict[str, Any], key: str) -> dict[str, Any] | None:
    value = raw.get(key)
    return value if isinstance(value, dict) else None


class CliAdapter(ABC):
    """Capability set every supported CLI tool implements."""

    name: CliType
    display_name: str
    config_dir_name: str  # e.g. ".claude" under the user's home

    # Raw hook event name -> canonical event type
    event_map: dict[str, NormalizedEventType] = {}

    def __init__(self, home: Path | None = None):
        self._home = home

    # --- Detection ---------------------------------------------------------

    def is_installed(self) -> bool:
        """Best-effort probe: the tool's config directory exists."""
        return self.config_dir().is_dir()

    # --- Paths -------------------------------------------------------------

    def home(self) -> Path:
        return self._home if self._home is not None else Path.home()

    def config_dir(self) -> Path:
        return self.home() / self.config_dir_name

    @abstractmethod
    def settings_path(self, scope: SettingsScope, project_path: str | None = None) -> Path:
        """File the tool reads hook configuration from."""

    @abstractmethod
    def transcript_path(self, project_path: str, session_id: str) -> Path:
        """Where the tool itself stores the transcript for this project/session."""

    # --- Hook schema -------------------------------------------------------

    @abstractmethod
    def supported_hooks(self) -> list[str]:
        """Every raw hook event the tool can emit."""

    @abstractmethod
    def default_hooks(self) -> list[str]:
        """Subset of supported_hooks wired for sync."""

    @abstractmethod
    def hook_config(self, command: str) -> HookConfiguration:
        """Full hook configuration for the given sync command."""

    def create_hook_entry(self, command: str, matcher: str | None = None) -> HookEntry:
        return HookEntry(actions=(HookAction(command=command),), matcher=matcher)

    # --- Settings I/O ------------------------------------------------------

    def read_settings(
        self, scope: SettingsScope, project_path: str | None = None, strict: bool = False
    ) -> dict[str, Any]:
        return load_settings(self.settings_path(scope, project_path), strict=strict)

    def write_settings(
        self, settings: dict[str, Any], scope: SettingsScope, project_path: str | None = None
    ) -> Path:
        path = self.settings_path(scope, project_path)
        save_settings(path, settings)
        return path

    # --- Resume ------------------------------------------------------------

    @abstractmethod
    def resume_command(self, session_id: str, project_path: str | None = None) -> str:
        """Shell command shown to the user; never parsed."""

    def list_sessions_command(self) -> str | None:
        return None

    # --- Event parsing -----------------------------------------------------

    def map_event_type(self, hook_name: str) -> NormalizedEventType:
        """Unknown names become notifications; a crashing hook blocks the host CLI."""
        return self.event_map.get(hook_name, NormalizedEventType.NOTIFICATION)

    @staticmethod
    def load_hook_payload(stdin: str) -> dict[str, Any]:
        """Decode hook stdin and enforce the two hard-required fields."""
        try:
            raw = json.loads(stdin)
        except json.JSONDecodeError as e:
            raise HookPayloadError(f"Hook input is not valid JSON: {e}") from e
        if not isinstance(raw, dict):
            raise HookPayloadError("Hook input must be a JSON object")
        missing = [f for f in REQUIRED_HOOK_FIELDS if not isinstance(raw.get(f), str) or not raw.get(f)]
        if missing:
            raise HookPayloadError(f"Hook input missing required field(s): {', '.join(missing)}")
        return raw

    def resolve_cwd(self, raw: dict[str, Any]) -> str:
        return optional_str(raw, "cwd") or os.getcwd()

    @abstractmethod
    def parse_hook_context(self, stdin: str) -> NormalizedHookContext:
        """Decode this tool's hook stdin into a NormalizedHookContext."""
