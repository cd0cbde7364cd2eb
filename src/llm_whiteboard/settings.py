"""
CLI settings file management.

Handles reading/writing the JSON settings files that Claude Code and
Gemini CLI read their hook registrations from. Keys we don't own are
carried through untouched.
"""

import json
import logging
from pathlib import Path
from typing import Any

from llm_whiteboard.errors import SettingsError
from llm_whiteboard.fileio import write_text_atomic

logger = logging.getLogger("llm_whiteboard.settings")


def load_settings(path: Path, strict: bool = False) -> dict[str, Any]:
    """
    Load a settings file, returning empty dict if it doesn't exist.

    An unparseable file (or one whose top level isn't an object) also reads
    as empty, unless strict is set, in which case it raises SettingsError so
    callers about to write don't clobber a file the user is mid-editing.
    """
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8") or "{}")
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        if strict:
            raise SettingsError(f"Cannot parse {path}: {e}") from e
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        if strict:
            raise SettingsError(f"{path} does not contain a JSON object")
        logger.warning("Ignoring settings file %s: top level is not an object", path)
        return {}
    return data


def save_settings(path: Path, settings: dict[str, Any]) -> None:
    """Save settings, creating parent directories as needed."""
    write_text_atomic(path, json.dumps(settings, indent=2) + "\n")


def deep_merge(target: dict[str, Any], source: dict[str, Any]) -> dict[str, Any]:
    """Merge source over target, recursing into nested objects. Returns a new dict."""
    result = dict(target)
    for key, value in source.items():
        existing = result.get(key)
        if isinstance(value, dict) and isinstance(existing, dict):
            result[key] = deep_merge(existing, value)
        else:
            result[key] = value
    return result
