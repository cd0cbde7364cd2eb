"""
Shared domain types for llm-whiteboard.

Enums provide exhaustiveness checking and prevent stringly-typed errors.
The dataclasses here are the canonical, tool-agnostic shape every adapter
normalizes into.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class CliType(str, Enum):
    """Supported AI coding CLI tools."""

    CLAUDE_CODE = "claude-code"
    GEMINI_CLI = "gemini-cli"


class NormalizedEventType(str, Enum):
    """Lifecycle events shared by every supported CLI."""

    SESSION_START = "session_start"
    SESSION_END = "session_end"
    USER_PROMPT = "user_prompt"
    TOOL_USE = "tool_use"
    TOOL_USE_START = "tool_use_start"
    AGENT_STOP = "agent_stop"
    SUBAGENT_STOP = "subagent_stop"
    CONTEXT_COMPACTION = "context_compaction"
    PERMISSION_REQUEST = "permission_request"
    NOTIFICATION = "notification"
    MODEL_REQUEST = "model_request"
    MODEL_RESPONSE = "model_response"


class SettingsScope(str, Enum):
    """Where a hook/settings change applies."""

    USER = "user"
    PROJECT = "project"


@dataclass(frozen=True)
class HookAction:
    """One command a hook runs."""

    command: str
    type: str = "command"

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "command": self.command}


@dataclass(frozen=True)
class HookEntry:
    """A matcher group in a CLI settings file."""

    actions: tuple[HookAction, ...]
    matcher: str | None = None  # Tool matcher (e.g., "AskUserQuestion", "*")

    def to_dict(self) -> dict[str, Any]:
        entry: dict[str, Any] = {}
        if self.matcher is not None:
            entry["matcher"] = self.matcher
        entry["hooks"] = [action.to_dict() for action in self.actions]
        return entry

    def commands(self) -> list[str]:
        return [action.command for action in self.actions]


@dataclass(frozen=True)
class HookConfiguration:
    """Everything an adapter wants merged into its settings file."""

    hooks: dict[str, list[HookEntry]]
    additional_settings: dict[str, Any] = field(default_factory=dict)
    is_experimental: bool = False


@dataclass(frozen=True)
class NormalizedHookContext:
    """
    Canonical record of one hook invocation.

    Built fresh per invocation and forwarded to the sync service; the raw
    event and originating CLI are kept for forensic replay.
    """

    type: NormalizedEventType
    session_id: str
    transcript_path: str
    cwd: str
    timestamp: str
    cli_type: CliType
    raw_event: dict[str, Any] = field(default_factory=dict)

    # Tool events
    tool_name: str | None = None
    tool_input: dict[str, Any] | None = None
    tool_response: Any = None

    # Prompt events
    prompt: str | None = None
    prompt_response: str | None = None

    # Session events
    session_reason: str | None = None

    # Compaction events
    compaction_trigger: str | None = None  # "manual" | "auto"

    # Notification events
    notification_type: str | None = None
    message: str | None = None

    @property
    def raw_event_name(self) -> str:
        return str(self.raw_event.get("hook_event_name", ""))

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the camelCase shape the sync service expects."""
        payload: dict[str, Any] = {
            "type": self.type.value,
            "sessionId": self.session_id,
            "transcriptPath": self.transcript_path,
            "cwd": self.cwd,
            "timestamp": self.timestamp,
            "cliType": self.cli_type.value,
        }
        optional = {
            "toolName": self.tool_name,
            "toolInput": self.tool_input,
            "toolResponse": self.tool_response,
            "prompt": self.prompt,
            "promptResponse": self.prompt_response,
            "sessionReason": self.session_reason,
            "compactionTrigger": self.compaction_trigger,
            "notificationType": self.notification_type,
            "message": self.message,
        }
        payload.update({k: v for k, v in optional.items() if v is not None})
        return payload
