"""
Gemini CLI adapter.

Layout:
    ~/.gemini/settings.json                          user-scope hooks
    <project>/.gemini/settings.json                  project-scope hooks
    ~/.gemini/tmp/<sha256(project)>/chats/<id>.json  transcripts

Gemini CLI hooks are experimental and need "hooks": {"enabled": true}.
"""

import hashlib
from pathlib import Path

from llm_whiteboard.adapters.base import (
    CliAdapter,
    optional_dict,
    optional_str,
    utc_now_iso,
)
from llm_whiteboard.types import (
    CliType,
    HookConfiguration,
    HookEntry,
    NormalizedEventType,
    NormalizedHookContext,
    SettingsScope,
)


def hash_project_path(project_path: str) -> str:
    """Gemini CLI's per-project temp directory name."""
    return hashlib.sha256(project_path.encode("utf-8")).hexdigest()


class GeminiCliAdapter(CliAdapter):
    name = CliType.GEMINI_CLI
    display_name = "Gemini CLI"
    config_dir_name = ".gemini"

    event_map = {
        "SessionStart": NormalizedEventType.SESSION_START,
        "SessionEnd": NormalizedEventType.SESSION_END,
        "BeforeAgent": NormalizedEventType.USER_PROMPT,
        "AfterAgent": NormalizedEventType.AGENT_STOP,
        "BeforeTool": NormalizedEventType.TOOL_USE_START,
        "AfterTool": NormalizedEventType.TOOL_USE,
        "BeforeModel": NormalizedEventType.MODEL_REQUEST,
        "AfterModel": NormalizedEventType.MODEL_RESPONSE,
        "PreCompress": NormalizedEventType.CONTEXT_COMPACTION,
        "Notification": NormalizedEventType.NOTIFICATION,
    }

    def settings_path(self, scope: SettingsScope, project_path: str | None = None) -> Path:
        if scope == SettingsScope.PROJECT and project_path:
            return Path(project_path) / ".gemini" / "settings.json"
        return self.config_dir() / "settings.json"

    def transcript_path(self, project_path: str, session_id: str) -> Path:
        return (
            self.config_dir()
            / "tmp"
            / hash_project_path(project_path)
            / "chats"
            / f"{session_id}.json"
        )

    def supported_hooks(self) -> list[str]:
        return [
            "SessionStart",
            "SessionEnd",
            "BeforeAgent",
            "AfterAgent",
            "BeforeTool",
            "AfterTool",
            "BeforeModel",
            "AfterModel",
            "BeforeToolSelection",
            "Notification",
            "PreCompress",
        ]

    def default_hooks(self) -> list[str]:
        # PreCompress fires on manual (/compress) or auto compression
        return [
            "SessionStart",
            "SessionEnd",
            "BeforeAgent",
            "AfterAgent",
            "AfterTool",
            "PreCompress",
        ]

    def hook_config(self, command: str) -> HookConfiguration:
        hooks: dict[str, list[HookEntry]] = {
            hook_name: [self.create_hook_entry(command)] for hook_name in self.default_hooks()
        }
        return HookConfiguration(
            hooks=hooks,
            additional_settings={"hooks": {"enabled": True}},
            is_experimental=True,
        )

    def resume_command(self, session_id: str, project_path: str | None = None) -> str:
        return f"gemini --resume {session_id}"

    def list_sessions_command(self) -> str | None:
        return "gemini --list-sessions"

    def parse_hook_context(self, stdin: str) -> NormalizedHookContext:
        raw = self.load_hook_payload(stdin)
        session_id = raw["session_id"]
        cwd = self.resolve_cwd(raw)

        transcript_path = optional_str(raw, "transcript_path") or str(
            self.transcript_path(cwd, session_id)
        )

        return NormalizedHookContext(
            type=self.map_event_type(raw["hook_event_name"]),
            session_id=session_id,
            transcript_path=transcript_path,
            cwd=cwd,
            timestamp=optional_str(raw, "timestamp") or utc_now_iso(),
            cli_type=self.name,
            raw_event=raw,
            tool_name=optional_str(raw, "tool_name"),
            tool_input=optional_dict(raw, "tool_input"),
            tool_response=raw.get("tool_response"),
            prompt=optional_str(raw, "prompt"),
            prompt_response=optional_str(raw, "prompt_response"),
            session_reason=optional_str(raw, "reason"),
            compaction_trigger=optional_str(raw, "trigger"),
            notification_type=optional_str(raw, "notification_type"),
            message=optional_str(raw, "message"),
        )
