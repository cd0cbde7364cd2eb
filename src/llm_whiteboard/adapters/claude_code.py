"""
Claude Code adapter.

Layout:
    ~/.claude/settings.json                      user-scope hooks
    <project>/.claude/settings.local.json        project-scope hooks
    ~/.claude/projects/<sanitized cwd>/<id>.jsonl transcripts
"""

import re
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

# Claude Code names project folders by replacing every character that isn't
# an ASCII letter or digit with "-", keeping the leading dash:
#   /Users/foo/bar  -> -Users-foo-bar
#   D:\sources\foo  -> D--sources-foo
_UNSAFE_PATH_CHARS = re.compile(r"[^A-Za-z0-9]")

# PreToolUse only for AskUserQuestion (detects waiting-for-input);
# PostToolUse needs an explicit wildcard to fire for every tool.
HOOK_MATCHERS = {
    "PreToolUse": "AskUserQuestion",
    "PostToolUse": "*",
}


def sanitize_project_path(project_path: str) -> str:
    return _UNSAFE_PATH_CHARS.sub("-", project_path)


class ClaudeCodeAdapter(CliAdapter):
    name = CliType.CLAUDE_CODE
    display_name = "Claude Code"
    config_dir_name = ".claude"

    event_map = {
        "SessionStart": NormalizedEventType.SESSION_START,
        "SessionEnd": NormalizedEventType.SESSION_END,
        "UserPromptSubmit": NormalizedEventType.USER_PROMPT,
        "PreToolUse": NormalizedEventType.TOOL_USE_START,
        "PostToolUse": NormalizedEventType.TOOL_USE,
        "PermissionRequest": NormalizedEventType.PERMISSION_REQUEST,
        "Stop": NormalizedEventType.AGENT_STOP,
        "SubagentStop": NormalizedEventType.SUBAGENT_STOP,
        "PreCompact": NormalizedEventType.CONTEXT_COMPACTION,
        "Notification": NormalizedEventType.NOTIFICATION,
    }

    def settings_path(self, scope: SettingsScope, project_path: str | None = None) -> Path:
        if scope == SettingsScope.PROJECT and project_path:
            return Path(project_path) / ".claude" / "settings.local.json"
        return self.config_dir() / "settings.json"

    def projects_dir(self) -> Path:
        return self.config_dir() / "projects"

    def transcript_path(self, project_path: str, session_id: str) -> Path:
        return self.projects_dir() / sanitize_project_path(project_path) / f"{session_id}.jsonl"

    def supported_hooks(self) -> list[str]:
        return [
            "SessionStart",
            "SessionEnd",
            "UserPromptSubmit",
            "PreToolUse",
            "PostToolUse",
            "PermissionRequest",
            "Stop",
            "SubagentStop",
            "PreCompact",
            "Notification",
            "Setup",
        ]

    def default_hooks(self) -> list[str]:
        return [
            "SessionStart",
            "SessionEnd",
            "UserPromptSubmit",
            "PreToolUse",
            "PostToolUse",
            "PermissionRequest",
            "Stop",
            "PreCompact",
        ]

    def hook_config(self, command: str) -> HookConfiguration:
        hooks: dict[str, list[HookEntry]] = {
            hook_name: [self.create_hook_entry(command, HOOK_MATCHERS.get(hook_name))]
            for hook_name in self.default_hooks()
        }
        return HookConfiguration(hooks=hooks, is_experimental=False)

    def resume_command(self, session_id: str, project_path: str | None = None) -> str:
        if project_path:
            return f'claude --resume {session_id} --directory "{project_path}"'
        return f"claude --resume {session_id}"

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
            timestamp=utc_now_iso(),
            cli_type=self.name,
            raw_event=raw,
            tool_name=optional_str(raw, "tool_name"),
            tool_input=optional_dict(raw, "tool_input"),
            tool_response=raw.get("tool_response"),
            prompt=optional_str(raw, "prompt"),
            session_reason=optional_str(raw, "reason") or optional_str(raw, "source"),
            compaction_trigger=optional_str(raw, "trigger"),
            notification_type=optional_str(raw, "notification_type"),
            message=optional_str(raw, "message"),
        )
