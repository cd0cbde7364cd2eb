"""Tests for the Claude Code and Gemini CLI adapters."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path

import pytest

from llm_whiteboard.adapters import (
    ClaudeCodeAdapter,
    GeminiCliAdapter,
    detect_installed_clis,
    get_adapter,
    parse_cli_type,
)
from llm_whiteboard.adapters.claude_code import sanitize_project_path
from llm_whiteboard.adapters.gemini_cli import hash_project_path
from llm_whiteboard.errors import HookPayloadError
from llm_whiteboard.types import CliType, NormalizedEventType, SettingsScope


def payload(**fields: object) -> str:
    base = {"hook_event_name": "SessionStart", "session_id": "abc-123", "cwd": "/work/proj"}
    base.update(fields)
    return json.dumps(base)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_get_adapter_by_string(self) -> None:
        assert isinstance(get_adapter("claude-code"), ClaudeCodeAdapter)
        assert isinstance(get_adapter(CliType.GEMINI_CLI), GeminiCliAdapter)

    def test_unknown_cli_type(self) -> None:
        with pytest.raises(ValueError, match="Unknown CLI type"):
            parse_cli_type("cursor")

    def test_detect_none(self, home: Path) -> None:
        """Nothing detected in an empty home."""
        assert detect_installed_clis() == []

    def test_detect_both(self, claude_home: Path, gemini_home: Path) -> None:
        assert detect_installed_clis() == [CliType.CLAUDE_CODE, CliType.GEMINI_CLI]

    def test_explicit_home(self, tmp_path: Path) -> None:
        """An injected home overrides Path.home()."""
        other = tmp_path / "other"
        (other / ".gemini").mkdir(parents=True)
        assert detect_installed_clis(home=other) == [CliType.GEMINI_CLI]


# ---------------------------------------------------------------------------
# Claude Code
# ---------------------------------------------------------------------------


class TestClaudeCodePaths:
    @pytest.mark.parametrize(
        ("project", "expected"),
        [
            ("/Users/foo/bar", "-Users-foo-bar"),
            ("D:\\sources\\foo", "D--sources-foo"),
            ("/home/me/my_project.v2", "-home-me-my-project-v2"),
        ],
    )
    def test_sanitize(self, project: str, expected: str) -> None:
        assert sanitize_project_path(project) == expected

    def test_transcript_path(self, home: Path) -> None:
        path = ClaudeCodeAdapter().transcript_path("/Users/foo/bar", "sess-1")
        assert path == home / ".claude" / "projects" / "-Users-foo-bar" / "sess-1.jsonl"

    def test_settings_paths(self, home: Path) -> None:
        adapter = ClaudeCodeAdapter()
        assert adapter.settings_path(SettingsScope.USER) == home / ".claude" / "settings.json"
        assert adapter.settings_path(SettingsScope.PROJECT, "/p") == Path("/p/.claude/settings.local.json")

    def test_resume_command(self) -> None:
        adapter = ClaudeCodeAdapter()
        assert adapter.resume_command("abc") == "claude --resume abc"
        assert adapter.resume_command("abc", "/p") == 'claude --resume abc --directory "/p"'
        assert adapter.list_sessions_command() is None


class TestClaudeCodeHooks:
    def test_default_hooks_supported(self) -> None:
        adapter = ClaudeCodeAdapter()
        assert set(adapter.default_hooks()) <= set(adapter.supported_hooks())

    def test_matchers(self) -> None:
        """PreToolUse only for AskUserQuestion, PostToolUse for every tool."""
        config = ClaudeCodeAdapter().hook_config("cmd")
        assert config.hooks["PreToolUse"][0].matcher == "AskUserQuestion"
        assert config.hooks["PostToolUse"][0].matcher == "*"
        assert config.hooks["SessionStart"][0].matcher is None
        assert "matcher" not in config.hooks["SessionStart"][0].to_dict()
        assert not config.is_experimental
        assert config.additional_settings == {}


class TestClaudeCodeParse:
    def test_tool_use(self) -> None:
        ctx = ClaudeCodeAdapter().parse_hook_context(
            payload(
                hook_event_name="PostToolUse",
                tool_name="Bash",
                tool_input={"command": "ls"},
                tool_response={"stdout": "a"},
                transcript_path="/t/abc-123.jsonl",
            )
        )
        assert ctx.type == NormalizedEventType.TOOL_USE
        assert ctx.session_id == "abc-123"
        assert ctx.cwd == "/work/proj"
        assert ctx.tool_name == "Bash"
        assert ctx.tool_input == {"command": "ls"}
        assert ctx.transcript_path == "/t/abc-123.jsonl"
        assert ctx.cli_type == CliType.CLAUDE_CODE
        assert ctx.raw_event_name == "PostToolUse"

    def test_transcript_path_derived(self, home: Path) -> None:
        """Without transcript_path the adapter computes it from cwd."""
        ctx = ClaudeCodeAdapter().parse_hook_context(payload())
        assert ctx.transcript_path == str(
            home / ".claude" / "projects" / "-work-proj" / "abc-123.jsonl"
        )

    def test_session_reason_from_source(self) -> None:
        ctx = ClaudeCodeAdapter().parse_hook_context(payload(source="resume"))
        assert ctx.session_reason == "resume"

    def test_compaction(self) -> None:
        ctx = ClaudeCodeAdapter().parse_hook_context(payload(hook_event_name="PreCompact", trigger="auto"))
        assert ctx.type == NormalizedEventType.CONTEXT_COMPACTION
        assert ctx.compaction_trigger == "auto"

    def test_unknown_event_is_notification(self) -> None:
        """Unrecognized hook names never fail."""
        ctx = ClaudeCodeAdapter().parse_hook_context(payload(hook_event_name="BrandNewHook"))
        assert ctx.type == NormalizedEventType.NOTIFICATION
        assert ctx.raw_event_name == "BrandNewHook"

    def test_missing_cwd_falls_back(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        ctx = ClaudeCodeAdapter().parse_hook_context(
            json.dumps({"hook_event_name": "Stop", "session_id": "s"})
        )
        assert ctx.cwd == str(tmp_path)

    @pytest.mark.parametrize(
        "stdin",
        [
            "not json",
            "[1, 2]",
            json.dumps({"session_id": "s"}),
            json.dumps({"hook_event_name": "Stop"}),
            json.dumps({"hook_event_name": "Stop", "session_id": ""}),
        ],
    )
    def test_invalid_payload(self, stdin: str) -> None:
        with pytest.raises(HookPayloadError):
            ClaudeCodeAdapter().parse_hook_context(stdin)

    def test_to_payload_omits_none(self) -> None:
        ctx = ClaudeCodeAdapter().parse_hook_context(payload(hook_event_name="UserPromptSubmit", prompt="hi"))
        body = ctx.to_payload()
        assert body["type"] == "user_prompt"
        assert body["prompt"] == "hi"
        assert body["cliType"] == "claude-code"
        assert "toolName" not in body


# ---------------------------------------------------------------------------
# Gemini CLI
# ---------------------------------------------------------------------------


class TestGeminiCli:
    def test_transcript_path(self, home: Path) -> None:
        digest = hashlib.sha256(b"/Users/foo/bar").hexdigest()
        path = GeminiCliAdapter().transcript_path("/Users/foo/bar", "sess-1")
        assert hash_project_path("/Users/foo/bar") == digest
        assert path == home / ".gemini" / "tmp" / digest / "chats" / "sess-1.json"

    def test_project_settings_path(self) -> None:
        path = GeminiCliAdapter().settings_path(SettingsScope.PROJECT, "/p")
        assert path == Path("/p/.gemini/settings.json")

    def test_hook_config_is_experimental(self) -> None:
        config = GeminiCliAdapter().hook_config("cmd")
        assert config.is_experimental
        assert config.additional_settings == {"hooks": {"enabled": True}}
        assert set(config.hooks) == {
            "SessionStart",
            "SessionEnd",
            "BeforeAgent",
            "AfterAgent",
            "AfterTool",
            "PreCompress",
        }

    def test_commands(self) -> None:
        adapter = GeminiCliAdapter()
        assert adapter.resume_command("abc", "/p") == "gemini --resume abc"
        assert adapter.list_sessions_command() == "gemini --list-sessions"

    @pytest.mark.parametrize(
        ("hook", "expected"),
        [
            ("BeforeAgent", NormalizedEventType.USER_PROMPT),
            ("AfterAgent", NormalizedEventType.AGENT_STOP),
            ("AfterTool", NormalizedEventType.TOOL_USE),
            ("BeforeModel", NormalizedEventType.MODEL_REQUEST),
            ("PreCompress", NormalizedEventType.CONTEXT_COMPACTION),
            ("Mystery", NormalizedEventType.NOTIFICATION),
        ],
    )
    def test_event_mapping(self, hook: str, expected: NormalizedEventType) -> None:
        assert GeminiCliAdapter().map_event_type(hook) == expected

    def test_parse_keeps_timestamp_and_response(self) -> None:
        ctx = GeminiCliAdapter().parse_hook_context(
            payload(
                hook_event_name="AfterAgent",
                timestamp="2025-01-01T00:00:00Z",
                prompt="do it",
                prompt_response="done",
            )
        )
        assert ctx.timestamp == "2025-01-01T00:00:00Z"
        assert ctx.prompt_response == "done"
        assert ctx.cli_type == CliType.GEMINI_CLI
