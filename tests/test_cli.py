"""CLI smoke tests via typer's CliRunner."""

from __future__ import annotations

import base64
import json
from pathlib import Path

import httpx
import pytest
from typer.testing import CliRunner

from llm_whiteboard.api import WhiteboardClient
from llm_whiteboard.cli import app
from llm_whiteboard.config import Config, read_config
from llm_whiteboard.crypto import checksum, create_key, decrypt, encrypt, read_key
from llm_whiteboard.hooks import hooks_installed
from llm_whiteboard.types import CliType

runner = CliRunner()


@pytest.fixture
def server(monkeypatch: pytest.MonkeyPatch):
    """Route every WhiteboardClient built by a command to an in-memory server."""
    state = {"sessions": [], "transcripts": {}, "uploads": []}

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/api/sync/sessions":
            return httpx.Response(200, json={"sessions": state["sessions"], "total": len(state["sessions"])})
        if path.startswith("/api/sync/transcript/"):
            record = state["transcripts"].get(path.rsplit("/", 1)[-1])
            if record is None:
                return httpx.Response(404, json={"error": "Session not found"})
            return httpx.Response(200, json=record)
        if path == "/api/sync/transcript":
            body = json.loads(request.content)
            state["uploads"].append(body)
            return httpx.Response(200, json={})
        return httpx.Response(200, json={})

    transport = httpx.MockTransport(handler)

    def from_config(cls, config, timeout=30.0, transport_=None, deadline=None):
        return cls(config.api_url, config.token, config.machine_id, timeout, transport, deadline)

    monkeypatch.setattr(WhiteboardClient, "from_config", classmethod(from_config))
    return state


def remote_record(session_id: str, content: bytes, encrypted: bool, project: str = "/Users/foo/proj") -> dict:
    return {
        "sessionId": session_id,
        "localSessionId": f"local-{session_id}",
        "projectPath": project,
        "cliType": "claude-code",
        "content": base64.b64encode(content).decode("ascii"),
        "isEncrypted": encrypted,
        "checksum": checksum(content),
        "sizeBytes": len(content),
    }


class TestInit:
    def test_non_interactive(self, claude_home: Path) -> None:
        result = runner.invoke(
            app,
            ["init", "--token", "lwb_sk_abc", "--url", "https://api.test/", "--machine-id", "laptop", "--no-encryption"],
        )
        assert result.exit_code == 0, result.output
        config = read_config()
        assert config is not None
        assert config.api_url == "https://api.test"
        assert config.machine_id == "laptop"
        assert not config.encryption_enabled
        assert hooks_installed(CliType.CLAUDE_CODE)

    def test_with_encryption(self, claude_home: Path) -> None:
        result = runner.invoke(
            app, ["init", "--token", "lwb_sk_abc", "--url", "https://api.test", "--machine-id", "m", "--enable-encryption"]
        )
        assert result.exit_code == 0, result.output
        assert read_config().encryption_enabled
        assert read_key() is not None

    def test_no_cli_detected(self, home: Path) -> None:
        result = runner.invoke(app, ["init", "--token", "lwb_sk_abc"])
        assert result.exit_code == 1
        assert "No supported CLI tools detected" in result.output

    def test_unknown_cli(self, claude_home: Path) -> None:
        result = runner.invoke(app, ["init", "--cli", "cursor"])
        assert result.exit_code == 1
        assert "Unknown CLI type" in result.output


class TestHooksGroup:
    def test_install_status_uninstall(self, claude_home: Path, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.chdir(tmp_path)
        assert runner.invoke(app, ["hooks", "install", "--cli", "claude-code"]).exit_code == 0
        assert hooks_installed(CliType.CLAUDE_CODE)

        status = runner.invoke(app, ["hooks", "status"])
        assert status.exit_code == 0
        assert "Claude Code" in status.output

        assert runner.invoke(app, ["uninstall"]).exit_code == 0
        assert not hooks_installed(CliType.CLAUDE_CODE)

    def test_broken_settings(self, claude_home: Path) -> None:
        (claude_home / ".claude" / "settings.json").write_text("{oops")
        result = runner.invoke(app, ["hooks", "install"])
        assert result.exit_code == 1
        assert "Settings file error" in result.output


class TestStatusAndLogout:
    def test_status_not_configured(self) -> None:
        result = runner.invoke(app, ["status"])
        assert result.exit_code == 0
        assert "Not configured" in result.output

    def test_status_key_missing(self, encrypted_config: Config) -> None:
        result = runner.invoke(app, ["status"])
        assert "KEY MISSING" in result.output

    def test_logout(self, claude_home: Path, config: Config) -> None:
        create_key()
        runner.invoke(app, ["hooks", "install"])
        result = runner.invoke(app, ["logout", "--yes"])
        assert result.exit_code == 0
        assert read_config() is None
        assert read_key() is not None
        assert not hooks_installed(CliType.CLAUDE_CODE)


class TestHookCommand:
    def test_unconfigured_exits_zero(self) -> None:
        result = runner.invoke(app, ["hook", "--cli", "claude-code"], input='{"hook_event_name": "Stop"}')
        assert result.exit_code == 0

    def test_unknown_cli(self) -> None:
        result = runner.invoke(app, ["hook", "--cli", "cursor"], input="{}")
        assert result.exit_code == 1


class TestRemoteCommands:
    def test_requires_config(self) -> None:
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 1
        assert "Not configured" in result.output

    def test_list(self, config: Config, server) -> None:
        server["sessions"] = [
            {"id": "id-1", "localSessionId": "local-1", "projectPath": "/p/app", "status": "ACTIVE", "title": "Fix login"}
        ]
        result = runner.invoke(app, ["list"])
        assert result.exit_code == 0, result.output
        assert "Fix login" in result.output

    def test_resume_encrypted(self, home: Path, encrypted_config: Config, server, tmp_path: Path, monkeypatch) -> None:
        key = create_key()
        original = b'{"type":"user","message":{"content":"hi"}}\n'
        server["transcripts"]["abc"] = remote_record("abc", encrypt(original, key), encrypted=True)
        project = tmp_path / "proj"
        project.mkdir()
        monkeypatch.chdir(project)

        result = runner.invoke(app, ["resume", "abc"])

        assert result.exit_code == 0, result.output
        assert "claude --resume local-abc" in result.output
        restored = next((home / ".claude" / "projects").glob("*/local-abc.jsonl"))
        assert restored.read_bytes() == original

    def test_resume_corrupt(self, config: Config, server, tmp_path: Path, monkeypatch) -> None:
        record = remote_record("abc", b"payload", encrypted=False)
        record["checksum"] = "0" * 64
        server["transcripts"]["abc"] = record
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(app, ["resume", "abc"])
        assert result.exit_code == 1
        assert "Corrupted download" in result.output

    def test_resume_not_found(self, config: Config, server) -> None:
        result = runner.invoke(app, ["resume", "missing"])
        assert result.exit_code == 1
        assert "Not found" in result.output

    def test_rotate_key(self, encrypted_config: Config, server) -> None:
        old_key = create_key()
        server["sessions"] = [
            {"id": "abc", "localSessionId": "local-abc", "projectPath": "/p", "status": "ACTIVE",
             "isEncrypted": True, "hasTranscript": True}
        ]
        server["transcripts"]["abc"] = remote_record("abc", encrypt(b"secret", old_key), encrypted=True)

        result = runner.invoke(app, ["rotate-key", "--yes"])

        assert result.exit_code == 0, result.output
        new_key = read_key()
        assert new_key != old_key
        uploaded = base64.b64decode(server["uploads"][0]["content"])
        assert decrypt(uploaded, new_key) == b"secret"

    def test_rotate_key_disabled(self, config: Config) -> None:
        result = runner.invoke(app, ["rotate-key", "--yes"])
        assert result.exit_code == 1
        assert "Encryption disabled" in result.output

    def test_sync(self, home: Path, config: Config, server, tmp_path: Path, monkeypatch) -> None:
        from llm_whiteboard.adapters import ClaudeCodeAdapter

        project = tmp_path / "proj"
        project.mkdir()
        monkeypatch.chdir(project)
        path = ClaudeCodeAdapter().transcript_path(str(Path.cwd()), "sess-9")
        path.parent.mkdir(parents=True)
        path.write_text('{"type":"user","message":{"content":"hello"}}\n')

        result = runner.invoke(app, ["sync"])

        assert result.exit_code == 0, result.output
        assert server["uploads"][0]["localSessionId"] == "sess-9"
