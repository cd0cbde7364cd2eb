"""Tests for the resume/restore pipeline."""

from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest

from llm_whiteboard import restore
from llm_whiteboard.adapters import ClaudeCodeAdapter, GeminiCliAdapter
from llm_whiteboard.api import TranscriptRecord
from llm_whiteboard.crypto import checksum, encrypt, generate_key
from llm_whiteboard.errors import CorruptTransfer, KeyMissing, UnsafeSessionId, WrongKeyOrCorrupt
from llm_whiteboard.restore import (
    directory_mismatch_warning,
    find_existing_transcript,
    restore_transcript,
    safe_transcript_target,
)


def make_record(
    content: bytes,
    encrypted: bool = False,
    project_path: str = "/Users/foo/proj",
    digest: str | None = None,
    session_id: str = "sess-1",
) -> TranscriptRecord:
    return TranscriptRecord(
        local_session_id=session_id,
        project_path=project_path,
        content=base64.b64encode(content).decode("ascii"),
        is_encrypted=encrypted,
        checksum=digest if digest is not None else checksum(content),
        size_bytes=len(content),
    )


def transcript_bytes(size: int) -> bytes:
    """JSONL transcript of roughly size bytes."""
    lines = []
    i = 0
    while sum(len(line) + 1 for line in lines) < size:
        lines.append(json.dumps({"type": "user", "message": {"content": f"message {i}"}}))
        i += 1
    return ("\n".join(lines) + "\n").encode("utf-8")


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


class TestChecksumFirst:
    def test_mismatch_never_decrypts(self, home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """A corrupted download is reported as corrupt; decrypt is never called."""
        key = generate_key()
        blob = encrypt(b"hello", key)
        record = make_record(blob, encrypted=True, digest=checksum(b"something else"))

        def exploding_decrypt(*args: object) -> bytes:
            raise AssertionError("decrypt must not run before checksum passes")

        monkeypatch.setattr(restore, "decrypt", exploding_decrypt)
        with pytest.raises(CorruptTransfer):
            restore_transcript(record, ClaudeCodeAdapter(), cwd="/Users/foo/proj", key_loader=lambda: key)
        assert not (home / ".claude" / "projects").exists()

    def test_invalid_base64_is_corrupt(self, home: Path) -> None:
        record = TranscriptRecord(
            local_session_id="s", project_path="", content="***", is_encrypted=False, checksum="x"
        )
        with pytest.raises(CorruptTransfer):
            restore_transcript(record, ClaudeCodeAdapter(), cwd="/p")


class TestDecryptErrors:
    def test_key_missing(self, home: Path) -> None:
        blob = encrypt(b"hello", generate_key())
        with pytest.raises(KeyMissing):
            restore_transcript(make_record(blob, encrypted=True), ClaudeCodeAdapter(), cwd="/p", key_loader=lambda: None)

    def test_wrong_key(self, home: Path) -> None:
        """Checksum passes but the key is wrong: a distinct error with the local fingerprint."""
        blob = encrypt(b"hello", generate_key())
        with pytest.raises(WrongKeyOrCorrupt) as exc_info:
            restore_transcript(
                make_record(blob, encrypted=True), ClaudeCodeAdapter(), cwd="/p", key_loader=generate_key
            )
        assert exc_info.value.fingerprint
        assert exc_info.value.category == "wrong-key"
        assert not (home / ".claude" / "projects").exists()


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


class TestRestore:
    def test_end_to_end_encrypted(self, home: Path) -> None:
        """10 KB transcript, encrypted, restored byte-identical under the current directory."""
        key = generate_key()
        original = transcript_bytes(10 * 1024)
        record = make_record(encrypt(original, key), encrypted=True)

        result = restore_transcript(record, ClaudeCodeAdapter(), cwd="/Users/foo/proj", key_loader=lambda: key)

        expected = home / ".claude" / "projects" / "-Users-foo-proj" / "sess-1.jsonl"
        assert result.transcript_path == expected
        assert expected.read_bytes() == original
        assert result.size_bytes == len(original)
        assert result.resume_command == "claude --resume sess-1"
        assert result.warning is None

    def test_plaintext_gemini(self, home: Path) -> None:
        record = make_record(b'{"messages": []}')
        result = restore_transcript(record, GeminiCliAdapter(), cwd="/Users/foo/proj")
        assert result.transcript_path.read_bytes() == b'{"messages": []}'
        assert result.transcript_path.suffix == ".json"
        assert result.resume_command == "gemini --resume sess-1"

    def test_overwrites_existing(self, home: Path) -> None:
        adapter = ClaudeCodeAdapter()
        target = adapter.transcript_path("/Users/foo/proj", "sess-1")
        target.parent.mkdir(parents=True)
        target.write_text("old")
        assert find_existing_transcript(adapter, "/Users/foo/proj", "sess-1") == target

        restore_transcript(make_record(b"new"), adapter, cwd="/Users/foo/proj")
        assert target.read_bytes() == b"new"

    def test_directory_mismatch_warns(self, home: Path) -> None:
        """Different project directory is a warning, and the restore still happens."""
        result = restore_transcript(make_record(b"x"), ClaudeCodeAdapter(), cwd="/Users/bar/other")
        assert result.warning is not None
        assert "/Users/foo/proj" in result.warning
        assert result.transcript_path.exists()


class TestSessionIdContainment:
    def test_traversal_cannot_overwrite_settings(self, home: Path) -> None:
        """A server-supplied id climbing out of chats/ is refused and settings.json is untouched."""
        settings = home / ".gemini" / "settings.json"
        settings.parent.mkdir(parents=True)
        settings.write_text('{"hooks": {}}')
        record = make_record(b'{"evil": true}', session_id="../../../settings")

        with pytest.raises(UnsafeSessionId):
            restore_transcript(record, GeminiCliAdapter(), cwd="/Users/foo/proj")

        assert settings.read_text() == '{"hooks": {}}'

    def test_refused_before_decrypt(self, home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        key = generate_key()
        record = make_record(encrypt(b"x", key), encrypted=True, session_id="../escape")

        def exploding_decrypt(*args: object) -> bytes:
            raise AssertionError("decrypt must not run for an unsafe id")

        monkeypatch.setattr(restore, "decrypt", exploding_decrypt)
        with pytest.raises(UnsafeSessionId):
            restore_transcript(record, ClaudeCodeAdapter(), cwd="/Users/foo/proj", key_loader=lambda: key)

    @pytest.mark.parametrize(
        "session_id",
        ["", "..", "../x", "a/b", "a\\b", "/etc/passwd", "C:\\temp\\x", "C:x", "sess..1"],
    )
    def test_rejected(self, session_id: str) -> None:
        with pytest.raises(UnsafeSessionId):
            safe_transcript_target(ClaudeCodeAdapter(), "/Users/foo/proj", session_id)

    def test_plain_uuid_accepted(self, home: Path) -> None:
        session_id = "3f2a9c1e-0b7d-4e55-9a10-2c6d8f0e1b42"
        target = safe_transcript_target(ClaudeCodeAdapter(), "/Users/foo/proj", session_id)
        assert target == home / ".claude" / "projects" / "-Users-foo-proj" / f"{session_id}.jsonl"


class TestMismatchWarning:
    @pytest.mark.parametrize(
        ("cwd", "original", "warns"),
        [
            ("/home/me/proj", "/Users/foo/proj", False),
            ("/home/me/proj", "C:\\code\\proj", False),
            ("/home/me/proj", "/Users/foo/other/", True),
            ("/home/me/proj", "", False),
        ],
    )
    def test_cases(self, cwd: str, original: str, warns: bool) -> None:
        assert (directory_mismatch_warning(cwd, original) is not None) is warns
