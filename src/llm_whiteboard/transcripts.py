"""
Local transcript discovery and upload.

Used by the hook handler (upload on session end) and the manual `sync`
command. Encryption happens before the checksum so the checksum always
covers the bytes that actually go over the wire.
"""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from llm_whiteboard.adapters import CliAdapter
from llm_whiteboard.api import WhiteboardClient
from llm_whiteboard.config import Config
from llm_whiteboard.crypto import checksum, encrypt, read_key
from llm_whiteboard.errors import KeyInvalid, KeyMissing
from llm_whiteboard.paths import encryption_key_file

logger = logging.getLogger("llm_whiteboard.transcripts")

TITLE_MAX_LENGTH = 100


@dataclass(frozen=True)
class LocalTranscript:
    session_id: str
    path: Path
    modified: datetime


@dataclass(frozen=True)
class UploadResult:
    session_id: str
    size_bytes: int
    is_encrypted: bool
    checksum: str


def truncate_title(text: str, limit: int = TITLE_MAX_LENGTH) -> str:
    text = text.strip()
    return text if len(text) <= limit else text[: limit - 3] + "..."


def extract_first_user_message(content: str) -> str | None:
    """First plain-text user message in a JSONL transcript, truncated for a title."""
    for line in content.splitlines():
        if not line.strip():
            continue
        try:
            entry = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(entry, dict) or entry.get("type") != "user":
            continue
        message = entry.get("message")
        text = message.get("content") if isinstance(message, dict) else None
        if isinstance(text, str) and text.strip():
            return truncate_title(text)
    return None


def read_transcript_title(path: Path) -> str | None:
    """Title from a transcript on disk; None if it isn't there yet."""
    try:
        return extract_first_user_message(path.read_text(encoding="utf-8", errors="replace"))
    except OSError:
        return None


def find_local_transcripts(adapter: CliAdapter, project_path: str) -> list[LocalTranscript]:
    """Transcripts stored for a project, most recent first."""
    # Any session id gives us the per-project directory and the file suffix
    probe = adapter.transcript_path(project_path, "probe")
    directory, suffix = probe.parent, probe.suffix
    if not directory.is_dir():
        return []

    found = [
        LocalTranscript(
            session_id=path.stem,
            path=path,
            modified=datetime.fromtimestamp(path.stat().st_mtime),
        )
        for path in directory.iterdir()
        if path.is_file() and path.suffix == suffix
    ]
    return sorted(found, key=lambda t: t.modified, reverse=True)


def upload_transcript_file(
    client: WhiteboardClient,
    config: Config,
    session_id: str,
    path: Path,
    key_loader: Callable[[], str | None] = read_key,
) -> UploadResult:
    """Read, optionally encrypt, checksum and upload one transcript file."""
    content = path.read_bytes()
    suggested_title = extract_first_user_message(content.decode("utf-8", errors="replace"))
    is_encrypted = False

    if config.encryption_enabled:
        key = key_loader()
        if not key:
            # Never fall back to uploading plaintext when the user asked for encryption
            raise KeyMissing(str(encryption_key_file()))
        try:
            content = encrypt(content, key)
        except ValueError as e:
            raise KeyInvalid(str(encryption_key_file()), str(e)) from e
        is_encrypted = True
        # The title is plaintext; keep it off the server for encrypted sessions
        suggested_title = None

    digest = checksum(content)
    client.upload_transcript(session_id, content, is_encrypted, digest, suggested_title)
    return UploadResult(session_id, len(content), is_encrypted, digest)
