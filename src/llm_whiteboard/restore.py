"""
Resume/restore pipeline.

Turns a downloaded transcript back into the file the CLI tool would have
written itself, so `claude --resume` / `gemini --resume` picks it up.

Order is fixed: session id check, checksum, decrypt, write. A corrupted
download is never decrypted and nothing unverified ever reaches disk.
"""

import base64
import binascii
import logging
import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath, PureWindowsPath

from llm_whiteboard.adapters import CliAdapter
from llm_whiteboard.api import TranscriptRecord
from llm_whiteboard.crypto import checksum, decrypt, key_fingerprint, read_key
from llm_whiteboard.errors import (
    CorruptTransfer,
    DecryptionFailed,
    KeyMissing,
    UnsafeSessionId,
    WrongKeyOrCorrupt,
)
from llm_whiteboard.fileio import write_bytes_atomic
from llm_whiteboard.paths import encryption_key_file

logger = logging.getLogger("llm_whiteboard.restore")


@dataclass(frozen=True)
class RestoreResult:
    transcript_path: Path
    project_path: str
    local_session_id: str
    resume_command: str
    size_bytes: int
    warning: str | None = None


def decode_content(record: TranscriptRecord) -> bytes:
    """Base64-decode the payload. Undecodable content counts as corruption."""
    try:
        return base64.b64decode(record.content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CorruptTransfer(record.checksum, f"<invalid base64: {e}>") from e


def verify_checksum(content: bytes, expected: str) -> None:
    actual = checksum(content)
    if actual != expected:
        raise CorruptTransfer(expected, actual)


def decrypt_content(content: bytes, key_loader: Callable[[], str | None] = read_key) -> bytes:
    """Decrypt with the local key, distinguishing missing key from wrong key."""
    key = key_loader()
    if not key:
        raise KeyMissing(str(encryption_key_file()))
    try:
        return decrypt(content, key)
    except (DecryptionFailed, ValueError) as e:
        raise WrongKeyOrCorrupt(key_fingerprint(key)) from e


def safe_transcript_target(adapter: CliAdapter, cwd: str, session_id: str) -> Path:
    """
    Where a downloaded session lands, refusing ids that would escape the
    tool's session directory. The id comes from the server.
    """
    if (
        not session_id
        or "/" in session_id
        or "\\" in session_id
        or ".." in session_id
        or PurePosixPath(session_id).is_absolute()
        or PureWindowsPath(session_id).is_absolute()
        or PureWindowsPath(session_id).drive
    ):
        raise UnsafeSessionId(session_id)

    target = adapter.transcript_path(cwd, session_id)
    session_dir = adapter.transcript_path(cwd, "x").parent.resolve()
    if not target.resolve().is_relative_to(session_dir):
        raise UnsafeSessionId(session_id)
    return target


def directory_mismatch_warning(cwd: str, original_project_path: str) -> str | None:
    """Non-fatal warning when resuming somewhere other than the original project."""
    if not original_project_path:
        return None
    original_name = _basename(original_project_path)
    if _basename(cwd) == original_name:
        return None
    return f"Original project: {original_project_path}, current directory: {cwd}"


def _basename(path: str) -> str:
    # Recorded paths may come from another OS
    return path.rstrip("/\\").replace("\\", "/").rsplit("/", 1)[-1]


def restore_transcript(
    record: TranscriptRecord,
    adapter: CliAdapter,
    cwd: str | None = None,
    key_loader: Callable[[], str | None] = read_key,
) -> RestoreResult:
    """
    Verify, decrypt and write a transcript for the current directory.

    The target is computed from cwd rather than the recorded project path:
    the CLI tools look sessions up by where the user is now.
    """
    cwd = cwd or os.getcwd()
    target = safe_transcript_target(adapter, cwd, record.local_session_id)

    content = decode_content(record)
    verify_checksum(content, record.checksum)
    logger.debug("Checksum verified for %s", record.local_session_id)

    if record.is_encrypted:
        content = decrypt_content(content, key_loader)
        logger.debug("Decrypted %s (%d bytes)", record.local_session_id, len(content))

    warning = directory_mismatch_warning(cwd, record.project_path)
    if warning:
        logger.warning("Resuming into a different directory. %s", warning)

    write_bytes_atomic(target, content)
    logger.info("Restored %s to %s", record.local_session_id, target)

    return RestoreResult(
        transcript_path=target,
        project_path=cwd,
        local_session_id=record.local_session_id,
        resume_command=adapter.resume_command(record.local_session_id),
        size_bytes=len(content),
        warning=warning,
    )


def find_existing_transcript(adapter: CliAdapter, project_path: str, session_id: str) -> Path | None:
    """Path of an already-present local transcript, or None."""
    path = adapter.transcript_path(project_path, session_id)
    return path if path.exists() else None
