"""
Encryption key rotation.

Generates a new key, persists it immediately, then re-encrypts every
encrypted remote transcript one at a time. A failure on one session is
recorded and the loop moves on; the caller gets the full list of which
sessions made it and which still need attention.

The previous key is copied to encryption.key.<fingerprint>.bak before the
new one replaces it, so sessions that failed to rotate stay readable.
Re-running is safe: each run decrypts what is currently stored remotely
and uploads exactly one layer of encryption.
"""

import base64
import binascii
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from llm_whiteboard.api import SessionSummary, WhiteboardClient
from llm_whiteboard.config import Config
from llm_whiteboard.crypto import (
    backup_key,
    checksum,
    create_key,
    decrypt,
    encrypt,
    key_fingerprint,
    read_key,
)
from llm_whiteboard.errors import (
    CorruptTransfer,
    EncryptionNotEnabled,
    KeyMissing,
)
from llm_whiteboard.paths import encryption_key_file

logger = logging.getLogger("llm_whiteboard.rotation")

ProgressCallback = Callable[[int, int, SessionSummary], None]


@dataclass(frozen=True)
class RotationResult:
    """Outcome for one session."""

    session_id: str
    local_session_id: str
    success: bool
    error: str | None = None


@dataclass
class RotationReport:
    new_key: str
    old_fingerprint: str
    old_key_backup: Path | None = None
    results: list[RotationResult] = field(default_factory=list)

    @property
    def fingerprint(self) -> str:
        return key_fingerprint(self.new_key)

    @property
    def success_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def error_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def failures(self) -> list[RotationResult]:
        return [r for r in self.results if not r.success]

    @property
    def partial(self) -> bool:
        return self.error_count > 0


def find_encrypted_sessions(client: WhiteboardClient) -> list[SessionSummary]:
    """Remote sessions that have an encrypted transcript."""
    return [s for s in client.iter_sessions() if s.is_encrypted and s.has_transcript]


def reencrypt_session(
    client: WhiteboardClient, session: SessionSummary, old_key: str, new_key: str
) -> None:
    """Download, verify, decrypt, re-encrypt and upload one transcript."""
    record = client.download_transcript(session.id)
    try:
        content = base64.b64decode(record.content, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CorruptTransfer(record.checksum, "<invalid base64>") from e

    actual = checksum(content)
    if actual != record.checksum:
        raise CorruptTransfer(record.checksum, actual)

    plaintext = decrypt(content, old_key)
    encrypted = encrypt(plaintext, new_key)
    client.upload_transcript(
        record.local_session_id or session.local_session_id,
        encrypted,
        is_encrypted=True,
        checksum=checksum(encrypted),
    )


def rotate_key(
    client: WhiteboardClient,
    config: Config,
    key_loader: Callable[[], str | None] = read_key,
    key_creator: Callable[[], str] = create_key,
    key_backup: Callable[[str], Path] | None = backup_key,
    progress: ProgressCallback | None = None,
) -> RotationReport:
    """
    Replace the local key and re-encrypt remote transcripts under it.

    Raises only for preconditions (encryption off, no current key) or if
    listing sessions fails before the new key exists. Per-session failures
    end up in the report.
    """
    if not config.encryption_enabled:
        raise EncryptionNotEnabled()
    old_key = key_loader()
    if not old_key:
        raise KeyMissing(str(encryption_key_file()))

    sessions = find_encrypted_sessions(client)
    logger.info("Found %d encrypted sessions to re-encrypt", len(sessions))

    old_key_backup = key_backup(old_key) if key_backup is not None else None

    # Written before touching any session so an interrupted run can be resumed
    new_key = key_creator()
    report = RotationReport(
        new_key=new_key,
        old_fingerprint=key_fingerprint(old_key),
        old_key_backup=old_key_backup,
    )

    for index, session in enumerate(sessions, 1):
        if progress is not None:
            progress(index, len(sessions), session)
        try:
            reencrypt_session(client, session, old_key, new_key)
        except Exception as e:
            logger.warning("Failed to re-encrypt session %s: %s", session.id, e)
            report.results.append(
                RotationResult(session.id, session.local_session_id, success=False, error=str(e))
            )
            continue
        report.results.append(RotationResult(session.id, session.local_session_id, success=True))

    return report
