"""
Transcript integrity and encryption.

Blob layout: nonce (16 bytes) + GCM tag (16 bytes) + ciphertext, AES-256-GCM.
Checksums are SHA-256 hex over whatever bytes are actually transmitted, and
are verified before any decryption so a corrupted download is reported as
corrupted rather than as a wrong key.

Keys are 32 random bytes kept as 64 hex characters in the key file.
"""

import hashlib
import logging
import secrets
from pathlib import Path

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from llm_whiteboard.errors import DecryptionFailed
from llm_whiteboard.fileio import write_text_atomic
from llm_whiteboard.paths import encryption_key_file

logger = logging.getLogger("llm_whiteboard.crypto")

NONCE_LENGTH = 16
TAG_LENGTH = 16
HEADER_LENGTH = NONCE_LENGTH + TAG_LENGTH
KEY_LENGTH = 32
FINGERPRINT_LENGTH = 16
KEY_FILE_MODE = 0o600
ENCRYPTION_KEY_BACKUP_PREFIX = "encryption.key."


def _key_bytes(key: bytes | str) -> bytes:
    """Accept raw key bytes or the hex text stored in the key file."""
    if isinstance(key, str):
        try:
            raw = bytes.fromhex(key.strip())
        except ValueError as e:
            raise ValueError("Encryption key is not valid hex") from e
    else:
        raw = key
    if len(raw) != KEY_LENGTH:
        raise ValueError(f"Encryption key must be {KEY_LENGTH} bytes, got {len(raw)}")
    return raw


def encrypt(plaintext: bytes, key: bytes | str) -> bytes:
    """Encrypt with a fresh random nonce. Returns nonce + tag + ciphertext."""
    nonce = secrets.token_bytes(NONCE_LENGTH)
    # AESGCM appends the tag to the ciphertext; move it into the header
    sealed = AESGCM(_key_bytes(key)).encrypt(nonce, plaintext, None)
    ciphertext, tag = sealed[:-TAG_LENGTH], sealed[-TAG_LENGTH:]
    return nonce + tag + ciphertext


def decrypt(blob: bytes, key: bytes | str) -> bytes:
    """
    Decrypt a nonce + tag + ciphertext blob.

    Raises DecryptionFailed if the blob is too short or the tag doesn't
    verify. Nothing is returned on failure.
    """
    if len(blob) < HEADER_LENGTH:
        raise DecryptionFailed(
            f"Encrypted blob is {len(blob)} bytes, shorter than the {HEADER_LENGTH}-byte header"
        )
    nonce = blob[:NONCE_LENGTH]
    tag = blob[NONCE_LENGTH:HEADER_LENGTH]
    ciphertext = blob[HEADER_LENGTH:]
    try:
        return AESGCM(_key_bytes(key)).decrypt(nonce, ciphertext + tag, None)
    except InvalidTag as e:
        raise DecryptionFailed("Authentication tag did not verify") from e


def checksum(data: bytes) -> str:
    """SHA-256 hex digest."""
    return hashlib.sha256(data).hexdigest()


# =============================================================================
# Key management
# =============================================================================


def generate_key() -> str:
    """New random key as hex text."""
    return secrets.token_hex(KEY_LENGTH)


def key_fingerprint(key: bytes | str) -> str:
    """Short, non-secret identifier for a key, safe to print and log."""
    text = key.hex() if isinstance(key, bytes) else key.strip()
    return hashlib.sha256(text.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def read_key() -> str | None:
    """Read the local key, or None if there isn't one."""
    path = encryption_key_file()
    try:
        key = path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None
    return key or None


def write_key(key: str) -> None:
    """Replace the local key file wholesale, owner-only."""
    _key_bytes(key)
    path = encryption_key_file()
    write_text_atomic(path, key, mode=KEY_FILE_MODE)
    logger.info("Wrote encryption key %s to %s", key_fingerprint(key), path)


def create_key() -> str:
    """Generate and persist a new key. Used both by init and rotation."""
    key = generate_key()
    write_key(key)
    return key


def backup_key(key: str) -> Path:
    """Keep a copy of a key about to be replaced, named by its fingerprint."""
    path = encryption_key_file().with_name(
        f"{ENCRYPTION_KEY_BACKUP_PREFIX}{key_fingerprint(key)}.bak"
    )
    write_text_atomic(path, key, mode=KEY_FILE_MODE)
    return path
