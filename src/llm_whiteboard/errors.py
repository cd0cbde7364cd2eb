"""
Error taxonomy for llm-whiteboard.

Every error carries a short category so commands can tell the user whether
a download was corrupted, the key is wrong, or the key is missing. Those
three must never be conflated.
"""


class WhiteboardError(Exception):
    """Base class for all llm-whiteboard failures."""

    category = "error"


class DecryptionFailed(WhiteboardError):
    """AEAD tag did not verify, or the blob is too short to hold a header."""

    category = "decryption"


class CorruptTransfer(WhiteboardError):
    """Checksum mismatch after download. Not retried automatically."""

    category = "corrupt"

    def __init__(self, expected: str, actual: str):
        super().__init__(
            "The downloaded transcript appears to be corrupted "
            f"(expected checksum {expected[:16]}..., got {actual[:16]}...). "
            "Fetch it again."
        )
        self.expected = expected
        self.actual = actual


class WrongKeyOrCorrupt(WhiteboardError):
    """Checksum passed but the transcript did not decrypt under the local key."""

    category = "wrong-key"

    def __init__(self, fingerprint: str | None = None):
        hint = f" (local key fingerprint: {fingerprint})" if fingerprint else ""
        super().__init__(
            "Failed to decrypt the transcript. Is this the correct key?" + hint
        )
        self.fingerprint = fingerprint


class KeyMissing(WhiteboardError):
    """Content is encrypted but no local key exists."""

    category = "missing-key"

    def __init__(self, key_path: str):
        super().__init__(
            "This content is encrypted but no encryption key was found. "
            f"Make sure your encryption key is at {key_path}"
        )
        self.key_path = key_path


class KeyInvalid(WhiteboardError):
    """The local key file exists but does not hold a 32-byte hex key."""

    category = "invalid-key"

    def __init__(self, key_path: str, reason: str):
        super().__init__(f"The encryption key at {key_path} is unusable: {reason}")
        self.key_path = key_path


class UnsafeSessionId(WhiteboardError):
    """A downloaded session id would place the transcript outside the session directory."""

    category = "unsafe-path"

    def __init__(self, session_id: str):
        super().__init__(f"Refusing to restore session with unsafe id {session_id!r}")
        self.session_id = session_id


class SessionNotFound(WhiteboardError):
    """Remote lookup for a session, snapshot or machine came back empty."""

    category = "not-found"


class NotConfigured(WhiteboardError):
    """No config.json yet."""

    category = "not-configured"

    def __init__(self) -> None:
        super().__init__("Not configured. Run: llmwhiteboard init")


class EncryptionNotEnabled(WhiteboardError):
    category = "encryption-disabled"

    def __init__(self) -> None:
        super().__init__(
            "Encryption is not enabled. Run: llmwhiteboard init --enable-encryption"
        )


class SettingsError(WhiteboardError):
    """A CLI settings file has a shape we refuse to overwrite."""

    category = "settings"


class HookPayloadError(WhiteboardError):
    """Hook stdin is not JSON or lacks hook_event_name / session_id."""

    category = "hook-payload"


class APIError(WhiteboardError):
    """Remote request failed with structured error info."""

    category = "api"

    def __init__(self, message: str, status_code: int | None = None, detail: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail or message
