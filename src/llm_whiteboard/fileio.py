"""
Atomic file writes.

Settings, keys, config and restored transcripts are all written to a
per-process temp file beside the target and moved into place, so a reader
never observes a half-written file. Concurrent invocations still race:
the last writer wins.
"""

import os
from pathlib import Path

DEFAULT_FILE_MODE = 0o644


def write_bytes_atomic(path: Path, data: bytes, mode: int | None = None) -> None:
    """
    Write data to path via temp file + os.replace, creating parent dirs.

    mode defaults to the existing file's permissions, or 0644 for new files.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    if mode is None:
        mode = path.stat().st_mode & 0o777 if path.exists() else DEFAULT_FILE_MODE

    tmp_path = path.with_name(f".{path.name}.{os.getpid()}.tmp")
    # Start owner-only so a key never sits world-readable, even briefly
    fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    try:
        with os.fdopen(fd, "wb") as tmp:
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_path, mode)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


def write_text_atomic(path: Path, text: str, mode: int | None = None) -> None:
    write_bytes_atomic(path, text.encode("utf-8"), mode=mode)
