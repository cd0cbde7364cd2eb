"""
HTTP client for the LLM Whiteboard sync service.

Every request carries the bearer token and a per-step timeout (connect,
read, write). httpx timeouts are not a total limit, so clients can also be
given a deadline covering every call they make; the hook handler uses one
so a slow or trickling server cannot hang the CLI tool that invoked it.
"""

import base64
import json
import logging
import time
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import httpx

from llm_whiteboard.config import Config
from llm_whiteboard.errors import APIError, SessionNotFound

logger = logging.getLogger("llm_whiteboard.api")

DEFAULT_TIMEOUT = 30.0
HOOK_TIMEOUT = 10.0
HOOK_DEADLINE = 25.0  # total for one hook invocation, all requests included
PAGE_SIZE = 100

__all__ = [
    "APIError",
    "SessionSummary",
    "TranscriptRecord",
    "WhiteboardClient",
]


@dataclass(frozen=True)
class SessionSummary:
    """One row of the session listing."""

    id: str
    local_session_id: str
    project_path: str
    status: str
    title: str | None = None
    cli_type: str = "claude-code"
    is_encrypted: bool = False
    has_transcript: bool = False
    last_activity_at: str | None = None

    @property
    def display_title(self) -> str:
        return self.title or f"Session {self.local_session_id[:8]}"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionSummary":
        return cls(
            id=str(data["id"]),
            local_session_id=str(data.get("localSessionId", "")),
            project_path=str(data.get("projectPath", "")),
            status=str(data.get("status", "")),
            title=data.get("title"),
            cli_type=str(data.get("cliType") or "claude-code"),
            is_encrypted=bool(data.get("isEncrypted", False)),
            has_transcript=bool(data.get("hasTranscript", False)),
            last_activity_at=data.get("lastActivityAt"),
        )


@dataclass(frozen=True)
class TranscriptRecord:
    """A downloaded transcript, still base64-encoded and possibly encrypted."""

    local_session_id: str
    project_path: str
    content: str  # base64
    is_encrypted: bool
    checksum: str
    session_id: str | None = None
    machine_id: str | None = None
    cli_type: str = "claude-code"
    size_bytes: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranscriptRecord":
        return cls(
            session_id=data.get("sessionId"),
            local_session_id=str(data["localSessionId"]),
            project_path=str(data.get("projectPath", "")),
            machine_id=data.get("machineId"),
            cli_type=str(data.get("cliType") or "claude-code"),
            content=str(data.get("content", "")),
            is_encrypted=bool(data.get("isEncrypted", False)),
            checksum=str(data.get("checksum", "")),
            size_bytes=int(data.get("sizeBytes") or 0),
        )


class WhiteboardClient:
    """Synchronous client; one instance per command invocation."""

    def __init__(
        self,
        api_url: str,
        token: str,
        machine_id: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        deadline: float | None = None,
    ):
        """
        timeout bounds each connect/read/write step. deadline, in seconds
        from now, bounds everything this client does; once it passes,
        requests fail with APIError.
        """
        self.machine_id = machine_id
        self._timeout = timeout
        self._deadline = time.monotonic() + deadline if deadline is not None else None
        self._client = httpx.Client(
            base_url=api_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: Config,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
        deadline: float | None = None,
    ) -> "WhiteboardClient":
        return cls(config.api_url, config.token, config.machine_id, timeout, transport, deadline)

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "WhiteboardClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _remaining(self, method: str, endpoint: str) -> float | None:
        if self._deadline is None:
            return None
        remaining = self._deadline - time.monotonic()
        if remaining <= 0:
            raise APIError(f"Deadline exceeded: {method} {endpoint}")
        return remaining

    def _request(self, method: str, endpoint: str, **kwargs: Any) -> Any:
        remaining = self._remaining(method, endpoint)
        if remaining is not None:
            kwargs["timeout"] = min(self._timeout, remaining)

        try:
            with self._client.stream(method, endpoint, **kwargs) as response:
                # Read in chunks so a server trickling bytes still hits the deadline
                chunks = []
                for chunk in response.iter_bytes():
                    self._remaining(method, endpoint)
                    chunks.append(chunk)
        except httpx.TimeoutException as e:
            raise APIError(f"Request timed out: {method} {endpoint}") from e
        except httpx.HTTPError as e:
            raise APIError(f"Request failed: {method} {endpoint}: {e}") from e
        body = b"".join(chunks)

        if response.is_success:
            if not body:
                return None
            try:
                return json.loads(body)
            except ValueError as e:
                raise APIError(
                    f"Unexpected non-JSON response from {method} {endpoint}",
                    status_code=response.status_code,
                ) from e

        detail = _error_detail(body)
        if response.status_code == 404:
            raise SessionNotFound(detail or f"Not found: {endpoint}")
        raise APIError(
            f"API error ({response.status_code}): {detail or response.reason_phrase}",
            status_code=response.status_code,
            detail=detail,
        )

    # --- Sync ---------------------------------------------------------------

    def sync_event(self, payload: dict[str, Any]) -> None:
        """Forward one hook event."""
        self._request("POST", "/api/sync", json={**payload, "machineId": self.machine_id})

    def upload_transcript(
        self,
        local_session_id: str,
        content: bytes,
        is_encrypted: bool,
        checksum: str,
        suggested_title: str | None = None,
    ) -> None:
        """Upload (or replace) a transcript. checksum covers the bytes in content."""
        body: dict[str, Any] = {
            "localSessionId": local_session_id,
            "machineId": self.machine_id,
            "content": base64.b64encode(content).decode("ascii"),
            "isEncrypted": is_encrypted,
            "checksum": checksum,
        }
        if suggested_title:
            body["suggestedTitle"] = suggested_title
        self._request("POST", "/api/sync/transcript", json=body)

    # --- Listing ------------------------------------------------------------

    def list_sessions(
        self,
        status: str | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[SessionSummary], int]:
        """One page of sessions plus the server's total count."""
        params: dict[str, Any] = {"limit": limit, "offset": offset}
        if status:
            params["status"] = status
        if search:
            params["search"] = search
        data = self._request("GET", "/api/sync/sessions", params=params) or {}
        sessions = [SessionSummary.from_dict(s) for s in data.get("sessions", [])]
        return sessions, int(data.get("total", len(sessions)))

    def iter_sessions(self, status: str | None = None, page_size: int = PAGE_SIZE) -> Iterator[SessionSummary]:
        """Walk every page of the listing."""
        offset = 0
        while True:
            sessions, total = self.list_sessions(status=status, limit=page_size, offset=offset)
            yield from sessions
            offset += len(sessions)
            if not sessions or offset >= total:
                return

    # --- Download -----------------------------------------------------------

    def download_transcript(self, session_id: str) -> TranscriptRecord:
        data = self._request("GET", f"/api/sync/transcript/{session_id}")
        return TranscriptRecord.from_dict(data)

    def download_snapshot(self, snapshot_id: str) -> TranscriptRecord:
        data = self._request("GET", f"/api/sync/snapshot/{snapshot_id}")
        return TranscriptRecord.from_dict(data)


def _error_detail(body: bytes) -> str | None:
    try:
        data = json.loads(body)
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return None
