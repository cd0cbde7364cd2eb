"""
Hook command - invoked by Claude Code / Gemini CLI on every hooked event.

Reads the hook payload from stdin, normalizes it through the CLI's adapter
and forwards it to the sync service. On session end the full transcript is
uploaded too.

Architecture: functional core, imperative shell. The host CLI must never
be blocked or broken by us: network calls use a short timeout, and sync
failures are logged to stderr, never raised.
"""

import logging
import sys
from pathlib import Path
from typing import Any

from llm_whiteboard.adapters import get_adapter
from llm_whiteboard.api import HOOK_DEADLINE, HOOK_TIMEOUT, WhiteboardClient
from llm_whiteboard.config import Config, read_config
from llm_whiteboard.errors import HookPayloadError, WhiteboardError
from llm_whiteboard.transcripts import read_transcript_title, truncate_title, upload_transcript_file
from llm_whiteboard.types import CliType, NormalizedEventType, NormalizedHookContext

logger = logging.getLogger("llm_whiteboard.hook")

# Events after which the transcript likely has its first user message
TITLE_EVENTS = frozenset({NormalizedEventType.TOOL_USE, NormalizedEventType.AGENT_STOP})


# =============================================================================
# PURE FUNCTIONS (Logic)
# =============================================================================


def summarize_event(context: NormalizedHookContext) -> tuple[str | None, dict[str, Any]]:
    """Short human summary plus metadata for the event timeline."""
    metadata: dict[str, Any] = {}

    if context.type == NormalizedEventType.USER_PROMPT:
        prompt = context.prompt or ""
        metadata["prompt"] = prompt
        return truncate_title(prompt), metadata

    if context.type == NormalizedEventType.CONTEXT_COMPACTION:
        if context.compaction_trigger:
            metadata["trigger"] = context.compaction_trigger
        if context.compaction_trigger == "auto":
            return "Auto-compaction triggered (context full)", metadata
        return "Manual compaction triggered", metadata

    if context.tool_name:
        if context.tool_input is not None:
            metadata["input"] = context.tool_input
        return f"Used {context.tool_name}", metadata

    if context.session_reason:
        metadata["reason"] = context.session_reason
    return context.message, metadata


def build_event_payload(
    context: NormalizedHookContext, suggested_title: str | None = None
) -> dict[str, Any]:
    """Body for POST /api/sync."""
    summary, metadata = summarize_event(context)
    if suggested_title is None and context.type == NormalizedEventType.USER_PROMPT:
        suggested_title = summary or None

    payload: dict[str, Any] = {
        "localSessionId": context.session_id,
        "projectPath": context.cwd,
        "cliType": context.cli_type.value,
        "event": {
            "type": context.type.value,
            "rawType": context.raw_event_name,
            "toolName": context.tool_name,
            "summary": summary,
            "metadata": metadata,
        },
        "timestamp": context.timestamp,
    }
    if suggested_title:
        payload["suggestedTitle"] = suggested_title
    return payload


# =============================================================================
# EFFECTFUL FUNCTIONS (I/O at the edges)
# =============================================================================


def read_stdin() -> str:
    return sys.stdin.read()


def forward_event(client: WhiteboardClient, config: Config, context: NormalizedHookContext) -> None:
    suggested_title = None
    if context.type in TITLE_EVENTS:
        suggested_title = read_transcript_title(Path(context.transcript_path))

    client.sync_event(build_event_payload(context, suggested_title))

    if context.type == NormalizedEventType.SESSION_END:
        transcript = Path(context.transcript_path)
        if transcript.is_file():
            result = upload_transcript_file(client, config, context.session_id, transcript)
            logger.info(
                "Uploaded transcript %s (%d bytes, encrypted=%s)",
                result.session_id,
                result.size_bytes,
                result.is_encrypted,
            )


# =============================================================================
# MAIN (Imperative shell)
# =============================================================================


def run_hook(
    cli_type: CliType | str,
    stdin_text: str | None = None,
    client: WhiteboardClient | None = None,
) -> int:
    """
    Handle one hook invocation and return the process exit code.

    Sync failures return 0 so the host CLI carries on. A malformed payload
    is a contract violation by the caller: it ends the invocation with 1,
    which both CLIs treat as a non-blocking hook error.
    """
    config = read_config()
    if config is None:
        return 0

    text = read_stdin() if stdin_text is None else stdin_text
    if not text.strip():
        return 0

    adapter = get_adapter(cli_type)
    try:
        context = adapter.parse_hook_context(text)
    except HookPayloadError as e:
        logger.error("LLM Whiteboard hook error: %s", e)
        return 1

    owns_client = client is None
    if client is None:
        client = WhiteboardClient.from_config(config, timeout=HOOK_TIMEOUT, deadline=HOOK_DEADLINE)
    try:
        forward_event(client, config, context)
    except (WhiteboardError, OSError) as e:
        logger.error("LLM Whiteboard sync failed: %s", e)
    finally:
        if owns_client:
            client.close()
    return 0
