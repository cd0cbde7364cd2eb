"""
Resume command - download a synced session and restore it where the CLI
tool will find it from the current directory.
"""

import os

import typer
from rich.console import Console

from llm_whiteboard.adapters import get_adapter
from llm_whiteboard.api import SessionSummary, TranscriptRecord, WhiteboardClient
from llm_whiteboard.commands import fail
from llm_whiteboard.config import require_config
from llm_whiteboard.errors import SessionNotFound, WhiteboardError
from llm_whiteboard.restore import find_existing_transcript, restore_transcript

console = Console()


def pick_session(client: WhiteboardClient, search: str | None, latest: bool) -> SessionSummary:
    """Resolve --search / --latest to a single remote session."""
    sessions, _ = client.list_sessions(search=search, limit=1 if latest else 10)
    if not sessions:
        raise SessionNotFound("No sessions found" + (f" matching '{search}'" if search else ""))
    if latest or len(sessions) == 1:
        return sessions[0]

    for i, s in enumerate(sessions, 1):
        project = s.project_path.replace("\\", "/").rsplit("/", 1)[-1]
        console.print(f"  [cyan]{i}[/cyan]. {s.display_title} [dim]- {project}[/dim]")
    choice = typer.prompt("Select a session to resume", type=int, default=1)
    if not 1 <= choice <= len(sessions):
        raise SessionNotFound(f"No session #{choice}")
    return sessions[choice - 1]


def fetch_record(
    client: WhiteboardClient,
    session_id: str | None,
    search: str | None,
    latest: bool,
    snapshot: str | None,
) -> TranscriptRecord:
    if snapshot:
        console.print(f"[dim]→ Fetching snapshot {snapshot}[/dim]")
        return client.download_snapshot(snapshot)
    if search or latest:
        session_id = pick_session(client, search, latest).id
    if not session_id:
        console.print("[red]Error:[/red] Provide a session ID, --search, --latest or --snapshot")
        raise typer.Exit(1)
    console.print(f"[dim]→ Fetching transcript {session_id}[/dim]")
    return client.download_transcript(session_id)


def run_resume(
    session_id: str | None = None,
    search: str | None = None,
    latest: bool = False,
    snapshot: str | None = None,
) -> None:
    """Main resume routine."""
    try:
        config = require_config()
        with WhiteboardClient.from_config(config) as client:
            record = fetch_record(client, session_id, search, latest, snapshot)

        console.print(f"[dim]  Local session: {record.local_session_id}[/dim]")
        console.print(f"[dim]  Project: {record.project_path}[/dim]")
        console.print(f"[dim]  Size: {record.size_bytes / 1024:.1f} KB, encrypted: {'yes' if record.is_encrypted else 'no'}[/dim]")

        adapter = get_adapter(record.cli_type)
        if find_existing_transcript(adapter, os.getcwd(), record.local_session_id):
            console.print("[dim]  Replacing the local copy of this session[/dim]")
        result = restore_transcript(record, adapter)
    except WhiteboardError as e:
        raise fail(console, e)
    except ValueError as e:
        # Session recorded by a CLI tool this version doesn't know
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if result.warning:
        console.print(f"[yellow]⚠ Resuming into a different directory.[/yellow] {result.warning}")

    console.print("\n[green]✓ Session restored successfully![/green]")
    console.print(f"Session restored to: {result.transcript_path}")
    console.print("\n[bold]To resume this session, run:[/bold]")
    console.print(f"  [cyan]{result.resume_command}[/cyan]\n")
    listing = adapter.list_sessions_command()
    if listing:
        console.print(f"[dim]To see local sessions: {listing}[/dim]\n")
