"""
Session commands - list remote sessions and manually upload local ones.
"""

import os

import typer
from rich.console import Console
from rich.table import Table

from llm_whiteboard.adapters import get_adapter, parse_cli_type
from llm_whiteboard.api import WhiteboardClient
from llm_whiteboard.commands import fail
from llm_whiteboard.config import require_config
from llm_whiteboard.errors import WhiteboardError
from llm_whiteboard.transcripts import find_local_transcripts, upload_transcript_file

console = Console()

STATUS_STYLES = {"ACTIVE": "green", "PAUSED": "yellow"}


def run_list(status: str | None = None, limit: int = 20) -> None:
    """Print the user's synced sessions."""
    try:
        config = require_config()
        with WhiteboardClient.from_config(config) as client:
            sessions, total = client.list_sessions(status=status, limit=limit)
    except WhiteboardError as e:
        raise fail(console, e)

    if not sessions:
        console.print("[dim]No sessions found.[/dim]")
        return

    table = Table(title=f"Your Sessions ({len(sessions)} of {total})")
    table.add_column("Title", style="bold", max_width=40)
    table.add_column("ID", style="cyan")
    table.add_column("Project")
    table.add_column("Status")
    table.add_column("CLI", style="dim")
    table.add_column("Transcript", justify="center")

    for s in sessions:
        project = s.project_path.replace("\\", "/").rsplit("/", 1)[-1] or s.project_path
        style = STATUS_STYLES.get(s.status, "dim")
        transcript = ("🔒 " if s.is_encrypted else "") + ("yes" if s.has_transcript else "-")
        table.add_row(s.display_title, s.id, project, f"[{style}]{s.status}[/{style}]", s.cli_type, transcript)

    console.print()
    console.print(table)
    console.print("\n[dim]To resume a session: llmwhiteboard resume <session-id>[/dim]\n")


def run_sync(cli: str = "claude-code", session: str | None = None, all_sessions: bool = False) -> None:
    """Upload local transcripts for the current directory."""
    try:
        adapter = get_adapter(parse_cli_type(cli))
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    cwd = os.getcwd()
    transcripts = find_local_transcripts(adapter, cwd)
    if not transcripts:
        console.print(f"[yellow]![/yellow] No {adapter.display_name} sessions found for this directory")
        console.print(f"[dim]Looking in: {adapter.transcript_path(cwd, 'x').parent}[/dim]")
        return

    if session:
        matches = [t for t in transcripts if t.session_id == session or t.session_id.startswith(session)]
        if not matches:
            console.print(f"[red]Error:[/red] Session not found: {session}")
            for t in transcripts[:5]:
                console.print(f"[dim]  {t.session_id} ({t.modified:%Y-%m-%d %H:%M})[/dim]")
            raise typer.Exit(1)
        selected = matches[:1]
    elif all_sessions:
        selected = transcripts
    else:
        selected = transcripts[:1]

    try:
        config = require_config()
    except WhiteboardError as e:
        raise fail(console, e)

    synced = 0
    with WhiteboardClient.from_config(config) as client:
        for t in selected:
            try:
                upload_transcript_file(client, config, t.session_id, t.path)
            except (WhiteboardError, OSError) as e:
                console.print(f"[red]✗[/red] {t.session_id[:8]}: {e}")
                continue
            synced += 1
            console.print(f"[green]✓[/green] Synced {t.session_id[:8]}")

    if synced != len(selected):
        console.print(f"\n[yellow]![/yellow] Synced {synced}/{len(selected)} session(s)")
        raise typer.Exit(1)
    console.print(f"\n[green]Synced {synced} session(s)[/green]")
