"""
Rotate-key command - replace the encryption key and re-encrypt every
encrypted session on the server.
"""

import typer
from rich.console import Console
from rich.prompt import Confirm
from rich.table import Table

from llm_whiteboard.api import SessionSummary, WhiteboardClient
from llm_whiteboard.commands import fail
from llm_whiteboard.config import require_config
from llm_whiteboard.crypto import key_fingerprint, read_key
from llm_whiteboard.errors import EncryptionNotEnabled, KeyMissing, WhiteboardError
from llm_whiteboard.paths import encryption_key_file
from llm_whiteboard.rotation import RotationReport, rotate_key

console = Console()


def print_report(report: RotationReport) -> None:
    total = len(report.results)
    if report.partial:
        console.print(f"\n[yellow]![/yellow] Key rotation completed with {report.error_count} errors")
        console.print(f"  {report.success_count} sessions re-encrypted successfully.")

        table = Table(title="Sessions still under the previous key")
        table.add_column("Session", style="cyan")
        table.add_column("Local ID", style="dim")
        table.add_column("Error", style="red", max_width=60)
        for r in report.failures:
            table.add_row(r.session_id, r.local_session_id, r.error or "")
        console.print(table)
    elif total:
        console.print(f"\n[green]✓[/green] Key rotation complete: {total} sessions re-encrypted")
    else:
        console.print("\n[green]✓[/green] No encrypted sessions found; new key generated")

    console.print(f"\nNew key fingerprint: {report.fingerprint}")
    if report.old_key_backup:
        console.print(f"[dim]Previous key ({report.old_fingerprint}) kept at {report.old_key_backup}[/dim]")
    console.print("\n[yellow]IMPORTANT: Back up your new encryption key![/yellow]")
    console.print(f"  Location: {encryption_key_file()}\n")


def run_rotate_key(yes: bool = False) -> None:
    """Main rotation routine."""
    try:
        config = require_config()
        if not config.encryption_enabled:
            raise EncryptionNotEnabled()
        old_key = read_key()
        if not old_key:
            raise KeyMissing(str(encryption_key_file()))
    except WhiteboardError as e:
        raise fail(console, e)

    console.print("\n[yellow]This will re-encrypt all your sessions with a new key.[/yellow]")
    console.print(f"[dim]Current key fingerprint: {key_fingerprint(old_key)}[/dim]\n")
    if not yes and not Confirm.ask("Rotate your encryption key?", default=False):
        console.print("[dim]Cancelled.[/dim]")
        return

    try:
        with WhiteboardClient.from_config(config) as client:
            with console.status("Fetching encrypted sessions...") as spinner:

                def progress(index: int, total: int, session: SessionSummary) -> None:
                    spinner.update(f"Re-encrypting session {index}/{total} ({session.display_title})...")

                report = rotate_key(client, config, progress=progress)
    except WhiteboardError as e:
        raise fail(console, e)

    print_report(report)
