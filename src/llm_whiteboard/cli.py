"""
Main CLI entry point for llmwhiteboard.

Usage:
    llmwhiteboard init [--token T] [--url U] [--enable-encryption] [--project] [--cli claude-code,gemini-cli]
    llmwhiteboard hook --cli {claude-code,gemini-cli}      (called by the CLI tools)
    llmwhiteboard sync [--session ID | --all] [--cli ...]
    llmwhiteboard list [--status S] [--limit N]
    llmwhiteboard resume [ID | --search Q | --latest | --snapshot ID]
    llmwhiteboard status | logout | uninstall | rotate-key [--yes]
    llmwhiteboard hooks {install,uninstall,status}
"""

import logging

import typer
from rich.console import Console

from llm_whiteboard import __version__
from llm_whiteboard.commands import hooks

app = typer.Typer(
    name="llmwhiteboard",
    help="Sync and resume AI coding CLI sessions across machines",
    no_args_is_help=True,
)
console = Console()

# Register command groups
app.add_typer(hooks.app, name="hooks", help="Manage sync hooks")


def version_callback(value: bool) -> None:
    if value:
        console.print(f"llmwhiteboard {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
    version: bool = typer.Option(
        False, "--version", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Sync and resume AI coding CLI sessions across machines."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@app.command()
def init(
    token: str | None = typer.Option(None, "--token", "-t", help="API token"),
    url: str | None = typer.Option(None, "--url", "-u", help="API URL"),
    machine_id: str | None = typer.Option(None, "--machine-id", "-m", help="Name for this machine"),
    encrypt: bool | None = typer.Option(
        None, "--enable-encryption/--no-encryption", help="Enable end-to-end encryption of transcripts"
    ),
    project: bool = typer.Option(False, "--project", "-p", help="Install hooks for this project only"),
    cli: str | None = typer.Option(None, "--cli", "-c", help="Comma-separated CLI tools; default: all detected"),
    hooks_only: bool = typer.Option(False, "--hooks-only", help="Only install hooks, keep existing config"),
) -> None:
    """Configure sync and install hooks for detected CLI tools."""
    from llm_whiteboard.commands.init import run_init

    run_init(
        token=token,
        url=url,
        machine_id=machine_id,
        enable_encryption=encrypt,
        project=project,
        cli=cli,
        hooks_only=hooks_only,
    )


@app.command()
def hook(
    cli: str = typer.Option("claude-code", "--cli", "-c", help="CLI tool that invoked the hook"),
) -> None:
    """Handle a hook event read from stdin (called by the CLI tools)."""
    from llm_whiteboard.adapters import parse_cli_type
    from llm_whiteboard.commands.hook import run_hook

    try:
        cli_type = parse_cli_type(cli)
    except ValueError as e:
        logging.getLogger("llm_whiteboard.hook").error("%s", e)
        raise typer.Exit(1)
    raise typer.Exit(run_hook(cli_type))


@app.command()
def sync(
    session: str | None = typer.Option(None, "--session", "-s", help="Session ID (or prefix) to upload"),
    all_sessions: bool = typer.Option(False, "--all", "-a", help="Upload every session for this directory"),
    cli: str = typer.Option("claude-code", "--cli", "-c", help="CLI tool whose transcripts to upload"),
) -> None:
    """Upload local transcripts for the current directory."""
    from llm_whiteboard.commands.sessions import run_sync

    run_sync(cli=cli, session=session, all_sessions=all_sessions)


@app.command("list")
def list_sessions(
    status: str | None = typer.Option(None, "--status", help="Filter by status (ACTIVE, PAUSED, COMPLETED, ARCHIVED)"),
    limit: int = typer.Option(20, "--limit", "-n", help="Number of sessions to show"),
) -> None:
    """List your synced sessions."""
    from llm_whiteboard.commands.sessions import run_list

    run_list(status=status, limit=limit)


@app.command()
def resume(
    session_id: str | None = typer.Argument(None, help="Session ID to resume"),
    search: str | None = typer.Option(None, "--search", "-s", help="Search sessions by title or project"),
    latest: bool = typer.Option(False, "--latest", "-l", help="Resume the most recent session"),
    snapshot: str | None = typer.Option(None, "--snapshot", help="Resume from a snapshot ID"),
) -> None:
    """Restore a synced session into the current directory."""
    from llm_whiteboard.commands.resume import run_resume

    run_resume(session_id=session_id, search=search, latest=latest, snapshot=snapshot)


@app.command()
def status() -> None:
    """Show configuration, encryption and hook status."""
    from llm_whiteboard.commands.status import show_status

    show_status()


@app.command()
def logout(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Remove hooks and local configuration."""
    from llm_whiteboard.commands.status import run_logout

    run_logout(yes=yes)


@app.command()
def uninstall() -> None:
    """Remove sync hooks from every detected CLI (config is kept)."""
    from llm_whiteboard.commands.status import run_uninstall

    run_uninstall()


@app.command("rotate-key")
def rotate_key(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Generate a new encryption key and re-encrypt all sessions."""
    from llm_whiteboard.commands.rotate import run_rotate_key

    run_rotate_key(yes=yes)


if __name__ == "__main__":
    app()
