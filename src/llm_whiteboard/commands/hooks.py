"""
Hooks CLI commands - install, remove and inspect sync hooks per CLI tool.
"""

import os

import typer
from rich.console import Console
from rich.table import Table

from llm_whiteboard.adapters import detect_installed_clis, get_adapter, parse_cli_type
from llm_whiteboard.commands import fail
from llm_whiteboard.errors import WhiteboardError
from llm_whiteboard.hooks import hooks_status, install_hooks, uninstall_hooks
from llm_whiteboard.types import CliType, SettingsScope

app = typer.Typer(no_args_is_help=True)
console = Console()

CliOption = typer.Option(None, "--cli", "-c", help="CLI tool (claude-code, gemini-cli); default: all detected")
ProjectOption = typer.Option(False, "--project", "-p", help="Project-level settings for the current directory")


def _targets(cli: str | None) -> list[CliType]:
    if cli:
        try:
            return [parse_cli_type(cli)]
        except ValueError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
    return detect_installed_clis()


def _scope(project: bool) -> tuple[SettingsScope, str | None]:
    if project:
        return SettingsScope.PROJECT, os.getcwd()
    return SettingsScope.USER, None


@app.command()
def install(cli: str | None = CliOption, project: bool = ProjectOption) -> None:
    """Install sync hooks."""
    scope, project_path = _scope(project)
    targets = _targets(cli)
    if not targets:
        console.print("[yellow]![/yellow] No supported CLI tools detected")
        raise typer.Exit(1)

    for cli_type in targets:
        adapter = get_adapter(cli_type)
        try:
            changed = install_hooks(cli_type, scope, project_path, adapter=adapter)
        except WhiteboardError as e:
            raise fail(console, e)
        if changed:
            console.print(f"[green]✓[/green] {adapter.display_name} hooks installed")
        else:
            console.print(f"[dim]○[/dim] {adapter.display_name} hooks already installed")


@app.command()
def uninstall(cli: str | None = CliOption, project: bool = ProjectOption) -> None:
    """Remove sync hooks, leaving all other hooks in place."""
    scope, project_path = _scope(project)
    for cli_type in _targets(cli):
        adapter = get_adapter(cli_type)
        try:
            removed = uninstall_hooks(cli_type, scope, project_path, adapter=adapter)
        except WhiteboardError as e:
            raise fail(console, e)
        if removed:
            console.print(f"[green]✓[/green] {adapter.display_name} hooks removed")
        else:
            console.print(f"[dim]○[/dim] {adapter.display_name} hooks were not installed")


@app.command()
def status(project: bool = ProjectOption) -> None:
    """Show hook status for every supported CLI."""
    scope, project_path = _scope(project)

    table = Table(title=f"Sync Hooks ({scope.value})")
    table.add_column("CLI", style="cyan")
    table.add_column("CLI Installed", style="dim")
    table.add_column("Hooks Installed", style="bold")
    table.add_column("Settings File", style="dim")

    for s in hooks_status(scope, project_path):
        cli_str = "[green]Yes[/green]" if s.cli_installed else "[red]No[/red]"
        hooks_str = "[green]Yes[/green]" if s.hooks_installed else "[dim]No[/dim]"
        table.add_row(s.display_name, cli_str, hooks_str, str(s.settings_path))

    console.print()
    console.print(table)
    console.print()
