"""
Status and logout commands.
"""

import os

from rich.console import Console
from rich.prompt import Confirm

from llm_whiteboard.adapters import detect_installed_clis, get_adapter
from llm_whiteboard.commands import fail
from llm_whiteboard.config import delete_config, read_config
from llm_whiteboard.crypto import key_fingerprint, read_key
from llm_whiteboard.errors import WhiteboardError
from llm_whiteboard.hooks import hooks_installed, uninstall_hooks
from llm_whiteboard.paths import encryption_key_file
from llm_whiteboard.types import SettingsScope

console = Console()


def show_status() -> None:
    """Show configuration, key and hook status."""
    console.print("\n[bold]LLM Whiteboard Status[/bold]\n")

    config = read_config()
    if config is None:
        console.print("[yellow]Status: Not configured[/yellow]")
        console.print("[dim]Run: llmwhiteboard init[/dim]\n")
        return

    console.print("[green]Status: Configured[/green]")
    console.print(f"  API URL: {config.api_url}")
    console.print(f"  Machine ID: {config.machine_id}")
    console.print(f"  Token: {config.token[:12]}...")

    if config.encryption_enabled:
        key = read_key()
        if key:
            console.print(f"  Encryption: Enabled (fingerprint: {key_fingerprint(key)})")
        else:
            console.print(f"  [yellow]Encryption: Enabled (KEY MISSING at {encryption_key_file()})[/yellow]")
    else:
        console.print("  Encryption: Disabled")

    console.print()
    cwd = os.getcwd()
    for cli_type in detect_installed_clis():
        adapter = get_adapter(cli_type)
        if hooks_installed(cli_type, SettingsScope.PROJECT, cwd, adapter=adapter):
            where = f"project-level ({adapter.settings_path(SettingsScope.PROJECT, cwd)})"
        elif hooks_installed(cli_type, SettingsScope.USER, adapter=adapter):
            where = f"global ({adapter.settings_path(SettingsScope.USER)})"
        else:
            console.print(f"[yellow]{adapter.display_name} hooks: Not installed[/yellow]")
            continue
        console.print(f"[green]{adapter.display_name} hooks: Installed[/green] [dim]{where}[/dim]")
    console.print()


def run_logout(yes: bool = False) -> None:
    """Remove hooks from every detected CLI and delete the config."""
    if not yes and not Confirm.ask("Remove LLM Whiteboard configuration?", default=False):
        console.print("[dim]Cancelled.[/dim]")
        return

    try:
        for cli_type in detect_installed_clis():
            adapter = get_adapter(cli_type)
            if uninstall_hooks(cli_type, SettingsScope.USER, adapter=adapter):
                console.print(f"[green]✓[/green] Removed {adapter.display_name} hooks")
    except WhiteboardError as e:
        raise fail(console, e)

    if delete_config():
        console.print("[green]✓[/green] Configuration removed")
    else:
        console.print("[dim]○[/dim] No configuration to remove")

    console.print("\n[yellow]Note: Your encryption key (if any) was NOT deleted.[/yellow]")
    console.print(f"[dim]To remove it: rm {encryption_key_file()}[/dim]")
    console.print("[dim]Your synced sessions remain on the server.[/dim]\n")


def run_uninstall() -> None:
    """Remove sync hooks at user and current-project scope; config stays."""
    cwd = os.getcwd()
    removed_any = False
    try:
        for cli_type in detect_installed_clis():
            adapter = get_adapter(cli_type)
            for scope, project_path in ((SettingsScope.USER, None), (SettingsScope.PROJECT, cwd)):
                if uninstall_hooks(cli_type, scope, project_path, adapter=adapter):
                    removed_any = True
                    path = adapter.settings_path(scope, project_path)
                    console.print(f"[green]✓[/green] Removed {adapter.display_name} hooks from {path}")
    except WhiteboardError as e:
        raise fail(console, e)

    if not removed_any:
        console.print("[dim]○[/dim] No sync hooks installed")
    console.print("[dim]Configuration kept; run 'llmwhiteboard logout' to remove it.[/dim]")
