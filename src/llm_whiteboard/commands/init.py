"""
Init command - writes config, optionally creates an encryption key, and
installs sync hooks for the selected CLI tools.

Hook handling:
- Identical hook already registered: skip silently
- Stale llm-whiteboard hook (old command or matcher): replaced
- Anyone else's hooks and settings: left alone
"""

import json
import os

import typer
from rich.console import Console
from rich.prompt import Confirm, Prompt

from llm_whiteboard.adapters import detect_installed_clis, get_adapter, parse_cli_type
from llm_whiteboard.commands import fail
from llm_whiteboard.config import DEFAULT_API_URL, Config, EncryptionSettings, get_machine_id, read_config, write_config
from llm_whiteboard.crypto import create_key, key_fingerprint, read_key
from llm_whiteboard.errors import WhiteboardError
from llm_whiteboard.hooks import install_hooks
from llm_whiteboard.paths import encryption_key_file
from llm_whiteboard.types import CliType, SettingsScope

console = Console()

TOKEN_PREFIX = "lwb_sk_"
INSTALL_LINKS = {
    CliType.CLAUDE_CODE: "https://claude.com/code",
    CliType.GEMINI_CLI: "https://github.com/google-gemini/gemini-cli",
}


def parse_cli_list(value: str | None) -> list[CliType] | None:
    """Parse a comma-separated --cli option."""
    if not value:
        return None
    return [parse_cli_type(part.strip()) for part in value.split(",") if part.strip()]


def print_no_clis() -> None:
    console.print("[yellow]![/yellow] No supported CLI tools detected. Please install one of:")
    for cli_type, link in INSTALL_LINKS.items():
        console.print(f"  - {get_adapter(cli_type).display_name}: {link}")


def install_for(cli_types: list[CliType], project: bool) -> None:
    """Install hooks for each CLI and report where they went."""
    scope = SettingsScope.PROJECT if project else SettingsScope.USER
    project_path = os.getcwd() if project else None

    for cli_type in cli_types:
        adapter = get_adapter(cli_type)
        config = adapter.hook_config("")
        if config.is_experimental:
            console.print(
                f"[yellow]![/yellow] {adapter.display_name} hooks are experimental; "
                "these settings will be enabled:"
            )
            console.print(f"[dim]{json.dumps(config.additional_settings, indent=2)}[/dim]")

        path = adapter.settings_path(scope, project_path)
        if install_hooks(cli_type, scope, project_path, adapter=adapter):
            console.print(f"[green]✓[/green] {adapter.display_name} hooks installed: {path}")
        else:
            console.print(f"[dim]○[/dim] {adapter.display_name} hooks already installed: {path}")


def run_init(
    token: str | None = None,
    url: str | None = None,
    machine_id: str | None = None,
    enable_encryption: bool | None = None,
    project: bool = False,
    cli: str | None = None,
    hooks_only: bool = False,
) -> None:
    """Main init routine."""
    try:
        requested = parse_cli_list(cli)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    installed = detect_installed_clis()
    selected = [c for c in requested if c in installed] if requested else installed
    if not selected:
        print_no_clis()
        raise typer.Exit(1)

    if hooks_only:
        try:
            install_for(selected, project)
        except WhiteboardError as e:
            raise fail(console, e)
        console.print("\n[dim]Restart your CLI tools to apply changes.[/dim]")
        return

    console.print("\n[bold]Welcome to LLM Whiteboard![/bold]\n")
    names = ", ".join(get_adapter(c).display_name for c in selected)
    console.print(f"[dim]Integrating: {names}[/dim]\n")

    existing = read_config()
    if token is None:
        token = Prompt.ask("API token", default=existing.token if existing else None)
    if not token.startswith(TOKEN_PREFIX):
        console.print(f"[yellow]![/yellow] Token doesn't start with {TOKEN_PREFIX}; using it anyway")
    if url is None:
        url = Prompt.ask("API URL", default=existing.api_url if existing else DEFAULT_API_URL)
    if machine_id is None:
        machine_id = Prompt.ask("Name for this machine", default=get_machine_id())
    if enable_encryption is None:
        enable_encryption = Confirm.ask(
            "Enable end-to-end encryption? (Recommended for sensitive data)", default=False
        )

    try:
        encryption = None
        if enable_encryption:
            key = read_key() or create_key()
            encryption = EncryptionSettings(enabled=True, key_path=str(encryption_key_file()))
            console.print("\n[yellow]IMPORTANT: Back up your encryption key![/yellow]")
            console.print(f"  Location: {encryption_key_file()}")
            console.print(f"  Fingerprint: {key_fingerprint(key)}")
            console.print("  Without this key, you cannot decrypt your sessions.\n")

        write_config(Config(token=token, api_url=url.rstrip("/"), machine_id=machine_id, encryption=encryption))
        console.print("[green]✓[/green] Configuration saved")

        install_for(selected, project)
    except WhiteboardError as e:
        raise fail(console, e)

    console.print("\n[green]Setup complete! Your sessions will now sync automatically.[/green]")
    console.print(f"[dim]Machine ID: {machine_id}[/dim]")
    console.print(f"[dim]Encryption: {'Enabled' if enable_encryption else 'Disabled'}[/dim]\n")
