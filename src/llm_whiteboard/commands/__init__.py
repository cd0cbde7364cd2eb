"""Command implementations behind the llmwhiteboard CLI."""

import typer
from rich.console import Console

from llm_whiteboard.errors import WhiteboardError

CATEGORY_LABELS = {
    "corrupt": "Corrupted download",
    "wrong-key": "Decryption failed",
    "missing-key": "Encryption key missing",
    "invalid-key": "Encryption key invalid",
    "not-found": "Not found",
    "unsafe-path": "Unsafe session id",
    "not-configured": "Not configured",
    "encryption-disabled": "Encryption disabled",
    "settings": "Settings file error",
    "api": "API error",
}


def fail(console: Console, error: WhiteboardError) -> typer.Exit:
    """Print an error naming its category and return the Exit to raise."""
    label = CATEGORY_LABELS.get(error.category, "Error")
    console.print(f"[red]✗ {label}:[/red] {error}")
    return typer.Exit(1)
