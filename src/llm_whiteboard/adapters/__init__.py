"""
CLI adapters.

Registry and detection helpers. Adding a tool means writing a CliAdapter
subclass and listing it in ADAPTER_CLASSES.
"""

from pathlib import Path

from llm_whiteboard.adapters.base import CliAdapter
from llm_whiteboard.adapters.claude_code import ClaudeCodeAdapter
from llm_whiteboard.adapters.gemini_cli import GeminiCliAdapter
from llm_whiteboard.types import CliType

ADAPTER_CLASSES: dict[CliType, type[CliAdapter]] = {
    CliType.CLAUDE_CODE: ClaudeCodeAdapter,
    CliType.GEMINI_CLI: GeminiCliAdapter,
}


def parse_cli_type(value: CliType | str) -> CliType:
    """Accept an enum or its string value; anything else is a ValueError."""
    try:
        return CliType(value)
    except ValueError:
        supported = ", ".join(c.value for c in CliType)
        raise ValueError(f"Unknown CLI type: {value} (supported: {supported})") from None


def get_adapter(cli_type: CliType | str, home: Path | None = None) -> CliAdapter:
    """Get an adapter by CLI type."""
    return ADAPTER_CLASSES[parse_cli_type(cli_type)](home=home)


def all_cli_types() -> list[CliType]:
    return list(ADAPTER_CLASSES)


def all_adapters(home: Path | None = None) -> list[CliAdapter]:
    return [ADAPTER_CLASSES[cli_type](home=home) for cli_type in all_cli_types()]


def detect_installed_clis(home: Path | None = None) -> list[CliType]:
    """CLI types whose config directory exists on this machine."""
    return [adapter.name for adapter in all_adapters(home) if adapter.is_installed()]


__all__ = [
    "CliAdapter",
    "ClaudeCodeAdapter",
    "GeminiCliAdapter",
    "all_adapters",
    "all_cli_types",
    "detect_installed_clis",
    "get_adapter",
    "parse_cli_type",
]
