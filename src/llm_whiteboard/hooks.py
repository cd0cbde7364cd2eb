"""
Hook installation.

Merges llm-whiteboard sync hooks into each CLI's settings file without
disturbing anything else in it: other keys survive verbatim, other people's
hooks on the same event survive, and installing twice is the same as
installing once.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from llm_whiteboard.adapters import CliAdapter, all_adapters, get_adapter
from llm_whiteboard.errors import SettingsError
from llm_whiteboard.settings import deep_merge
from llm_whiteboard.types import CliType, HookEntry, SettingsScope

logger = logging.getLogger("llm_whiteboard.hooks")

COMMAND_MARKER = "llmwhiteboard"


@dataclass(frozen=True)
class HookStatus:
    cli_type: CliType
    display_name: str
    cli_installed: bool
    hooks_installed: bool
    settings_path: Path


def hook_command(cli_type: CliType | str) -> str:
    """Command the CLI runs for every sync hook."""
    return f"{COMMAND_MARKER} hook --cli {CliType(cli_type).value}"


def _is_hook_command(command: Any) -> bool:
    """Our commands start with `llmwhiteboard hook`; paths merely containing the name are not ours."""
    return isinstance(command, str) and command.split()[:2] == [COMMAND_MARKER, "hook"]


def _is_ours(group: Any) -> bool:
    """True if every action in a matcher group is an llm-whiteboard command."""
    if not isinstance(group, dict):
        return False
    actions = group.get("hooks")
    if not isinstance(actions, list) or not actions:
        return False
    return all(
        isinstance(a, dict) and _is_hook_command(a.get("command")) for a in actions
    )


def _has_entry(groups: list[Any], entry: HookEntry) -> bool:
    """Check whether a group with the same matcher already runs every command of entry."""
    wanted = set(entry.commands())
    for group in groups:
        if not isinstance(group, dict) or group.get("matcher") != entry.matcher:
            continue
        present = {a.get("command") for a in group.get("hooks", []) if isinstance(a, dict)}
        if wanted <= present:
            return True
    return False


def _hooks_section(settings: dict[str, Any], create: bool) -> dict[str, Any] | None:
    hooks = settings.get("hooks")
    if hooks is None:
        if not create:
            return None
        hooks = settings["hooks"] = {}
    if not isinstance(hooks, dict):
        raise SettingsError(f"'hooks' must be an object, found {type(hooks).__name__}")
    return hooks


def _event_groups(hooks: dict[str, Any], event: str) -> list[Any]:
    groups = hooks.setdefault(event, [])
    if not isinstance(groups, list):
        raise SettingsError(f"'hooks.{event}' must be a list, found {type(groups).__name__}")
    return groups


def install_hooks(
    cli_type: CliType | str,
    scope: SettingsScope = SettingsScope.USER,
    project_path: str | None = None,
    adapter: CliAdapter | None = None,
) -> bool:
    """
    Install sync hooks for one CLI.

    Returns True if the settings file changed, False if everything was
    already in place.
    """
    adapter = adapter or get_adapter(cli_type)
    config = adapter.hook_config(hook_command(adapter.name))

    # Strict read: an unparseable file must fail loudly, not be overwritten
    settings = adapter.read_settings(scope, project_path, strict=True)
    hooks = _hooks_section(settings, create=True)
    changed = False

    for event, entries in config.hooks.items():
        groups = _event_groups(hooks, event)

        # Drop stale llm-whiteboard groups (old command or matcher)
        kept = [g for g in groups if not _is_ours(g) or any(_matches(g, e) for e in entries)]
        if len(kept) != len(groups):
            groups[:] = kept
            changed = True

        for entry in entries:
            if _has_entry(groups, entry):
                continue
            groups.append(entry.to_dict())
            changed = True

    if config.additional_settings:
        merged = deep_merge(settings, config.additional_settings)
        if merged != settings:
            settings = merged
            changed = True

    if changed:
        path = adapter.write_settings(settings, scope, project_path)
        logger.info("Installed %s hooks into %s", adapter.display_name, path)
    return changed


def _matches(group: dict[str, Any], entry: HookEntry) -> bool:
    return group.get("matcher") == entry.matcher and [
        a.get("command") for a in group.get("hooks", []) if isinstance(a, dict)
    ] == entry.commands()


def uninstall_hooks(
    cli_type: CliType | str,
    scope: SettingsScope = SettingsScope.USER,
    project_path: str | None = None,
    adapter: CliAdapter | None = None,
) -> bool:
    """
    Remove llm-whiteboard hooks for one CLI.

    Returns True if anything was removed.
    """
    adapter = adapter or get_adapter(cli_type)
    settings = adapter.read_settings(scope, project_path, strict=True)
    hooks = _hooks_section(settings, create=False)
    if not hooks:
        return False

    removed = False
    for event in adapter.supported_hooks():
        groups = hooks.get(event)
        if not isinstance(groups, list):
            continue
        kept = [g for g in groups if not _is_ours(g)]
        if len(kept) == len(groups):
            continue
        removed = True
        if kept:
            hooks[event] = kept
        else:
            del hooks[event]

    if removed:
        path = adapter.write_settings(settings, scope, project_path)
        logger.info("Removed %s hooks from %s", adapter.display_name, path)
    return removed


def hooks_installed(
    cli_type: CliType | str,
    scope: SettingsScope = SettingsScope.USER,
    project_path: str | None = None,
    adapter: CliAdapter | None = None,
) -> bool:
    """Check that every default hook carries the expected command+matcher entry."""
    adapter = adapter or get_adapter(cli_type)
    settings = adapter.read_settings(scope, project_path)
    hooks = settings.get("hooks")
    if not isinstance(hooks, dict):
        return False

    config = adapter.hook_config(hook_command(adapter.name))
    for event, entries in config.hooks.items():
        groups = hooks.get(event)
        if not isinstance(groups, list):
            return False
        if not all(_has_entry(groups, entry) for entry in entries):
            return False
    return True


def hooks_status(
    scope: SettingsScope = SettingsScope.USER,
    project_path: str | None = None,
    home: Path | None = None,
) -> list[HookStatus]:
    """Hook status for every supported CLI."""
    statuses = []
    for adapter in all_adapters(home):
        cli_installed = adapter.is_installed()
        statuses.append(
            HookStatus(
                cli_type=adapter.name,
                display_name=adapter.display_name,
                cli_installed=cli_installed,
                hooks_installed=cli_installed
                and hooks_installed(adapter.name, scope, project_path, adapter=adapter),
                settings_path=adapter.settings_path(scope, project_path),
            )
        )
    return statuses
