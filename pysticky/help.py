"""Help and documentation functions for pysticky commands."""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .manager import Pysticky

__all__ = ["get_command_help", "get_commands_help", "get_help"]

BUILTIN_SOURCE = "built-in"


def _iter_commands(manager: Pysticky) -> dict[str, tuple[str, str]]:
    """Return {command_name: (full_docstring, source)} for every `run_*` method."""
    commands: dict[str, tuple[str, str]] = {}
    for plugin in manager.plugins.values():
        source = BUILTIN_SOURCE if plugin.name == "pysticky" else plugin.name
        for attr in dir(plugin):
            if not attr.startswith("run_"):
                continue
            handler = getattr(plugin, attr)
            if callable(handler):
                commands.setdefault(attr[4:], (inspect.getdoc(handler) or "N/A", source))
    return commands


def get_commands_help(manager: Pysticky) -> dict[str, tuple[str, str]]:
    """Get the available commands and their short documentation.

    Args:
        manager: The Pysticky manager instance

    Returns:
        Dict mapping command name to (short_description, source) tuple
    """
    return {name: (doc.split("\n")[0], source) for name, (doc, source) in sorted(_iter_commands(manager).items())}


def get_help(manager: Pysticky) -> str:
    """Get the help documentation for all commands.

    Commands are grouped by plugin, with built-in commands listed first.

    Args:
        manager: The Pysticky manager instance
    """
    intro = """Syntax: pysticky [command]

If the command is omitted, runs the daemon.
Commands use the underscore or the dash form (toggle_appid, toggle-appid).

Available commands:
"""
    by_source: dict[str, list[tuple[str, str]]] = {}
    for name, (desc, source) in get_commands_help(manager).items():
        by_source.setdefault(source, []).append((name, desc))

    lines: list[str] = []
    for source in sorted(by_source, key=lambda s: (s != BUILTIN_SOURCE, s)):
        lines.append(f"\n{source}:")
        lines.extend(f"  {name:20s} {desc}" for name, desc in by_source[source])
    return intro + "\n".join(lines) + "\n"


def get_command_help(manager: Pysticky, command: str) -> str:
    """Get detailed help for a specific command.

    Args:
        manager: The Pysticky manager instance
        command: Command name to get help for

    Returns:
        Full docstring with source indicator, or error message if not found
    """
    command = command.strip().replace("-", "_")
    commands = _iter_commands(manager)
    if command not in commands:
        return f"Unknown command: {command}\nRun 'pysticky help' for available commands.\n"
    doc, source = commands[command]
    doc_formatted = doc if doc.endswith("\n") else f"{doc}\n"
    return f"{command} ({source})\n\n{doc_formatted}"
