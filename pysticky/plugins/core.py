"""Built-in commands of the daemon."""

import json
from typing import Any

from ..config_loader import SECTION
from ..help import get_command_help, get_help
from ..schema import PYSTICKY_CONFIG_SCHEMA
from ..version import VERSION
from .interface import Plugin


class Extension(Plugin):
    """Internal built-in plugin implementing the daemon commands."""

    config_schema = PYSTICKY_CONFIG_SCHEMA

    def __init__(self, name: str) -> None:
        super().__init__(name, section=SECTION)

    def run_version(self) -> str:
        """Show the pysticky version."""
        return f"{VERSION}\n"

    def run_dumpjson(self) -> str:
        """Dump the configuration and the window sets in JSON format."""
        snap = self.manager.store.snapshot()
        data: dict[str, Any] = {
            "config": self.manager.config,
            "sticky": sorted(snap.sticky),
            "staged": sorted(snap.staged),
            "stats": self.manager.store.stats(),
            "reactor": {
                "state": str(self.manager.reactor.state),
                "target": self.manager.reactor.target,
                "reconciliations": self.manager.reactor.reconciliations,
            },
            "stage_workspace": self.manager.stage.resolved_id,
        }
        return json.dumps(data, indent=2)

    def run_help(self, command: str = "") -> str:
        """[command] Show available commands or detailed help.

        Usage:
          pysticky help           List all commands
          pysticky help <command> Show detailed help
        """
        return get_command_help(self.manager, command) if command else get_help(self.manager)

    def run_exit(self) -> None:
        """Terminate the pysticky daemon."""
        self.manager.stopped = True
