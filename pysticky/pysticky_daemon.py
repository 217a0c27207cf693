"""Daemon startup functions for pysticky."""

import asyncio
from pathlib import Path

from .constants import CONTROL
from .manager import Pysticky
from .models import StickyError

__all__ = ["run_daemon"]


async def run_daemon(config_filename: str = "") -> None:
    """Run the server / daemon.

    Args:
        config_filename: Optional configuration file or folder
    """
    manager = Pysticky()

    ipc_folder = Path(CONTROL).parent
    try:
        ipc_folder.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        manager.log.critical("Cannot create IPC folder %s: %s", ipc_folder, e)
        return

    await manager.initialize(config_filename)

    try:
        await manager.backend.get_active_workspace()
    except StickyError as e:
        manager.log.warning("niri is not reachable yet (%s), waiting for it", e)

    manager.server = await asyncio.start_unix_server(manager.read_command, CONTROL)

    manager.log.debug("[ initialized ]".center(80, "="))

    try:
        await manager.run()
    except asyncio.CancelledError:
        manager.log.critical("cancelled")
    else:
        manager.log.info("exiting")
