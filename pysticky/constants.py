"""Shared constants for pysticky."""

import os
from pathlib import Path

from .ipc_paths import IPC_FOLDER

__all__ = [
    "CONFIG_FILE",
    "CONTROL",
    "DEFAULT_EVENT_RETRY_DELAY",
    "DEFAULT_NOTIFICATION_DURATION_MS",
    "DEFAULT_STAGE_WORKSPACE",
    "ERROR_NOTIFICATION_DURATION_MS",
    "EVENT_MAX_RETRY_DELAY",
    "IPC_MAX_RETRIES",
    "IPC_RETRY_DELAY_MULTIPLIER",
    "IPC_STREAM_LIMIT",
    "TASK_TIMEOUT",
]

CONTROL = f"{IPC_FOLDER}/.pysticky.sock"

_xdg_config_home = Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")
CONFIG_FILE = _xdg_config_home / "pysticky" / "config.toml"

# Used for shutdown only: the core never puts a timeout on window manager calls
TASK_TIMEOUT = 35.0

DEFAULT_STAGE_WORKSPACE = "stage"

# Notification durations (milliseconds)
DEFAULT_NOTIFICATION_DURATION_MS = 5000
ERROR_NOTIFICATION_DURATION_MS = 8000

# IPC retry settings
IPC_MAX_RETRIES = 3
IPC_RETRY_DELAY_MULTIPLIER = 0.5
# niri answers and events are single JSON lines, listing every window
IPC_STREAM_LIMIT = 16 * 1024 * 1024

# Event stream reconnection (seconds)
DEFAULT_EVENT_RETRY_DELAY = 1.0
EVENT_MAX_RETRY_DELAY = 30.0
