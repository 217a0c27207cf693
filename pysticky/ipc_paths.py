"""IPC path management."""

import os
from pathlib import Path

__all__ = [
    "IPC_FOLDER",
    "NIRI_SOCKET",
]

NIRI_SOCKET = os.environ.get("NIRI_SOCKET")

if NIRI_SOCKET:
    # Niri environment - use parent directory of NIRI_SOCKET
    IPC_FOLDER = str(Path(NIRI_SOCKET).parent)
elif os.environ.get("XDG_RUNTIME_DIR"):
    IPC_FOLDER = os.environ["XDG_RUNTIME_DIR"]
else:
    # Standalone fallback - no session detected
    IPC_FOLDER = os.environ.get("XDG_DATA_HOME", str(Path("~/.local/share").expanduser()))
