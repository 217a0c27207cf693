"""Backend adapters for window manager abstraction.

This package provides the WindowManagerBackend abstraction layer through
which the daemon lists windows, moves them and listens to workspace
switches. Niri is the only implementation.
"""

from .proxy import BackendProxy

__all__ = ["BackendProxy"]
