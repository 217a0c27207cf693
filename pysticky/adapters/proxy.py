"""Backend proxy that injects a logger into all calls.

This module provides a BackendProxy class that wraps a WindowManagerBackend
and automatically passes the caller's logger to all backend method calls.
This allows backend operations to be logged under the engine, reactor or
plugin logger for better traceability.
"""

from collections.abc import AsyncIterator
from logging import Logger
from typing import TYPE_CHECKING

from ..constants import DEFAULT_NOTIFICATION_DURATION_MS
from ..models import WindowInfo, WorkspaceInfo

if TYPE_CHECKING:
    from .backend import WindowManagerBackend


class BackendProxy:
    """Proxy that injects a logger into all backend calls.

    Each consumer gets its own BackendProxy instance with its own logger,
    while sharing the underlying backend.

    Attributes:
        log: The logger to use for all backend operations
    """

    def __init__(self, backend: "WindowManagerBackend", log: Logger) -> None:
        """Initialize the proxy.

        Args:
            backend: The underlying backend to delegate calls to
            log: The logger to inject into all backend calls
        """
        self._backend = backend
        self.log = log

    # === Query methods ===

    async def list_windows(self) -> list[WindowInfo]:
        """Return every window, in the window manager's enumeration order."""
        return await self._backend.list_windows(log=self.log)

    async def get_active_window(self) -> WindowInfo | None:
        """Return the focused window, None if no window is focused."""
        return await self._backend.get_active_window(log=self.log)

    async def get_workspaces(self) -> list[WorkspaceInfo]:
        """Return every workspace."""
        return await self._backend.get_workspaces(log=self.log)

    async def get_active_workspace(self) -> str:
        """Return the id of the focused workspace."""
        return await self._backend.get_active_workspace(log=self.log)

    # === Action methods ===

    async def find_or_create_workspace(self, name: str) -> str:
        """Return the id of the workspace called `name`, creating it if needed.

        Args:
            name: The workspace name
        """
        return await self._backend.find_or_create_workspace(name, log=self.log)

    async def move_window_to_workspace(self, window_id: str, workspace_id: str) -> None:
        """Move a window to a workspace.

        Args:
            window_id: The window id
            workspace_id: Target workspace id
        """
        await self._backend.move_window_to_workspace(window_id, workspace_id, log=self.log)

    async def focus_window(self, window_id: str) -> None:
        """Focus a window.

        Args:
            window_id: The window id
        """
        await self._backend.focus_window(window_id, log=self.log)

    # === Events ===

    def workspace_switch_events(self) -> AsyncIterator[str]:
        """Return the endless sequence of newly active workspace ids."""
        return self._backend.workspace_switch_events(log=self.log)

    # === Notification methods ===

    async def notify_error(self, message: str, duration: int = DEFAULT_NOTIFICATION_DURATION_MS) -> None:
        """Send an error notification.

        Args:
            message: The notification message
            duration: Duration in milliseconds
        """
        await self._backend.notify_error(message, duration, log=self.log)
