"""Backend adapter interface."""

import asyncio
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from logging import Logger
from typing import Any

from ..common import notify_send
from ..constants import DEFAULT_EVENT_RETRY_DELAY, DEFAULT_NOTIFICATION_DURATION_MS, EVENT_MAX_RETRY_DELAY
from ..models import GatewayUnavailable, WindowInfo, WorkspaceInfo


class WindowManagerBackend(ABC):
    """Abstract base class for window manager backends.

    All methods that perform logging require a `log` parameter to be passed.
    This allows the calling code (via BackendProxy) to inject the appropriate
    logger for traceability.

    Query and action methods raise `GatewayUnavailable` when the window
    manager can't be reached and `GatewayOperationFailed` when it refuses a
    request.
    """

    def __init__(self, retry_delay: float = DEFAULT_EVENT_RETRY_DELAY) -> None:
        """Initialize the backend.

        Args:
            retry_delay: Initial delay before reconnecting a lost event stream
        """
        self.retry_delay = retry_delay

    @abstractmethod
    async def list_windows(self, *, log: Logger) -> list[WindowInfo]:
        """Return every window, in the window manager's enumeration order.

        Args:
            log: Logger to use for this operation
        """

    @abstractmethod
    async def get_active_window(self, *, log: Logger) -> WindowInfo | None:
        """Return the focused window, None if no window is focused.

        Args:
            log: Logger to use for this operation
        """

    @abstractmethod
    async def get_workspaces(self, *, log: Logger) -> list[WorkspaceInfo]:
        """Return every workspace.

        Args:
            log: Logger to use for this operation
        """

    async def get_active_workspace(self, *, log: Logger) -> str:
        """Return the id of the focused workspace.

        Args:
            log: Logger to use for this operation
        """
        workspaces = await self.get_workspaces(log=log)
        for workspace in workspaces:
            if workspace.is_focused:
                return workspace.id
        for workspace in workspaces:
            if workspace.is_active:
                return workspace.id
        msg = "Active workspace not found"
        raise GatewayUnavailable(msg)

    @abstractmethod
    async def find_or_create_workspace(self, name: str, *, log: Logger) -> str:
        """Return the id of the workspace called `name`, creating it if needed.

        Args:
            name: The workspace name
            log: Logger to use for this operation
        """

    @abstractmethod
    async def move_window_to_workspace(self, window_id: str, workspace_id: str, *, log: Logger) -> None:
        """Move a window to a workspace without following it.

        Must succeed when the window already is on the target workspace.

        Args:
            window_id: The window id
            workspace_id: Target workspace id
            log: Logger to use for this operation
        """

    @abstractmethod
    async def focus_window(self, window_id: str, *, log: Logger) -> None:
        """Focus a window.

        Args:
            window_id: The window id
            log: Logger to use for this operation
        """

    @abstractmethod
    async def open_event_stream(self, *, log: Logger) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
        """Open a new connection delivering window manager events.

        Args:
            log: Logger to use for this operation
        """

    @abstractmethod
    def parse_event(self, raw_data: str, *, log: Logger) -> tuple[str, Any] | None:
        """Parse a raw event string into (event_name, event_data).

        Args:
            raw_data: Raw event string from the compositor
            log: Logger to use for this operation
        """

    @abstractmethod
    def switched_workspace(self, event: tuple[str, Any]) -> str | None:
        """Return the newly active workspace id if `event` is a workspace switch.

        Args:
            event: A parsed event, as returned by `parse_event`
        """

    async def workspace_switch_events(self, *, log: Logger) -> AsyncIterator[str]:
        """Yield the id of every newly active workspace, forever.

        The event connection is re-opened whenever it is lost: right away if
        it delivered events, else after a delay doubling on every failed
        attempt. Switches happening while disconnected are missed.

        Args:
            log: Logger to use for this operation
        """
        delay = self.retry_delay
        while True:
            try:
                reader, writer = await self.open_event_stream(log=log)
            except (GatewayUnavailable, OSError) as e:
                log.warning("Event stream unavailable (%s), retrying in %.1fs", e, delay)
                await asyncio.sleep(delay)
                delay = min(delay * 2, EVENT_MAX_RETRY_DELAY)
                continue
            received = False
            try:
                while True:
                    try:
                        line = await reader.readline()
                    except (OSError, ValueError):
                        log.exception("Event stream read failed")
                        break
                    if not line:
                        log.warning("Event stream closed")
                        break
                    received = True
                    delay = self.retry_delay
                    parsed = self.parse_event(line.decode(errors="replace"), log=log)
                    if parsed is None:
                        continue
                    workspace_id = self.switched_workspace(parsed)
                    if workspace_id is not None:
                        yield workspace_id
            finally:
                writer.close()
            if not received:
                # the stream broke before delivering anything
                log.warning("Reconnecting the event stream in %.1fs", delay)
                await asyncio.sleep(delay)
                delay = min(delay * 2, EVENT_MAX_RETRY_DELAY)

    async def notify(
        self,
        message: str,
        duration: int = DEFAULT_NOTIFICATION_DURATION_MS,
        color: str = "ff0000",
        *,
        log: Logger,
    ) -> None:
        """Send a notification.

        Args:
            message: The notification message
            duration: Duration in milliseconds
            color: Hex color code
            log: Logger to use for this operation
        """
        await notify_send(message, duration, color, log=log)

    async def notify_error(self, message: str, duration: int = DEFAULT_NOTIFICATION_DURATION_MS, *, log: Logger) -> None:
        """Send an error notification (default: red color)."""
        await self.notify(message, duration, "ff0000", log=log)
