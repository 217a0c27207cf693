"""Niri adapter."""

import json
from logging import Logger
from typing import Any

from ..ipc import get_event_stream, niri_request
from ..models import GatewayOperationFailed, WindowInfo, WorkspaceInfo
from .backend import WindowManagerBackend

WORKSPACE_SWITCH_EVENT = "niri_workspaceactivated"


def _unwrap(reply: Any, key: str) -> Any:  # noqa: ANN401
    """Return `reply[key]` for `{"Windows": [...]}` style replies."""
    if isinstance(reply, dict) and key in reply:
        return reply[key]
    return reply


def _optional_id(value: Any) -> str | None:  # noqa: ANN401
    return None if value is None else str(value)


def niri_window_to_window_info(data: dict[str, Any]) -> WindowInfo:
    """Convert a niri window object to WindowInfo.

    Args:
        data: Niri window data dictionary
    """
    return WindowInfo(
        id=str(data["id"]),
        app_id=data.get("app_id") or "",
        title=data.get("title") or "",
        workspace_id=_optional_id(data.get("workspace_id")),
    )


def niri_workspace_to_workspace_info(data: dict[str, Any]) -> WorkspaceInfo:
    """Convert a niri workspace object to WorkspaceInfo.

    Args:
        data: Niri workspace data dictionary
    """
    return WorkspaceInfo(
        id=str(data["id"]),
        name=data.get("name") or "",
        output=data.get("output") or "",
        idx=data.get("idx", 0),
        is_active=data.get("is_active", False),
        is_focused=data.get("is_focused", False),
        active_window_id=_optional_id(data.get("active_window_id")),
    )


def workspace_reference(workspace_id: str) -> dict[str, Any]:
    """Return the niri reference to a workspace: by id when numeric, else by name."""
    if workspace_id.isdigit():
        return {"Id": int(workspace_id)}
    return {"Name": workspace_id}


def _window_number(window_id: str) -> int:
    try:
        return int(window_id)
    except ValueError as e:
        msg = f"Invalid niri window id: {window_id!r}"
        raise GatewayOperationFailed(msg) from e


class NiriBackend(WindowManagerBackend):
    """Niri backend implementation."""

    async def action(self, name: str, arguments: dict[str, Any], *, log: Logger) -> None:
        """Run a niri action.

        Args:
            name: Action name, e.g. "FocusWindow"
            arguments: Action arguments
            log: Logger to use for this operation
        """
        await niri_request({"Action": {name: arguments}}, logger=log)

    async def list_windows(self, *, log: Logger) -> list[WindowInfo]:
        """Return every window, in niri's enumeration order.

        Args:
            log: Logger to use for this operation
        """
        windows = _unwrap(await niri_request("Windows", logger=log), "Windows")
        return [niri_window_to_window_info(w) for w in windows or []]

    async def get_active_window(self, *, log: Logger) -> WindowInfo | None:
        """Return the focused window.

        Args:
            log: Logger to use for this operation
        """
        window = _unwrap(await niri_request("FocusedWindow", logger=log), "FocusedWindow")
        if not window:
            return None
        return niri_window_to_window_info(window)

    async def get_workspaces(self, *, log: Logger) -> list[WorkspaceInfo]:
        """Return every workspace.

        Args:
            log: Logger to use for this operation
        """
        workspaces = _unwrap(await niri_request("Workspaces", logger=log), "Workspaces")
        return [niri_workspace_to_workspace_info(w) for w in workspaces or []]

    async def find_or_create_workspace(self, name: str, *, log: Logger) -> str:
        """Return the id of the workspace called `name`.

        Niri only creates workspaces on demand: the trailing empty workspace
        of the focused output gets the name, which makes it persistent.

        Args:
            name: The workspace name
            log: Logger to use for this operation
        """
        workspaces = await self.get_workspaces(log=log)
        for workspace in workspaces:
            if workspace.name == name:
                return workspace.id

        focused = next((w for w in workspaces if w.is_focused), None)
        output = focused.output if focused else ""
        candidates = [
            w
            for w in workspaces
            if w.output == output and not w.name and w.active_window_id is None and not w.is_focused
        ]
        if not candidates:
            msg = f"No empty workspace available to create {name!r}"
            raise GatewayOperationFailed(msg)
        target = max(candidates, key=lambda w: w.idx)
        log.info("Creating workspace %s (id %s)", name, target.id)
        await self.action("SetWorkspaceName", {"name": name, "workspace": workspace_reference(target.id)}, log=log)
        return target.id

    async def move_window_to_workspace(self, window_id: str, workspace_id: str, *, log: Logger) -> None:
        """Move a window to a workspace, keeping the focus where it is.

        Args:
            window_id: The window id
            workspace_id: Target workspace id
            log: Logger to use for this operation
        """
        await self.action(
            "MoveWindowToWorkspace",
            {
                "window_id": _window_number(window_id),
                "focus": False,
                "reference": workspace_reference(workspace_id),
            },
            log=log,
        )

    async def focus_window(self, window_id: str, *, log: Logger) -> None:
        """Focus a window.

        Args:
            window_id: The window id
            log: Logger to use for this operation
        """
        await self.action("FocusWindow", {"id": _window_number(window_id)}, log=log)

    async def open_event_stream(self, *, log: Logger) -> tuple[Any, Any]:
        """Open the niri event stream.

        Args:
            log: Logger to use for this operation
        """
        return await get_event_stream(logger=log)

    def parse_event(self, raw_data: str, *, log: Logger) -> tuple[str, Any] | None:
        """Parse a raw event string into (event_name, event_data).

        Niri writes events as `{"EventName": {...}}`.

        Args:
            raw_data: Raw event string from the compositor
            log: Logger to use for this operation
        """
        if not raw_data.strip().startswith("{"):
            return None
        try:
            event = json.loads(raw_data)
        except json.JSONDecodeError:
            log.exception("Invalid JSON event: %s", raw_data)
            return None

        if len(event) != 1:
            return None
        type_name, data = next(iter(event.items()))
        return f"niri_{type_name.lower()}", data

    def switched_workspace(self, event: tuple[str, Any]) -> str | None:
        """Return the focused workspace id of a `WorkspaceActivated` event.

        Activations on unfocused outputs don't change what the user sees.

        Args:
            event: A parsed event, as returned by `parse_event`
        """
        name, data = event
        if name != WORKSPACE_SWITCH_EVENT or not isinstance(data, dict):
            return None
        if not data.get("focused", False):
            return None
        return _optional_id(data.get("id"))
