"""Common types: window descriptors, errors and command results."""

from dataclasses import asdict, dataclass, field
from enum import IntEnum, StrEnum
from typing import Any

__all__ = [
    "CommandResult",
    "ExitCode",
    "GatewayOperationFailed",
    "GatewayUnavailable",
    "ItemResult",
    "Outcome",
    "PreconditionViolated",
    "PyStickyError",
    "ReactorState",
    "ResponsePrefix",
    "SelectorNotFound",
    "StickyError",
    "WindowInfo",
    "WorkspaceInfo",
]

WindowId = str
WorkspaceId = str


@dataclass(frozen=True)
class WindowInfo:
    """Read-only snapshot of a window as reported by the window manager."""

    id: WindowId
    app_id: str = ""
    title: str = ""
    workspace_id: WorkspaceId | None = None

    def describe(self) -> str:
        """Return a one-line human readable description."""
        return f"{self.id} [{self.app_id or '?'}] {self.title}".rstrip()


@dataclass(frozen=True)
class WorkspaceInfo:
    """Workspace as reported by the window manager."""

    id: WorkspaceId
    name: str = ""
    output: str = ""
    idx: int = 0
    is_active: bool = False
    is_focused: bool = False
    active_window_id: WindowId | None = None


class PyStickyError(BaseException):
    """Used for errors which already triggered logging."""


class StickyError(Exception):
    """Base class for errors surfaced to clients."""

    kind = "Error"


class SelectorNotFound(StickyError):
    """No window matches the given id, app-id or title."""

    kind = "SelectorNotFound"


class PreconditionViolated(StickyError):
    """The window is not in a state allowing the operation."""

    kind = "PreconditionViolated"


class GatewayUnavailable(StickyError):
    """The window manager connection is down."""

    kind = "GatewayUnavailable"


class GatewayOperationFailed(StickyError):
    """A specific window manager query or action failed."""

    kind = "GatewayOperationFailed"


class Outcome(StrEnum):
    """Overall status of a command."""

    OK = "ok"
    NOOP = "noop"  # already in the requested state
    PARTIAL = "partial"
    FAILED = "failed"


class ReactorState(StrEnum):
    """Event reactor states."""

    IDLE = "idle"
    RECONCILING = "reconciling"


@dataclass
class ItemResult:
    """Per-window outcome of a bulk operation."""

    window_id: WindowId
    ok: bool
    reason: str = ""


@dataclass
class CommandResult:
    """Structured result of a Command Engine operation."""

    status: Outcome
    message: str = ""
    items: list[ItemResult] = field(default_factory=list)
    windows: list[WindowInfo] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """True unless every requested change failed."""
        return self.status != Outcome.FAILED

    @classmethod
    def from_items(cls, verb: str, items: list[ItemResult]) -> "CommandResult":
        """Aggregate per-window results of a bulk operation.

        Args:
            verb: Past participle describing the action (e.g. "staged")
            items: The per-window results
        """
        done = sum(1 for item in items if item.ok)
        if not items:
            return cls(Outcome.NOOP, f"No window to be {verb}")
        if done == len(items):
            status = Outcome.OK
        elif done:
            status = Outcome.PARTIAL
        else:
            status = Outcome.FAILED
        return cls(status, f"{done}/{len(items)} window(s) {verb}", items=items)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON serializable representation."""
        return {
            "status": str(self.status),
            "message": self.message,
            "items": [{"id": i.window_id, "ok": i.ok, "reason": i.reason} for i in self.items],
            "windows": [asdict(w) for w in self.windows],
        }


# Exit codes for client
class ExitCode(IntEnum):
    """Standard exit codes for the pysticky client."""

    SUCCESS = 0
    USAGE_ERROR = 1  # No command provided, invalid arguments
    ENV_ERROR = 2  # Missing environment variables
    CONNECTION_ERROR = 3  # Cannot connect to daemon
    COMMAND_ERROR = 4  # Command execution failed


# Socket response protocol
class ResponsePrefix(StrEnum):
    """Response prefixes for daemon-client communication."""

    OK = "OK"
    ERROR = "ERROR"
