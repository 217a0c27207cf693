"""Configuration schema of the `[pysticky]` section."""

from .constants import DEFAULT_EVENT_RETRY_DELAY, DEFAULT_STAGE_WORKSPACE
from .validation import ConfigField, ConfigItems

__all__ = ["PYSTICKY_CONFIG_SCHEMA"]


def _validate_workspace_name(value: str) -> list[str]:
    if not value.strip():
        return ["Workspace name can't be empty"]
    return []


def _validate_positive(value: float) -> list[str]:
    if value <= 0:
        return ["Must be greater than 0"]
    return []


PYSTICKY_CONFIG_SCHEMA = ConfigItems(
    ConfigField("include", list, description="Additional config files or folders to include"),
    ConfigField(
        "stage_workspace",
        str,
        default=DEFAULT_STAGE_WORKSPACE,
        description="Name of the workspace used to park staged windows (created if missing)",
        validator=_validate_workspace_name,
    ),
    ConfigField(
        "follow_on_add",
        bool,
        default=True,
        description="Move a window to the active workspace when it becomes sticky",
    ),
    ConfigField(
        "focus_on_unstage",
        bool,
        default=False,
        description="Focus windows brought back from the stage workspace",
    ),
    ConfigField(
        "notify_errors",
        bool,
        default=False,
        description="Send a desktop notification when a command fails",
    ),
    ConfigField(
        "event_retry_delay",
        (int, float),
        default=DEFAULT_EVENT_RETRY_DELAY,
        description="Initial delay (seconds) before reconnecting to the event stream",
        validator=_validate_positive,
    ),
    ConfigField(
        "colored_handlers_log",
        bool,
        default=True,
        description="Enable colored log output for command handlers (debugging)",
    ),
)
