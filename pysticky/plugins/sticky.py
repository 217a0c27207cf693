"""Sticky and stage commands.

When several windows match an `--appid` or `--title` selector, the first
one listed by niri is used.
"""

from typing import TYPE_CHECKING

from ..models import CommandResult, GatewayOperationFailed
from ..selectors import Selector
from .interface import Plugin

if TYPE_CHECKING:
    from ..engine import CommandEngine

SELECTOR_USAGE = "<id> | --active | --appid <app_id> | --title <text>"


def parse_selector(args: str, usage: str = SELECTOR_USAGE) -> Selector:
    """Parse `<id> | --active | --appid <app_id> | --title <text>`.

    Args:
        args: The command arguments
        usage: Usage text for error messages

    Raises:
        ValueError: Invalid arguments
    """
    flag, _, value = args.strip().partition(" ")
    value = value.strip()
    if not flag:
        msg = f"Missing argument, expected {usage}"
        raise ValueError(msg)
    if flag == "--active":
        if value:
            msg = f"--active takes no argument, expected {usage}"
            raise ValueError(msg)
        return Selector.active()
    if flag in ("--appid", "--title"):
        if not value:
            msg = f"{flag} requires a value"
            raise ValueError(msg)
        return Selector.by_app_id(value) if flag == "--appid" else Selector.by_title(value)
    if flag.startswith("-"):
        msg = f"Unknown option {flag}, expected {usage}"
        raise ValueError(msg)
    if value:
        msg = f"Unexpected argument {value!r}, expected {usage}"
        raise ValueError(msg)
    return Selector.by_id(flag)


def render(result: CommandResult) -> str:
    """Format a command result for the client.

    Raises:
        GatewayOperationFailed: Every requested change failed
    """
    lines = [result.message] if result.message else []
    if result.items:
        by_id = {w.id: w for w in result.windows}
        for item in result.items:
            name = by_id[item.window_id].describe() if item.window_id in by_id else item.window_id
            lines.append(f"  {name}: ok" if item.ok else f"  {name}: FAILED ({item.reason})")
    if not result.success:
        raise GatewayOperationFailed("\n".join(lines))
    return "\n".join(lines) + "\n"


def render_list(result: CommandResult) -> str:
    """Format a window listing for the client."""
    return "".join(f"{window.describe()}\n" for window in result.windows)


class Extension(Plugin):
    """Sticky windows follow the active workspace, staged ones wait on the stage workspace."""

    @property
    def engine(self) -> "CommandEngine":
        """The command engine shared with the daemon."""
        return self.manager.engine

    async def run_add(self, args: str = "") -> str:
        """<id|--active|--appid X|--title X> Make a window sticky.

        With --appid (exact match) or --title (substring), the first
        matching window is used.
        """
        return render(await self.engine.sticky_add(parse_selector(args)))

    async def run_remove(self, args: str = "") -> str:
        """<id|--active|--appid X|--title X> Make a window non-sticky.

        A staged window is brought back to the active workspace first.
        """
        return render(await self.engine.sticky_remove(parse_selector(args)))

    async def run_toggle(self, args: str = "") -> str:
        """<id|--active|--appid X|--title X> Toggle the sticky state of a window."""
        return render(await self.engine.sticky_toggle(parse_selector(args)))

    async def run_list(self) -> str:
        """List the sticky windows."""
        return render_list(await self.engine.sticky_list())

    async def run_toggle_active(self) -> str:
        """Toggle the sticky state of the focused window."""
        return render(await self.engine.toggle_active_sticky())

    async def run_toggle_appid(self, app_id: str = "") -> str:
        """<app_id> Toggle the sticky state of the first window with this app-id."""
        return render(await self.engine.sticky_toggle(parse_selector(f"--appid {app_id}")))

    async def run_toggle_title(self, text: str = "") -> str:
        """<text> Toggle the sticky state of the first window whose title contains text."""
        return render(await self.engine.sticky_toggle(parse_selector(f"--title {text}")))

    async def run_stage(self, args: str = "") -> str:
        """<id|--all|--list|--active|--appid X|--title X|--toggle-active|--toggle-appid X|--toggle-title X> Stage sticky windows.

        Staged windows are moved to the stage workspace and stop following
        workspace switches. Only sticky windows can be staged.
        The --toggle-* variants un-stage windows which are already staged.
        """
        flag, _, value = args.strip().partition(" ")
        match flag:
            case "--all":
                return render(await self.engine.stage_add_all())
            case "--list":
                return render_list(await self.engine.stage_list())
            case "--toggle-active":
                return render(await self.engine.toggle_active_stage())
            case "--toggle-appid" | "--toggle-title":
                selector = parse_selector(f"--{flag.removeprefix('--toggle-')} {value}")
                return render(await self.engine.stage_toggle(selector))
        return render(await self.engine.stage_add(parse_selector(args)))

    async def run_unstage(self, args: str = "") -> str:
        """<id|--all|--active|--appid X|--title X|--toggle-appid X|--toggle-title X> Bring staged windows back.

        Windows are moved to the active workspace and follow workspace
        switches again.
        The --toggle-* variants toggle the sticky state instead, like
        toggle_appid and toggle_title.
        """
        flag, _, value = args.strip().partition(" ")
        match flag:
            case "--all":
                return render(await self.engine.stage_remove_all())
            case "--toggle-appid" | "--toggle-title":
                selector = parse_selector(f"--{flag.removeprefix('--toggle-')} {value}")
                return render(await self.engine.sticky_toggle(selector))
        return render(await self.engine.stage_remove(parse_selector(args)))
