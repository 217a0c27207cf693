"""Desktop notifications."""

import asyncio
import shutil
from logging import Logger

from .constants import DEFAULT_NOTIFICATION_DURATION_MS

__all__ = ["notify_send"]

URGENCY_BY_COLOR = {
    "ff0000": "critical",
    "0000ff": "low",
}


async def notify_send(
    text: str,
    duration: int = DEFAULT_NOTIFICATION_DURATION_MS,
    color: str = "ff0000",
    log: Logger | None = None,
) -> None:
    """Send a desktop notification using `notify-send`.

    Niri has no notification facility over its IPC socket.

    Args:
        text: The message
        duration: Duration in milliseconds
        color: Hex color code, mapped to an urgency level
        log: Logger used when notify-send is missing
    """
    if not shutil.which("notify-send"):
        if log:
            log.info("notify-send not available: %s", text)
        return
    urgency = URGENCY_BY_COLOR.get(color.lower(), "normal")
    proc = await asyncio.create_subprocess_exec(
        "notify-send",
        "-t",
        str(duration),
        "-u",
        urgency,
        "pysticky",
        text,
        stdout=asyncio.subprocess.DEVNULL,
        stderr=asyncio.subprocess.DEVNULL,
    )
    await proc.wait()
