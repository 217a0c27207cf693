"""Client-side functions for the pysticky CLI."""

import asyncio
import sys

from . import constants as pysticky_constants
from .common import notify_send
from .logging_setup import get_logger
from .models import ExitCode, ResponsePrefix

__all__ = ["run_client"]


async def run_client(args: list[str]) -> None:
    """Send one command to the daemon, print the reply and exit.

    Args:
        args: The command and its arguments
    """
    log = get_logger("client")

    if args[0] in {"--help", "-h"}:
        args[0] = "help"

    try:
        reader, writer = await asyncio.open_unix_connection(pysticky_constants.CONTROL)
    except (ConnectionRefusedError, FileNotFoundError):
        log.critical(
            "Cannot connect to pysticky daemon at %s.\nIs the daemon running? Start it with: pysticky (no arguments)",
            pysticky_constants.CONTROL,
        )
        await notify_send("pysticky can't connect. Is the daemon running?", log=log)
        sys.exit(ExitCode.CONNECTION_ERROR)

    args = [args[0].replace("-", "_"), *args[1:]]
    writer.write((" ".join(args) + "\n").encode())
    writer.write_eof()
    await writer.drain()
    return_value = (await reader.read()).decode("utf-8")
    writer.close()
    await writer.wait_closed()

    if return_value.startswith(f"{ResponsePrefix.ERROR}:"):
        error_msg = return_value[len(ResponsePrefix.ERROR) + 2 :].strip()
        print(f"Error: {error_msg}", file=sys.stderr)
        sys.exit(ExitCode.COMMAND_ERROR)
    elif return_value.startswith(f"{ResponsePrefix.OK}"):
        remaining = return_value[len(ResponsePrefix.OK) :].strip()
        if remaining:
            print(remaining)
        sys.exit(ExitCode.SUCCESS)
    else:
        print(f"Error: unexpected reply: {return_value!r}", file=sys.stderr)
        sys.exit(ExitCode.COMMAND_ERROR)
