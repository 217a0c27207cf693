"""pysticky - sticky and staged windows for niri (cli client & daemon)."""

import asyncio
import sys
from pathlib import Path

from .client import run_client
from .constants import CONTROL
from .logging_setup import get_logger, init_logger
from .models import ExitCode, PyStickyError
from .pysticky_daemon import run_daemon

__all__ = ["main"]


def use_param(txt: str, args: list[str]) -> str:
    """Check if parameter `txt` is in args.

    If found, removes it from args & returns the argument value.

    Args:
        txt: Parameter name to look for
        args: Argument list, modified in place

    Raises:
        ValueError: The parameter has no value
    """
    v = ""
    if txt in args:
        i = args.index(txt)
        if i + 1 >= len(args):
            msg = f"{txt} requires a value"
            raise ValueError(msg)
        v = args[i + 1]
        del args[i : i + 2]
    return v


def main() -> None:
    """Run the command."""
    args = sys.argv[1:]
    try:
        debug_flag = use_param("--debug", args)
        config_override = use_param("--config", args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(ExitCode.USAGE_ERROR)

    if debug_flag:
        init_logger(filename=debug_flag, force_debug=True)
    else:
        init_logger()
    log = get_logger("startup")

    invoke_daemon = not args
    if invoke_daemon and Path(CONTROL).exists():
        log.critical(
            """%s exists,
is pysticky already running ?
If that's not the case, delete this file and run again.""",
            CONTROL,
        )
        sys.exit(ExitCode.USAGE_ERROR)

    try:
        asyncio.run(run_daemon(config_override) if invoke_daemon else run_client(args))
    except KeyboardInterrupt:
        pass
    except PyStickyError:
        log.critical("Command failed.")
        sys.exit(ExitCode.COMMAND_ERROR)
    except Exception:  # pylint: disable=W0718
        log.critical("Unhandled exception:", exc_info=True)
        sys.exit(ExitCode.COMMAND_ERROR)
    finally:
        if invoke_daemon and Path(CONTROL).exists():
            Path(CONTROL).unlink()


if __name__ == "__main__":
    main()
