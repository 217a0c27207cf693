"""ANSI terminal colors.

Colors are disabled when NO_COLOR is set or when the output isn't a
terminal, unless FORCE_COLOR is set.
"""

import os
import sys
from typing import TextIO

__all__ = [
    "BLUE",
    "BOLD",
    "DIM",
    "RED",
    "RESET",
    "YELLOW",
    "HandlerStyles",
    "colorize",
    "make_style",
    "should_colorize",
]

_ESC = "\x1b["
RESET = f"{_ESC}0m"

BOLD = "1"
DIM = "2"
RED = "31"
YELLOW = "33"
BLUE = "34"


def should_colorize(stream: TextIO | None = None) -> bool:
    """Return True if `stream` (stderr by default) should get colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("FORCE_COLOR"):
        return True
    stream = sys.stderr if stream is None else stream
    return hasattr(stream, "isatty") and stream.isatty()


def make_style(*codes: str) -> tuple[str, str]:
    """Return the (prefix, suffix) pair applying `codes`."""
    return (f"{_ESC}{';'.join(codes)}m" if codes else "", RESET)


def colorize(text: str, *codes: str) -> str:
    """Wrap `text` in the ANSI `codes`, e.g. `colorize("x", RED, BOLD)`."""
    if not codes:
        return text
    prefix, suffix = make_style(*codes)
    return f"{prefix}{text}{suffix}"


class HandlerStyles:
    """Styles of the command handler traces."""

    COMMAND = (YELLOW, BOLD)  # run_* methods
    EVENT = (BLUE, BOLD)
