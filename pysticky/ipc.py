"""Interact with niri using its IPC socket.

Every request is a single JSON document on one line, answered by a single
line holding either `{"Ok": ...}` or `{"Err": "..."}`.
"""

__all__ = [
    "get_event_stream",
    "niri_connection",
    "niri_request",
    "retry_on_reset",
]

import asyncio
import contextlib
import json
import os
from collections.abc import AsyncIterator, Callable
from logging import Logger
from typing import Any

from .constants import IPC_MAX_RETRIES, IPC_RETRY_DELAY_MULTIPLIER, IPC_STREAM_LIMIT
from .models import GatewayOperationFailed, GatewayUnavailable

EVENT_STREAM_REQUEST = "EventStream"


def get_socket_path() -> str:
    """Return the niri socket path from the environment."""
    path = os.environ.get("NIRI_SOCKET")
    if not path:
        msg = "NIRI_SOCKET is not set, is niri running ?"
        raise GatewayUnavailable(msg)
    return path


@contextlib.asynccontextmanager
async def niri_connection(logger: Logger) -> AsyncIterator[tuple[asyncio.StreamReader, asyncio.StreamWriter]]:
    """Context manager for a niri socket connection."""
    try:
        reader, writer = await asyncio.open_unix_connection(get_socket_path(), limit=IPC_STREAM_LIMIT)
    except (FileNotFoundError, ConnectionRefusedError) as e:
        logger.critical("niri socket not found! is it running ?")
        msg = f"Cannot connect to niri: {e}"
        raise GatewayUnavailable(msg) from e
    except OSError as e:
        logger.critical("Cannot open the niri socket: %s", e)
        msg = f"Cannot connect to niri: {e}"
        raise GatewayUnavailable(msg) from e
    try:
        yield reader, writer
    finally:
        writer.close()
        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            await writer.wait_closed()


def retry_on_reset(func: Callable) -> Callable:
    """Retry on reset wrapper."""

    async def wrapper(*args, logger: Logger, **kwargs) -> Any:  # noqa: ANN401
        exc = None
        for count in range(IPC_MAX_RETRIES):
            try:
                return await func(*args, **kwargs, logger=logger)
            except ConnectionResetError as e:  # noqa: PERF203
                exc = e
                logger.warning("ipc connection problem, retrying...")
                await asyncio.sleep(IPC_RETRY_DELAY_MULTIPLIER * count)
        logger.error("ipc connection failed.")
        msg = "niri connection reset"
        raise GatewayUnavailable(msg) from exc

    return wrapper


async def _exchange(payload: str | dict, logger: Logger) -> bytes:
    """Send `payload` and return the raw reply line.

    Raises:
        ConnectionResetError: The connection was reset, worth a retry
        GatewayUnavailable: Any other socket failure
    """
    try:
        async with niri_connection(logger) as (reader, writer):
            writer.write(json.dumps(payload).encode() + b"\n")
            await writer.drain()
            return await reader.readline()
    except ConnectionResetError:
        raise
    except (OSError, ValueError) as e:
        # ValueError: reply longer than the stream limit
        msg = f"niri connection failed: {e!r}"
        raise GatewayUnavailable(msg) from e


@retry_on_reset
async def niri_request(payload: str | dict, logger: Logger) -> Any:  # noqa: ANN401
    """Send a request and return the content of the `Ok` reply.

    Args:
        payload: The request, e.g. "Windows" or {"Action": {...}}
        logger: logger to use

    Raises:
        GatewayUnavailable: The socket can't be reached
        GatewayOperationFailed: niri answered with an error
    """
    logger.debug("niri << %s", payload)
    line = await _exchange(payload, logger)
    if not line:
        msg = "niri closed the connection without answering"
        raise GatewayUnavailable(msg)
    try:
        reply = json.loads(line.decode("utf-8", errors="replace"))
    except json.JSONDecodeError as e:
        msg = f"Invalid reply from niri: {line!r}"
        raise GatewayOperationFailed(msg) from e
    if isinstance(reply, dict) and "Ok" in reply:
        return reply["Ok"]
    error = reply.get("Err", reply) if isinstance(reply, dict) else reply
    msg = f"niri error: {error}"
    raise GatewayOperationFailed(msg)


async def get_event_stream(logger: Logger) -> tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    """Return a new event stream connection.

    The connection is switched to event mode, after which niri writes one
    JSON event per line until it exits.

    Raises:
        GatewayUnavailable: The socket can't be reached or niri refused the request
    """
    try:
        reader, writer = await asyncio.open_unix_connection(get_socket_path(), limit=IPC_STREAM_LIMIT)
    except OSError as e:
        msg = f"Cannot open the niri event stream: {e}"
        raise GatewayUnavailable(msg) from e
    try:
        writer.write(json.dumps(EVENT_STREAM_REQUEST).encode() + b"\n")
        await writer.drain()
        reply = await reader.readline()
    except (OSError, ValueError) as e:
        writer.close()
        msg = f"Cannot open the niri event stream: {e!r}"
        raise GatewayUnavailable(msg) from e
    try:
        accepted = "Ok" in json.loads(reply)
    except (json.JSONDecodeError, TypeError):
        accepted = False
    if not accepted:
        writer.close()
        msg = f"niri refused the event stream: {reply!r}"
        raise GatewayUnavailable(msg)
    logger.debug("event stream opened")
    return reader, writer
