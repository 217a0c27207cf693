"""Pysticky manager - the core daemon class."""

import asyncio
import contextlib
import inspect
import os
import signal
import sys
from collections.abc import Callable
from typing import Any

from .adapters.backend import WindowManagerBackend
from .adapters.niri import NiriBackend
from .adapters.proxy import BackendProxy
from .ansi import HandlerStyles, colorize
from .config import Configuration
from .config_loader import ConfigLoader
from .constants import ERROR_NOTIFICATION_DURATION_MS, TASK_TIMEOUT
from .engine import CommandEngine, StageWorkspace
from .logging_setup import get_logger
from .models import PyStickyError, ResponsePrefix, StickyError
from .plugins import core, sticky
from .plugins.interface import Plugin
from .reactor import EventReactor
from .state import StateStore

__all__: list[str] = ["Pysticky"]


class Pysticky:  # pylint: disable=too-many-instance-attributes
    """Main app object."""

    server: asyncio.Server
    stopped = False
    config: dict[str, Any]
    engine: CommandEngine
    reactor: EventReactor
    stage: StageWorkspace
    log_handler: Callable[[Plugin, str, tuple], None]

    def __init__(self, backend: WindowManagerBackend | None = None) -> None:
        self.config = {}
        self.plugins: dict[str, Plugin] = {}
        self.log = get_logger()
        self.store = StateStore()
        self._shared_backend = backend or NiriBackend()
        self.backend = BackendProxy(self._shared_backend, self.log)
        self.log_handler = self.colored_log_handler
        self._running: set[asyncio.Task] = set()
        self._reactor_task: asyncio.Task | None = None
        signal.signal(signal.SIGTERM, lambda *_: sys.exit(0))

    @property
    def settings(self) -> Configuration:
        """The `[pysticky]` configuration section (schema aware)."""
        return self.plugins["pysticky"].config

    async def initialize(self, config_filename: str = "") -> None:
        """Load the configuration, then create the plugins and the core objects.

        Args:
            config_filename: Optional configuration file or folder
        """
        self.config = dict(await ConfigLoader(self.log).load(config_filename))
        self.plugins = {
            "pysticky": core.Extension("pysticky"),
            "sticky": sticky.Extension("sticky"),
        }
        for plugin in self.plugins.values():
            plugin.manager = self
            plugin.backend = BackendProxy(self._shared_backend, plugin.log)
            await plugin.load_config(self.config)
            validation_errors = plugin.validate_config()
            for error in validation_errors:
                self.log.error(error)
            if validation_errors:
                msg = f"{len(validation_errors)} config error(s), check the logs for details"
                await self.backend.notify_error(f"pysticky: {msg}", duration=ERROR_NOTIFICATION_DURATION_MS)
                raise PyStickyError(msg)

        settings = self.settings
        self.log_handler = self.colored_log_handler if settings.get_bool("colored_handlers_log") else self.plain_log_handler
        self._shared_backend.retry_delay = settings.get_float("event_retry_delay")

        engine_log = get_logger("engine")
        engine_backend = BackendProxy(self._shared_backend, engine_log)
        self.stage = StageWorkspace(engine_backend, settings.get_str("stage_workspace"))
        self.engine = CommandEngine(
            self.store,
            engine_backend,
            self.stage,
            engine_log,
            follow_on_add=settings.get_bool("follow_on_add"),
            focus_on_unstage=settings.get_bool("focus_on_unstage"),
        )
        reactor_log = get_logger("reactor")
        self.reactor = EventReactor(self.store, BackendProxy(self._shared_backend, reactor_log), self.stage, reactor_log)

        for plugin in self.plugins.values():
            await plugin.init()
            plugin.log.info("configured")

    def plain_log_handler(self, plugin: Plugin, name: str, params: tuple[str]) -> None:
        """Log a handler method without color.

        Args:
            plugin: The plugin instance
            name: The handler name
            params: Parameters passed to the handler
        """
        plugin.log.debug("%s%s", name, params)

    def colored_log_handler(self, plugin: Plugin, name: str, params: tuple[str]) -> None:
        """Log a handler method with color.

        Args:
            plugin: The plugin instance
            name: The handler name
            params: Parameters passed to the handler
        """
        style = HandlerStyles.COMMAND if name.startswith("run_") else HandlerStyles.EVENT
        plugin.log.debug(colorize(f"{name}{params}", *style))

    async def _notify_failure(self, message: str) -> None:
        if self.settings.get_bool("notify_errors"):
            await self.backend.notify_error(message, duration=ERROR_NOTIFICATION_DURATION_MS)

    async def _run_plugin_handler(self, plugin: Plugin, full_name: str, params: tuple[str, ...]) -> tuple[bool, str]:
        """Run a single handler on a plugin.

        Args:
            plugin: The plugin instance
            full_name: The full name of the handler
            params: Parameters to pass to the handler

        Returns:
            A tuple of (success, message).
            On success: message contains handler return value (if string) or empty.
            On failure: message contains error description.
        """
        self.log_handler(plugin, full_name, params)
        try:
            handler = getattr(plugin, full_name)
            if inspect.iscoroutinefunction(handler):
                result = await handler(*params)
            else:
                result = handler(*params)
        except StickyError as e:
            plugin.log.warning("%s(%s): %s", full_name, ", ".join(params), e)
            error_msg = f"{e.kind}: {e}"
            await self._notify_failure(f"pysticky {full_name[4:]}: {e}")
            if os.environ.get("PYSTICKY_STRICT_ERRORS"):
                raise
            return (False, error_msg)
        except ValueError as e:
            plugin.log.warning("%s: %s", full_name, e)
            return (False, f"Invalid arguments: {e}")
        except AssertionError as e:
            self.log.exception("Integrity check failed")
            error_msg = f"Integrity check failed on {plugin.name}::{full_name}: {e}"
            await self._notify_failure(f"pysticky {error_msg}")
            return (False, error_msg)
        except Exception as e:  # pylint: disable=W0718
            self.log.exception("%s::%s(%s) failed:", plugin.name, full_name, params)
            error_msg = f"{plugin.name}::{full_name}: {e}"
            await self._notify_failure(f"pysticky error {error_msg}")
            if os.environ.get("PYSTICKY_STRICT_ERRORS"):
                raise
            return (False, error_msg)

        return_data = result if isinstance(result, str) else ""
        return (True, return_data)

    async def _call_handler(self, full_name: str, *params: str, notify: str = "") -> tuple[bool, bool, str]:
        """Call a command handler with params.

        Args:
            full_name: The full name of the handler
            *params: Parameters to pass to the handler
            notify: Command name, reported when no handler exists

        Returns:
            A tuple of (handled, success, message).
            - handled: True if a handler was found
            - success: True if the handler succeeded (only meaningful when handled=True)
            - message: Error if failed, return data if succeeded
        """
        for plugin in self.plugins.values():
            if hasattr(plugin, full_name):
                success, msg = await self._run_plugin_handler(plugin, full_name, params)
                return (True, success, msg)
        return (False, False, f'Unknown command "{notify}". Try "help" for available commands.')

    async def _process_command(self, data: str) -> str:
        """Process a command and return the response.

        The handler runs in its own task: a client disconnecting doesn't
        interrupt window moves already started.

        Args:
            data: The command string

        Returns:
            Response string to send to client
        """
        args = data.split(None, 1)
        cmd = args[0].replace("-", "_")
        params = args[1:]

        task = asyncio.create_task(self._call_handler(f"run_{cmd}", *params, notify=cmd))
        self._running.add(task)
        task.add_done_callback(self._running.discard)
        handled, success, msg = await asyncio.shield(task)
        if not handled:
            self.log.warning("No such command: %s", cmd)
        if not success:
            return f"{ResponsePrefix.ERROR}: {msg}\n"
        if msg:
            return f"{ResponsePrefix.OK}\n{msg}"
        return f"{ResponsePrefix.OK}\n"

    async def read_command(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        """Receive a socket command.

        Args:
            reader: The stream reader
            writer: The stream writer
        """
        data = (await reader.readline()).decode(errors="replace").strip()

        if not data:
            self.log.warning("Empty command received")
            writer.write(f"{ResponsePrefix.ERROR}: No command provided\n".encode())
        else:
            writer.write((await self._process_command(data)).encode())

        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            await writer.drain()
        writer.close()
        if self.stopped:
            asyncio.create_task(self.shutdown())

    async def shutdown(self) -> None:
        """Stop the reactor and the server, letting running commands finish."""
        if self._running:
            await asyncio.wait(self._running, timeout=TASK_TIMEOUT)
        for plugin in self.plugins.values():
            await plugin.exit()
        if self._reactor_task:
            self._reactor_task.cancel()
        self.server.close()

    async def serve(self) -> None:
        """Run the server."""
        async with self.server:
            await self.server.wait_closed()

    async def run(self) -> None:
        """Run the server and the event reactor until `exit`."""
        async with asyncio.TaskGroup() as group:
            group.create_task(self.serve())
            self._reactor_task = group.create_task(self.reactor.run())
