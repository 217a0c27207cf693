"""Configuration file loading.

Handles reading and merging TOML configuration files, including the
optional `include` directive pulling extra files or folders in.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiofiles
import aiofiles.os

from . import constants
from .models import PyStickyError
from .utils import merge

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader", "SECTION"]

SECTION = "pysticky"


class ConfigLoader:
    """Loads and merges configuration files.

    A missing default configuration file is not an error: every option has a
    default value. An explicitly requested file must exist.
    """

    def __init__(self, log: logging.Logger) -> None:
        self.log = log
        self._config: dict[str, Any] = {}

    @property
    def config(self) -> dict[str, Any]:
        """Return the loaded configuration."""
        return self._config

    async def load(self, config_filename: str = "") -> dict[str, Any]:
        """Load configuration from file or directory.

        Args:
            config_filename: Optional path to config file or directory.
                           If empty, uses the default CONFIG_FILE location.

        Raises:
            PyStickyError: If an explicit config file is missing or has syntax errors.
        """
        if config_filename:
            config = await self._open(Path(os.path.expandvars(config_filename)).expanduser(), required=True)
        else:
            config = await self._open(Path(constants.CONFIG_FILE), required=False)

        for extra in list(config.get(SECTION, {}).get("include", [])):
            merge(config, await self._open(Path(os.path.expandvars(extra)).expanduser(), required=True))

        self._config.clear()
        merge(self._config, config, replace=True)
        self._config.setdefault(SECTION, {})
        return self._config

    async def _open(self, fname: Path, required: bool) -> dict[str, Any]:
        """Load a file, or every `*.toml` file of a folder, into a dictionary."""
        if await aiofiles.os.path.isdir(fname):
            config: dict[str, Any] = {}
            for toml_file in sorted(await aiofiles.os.listdir(fname)):
                if toml_file.endswith(".toml"):
                    merge(config, await self._load_file(fname / toml_file))
            return config
        if await aiofiles.os.path.exists(fname):
            return await self._load_file(fname)
        if required:
            self.log.critical("Config file not found: %s", fname)
            raise PyStickyError
        self.log.info("No config file at %s, using defaults", fname)
        return {}

    async def _load_file(self, fname: Path) -> dict[str, Any]:
        """Parse a single TOML file."""
        self.log.info("Loading %s", fname)
        async with aiofiles.open(fname, encoding="utf-8") as f:
            content = await f.read()
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            self.log.critical("Problem reading %s: %s", fname, e)
            raise PyStickyError from e
