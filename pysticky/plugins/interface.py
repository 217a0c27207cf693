"""Common plugin interface."""

from typing import TYPE_CHECKING, Any, ClassVar

from ..config import Configuration
from ..logging_setup import get_logger
from ..validation import ConfigItems, ConfigValidator

if TYPE_CHECKING:
    from ..adapters.proxy import BackendProxy
    from ..manager import Pysticky


class Plugin:
    """Base class for any pysticky plugin.

    Commands are the `run_<name>` methods: the control socket dispatches
    `<name> [arguments]` to them, passing the arguments as a single string.
    """

    config_schema: ClassVar[ConfigItems | None] = None
    " Schema of the plugin's configuration section "

    backend: "BackendProxy"
    " Window manager access, logging under this plugin's logger "

    manager: "Pysticky"
    " The daemon owning this plugin "

    def __init__(self, name: str, section: str | None = None) -> None:
        """Create a new plugin `name` and the matching logger.

        Args:
            name: The plugin name
            section: Configuration section, defaults to `name`
        """
        self.name = name
        """ the plugin name """
        self.section = section or name
        """ the configuration section read by this plugin """
        self.log = get_logger(name)
        """ the logger to use for this plugin """
        self.config = Configuration(logger=self.log, schema=self.config_schema)
        """ this plugin configuration section """

    # Functions to override

    async def init(self) -> None:
        """Initialize the plugin.

        Called once the configuration is loaded.
        """

    async def exit(self) -> None:
        """Empty exit function."""

    # Generic implementations

    async def load_config(self, config: dict[str, Any]) -> None:
        """Load the configuration section from the passed `config`."""
        self.config.clear()
        self.config.update(config.get(self.section, {}))

    def validate_config(self) -> list[str]:
        """Validate the configuration section against `config_schema`.

        Returns:
            List of error messages (empty if valid)
        """
        if self.config_schema is None:
            return []
        validator = ConfigValidator(self.config, self.section, self.log)
        errors = validator.validate(self.config_schema)
        validator.warn_unknown_keys(self.config_schema)
        return errors
