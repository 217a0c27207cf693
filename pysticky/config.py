"""Typed access to a configuration section.

Values missing from the TOML file fall back to the schema defaults, so
`settings.get_bool("follow_on_add")` is always meaningful.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import logging

    from .validation import ConfigItems

__all__ = ["BOOL_STRINGS", "Configuration", "coerce_to_bool"]

ConfigValueType = float | bool | str | list | dict

_TRUE_WORDS = frozenset({"true", "yes", "on", "1", "enabled"})
_FALSE_WORDS = frozenset({"false", "no", "off", "0", "disabled"})
BOOL_STRINGS = _TRUE_WORDS | _FALSE_WORDS


def coerce_to_bool(value: ConfigValueType | None, default: bool = False) -> bool:
    """Read a loosely typed boolean.

    `None` gives `default`, blank strings and the usual negative words
    ("no", "off", "disabled"...) give False, anything else is truthy.
    """
    if value is None:
        return default
    if isinstance(value, str):
        word = value.strip().lower()
        return bool(word) and word not in _FALSE_WORDS
    return bool(value)


class Configuration(dict):
    """A configuration section, optionally backed by a schema."""

    def __init__(
        self,
        *args: Any,  # noqa: ANN401
        logger: logging.Logger,
        schema: ConfigItems | None = None,
        **kwargs: Any,  # noqa: ANN401
    ) -> None:
        super().__init__(*args, **kwargs)
        self.log = logger
        self.defaults: dict[str, ConfigValueType] = {f.name: f.default for f in schema or () if f.default is not None}

    def get(self, name: str, default: ConfigValueType | None = None) -> ConfigValueType | None:  # type: ignore[override]
        """Return the configured value, else the schema default, else `default`."""
        if name in self:
            return dict.get(self, name)  # type: ignore[return-value]
        return self.defaults.get(name, default)

    def get_bool(self, name: str, default: bool = False) -> bool:
        """Return `name` as a boolean."""
        return coerce_to_bool(self.get(name), default)

    def get_float(self, name: str, default: float = 0.0) -> float:
        """Return `name` as a float, logging unusable values."""
        value = self.get(name)
        if value is None:
            return default
        try:
            return float(value)  # type: ignore[arg-type]
        except (ValueError, TypeError):
            self.log.warning("%s should be a number, got %r: using %s", name, value, default)
            return default

    def get_str(self, name: str, default: str = "") -> str:
        """Return `name` as a string."""
        value = self.get(name)
        return default if value is None else str(value)
