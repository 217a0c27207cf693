"""Configuration schema and validation.

A schema is a `ConfigItems` list of `ConfigField`. The validator reports
type mismatches, missing required keys, invalid choices and custom
validator errors, and suggests the closest known key for typos.
"""

import difflib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from .config import BOOL_STRINGS

__all__ = [
    "ConfigField",
    "ConfigItems",
    "ConfigValidator",
    "format_config_error",
]


@dataclass
class ConfigField:
    """One expected configuration key.

    Attributes:
        name: The key
        field_type: Expected type, or a tuple of accepted types
        required: The key must be set
        default: Value used when the key is missing
        description: Shown in error messages and documentation
        choices: Accepted values, if restricted
        validator: Returns error messages for an invalid value
    """

    name: str
    field_type: type | tuple[type, ...] = str
    required: bool = False
    default: Any = None
    description: str = ""
    choices: list | None = None
    validator: Callable[[Any], list[str]] | None = None

    @property
    def type_name(self) -> str:
        """Readable expected type, e.g. 'int or float'."""
        types = self.field_type if isinstance(self.field_type, tuple) else (self.field_type,)
        return " or ".join(t.__name__ for t in types)

    def accepts(self, value: Any) -> bool:  # noqa: ANN401
        """Return True if `value` has one of the expected types.

        Booleans may be written as words ("yes", "off"...), numbers may be
        int or float but not bool.
        """
        types = self.field_type if isinstance(self.field_type, tuple) else (self.field_type,)
        for typ in types:
            if typ is bool and (isinstance(value, bool) or (isinstance(value, str) and value.lower() in BOOL_STRINGS)):
                return True
            if typ in (int, float) and isinstance(value, (int, float)) and not isinstance(value, bool):
                return True
            if typ not in (bool, int, float) and isinstance(value, typ):
                return True
        return False


class ConfigItems(list):
    """The schema of a configuration section."""

    def __init__(self, *fields: ConfigField) -> None:
        super().__init__(fields)

    @property
    def names(self) -> list[str]:
        """Every known key."""
        return [f.name for f in self]


def _find_similar_key(unknown_key: str, known_keys: list[str]) -> str | None:
    matches = difflib.get_close_matches(unknown_key, known_keys, n=1)
    return matches[0] if matches else None


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Format a configuration error message.

    Args:
        section: Configuration section name
        field: The faulty key
        message: What is wrong
        suggestion: How to fix it
    """
    msg = f"[{section}] Config error for '{field}': {message}"
    return f"{msg} -> {suggestion}" if suggestion else msg


class ConfigValidator:
    """Checks a configuration section against its schema."""

    def __init__(self, config: dict, section: str, logger: logging.Logger) -> None:
        self.config = config
        self.section = section
        self.log = logger

    def _check_field(self, field_def: ConfigField, value: Any) -> list[str]:  # noqa: ANN401
        if not field_def.accepts(value):
            return [format_config_error(self.section, field_def.name, f"Expected {field_def.type_name}, got {type(value).__name__}")]
        errors = []
        if field_def.choices is not None and value not in field_def.choices:
            choices = ", ".join(repr(c) for c in field_def.choices)
            errors.append(format_config_error(self.section, field_def.name, f"Invalid value {value!r}", f"Valid options: {choices}"))
        if field_def.validator:
            errors.extend(format_config_error(self.section, field_def.name, e) for e in field_def.validator(value))
        return errors

    def validate(self, schema: ConfigItems) -> list[str]:
        """Return the error messages, an empty list when the section is valid.

        Args:
            schema: The section schema
        """
        errors = []
        for field_def in schema:
            value = self.config.get(field_def.name)
            if value is None:
                if field_def.required:
                    errors.append(format_config_error(self.section, field_def.name, "Missing required field"))
                continue
            errors.extend(self._check_field(field_def, value))
        return errors

    def warn_unknown_keys(self, schema: ConfigItems) -> list[str]:
        """Log a warning for every key missing from the schema.

        Args:
            schema: The section schema

        Returns:
            The warning messages
        """
        warnings = []
        for key in self.config:
            if key in schema.names:
                continue
            similar = _find_similar_key(key, schema.names)
            if similar:
                msg = f"[{self.section}] Unknown option '{key}' (did you mean '{similar}'?)"
            else:
                msg = f"[{self.section}] Unknown option '{key}' - will be ignored"
            self.log.warning(msg)
            warnings.append(msg)
        return warnings
