"""Configuration validation with declarative schema definitions.

ConfigField describes one option, ConfigItems groups them, ConfigValidator
checks a section against them and suggests fixes for typos.
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
    """Describes an expected configuration field.

    Attributes:
        name: The configuration key name
        field_type: Expected type (str, float, bool)
        required: Whether the field is required
        default: Default value if not provided
        description: Human-readable description
        choices: List of valid values for enum-like fields
        validator: Custom validator function returning list of error messages
    """

    name: str
    field_type: type = str
    required: bool = False
    default: Any = None
    description: str = ""
    choices: list | None = None
    validator: Callable[[Any], list[str]] | None = None


class ConfigItems(list):
    """A list of ConfigField items with lookup by name."""

    def __init__(self, *args: ConfigField) -> None:
        super().__init__(args)

    def get(self, name: str) -> ConfigField | None:
        """Get a ConfigField by name."""
        return next((prop for prop in self if prop.name == name), None)


def format_config_error(section: str, field: str, message: str, suggestion: str = "") -> str:
    """Format a configuration error message.

    Args:
        section: Configuration section name
        field: Field name that has the error
        message: Error description
        suggestion: Optional suggestion for fixing the error
    """
    msg = f"[{section}] Config error for '{field}': {message}"
    if suggestion:
        msg += f" -> {suggestion}"
    return msg


class ConfigValidator:
    """Validates a configuration section against a schema."""

    def __init__(self, config: dict, section: str, logger: logging.Logger) -> None:
        self.config = config
        self.section = section
        self.log = logger

    def validate(self, schema: ConfigItems) -> list[str]:
        """Return the list of error messages (empty if the section is valid)."""
        errors = []

        for field_def in schema:
            value = self.config.get(field_def.name)

            if value is None:
                if field_def.required:
                    errors.append(format_config_error(self.section, field_def.name, "Missing required field"))
                continue

            type_error = self._check_type(field_def, value)
            if type_error:
                errors.append(type_error)
                continue

            if field_def.choices is not None and value not in field_def.choices:
                choices_str = ", ".join(repr(c) for c in field_def.choices)
                errors.append(
                    format_config_error(self.section, field_def.name, f"Invalid value {value!r}", f"Valid options: {choices_str}")
                )
            if field_def.validator:
                errors.extend(
                    format_config_error(self.section, field_def.name, validation_error) for validation_error in field_def.validator(value)
                )

        return errors

    def _check_type(self, field_def: ConfigField, value: Any) -> str | None:  # noqa: ANN401
        """Return an error message if `value` doesn't match the field type."""
        expected = field_def.field_type
        if expected is bool:
            if isinstance(value, bool) or (isinstance(value, str) and value.lower() in BOOL_STRINGS):
                return None
            return format_config_error(
                self.section, field_def.name, f"Expected bool, got {type(value).__name__}", "Use true/false (without quotes)"
            )
        if expected in (int, float):
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                return None
            return format_config_error(
                self.section,
                field_def.name,
                f"Expected {expected.__name__}, got {type(value).__name__}",
                f"Use {field_def.name} = {field_def.default} (without quotes)",
            )
        if expected is str and not isinstance(value, str):
            return format_config_error(
                self.section, field_def.name, f"Expected str, got {type(value).__name__}", f'Use {field_def.name} = "value"'
            )
        return None

    def warn_unknown_keys(self, schema: ConfigItems) -> list[str]:
        """Log and return warnings for unknown configuration keys."""
        warnings = []
        known_keys = [f.name for f in schema]

        for key in self.config:
            if key in known_keys:
                continue
            similar = difflib.get_close_matches(key, known_keys, n=1)
            if similar:
                msg = f"[{self.section}] Unknown option '{key}' (did you mean '{similar[0]}'?)"
            else:
                msg = f"[{self.section}] Unknown option '{key}' - will be ignored"
            self.log.warning(msg)
            warnings.append(msg)

        return warnings
