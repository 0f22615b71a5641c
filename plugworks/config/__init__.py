"""
plugworks Configuration - TOML-based registry settings.

This module provides:
- The registry settings schema
- Loading settings (and per-plugin option tables) from a TOML file
- Generating a commented default settings file

Example settings file:
    [registry]
    trace = true
    log_level = "DEBUG"

    [plugins.greeter]
    greeting = "hello"

Example usage:
    from plugworks.config import load_settings

    settings = load_settings(Path("plugworks.toml"))
    registry = PluginsRegistry(settings)
    registry.register_plugin(Greeter(settings.options_for("greeter")))
"""

from dataclasses import dataclass, field as dataclass_field
from pathlib import Path
from typing import Any

from plugworks.config.schema import ConfigField, ValidationError, validate_config
from plugworks.config.toml_handler import (
    TOMLError,
    generate_toml_from_schema,
    read_toml,
    write_toml,
)
from plugworks.logging_config import LogLevel, is_development

DEFAULT_SETTINGS_FILE = Path("plugworks.toml")


class ConfigError(Exception):
    """Raised when settings cannot be loaded or written."""

    pass


def field(
    type_: type,
    default: Any,
    description: str = "",
    min: Any = None,
    max: Any = None,
    choices: list[Any] | None = None,
) -> ConfigField:
    """
    Helper to declare a ConfigField.

    Example:
        options_schema = {"retries": field(int, 3, "Retry attempts", min=0)}
    """
    return ConfigField(
        type_=type_,
        default=default,
        description=description,
        min=min,
        max=max,
        choices=choices,
    )


REGISTRY_SCHEMA: dict[str, ConfigField] = {
    "trace": field(bool, False, "Log every registry operation at TRACE level"),
    "log_level": field(
        str,
        LogLevel.INFO.value,
        "Level of the plugworks console sink",
        choices=[level.value for level in LogLevel],
    ),
}


@dataclass
class RegistrySettings:
    """
    Registry settings.

    Attributes:
        trace: Trace registry operations
        log_level: Console sink level
        plugins: Plugin name -> option table
    """

    trace: bool = False
    log_level: str = LogLevel.INFO.value
    plugins: dict[str, dict[str, Any]] = dataclass_field(default_factory=dict)

    def options_for(self, plugin_name: str) -> dict[str, Any]:
        """Return a copy of a plugin's option table (empty if absent)."""
        return dict(self.plugins.get(plugin_name, {}))


def load_settings(path: Path | None = None) -> RegistrySettings:
    """
    Load registry settings from a TOML file.

    A missing file yields default settings. PLUGWORKS_ENV=development
    always enables tracing.

    Args:
        path: Settings file (default: ./plugworks.toml)

    Returns:
        RegistrySettings instance

    Raises:
        ConfigError: If the file is malformed or fails validation
    """
    path = path or DEFAULT_SETTINGS_FILE

    data: dict[str, Any] = {}
    if path.exists():
        try:
            data = read_toml(path)
        except TOMLError as e:
            raise ConfigError(f"Failed to load settings: {e}") from e

    plugins = data.get("plugins", {})
    if not isinstance(plugins, dict) or not all(
        isinstance(table, dict) for table in plugins.values()
    ):
        raise ConfigError("'plugins' must be a table of per-plugin tables")

    try:
        registry = validate_config(data.get("registry", {}), REGISTRY_SCHEMA)
    except ValidationError as e:
        raise ConfigError(f"Invalid [registry] settings: {e}") from e

    return RegistrySettings(
        trace=registry["trace"] or is_development(),
        log_level=registry["log_level"],
        plugins={name: dict(table) for name, table in plugins.items()},
    )


def write_default_settings(path: Path | None = None) -> Path:
    """
    Write a commented default settings file.

    Returns:
        Path of the written file

    Raises:
        ConfigError: If the file cannot be written
    """
    path = path or DEFAULT_SETTINGS_FILE
    try:
        write_toml(path, generate_toml_from_schema("registry", REGISTRY_SCHEMA))
    except TOMLError as e:
        raise ConfigError(f"Failed to write settings: {e}") from e
    return path


__all__ = [
    "REGISTRY_SCHEMA",
    "ConfigError",
    "ConfigField",
    "RegistrySettings",
    "field",
    "load_settings",
    "write_default_settings",
]
