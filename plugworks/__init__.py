"""
plugworks - Staged plugin registry with dependency-ordered async initialization.

This is the main package that exports the public API.
"""

__version__ = "0.1.0"

from plugworks.config import ConfigError, RegistrySettings, load_settings
from plugworks.core.extension import ExtensionPointError
from plugworks.core.stages import Stage, StageError
from plugworks.plugin.base import Plugin, PluginOptionsError
from plugworks.plugin.registry import (
    DuplicatePluginError,
    PluginsRegistry,
    RegistryError,
)
from plugworks.plugin.resolver import DependencyError

__all__ = [
    "__version__",
    "ConfigError",
    "DependencyError",
    "DuplicatePluginError",
    "ExtensionPointError",
    "Plugin",
    "PluginOptionsError",
    "PluginsRegistry",
    "RegistryError",
    "RegistrySettings",
    "Stage",
    "StageError",
    "load_settings",
]
