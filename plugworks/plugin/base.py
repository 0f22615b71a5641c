"""
Plugin Capability Contract.

Every unit registered with PluginsRegistry is a Plugin: it has a unique
name, the names of the plugins it requires, an initialization hook and a
post-initialization hook. Both hooks receive the registry and may return
an awaitable.

Example:
    class Search(Plugin):
        name = "search"
        requires = ("storage",)

        async def init(self, registry):
            registry.register_extension_point("search.backends")
            registry.attach_to_extension_point("menu", {"label": "Search"})
"""

import asyncio
from collections.abc import Awaitable, Mapping
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from plugworks.config.schema import ConfigField, ValidationError, validate_config

if TYPE_CHECKING:
    from plugworks.plugin.registry import PluginsRegistry


class PluginOptionsError(Exception):
    """Raised when plugin options do not match the plugin's options schema."""

    pass


class Plugin:
    """
    Base class for plugins.

    Attributes:
        name: Unique plugin name
        requires: Names of plugins that must initialize first
        options_schema: Optional field declarations for options
        options: Options passed at construction (defaults filled in when a
            schema is declared)
        state: None until first resolved, then the shared initialization
            future that dependents await
    """

    name: str = "plugin"
    requires: tuple[str, ...] = ()
    options_schema: Mapping[str, ConfigField] = MappingProxyType({})

    def __init__(self, options: dict[str, Any] | None = None):
        options = dict(options or {})

        if self.options_schema:
            try:
                options = validate_config(options, dict(self.options_schema))
            except ValidationError as e:
                raise PluginOptionsError(
                    f"Invalid options for plugin {self.name}: {e}"
                ) from e

        self.options = options
        self.state: asyncio.Future | None = None

    def init(self, registry: "PluginsRegistry") -> Awaitable[Any] | Any:
        """Initialization hook, run once after every required plugin."""
        return None

    def on_registry_init_finish(
        self, registry: "PluginsRegistry"
    ) -> Awaitable[Any] | None:
        """Notification that every plugin has initialized. Not awaited."""
        return None

    @property
    def initialized(self) -> bool:
        """True once the initialization hook has completed successfully."""
        return (
            self.state is not None
            and self.state.done()
            and not self.state.cancelled()
            and self.state.exception() is None
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, requires={list(self.requires)!r})"
