"""
Plugins Registry.

This module provides the composition root of plugworks: it owns the
plugin table, the extension point store and the lifecycle stage.

Lifecycle:
- Configuration: register plugins and extension points
- PluginsInitialisation: init hooks run in dependency order; plugins
  attach items and may still register extension points
- Ready: extension point definitions are locked; hosts read results

Example:
    registry = PluginsRegistry()
    registry.register_extension_point("menu", lambda item: item["label"])
    registry.register_plugin(Search())
    await registry.init()
    registry.apply_extension_point("menu")  # ["Search"]
"""

import asyncio
import inspect
from typing import Any

from plugworks.config import RegistrySettings
from plugworks.core.extension import ExtensionPointStore, Item, Transform
from plugworks.core.stages import Stage, StageMachine
from plugworks.logging_config import (
    LogLevel,
    current_level,
    get_logger,
    is_development,
    setup_logging,
)
from plugworks.plugin.base import Plugin
from plugworks.plugin.resolver import DependencyResolver

logger = get_logger("plugin.registry")


class RegistryError(Exception):
    """Base exception for registry errors."""

    pass


class DuplicatePluginError(RegistryError):
    """Raised when a plugin name is registered twice."""

    pass


class PluginsRegistry:
    """
    Staged plugin registry.

    One instance owns all plugin and extension point state; init() is
    single-use and drives the stage from Configuration to Ready.
    """

    def __init__(self, settings: RegistrySettings | None = None):
        """
        Initialize PluginsRegistry.

        Args:
            settings: Registry settings. When given, the console sink is
                installed at settings.log_level. Tracing (settings.trace or
                PLUGWORKS_ENV=development) raises the sink to TRACE.
        """
        self.settings = settings or RegistrySettings()
        self._stages = StageMachine()
        self._plugins: dict[str, Plugin] = {}
        self._extension_points = ExtensionPointStore(self._stages)
        self._background: set[asyncio.Task] = set()

        if self.settings.trace or is_development():
            setup_logging(LogLevel.TRACE, force=current_level() is not LogLevel.TRACE)
        elif settings is not None:
            setup_logging(self.settings.log_level)

    @property
    def stage(self) -> Stage:
        return self._stages.stage

    @property
    def plugins(self) -> list[Plugin]:
        """Registered plugins, in registration order."""
        return list(self._plugins.values())

    def get_plugin(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    def register_plugin(self, plugin: Plugin) -> None:
        """
        Register a plugin.

        Args:
            plugin: Plugin instance

        Raises:
            StageError: If not in the Configuration stage
            DuplicatePluginError: If a plugin with the same name is registered
        """
        logger.trace("registerPlugin {}", plugin.name)

        self._stages.expect("registerPlugin", Stage.CONFIGURATION)

        if plugin.name in self._plugins:
            raise DuplicatePluginError(
                f'Plugin with name "{plugin.name}" already registered'
            )

        self._plugins[plugin.name] = plugin

    def register_extension_point(
        self, name: str, transform: Transform | None = None
    ) -> None:
        """
        Register an extension point; allowed until the registry is Ready.

        A second registration under the same name is ignored.
        """
        self._extension_points.register(name, transform)

    def attach_to_extension_point(self, name: str, item: Item) -> None:
        """
        Contribute an item; allowed only while plugins initialize.

        Raises:
            StageError: If plugins are not initializing
            ExtensionPointError: If the extension point does not exist
        """
        self._extension_points.attach(name, item)

    def apply_extension_point(self, name: str) -> list[Any] | None:
        """Transformed items of an extension point, or None if it does not exist."""
        return self._extension_points.apply(name)

    async def init(self) -> None:
        """
        Initialize every registered plugin and move to the Ready stage.

        Init hooks run concurrently, each after the hooks of the plugins it
        requires. Then every plugin's on_registry_init_finish hook is called
        without being awaited.

        Raises:
            StageError: If init() has already been called
            DependencyError: If a plugin requires an unregistered name
            Exception: Whatever an init hook raises; the registry then stays
                in the PluginsInitialisation stage
        """
        self._stages.expect("init", Stage.CONFIGURATION)
        self._stages.advance(Stage.PLUGINS_INITIALISATION)

        logger.info("Initializing {} plugin(s)", len(self._plugins))

        await DependencyResolver(self._plugins, self).resolve_all()

        for plugin in self.plugins:
            self._notify_init_finish(plugin)

        self._stages.advance(Stage.READY)
        logger.info("Registry ready")

    def _notify_init_finish(self, plugin: Plugin) -> None:
        result = plugin.on_registry_init_finish(self)
        if not inspect.isawaitable(result):
            return

        task = asyncio.ensure_future(result)
        self._background.add(task)
        task.add_done_callback(lambda t, name=plugin.name: self._finish_background(t, name))

    def _finish_background(self, task: asyncio.Future, plugin_name: str) -> None:
        self._background.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error(
                "on_registry_init_finish of plugin {} failed", plugin_name
            )
