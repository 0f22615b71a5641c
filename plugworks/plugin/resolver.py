"""
Dependency-Resolving Initializer.

Plugins name their dependencies; nothing computes a global order up
front. Instead each plugin gets an initialization task that first awaits
the tasks of everything it requires, then runs its own init hook. The
task is stored on the plugin (Plugin.state) before any dependency is
touched, so a plugin required by several others is initialized once and
every dependent awaits the same task.

Known limitation: dependency cycles are not detected. Plugins in a cycle
wait on each other forever and PluginsRegistry.init() never returns.
Cancelling the stalled init() cancels only the top-level tasks: dependents
await their dependencies through asyncio.shield, so a cancel does not
bounce around the cycle.
"""

import asyncio
import inspect
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from plugworks.logging_config import get_logger
from plugworks.plugin.base import Plugin

if TYPE_CHECKING:
    from plugworks.plugin.registry import PluginsRegistry

logger = get_logger("plugin.resolver")


class DependencyError(Exception):
    """Raised when a plugin requires a name that no plugin is registered under."""

    def __init__(self, plugin_name: str, dependency_name: str):
        self.plugin_name = plugin_name
        self.dependency_name = dependency_name
        super().__init__(
            f'Plugin "{plugin_name}" requires "{dependency_name}", '
            f"but no plugin with that name is registered"
        )


class DependencyResolver:
    """
    Initializes plugins after their dependencies, with maximal concurrency.

    Must be driven from a running event loop.
    """

    def __init__(self, plugins: Mapping[str, Plugin], registry: "PluginsRegistry"):
        """
        Initialize DependencyResolver.

        Args:
            plugins: Plugin table (name -> plugin), looked up at resolution time
            registry: Registry passed to every init hook
        """
        self._plugins = plugins
        self._registry = registry

    def resolve(self, plugin: Plugin) -> asyncio.Future:
        """
        Get the initialization future of a plugin, starting it if needed.

        Args:
            plugin: Plugin to initialize

        Returns:
            The plugin's shared initialization future; its result is the
            value returned by the plugin's init hook
        """
        if plugin.state is not None:
            return plugin.state

        logger.trace("pluginInitialise {}", plugin.name)

        # Stored before the task runs so dependents started later reuse it.
        plugin.state = asyncio.create_task(
            self._initialise(plugin), name=f"plugworks-init:{plugin.name}"
        )
        return plugin.state

    async def resolve_all(self) -> list[Any]:
        """
        Initialize every plugin in the table.

        Every plugin task is allowed to settle before a failure is raised, so
        no failed task is left unobserved.

        Returns:
            init hook results, in plugin table order

        Raises:
            DependencyError: If any plugin requires an unregistered name
            Exception: Whatever an init hook raises (the first failure in
                plugin table order)
        """
        futures = [self.resolve(plugin) for plugin in list(self._plugins.values())]

        await asyncio.gather(*futures, return_exceptions=True)

        for future in futures:
            error = None if future.cancelled() else future.exception()
            if error is not None:
                raise error

        return [future.result() for future in futures]

    async def _initialise(self, plugin: Plugin) -> Any:
        dependencies = [self._lookup(plugin, name) for name in plugin.requires]

        await asyncio.gather(
            *(asyncio.shield(self.resolve(dependency)) for dependency in dependencies)
        )

        logger.debug("Initializing plugin {}", plugin.name)
        result = plugin.init(self._registry)
        if inspect.isawaitable(result):
            result = await result

        logger.debug("Plugin {} initialized", plugin.name)
        return result

    def _lookup(self, dependent: Plugin, name: str) -> Plugin:
        plugin = self._plugins.get(name)
        if plugin is None:
            raise DependencyError(dependent.name, name)
        return plugin
