"""Plugin registry for discovering and managing plugins."""

import importlib
import logging
from importlib.metadata import entry_points

from .base import PluginBase

logger = logging.getLogger(__name__)

BUILTIN_PLUGINS = [
    "eventing.plugins.channels",
]

ENTRY_POINT_GROUP = "eventing_plugins"


class PluginRegistry:
    """Registry for discovering and managing eventing plugins."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._plugins = {}
        return cls._instance

    def discover_plugins(self, builtin_only=False):
        """Discover and load all available plugins.

        Args:
            builtin_only: If True, only load built-in plugins

        Returns:
            int: Number of plugins discovered
        """
        logger.info("Discovering plugins...")

        builtin_count = self._load_builtin_plugins()
        external_count = 0 if builtin_only else self._load_external_plugins()

        total_count = builtin_count + external_count
        logger.info(
            f"Discovered {total_count} plugins ({builtin_count} builtin, {external_count} external)"
        )
        return total_count

    def _load_builtin_plugins(self):
        loaded_count = 0
        for plugin_module in BUILTIN_PLUGINS:
            try:
                module = importlib.import_module(plugin_module)
            except ImportError as e:
                logger.warning(f"Could not load builtin plugin {plugin_module}: {e}")
                continue

            for attr_name in dir(module):
                attr = getattr(module, attr_name)
                if (
                    isinstance(attr, type)
                    and issubclass(attr, PluginBase)
                    and attr is not PluginBase
                ):
                    if self.register_plugin(attr()):
                        loaded_count += 1
                    break

        return loaded_count

    def _load_external_plugins(self):
        """Load external plugins via Python entry points."""
        loaded_count = 0
        for entry_point in entry_points(group=ENTRY_POINT_GROUP):
            try:
                plugin_class = entry_point.load()
            except Exception as e:
                logger.error(f"Failed to load external plugin {entry_point.name}: {e}")
                continue

            if not (isinstance(plugin_class, type) and issubclass(plugin_class, PluginBase)):
                logger.error(f"Plugin {entry_point.name} does not inherit from PluginBase")
                continue

            if self.register_plugin(plugin_class()):
                loaded_count += 1
                logger.info(f"Loaded external plugin: {entry_point.name}")

        return loaded_count

    def register_plugin(self, plugin):
        """Register a plugin instance.

        Returns:
            bool: True if registration successful, False otherwise
        """
        if not isinstance(plugin, PluginBase):
            logger.error(f"Plugin must inherit from PluginBase: {type(plugin)}")
            return False

        if plugin.name in self._plugins:
            existing_version = self._plugins[plugin.name].version
            logger.warning(
                f"Plugin {plugin.name} already registered (existing: {existing_version}, new: {plugin.version})"
            )
            return False

        self._plugins[plugin.name] = plugin
        logger.debug(f"Registered plugin: {plugin.name} v{plugin.version}")
        return True

    def initialize_all_plugins(self):
        """Initialize all registered plugins.

        Returns:
            Dict[str, bool]: Map of plugin names to initialization success status
        """
        logger.info("Initializing all plugins...")

        results = {name: plugin.initialize() for name, plugin in self._plugins.items()}

        successful_count = sum(1 for success in results.values() if success)
        logger.info(
            f"Initialized {successful_count}/{len(self._plugins)} plugins successfully"
        )
        return results

    def register_all_handlers(self):
        """Register kopf handlers for all initialized plugins."""
        logger.info("Registering handlers for all plugins...")

        for plugin_name, plugin in self._plugins.items():
            if not plugin.initialized:
                logger.warning(
                    f"Skipping handler registration for uninitialized plugin: {plugin_name}"
                )
                continue

            try:
                plugin.register_handlers()
                logger.debug(f"Registered handlers for plugin: {plugin_name}")
            except Exception as e:
                logger.error(f"Failed to register handlers for plugin {plugin_name}: {e}")

    def shutdown_all_plugins(self):
        logger.info("Shutting down all plugins...")
        for plugin in self._plugins.values():
            plugin.shutdown()

    def get_plugin(self, name):
        return self._plugins.get(name)

    def list_plugin_names(self):
        return list(self._plugins.keys())

    def get_plugins_health_status(self):
        return {name: plugin.get_health_status() for name, plugin in self._plugins.items()}

    def clear(self):
        """Forget every registered plugin (useful for testing)."""
        self._plugins.clear()
