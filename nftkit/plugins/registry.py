"""Plugin registry: string id -> NFT plugin implementation.

The registry is an explicit object built once at process start and handed to
every server that needs plugin resolution. Registration replaces any previous
entry with the same id. Writes are copy-on-write under a lock, so lookups
never see a half-updated mapping.
"""

from __future__ import annotations

import threading
from types import MappingProxyType

import structlog

from nftkit.core.errors import PluginConformanceError, PluginNotRegisteredError
from nftkit.plugins.base import NftPlugin, missing_capabilities

log = structlog.get_logger()


class PluginRegistry:
    """Registry of NFT marketplace plugins.

    Example:
        >>> registry = PluginRegistry()
        >>> registry.register("magic-eden", MagicEdenPlugin())
        >>> plugin = registry.resolve("magic-eden")
    """

    def __init__(self) -> None:
        self._plugins: MappingProxyType[str, NftPlugin] = MappingProxyType({})
        self._lock = threading.Lock()

    def register(self, plugin_id: str, plugin: NftPlugin) -> None:
        """Insert or replace the plugin registered under ``plugin_id``.

        Raises:
            PluginConformanceError: If ``plugin`` lacks any capability
        """
        missing = missing_capabilities(plugin)
        if missing:
            raise PluginConformanceError(plugin_id, missing)

        with self._lock:
            replaced = plugin_id in self._plugins
            plugins = dict(self._plugins)
            plugins[plugin_id] = plugin
            self._plugins = MappingProxyType(plugins)

        log.info(
            "plugin.registered",
            plugin_id=plugin_id,
            plugin_class=type(plugin).__name__,
            replaced=replaced,
        )

    def unregister(self, plugin_id: str) -> None:
        with self._lock:
            if plugin_id not in self._plugins:
                return
            plugins = dict(self._plugins)
            del plugins[plugin_id]
            self._plugins = MappingProxyType(plugins)
        log.info("plugin.unregistered", plugin_id=plugin_id)

    def resolve(self, plugin_id: str) -> NftPlugin | None:
        """Return the plugin for ``plugin_id`` or None."""
        return self._plugins.get(plugin_id)

    def require(self, plugin_id: str) -> NftPlugin:
        """Return the plugin for ``plugin_id``.

        Raises:
            PluginNotRegisteredError: If nothing is registered under the id
        """
        plugin = self.resolve(plugin_id)
        if plugin is None:
            raise PluginNotRegisteredError(plugin_id)
        return plugin

    def ids(self) -> list[str]:
        return sorted(self._plugins)

    def __contains__(self, plugin_id: object) -> bool:
        return plugin_id in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)
