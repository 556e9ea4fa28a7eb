"""NFT marketplace plugins and the registry that resolves them by id.

Usage:
    from nftkit.plugins import build_default_registry

    registry = build_default_registry(client)
    plugin = registry.require("opensea")
    asset = await plugin.get_asset(params)
"""

from __future__ import annotations

from nftkit.nft.opensea_client import OpenSeaClient
from nftkit.plugins.base import CAPABILITIES, NftPlugin, PreparedAction
from nftkit.plugins.magic_eden import MagicEdenPlugin
from nftkit.plugins.opensea import OpenSeaPlugin
from nftkit.plugins.registry import PluginRegistry

__all__ = [
    "CAPABILITIES",
    "MagicEdenPlugin",
    "NftPlugin",
    "OpenSeaPlugin",
    "PluginRegistry",
    "PreparedAction",
    "build_default_registry",
]


def build_default_registry(client: OpenSeaClient) -> PluginRegistry:
    """Registry with the built-in OpenSea and Magic Eden plugins."""
    registry = PluginRegistry()
    for plugin in (OpenSeaPlugin(client), MagicEdenPlugin()):
        registry.register(plugin.id, plugin)
    return registry
