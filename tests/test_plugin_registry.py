"""Tests for the plugin registry."""

import pytest

from conftest import StubPlugin
from nftkit.core.errors import PluginConformanceError, PluginNotRegisteredError
from nftkit.plugins import NftPlugin, build_default_registry
from nftkit.plugins.magic_eden import MagicEdenPlugin
from nftkit.plugins.opensea import OpenSeaPlugin
from nftkit.plugins.registry import PluginRegistry


class ReadOnlyPlugin:
    id = "read-only"

    async def get_asset(self, params):
        return None

    async def get_listings(self, params):
        return []

    async def get_offers(self, params):
        return []


def test_register_and_resolve() -> None:
    registry = PluginRegistry()
    plugin = MagicEdenPlugin()
    registry.register("magic-eden", plugin)

    assert registry.resolve("magic-eden") is plugin
    assert registry.require("magic-eden") is plugin
    assert "magic-eden" in registry
    assert len(registry) == 1


def test_resolve_unknown_returns_none() -> None:
    assert PluginRegistry().resolve("nope") is None


def test_require_unknown_raises() -> None:
    with pytest.raises(PluginNotRegisteredError) as exc_info:
        PluginRegistry().require("nope")
    assert exc_info.value.message == "NFT plugin not registered: nope"


def test_register_replaces_existing_entry() -> None:
    registry = PluginRegistry()
    first, second = StubPlugin(), StubPlugin()
    registry.register("stub", first)
    registry.register("stub", second)

    assert registry.resolve("stub") is second
    assert registry.ids() == ["stub"]


def test_register_rejects_incomplete_plugin() -> None:
    registry = PluginRegistry()
    with pytest.raises(PluginConformanceError) as exc_info:
        registry.register("read-only", ReadOnlyPlugin())

    assert "list" in exc_info.value.missing
    assert "bulk_cancel" in exc_info.value.missing
    assert "get_asset" not in exc_info.value.missing
    assert "read-only" not in registry


def test_unregister() -> None:
    registry = PluginRegistry()
    registry.register("stub", StubPlugin())
    registry.unregister("stub")
    registry.unregister("stub")
    assert len(registry) == 0


@pytest.mark.asyncio
async def test_default_registry(client) -> None:
    registry = build_default_registry(client)

    assert registry.ids() == ["magic-eden", "opensea"]
    assert isinstance(registry.require("opensea"), OpenSeaPlugin)
    assert isinstance(registry.require("magic-eden"), NftPlugin)
