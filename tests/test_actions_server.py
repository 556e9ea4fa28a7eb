"""Tests for the non-custodial actions tools."""

import pytest

from conftest import CONTRACT, WALLET, StubPlugin
from nftkit.nft.config import NftKitSettings
from nftkit.plugins.magic_eden import MagicEdenPlugin
from nftkit.plugins.opensea import OpenSeaPlugin
from nftkit.plugins.registry import PluginRegistry
from nftkit.servers.opensea_actions import (
    DEFAULT_OPENSEA_CONDUIT,
    WETH_CONTRACT,
    ZERO_ADDRESS,
    OpenSeaActionTools,
    create_actions_server,
    to_wei,
)

ACTION_TOOLS = {
    "approve_token",
    "list_nft",
    "buy_nft",
    "make_offer",
    "cancel_offer",
    "transfer_nft",
    "wrap_weth",
    "unwrap_weth",
    "bulk_cancel",
}

DISABLED = {
    "error": "Write actions disabled",
    "message": "Set ENABLE_OPENSEA_WRITE=true to enable execution",
    "preparedTransaction": "Transaction prepared but not executed (non-custodial mode)",
}


@pytest.fixture
def write_registry(registry, client):
    registry.register("opensea", OpenSeaPlugin(client))
    registry.register("magic-eden", MagicEdenPlugin())
    return registry


@pytest.fixture
def actions(write_registry, write_settings) -> OpenSeaActionTools:
    return OpenSeaActionTools(write_registry, write_settings)


def test_to_wei() -> None:
    assert to_wei("1") == 10**18
    assert to_wei("0.05") == 5 * 10**16
    for bad in ("abc", "0", "-1", "NaN"):
        with pytest.raises(ValueError):
            to_wei(bad)


@pytest.mark.asyncio
async def test_server_exposes_action_tools(actions) -> None:
    listed = await create_actions_server(actions).list_tools()
    assert {tool.name for tool in listed} == ACTION_TOOLS


@pytest.mark.asyncio
async def test_writes_disabled_by_default(settings) -> None:
    plugin = StubPlugin()
    registry = PluginRegistry()
    registry.register("opensea", plugin)
    tools = OpenSeaActionTools(registry, settings)

    result = await tools.list_nft({"contract_address": CONTRACT, "token_id": "1", "price": "1"})

    assert result == DISABLED
    assert plugin.calls == []


@pytest.mark.asyncio
async def test_disabled_gate_still_validates_arguments(settings, registry) -> None:
    tools = OpenSeaActionTools(registry, settings)

    result = await tools.wrap_weth({})

    assert result["error"] == "Invalid arguments"


@pytest.mark.asyncio
async def test_list_nft_prepares_listing(actions) -> None:
    result = await actions.list_nft(
        {"contractAddress": CONTRACT.upper().replace("0X", "0x"), "tokenId": 42, "price": "0.5"}
    )

    assert result["message"] == "NFT listing prepared successfully"
    assert result["contractAddress"] == CONTRACT
    assert result["tokenId"] == "42"
    assert result["price"] == "0.5 ETH"
    assert result["priceInWei"] == str(5 * 10**17)
    assert result["duration"] == "30 days"
    assert result["preparedTransaction"] == {
        "to": ZERO_ADDRESS,
        "data": "0x",
        "value": "0",
        "chainId": 42161,
    }
    assert result["prepared"]["prepared"] == "seaport-listing"
    assert result["prepared"]["params"]["price"] == "0.5"
    assert result["executed"] is False
    assert result["note"] == "Transaction prepared but not executed (review required)"


@pytest.mark.asyncio
async def test_list_nft_rejects_bad_price(actions) -> None:
    result = await actions.list_nft({"contract_address": CONTRACT, "token_id": "1", "price": "lots"})

    assert result["error"] == "Failed to prepare NFT listing"
    assert "lots" in result["details"]


@pytest.mark.asyncio
async def test_approve_token_defaults_to_conduit(actions) -> None:
    result = await actions.approve_token({"contract_address": CONTRACT})

    assert result["approvedOperator"] == DEFAULT_OPENSEA_CONDUIT
    assert result["tokenType"] == "erc721"
    assert result["preparedTransaction"]["to"] == CONTRACT


@pytest.mark.asyncio
async def test_buy_nft_at_market_price(actions) -> None:
    result = await actions.buy_nft({"contract_address": CONTRACT, "token_id": "1"})

    assert result["maxPrice"] == "Market price"
    assert result["preparedTransaction"]["value"] == "0"
    assert result["prepared"]["params"]["price"] == "market"


@pytest.mark.asyncio
async def test_buy_nft_with_max_price(actions) -> None:
    result = await actions.buy_nft(
        {"contract_address": CONTRACT, "token_id": "1", "max_price": "2"}
    )

    assert result["maxPrice"] == "2 ETH"
    assert result["preparedTransaction"]["value"] == str(2 * 10**18)


@pytest.mark.asyncio
async def test_collection_offer_without_token(actions) -> None:
    result = await actions.make_offer(
        {"contract_address": CONTRACT, "price": "0.1", "offer_type": "collection"}
    )

    assert result["offerType"] == "collection"
    assert result["duration"] == "7 days"
    assert result["prepared"]["prepared"] == "seaport-offer"
    assert "tokenId" not in result["prepared"]["params"]


@pytest.mark.asyncio
async def test_asset_offer_requires_token(actions) -> None:
    result = await actions.make_offer({"contract_address": CONTRACT, "price": "0.1"})

    assert result["error"] == "Invalid arguments"
    assert "token_id is required for asset offers" in result["message"]


@pytest.mark.asyncio
async def test_cancel_transfer_and_bulk_cancel(actions) -> None:
    cancel = await actions.cancel_offer({"contract_address": CONTRACT, "offer_id": "0xoffer"})
    transfer = await actions.transfer_nft(
        {"contract_address": CONTRACT, "token_id": "1", "to_address": WALLET}
    )
    bulk = await actions.bulk_cancel({"order_ids": ["a", "b"], "order_type": "listings"})

    assert cancel["prepared"] == {
        "prepared": "seaport-cancel-offer",
        "params": {"chainId": 42161, "offerId": "0xoffer"},
    }
    assert transfer["toAddress"] == WALLET
    assert transfer["prepared"]["params"]["to"] == WALLET
    assert bulk["count"] == 2
    assert bulk["prepared"]["prepared"] == "bulk-cancel"


@pytest.mark.asyncio
async def test_bulk_cancel_needs_orders(actions) -> None:
    result = await actions.bulk_cancel({"order_ids": []})
    assert result["error"] == "Invalid arguments"


@pytest.mark.asyncio
async def test_wrap_and_unwrap_weth(actions) -> None:
    wrap = await actions.wrap_weth({"amount": "1.5"})
    unwrap = await actions.unwrap_weth({"amount": "1.5"})

    assert wrap["amountInWei"] == str(15 * 10**17)
    assert wrap["preparedTransaction"]["to"] == WETH_CONTRACT
    assert wrap["preparedTransaction"]["value"] == str(15 * 10**17)
    assert unwrap["preparedTransaction"]["value"] == "0"
    assert unwrap["prepared"]["prepared"] == "unwrap-weth"


@pytest.mark.asyncio
async def test_configured_write_plugin(write_registry) -> None:
    settings = NftKitSettings(
        _env_file=None, ENABLE_OPENSEA_WRITE=True, NFT_WRITE_PLUGIN="magic-eden"
    )
    tools = OpenSeaActionTools(write_registry, settings)

    result = await tools.list_nft({"contract_address": CONTRACT, "token_id": "1", "price": "1"})

    assert result["prepared"]["prepared"] == "magic-eden-listing"


@pytest.mark.asyncio
async def test_unregistered_write_plugin(registry) -> None:
    settings = NftKitSettings(_env_file=None, ENABLE_OPENSEA_WRITE=True)
    tools = OpenSeaActionTools(registry, settings)

    result = await tools.wrap_weth({"amount": "1"})

    assert result == {
        "error": "Failed to prepare WETH wrap",
        "details": "NFT plugin not registered: opensea",
    }
