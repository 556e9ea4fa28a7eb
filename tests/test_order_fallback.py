"""Tests for plugin-first listings/offers lookup with collection fallback."""

from unittest.mock import AsyncMock

import pytest

from conftest import CONTRACT, FakeOpenSea, StubPlugin
from nftkit.core.errors import MarketplaceAPIError
from nftkit.core.types import GetAssetParams
from nftkit.nft.opensea_client import OrderSide
from nftkit.plugins.fallback import (
    AssetOrderReader,
    AssetOrdersQuery,
    OutcomeKind,
    query_plugin,
)

LISTINGS_PATH = "/api/v2/orders/arbitrum/seaport/listings"
OFFERS_PATH = "/api/v2/orders/arbitrum/seaport/offers"

QUERY = AssetOrdersQuery(
    contract_address=CONTRACT,
    token_id="7",
    chain_id=42161,
    collection_slug="cool-cats",
    fallback_to_collection=True,
)
NO_FALLBACK = AssetOrdersQuery(contract_address=CONTRACT, token_id="7", chain_id=42161)
PARAMS = GetAssetParams(contract_address=CONTRACT, token_id="7", chain_id=42161)


@pytest.mark.asyncio
async def test_query_plugin_outcomes() -> None:
    success = await query_plugin(StubPlugin(listings=[{"id": 1}]), OrderSide.LISTINGS, PARAMS)
    empty = await query_plugin(StubPlugin(), OrderSide.OFFERS, PARAMS)
    error = await query_plugin(StubPlugin(error=RuntimeError("boom")), OrderSide.LISTINGS, PARAMS)

    assert success.kind == OutcomeKind.SUCCESS
    assert success.orders == [{"id": 1}]
    assert empty.kind == OutcomeKind.EMPTY
    assert error.kind == OutcomeKind.ERROR
    assert str(error.error) == "boom"


@pytest.mark.asyncio
async def test_plugin_orders_are_returned_without_http(registry, client, fake_api: FakeOpenSea) -> None:
    plugin = StubPlugin(listings=[{"order_hash": "0xaa"}])
    registry.register("opensea", plugin)

    result = await AssetOrderReader(registry, client).read(OrderSide.LISTINGS, QUERY)

    assert result == {
        "rateLimit": None,
        "nextCursor": None,
        "data": {"orders": [{"order_hash": "0xaa"}]},
    }
    assert fake_api.requests == []


@pytest.mark.asyncio
async def test_empty_plugin_result_falls_back_to_collection(
    registry, client, fake_api: FakeOpenSea
) -> None:
    registry.register("opensea", StubPlugin())
    fake_api.add(
        LISTINGS_PATH,
        {"orders": [{"order_hash": "0xcc"}], "next": "page-2"},
        headers={"x-ratelimit-remaining": "10"},
    )

    result = await AssetOrderReader(registry, client).read(OrderSide.LISTINGS, QUERY)

    assert result["fallback"] == "collection_listings"
    assert result["nextCursor"] == "page-2"
    assert result["rateLimit"]["remaining"] == "10"
    assert result["data"]["orders"] == [{"order_hash": "0xcc"}]
    (request,) = fake_api.requests
    assert dict(request.url.params) == {"collection_slug": "cool-cats"}


@pytest.mark.asyncio
async def test_offers_fallback_is_tagged(registry, client, fake_api: FakeOpenSea) -> None:
    registry.register("opensea", StubPlugin())
    fake_api.add(OFFERS_PATH, {"orders": []})

    result = await AssetOrderReader(registry, client).read(OrderSide.OFFERS, QUERY)

    assert result["fallback"] == "collection_offers"


@pytest.mark.asyncio
async def test_empty_plugin_result_without_fallback(registry, client, fake_api: FakeOpenSea) -> None:
    registry.register("opensea", StubPlugin())

    result = await AssetOrderReader(registry, client).read(OrderSide.LISTINGS, NO_FALLBACK)

    assert result["data"] == {"orders": []}
    assert "fallback" not in result
    assert fake_api.requests == []


@pytest.mark.asyncio
async def test_fallback_requires_collection_slug(registry, client, fake_api: FakeOpenSea) -> None:
    registry.register("opensea", StubPlugin())
    query = AssetOrdersQuery(
        contract_address=CONTRACT, token_id="7", chain_id=42161, fallback_to_collection=True
    )

    result = await AssetOrderReader(registry, client).read(OrderSide.LISTINGS, query)

    assert "fallback" not in result
    assert fake_api.requests == []


@pytest.mark.asyncio
async def test_plugin_error_uses_http_asset_query(registry, client, fake_api: FakeOpenSea) -> None:
    plugin = StubPlugin(error=MarketplaceAPIError(500, "boom"))
    registry.register("opensea", plugin)
    fake_api.add(LISTINGS_PATH, {"orders": [{"order_hash": "0xdd"}]})

    result = await AssetOrderReader(registry, client).read(OrderSide.LISTINGS, QUERY)

    assert plugin.calls == ["get_listings"]
    assert result["data"]["orders"] == [{"order_hash": "0xdd"}]
    assert "fallback" not in result
    (request,) = fake_api.requests
    assert dict(request.url.params) == {"asset_contract_address": CONTRACT, "token_ids": "7"}


@pytest.mark.asyncio
async def test_no_plugin_uses_http_then_collection(registry, client, fake_api: FakeOpenSea) -> None:
    fake_api.add(LISTINGS_PATH, {"orders": []})
    fake_api.add(LISTINGS_PATH, {"orders": [{"order_hash": "0xee"}]})

    result = await AssetOrderReader(registry, client).read(OrderSide.LISTINGS, QUERY)

    assert result["fallback"] == "collection_listings"
    assert result["data"]["orders"] == [{"order_hash": "0xee"}]
    asset_request, collection_request = fake_api.requests
    assert "token_ids" in asset_request.url.params
    assert collection_request.url.params["collection_slug"] == "cool-cats"


@pytest.mark.asyncio
async def test_no_plugin_without_fallback(registry, client, fake_api: FakeOpenSea) -> None:
    fake_api.add(OFFERS_PATH, {"orders": []})

    result = await AssetOrderReader(registry, client).read(OrderSide.OFFERS, NO_FALLBACK)

    assert result["data"] == {"orders": []}
    assert "fallback" not in result
    assert len(fake_api.requests) == 1


@pytest.mark.asyncio
async def test_reader_passes_normalized_params_to_plugin(registry, client) -> None:
    plugin = StubPlugin()
    plugin.get_offers = AsyncMock(return_value=[{"order_hash": "0xff"}])
    registry.register("opensea", plugin)
    query = AssetOrdersQuery(contract_address=CONTRACT, token_id="7", chain_id=42161)

    result = await AssetOrderReader(registry, client).read(OrderSide.OFFERS, query)

    plugin.get_offers.assert_awaited_once_with(PARAMS)
    assert result["data"]["orders"] == [{"order_hash": "0xff"}]


@pytest.mark.asyncio
async def test_plugin_orders_carry_no_pagination_or_rate_limit(
    registry, client, fake_api: FakeOpenSea
) -> None:
    registry.register("opensea", StubPlugin(offers=[{"order_hash": "0x1"}]))
    query = AssetOrdersQuery(
        contract_address=CONTRACT, token_id="7", chain_id=42161, limit=5, cursor="page-3"
    )

    result = await AssetOrderReader(registry, client).read(OrderSide.OFFERS, query)

    assert result["rateLimit"] is None
    assert result["nextCursor"] is None
    assert fake_api.requests == []
