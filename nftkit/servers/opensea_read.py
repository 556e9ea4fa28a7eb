"""Read-only OpenSea MCP server (Arbitrum).

Tools return ``{rateLimit, nextCursor, data}``. Asset listings and offers served
by a plugin come back with ``rateLimit`` and ``nextCursor`` set to None: the
plugin interface returns bare orders and is not paginated. Failures come back as an
``{error, message}`` payload in the normal result channel so the calling
agent always gets parseable JSON.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

import structlog
from mcp.server.fastmcp import FastMCP
from pydantic import Field

from nftkit.core.normalize import Chain, CollectionSlug, EthAddress, TokenId, chain_slug
from nftkit.core.types import GetAssetParams
from nftkit.nft.config import NftKitSettings
from nftkit.nft.opensea_client import OpenSeaClient, OrderSide
from nftkit.plugins.fallback import AssetOrderReader, AssetOrdersQuery, envelope
from nftkit.plugins.registry import PluginRegistry
from nftkit.servers.common import ToolArgs, given, run_tool

log = structlog.get_logger()

SERVER_NAME = "opensea-arbitrum-mcp-server"
ARBITRUM_CHAIN = chain_slug(Chain.ARBITRUM)

SLUG_ALIASES = ("collection_slug", "collectionSlug", "slug", "collection")


class WalletNftsArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "address": ("address", "wallet", "wallet_address", "walletAddress", "owner", "account"),
    }

    address: EthAddress | None = None
    cursor: str | None = None


class CollectionArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {"collection_slug": SLUG_ALIASES}

    collection_slug: CollectionSlug


class ListCollectionsArgs(ToolArgs):
    limit: int = Field(default=20, ge=1, le=50)
    cursor: str | None = None


class CollectionListingsArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {"collection_slug": SLUG_ALIASES}

    collection_slug: CollectionSlug
    limit: int | None = Field(default=None, ge=1)
    cursor: str | None = None


class AssetOrdersArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "contract_address": ("contract_address", "contractAddress"),
        "token_id": ("token_id", "tokenId"),
        "collection_slug": ("collection_slug", "collectionSlug"),
        "fallback_to_collection": ("fallback_to_collection", "fallbackToCollection"),
    }

    contract_address: EthAddress
    token_id: TokenId
    collection_slug: CollectionSlug | None = None
    fallback_to_collection: bool = False
    limit: int | None = Field(default=None, ge=1)
    cursor: str | None = None


class NftAssetArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "contract_address": ("contract_address", "contractAddress"),
        "token_id": ("token_id", "tokenId"),
        "chain_id": ("chain_id", "chainId"),
    }

    plugin: str = "opensea"
    contract_address: EthAddress
    token_id: TokenId
    chain_id: int = int(Chain.ARBITRUM)


def is_arbitrum_collection(collection: Mapping[str, Any]) -> bool:
    contracts = collection.get("contracts") or []
    return any(contract.get("chain") == ARBITRUM_CHAIN for contract in contracts)


class OpenSeaReadTools:
    """Handlers behind the read server's tools.

    Each handler takes the raw tool arguments and returns the JSON payload.
    """

    def __init__(
        self,
        client: OpenSeaClient,
        registry: PluginRegistry,
        settings: NftKitSettings,
    ) -> None:
        self.client = client
        self.registry = registry
        self.settings = settings
        self.orders = AssetOrderReader(registry, client, plugin_id="opensea")

    async def get_wallet_nfts(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def handler() -> dict[str, Any]:
            args = WalletNftsArgs.parse(arguments)
            address = args.address or self.settings.default_wallet
            result = await self.client.get_wallet_nfts(address, ARBITRUM_CHAIN, cursor=args.cursor)
            return envelope(result)

        return await run_tool("get_wallet_nfts", handler)

    async def get_collection(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def handler() -> dict[str, Any]:
            args = CollectionArgs.parse(arguments)
            result = await self.client.get_collection(args.collection_slug)
            payload = envelope(result)
            del payload["nextCursor"]
            return payload

        return await run_tool("get_collection", handler)

    async def list_arbitrum_collections(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def handler() -> dict[str, Any]:
            args = ListCollectionsArgs.parse(arguments)
            result = await self.client.list_collections(limit=args.limit, cursor=args.cursor)
            data = dict(result.data or {})
            collections = data.get("collections") or []
            data["collections"] = [c for c in collections if is_arbitrum_collection(c)]
            log.debug(
                "opensea.collections_filtered",
                received=len(collections),
                arbitrum=len(data["collections"]),
            )
            payload = envelope(result)
            payload["data"] = data
            return payload

        return await run_tool("list_arbitrum_collections", handler)

    async def get_listings_by_collection(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def handler() -> dict[str, Any]:
            args = CollectionListingsArgs.parse(arguments)
            result = await self.client.get_orders(
                OrderSide.LISTINGS,
                ARBITRUM_CHAIN,
                collection_slug=args.collection_slug,
                limit=args.limit,
                cursor=args.cursor,
            )
            return envelope(result)

        return await run_tool("get_listings_by_collection", handler)

    async def get_listings_by_asset(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        return await run_tool(
            "get_listings_by_asset",
            lambda: self._asset_orders(OrderSide.LISTINGS, arguments),
        )

    async def get_offers_by_asset(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        return await run_tool(
            "get_offers_by_asset",
            lambda: self._asset_orders(OrderSide.OFFERS, arguments),
        )

    async def _asset_orders(self, side: OrderSide, arguments: Mapping[str, Any]) -> dict[str, Any]:
        args = AssetOrdersArgs.parse(arguments)
        query = AssetOrdersQuery(
            contract_address=args.contract_address,
            token_id=args.token_id,
            chain_id=Chain.ARBITRUM,
            collection_slug=args.collection_slug,
            fallback_to_collection=args.fallback_to_collection,
            limit=args.limit,
            cursor=args.cursor,
        )
        return await self.orders.read(side, query)

    async def get_nft_asset(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def handler() -> dict[str, Any]:
            args = NftAssetArgs.parse(arguments)
            plugin = self.registry.require(args.plugin)
            asset = await plugin.get_asset(
                GetAssetParams(
                    contract_address=args.contract_address,
                    token_id=args.token_id,
                    chain_id=args.chain_id,
                )
            )
            return {"plugin": args.plugin, "data": asset.to_wire()}

        return await run_tool("get_nft_asset", handler)


def create_read_server(tools: OpenSeaReadTools, *, port: int | None = None) -> FastMCP:
    """Build the FastMCP server exposing the read tools."""
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Read-only OpenSea access for Arbitrum: wallet NFTs, collections, "
            "listings and offers. Results fetched over HTTP carry OpenSea rate-limit headers."
        ),
    )
    if port is not None:
        server.settings.port = port

    @server.tool(name="get_wallet_nfts", description="Fetch NFTs owned by a wallet on Arbitrum.")
    async def get_wallet_nfts(
        address: str | None = None,
        wallet: str | None = None,
        wallet_address: str | None = None,
        walletAddress: str | None = None,
        owner: str | None = None,
        account: str | None = None,
        cursor: str | None = None,
    ) -> dict[str, Any]:
        return await tools.get_wallet_nfts(
            given(
                {
                    "address": address,
                    "wallet": wallet,
                    "wallet_address": wallet_address,
                    "walletAddress": walletAddress,
                    "owner": owner,
                    "account": account,
                    "cursor": cursor,
                }
            )
        )

    @server.tool(
        name="get_collection",
        description="Fetch OpenSea collection metadata by slug (Arbitrum collections only).",
    )
    async def get_collection(
        collection_slug: str | None = None,
        collectionSlug: str | None = None,
        slug: str | None = None,
        collection: str | None = None,
    ) -> dict[str, Any]:
        return await tools.get_collection(
            given(
                {
                    "collection_slug": collection_slug,
                    "collectionSlug": collectionSlug,
                    "slug": slug,
                    "collection": collection,
                }
            )
        )

    @server.tool(
        name="list_arbitrum_collections",
        description="List collections available on Arbitrum.",
    )
    async def list_arbitrum_collections(
        limit: int = 20,
        cursor: str | None = None,
    ) -> dict[str, Any]:
        return await tools.list_arbitrum_collections(given({"limit": limit, "cursor": cursor}))

    @server.tool(
        name="get_listings_by_collection",
        description="Get active listings for a collection on Arbitrum.",
    )
    async def get_listings_by_collection(
        collection_slug: str | None = None,
        collectionSlug: str | None = None,
        slug: str | None = None,
        collection: str | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> dict[str, Any]:
        return await tools.get_listings_by_collection(
            given(
                {
                    "collection_slug": collection_slug,
                    "collectionSlug": collectionSlug,
                    "slug": slug,
                    "collection": collection,
                    "limit": limit,
                    "cursor": cursor,
                }
            )
        )

    @server.tool(
        name="get_listings_by_asset",
        description="Get active listings for a specific NFT asset on Arbitrum.",
    )
    async def get_listings_by_asset(
        contract_address: str | None = None,
        contractAddress: str | None = None,
        token_id: str | int | None = None,
        tokenId: str | int | None = None,
        collection_slug: str | None = None,
        collectionSlug: str | None = None,
        fallback_to_collection: bool | None = None,
        fallbackToCollection: bool | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> dict[str, Any]:
        return await tools.get_listings_by_asset(
            given(
                {
                    "contract_address": contract_address,
                    "contractAddress": contractAddress,
                    "token_id": token_id,
                    "tokenId": tokenId,
                    "collection_slug": collection_slug,
                    "collectionSlug": collectionSlug,
                    "fallback_to_collection": fallback_to_collection,
                    "fallbackToCollection": fallbackToCollection,
                    "limit": limit,
                    "cursor": cursor,
                }
            )
        )

    @server.tool(
        name="get_offers_by_asset",
        description="Get active offers for a specific NFT asset on Arbitrum.",
    )
    async def get_offers_by_asset(
        contract_address: str | None = None,
        contractAddress: str | None = None,
        token_id: str | int | None = None,
        tokenId: str | int | None = None,
        collection_slug: str | None = None,
        collectionSlug: str | None = None,
        fallback_to_collection: bool | None = None,
        fallbackToCollection: bool | None = None,
        limit: int | None = None,
        cursor: str | None = None,
    ) -> dict[str, Any]:
        return await tools.get_offers_by_asset(
            given(
                {
                    "contract_address": contract_address,
                    "contractAddress": contractAddress,
                    "token_id": token_id,
                    "tokenId": tokenId,
                    "collection_slug": collection_slug,
                    "collectionSlug": collectionSlug,
                    "fallback_to_collection": fallback_to_collection,
                    "fallbackToCollection": fallbackToCollection,
                    "limit": limit,
                    "cursor": cursor,
                }
            )
        )

    @server.tool(
        name="get_nft_asset",
        description="Fetch an NFT asset through the plugin registry (opensea or magic-eden).",
    )
    async def get_nft_asset(
        contract_address: str,
        token_id: str | int,
        plugin: str = "opensea",
        chain_id: int = int(Chain.ARBITRUM),
    ) -> dict[str, Any]:
        return await tools.get_nft_asset(
            {
                "contract_address": contract_address,
                "token_id": token_id,
                "plugin": plugin,
                "chain_id": chain_id,
            }
        )

    return server
