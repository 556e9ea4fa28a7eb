"""OpenSea plugin: reads through the resilient OpenSea client."""

from __future__ import annotations

from typing import Any

import structlog
from pydantic import ValidationError

from nftkit.core.errors import UnexpectedResponseError
from nftkit.core.normalize import chain_slug, normalize_address
from nftkit.core.types import (
    BulkCancelParams,
    BuyParams,
    CancelOfferParams,
    GetAssetParams,
    GetListingsParams,
    GetOffersParams,
    ListParams,
    NftAttribute,
    NftPrimitive,
    OfferParams,
    TokenStandard,
    TransferParams,
    UnwrapParams,
    WrapParams,
)
from nftkit.nft.opensea_client import OpenSeaClient, OrderSide
from nftkit.plugins.base import PreparedAction, prepared
from nftkit.utils.resilience import SINGLE_ATTEMPT_POLICY

log = structlog.get_logger()


class OpenSeaPlugin:
    """NFT plugin backed by the OpenSea v2 REST API.

    Write capabilities return Seaport-tagged placeholders; nothing is signed
    or submitted.
    """

    id = "opensea"

    def __init__(self, client: OpenSeaClient) -> None:
        self.client = client

    async def get_asset(self, params: GetAssetParams) -> NftPrimitive:
        result = await self.client.get_nft(
            chain_slug(params.chain_id), params.contract_address, params.token_id
        )
        data = result.data if result.data is not None else {}
        if not isinstance(data, dict):
            raise UnexpectedResponseError("nft payload is not an object")
        nft = data.get("nft") or {}
        if not isinstance(nft, dict):
            raise UnexpectedResponseError("nft is not an object")
        try:
            return self._parse_nft(nft, params)
        except ValidationError as e:
            log.warning(
                "opensea.plugin.unexpected_nft",
                contract=params.contract_address,
                token_id=params.token_id,
                error=str(e),
            )
            raise UnexpectedResponseError(str(e)) from e

    async def get_listings(self, params: GetListingsParams) -> list[dict[str, Any]]:
        return await self._orders(OrderSide.LISTINGS, params)

    async def get_offers(self, params: GetOffersParams) -> list[dict[str, Any]]:
        return await self._orders(OrderSide.OFFERS, params)

    async def _orders(self, side: OrderSide, params: GetAssetParams) -> list[dict[str, Any]]:
        # One attempt: a failure here is retried on the HTTP fallback path
        result = await self.client.get_orders(
            side,
            chain_slug(params.chain_id),
            asset_contract_address=params.contract_address,
            token_ids=params.token_id,
            retry_policy=SINGLE_ATTEMPT_POLICY,
        )
        orders = (result.data or {}).get("orders") or []
        log.debug(
            "opensea.plugin.orders",
            side=str(side),
            contract=params.contract_address,
            token_id=params.token_id,
            count=len(orders),
        )
        return orders

    def _parse_nft(self, nft: dict[str, Any], params: GetAssetParams) -> NftPrimitive:
        """Map an OpenSea ``nft`` object onto the primitive.

        Traits and owners that don't validate are dropped rather than failing
        the whole asset.
        """
        collection = nft.get("collection")
        if isinstance(collection, dict):
            collection_slug = collection.get("slug")
            collection_name = collection.get("name")
            collection_verified = bool(collection.get("is_verified"))
        else:
            # v2 returns the collection as a bare slug string
            collection_slug = collection or None
            collection_name = None
            collection_verified = False

        owner = nft.get("owner")
        if owner is None:
            owners = nft.get("owners") or []
            if owners and isinstance(owners[0], dict):
                owner = owners[0].get("address")
        try:
            owner = normalize_address(owner) if owner is not None else None
        except ValueError:
            owner = None

        attributes = []
        for trait in nft.get("traits") or []:
            if not isinstance(trait, dict) or trait.get("value") is None:
                continue
            try:
                attributes.append(
                    NftAttribute(trait_type=trait.get("trait_type"), value=trait["value"])
                )
            except ValidationError:
                continue

        standard = (
            TokenStandard.ERC1155
            if nft.get("token_standard") == "erc1155"
            else TokenStandard.ERC721
        )

        return NftPrimitive(
            contract_address=params.contract_address,
            token_id=params.token_id,
            token_standard=standard,
            owner=owner,
            name=nft.get("name"),
            description=nft.get("description"),
            image=nft.get("image_url"),
            attributes=attributes or None,
            collection_slug=collection_slug,
            collection_name=collection_name,
            collection_verified=collection_verified,
            chain_id=params.chain_id,
        )

    async def list(self, params: ListParams) -> PreparedAction:
        return prepared("seaport-listing", params)

    async def buy(self, params: BuyParams) -> PreparedAction:
        return prepared("seaport-buy", params)

    async def offer(self, params: OfferParams) -> PreparedAction:
        return prepared("seaport-offer", params)

    async def cancel_offer(self, params: CancelOfferParams) -> PreparedAction:
        return prepared("seaport-cancel-offer", params)

    async def transfer(self, params: TransferParams) -> PreparedAction:
        return prepared("nft-transfer", params)

    async def wrap(self, params: WrapParams) -> PreparedAction:
        return prepared("wrap-weth", params)

    async def unwrap(self, params: UnwrapParams) -> PreparedAction:
        return prepared("unwrap-weth", params)

    async def bulk_cancel(self, params: BulkCancelParams) -> PreparedAction:
        return prepared("bulk-cancel", params)
