"""Magic Eden plugin skeleton.

Satisfies the plugin interface without network access until the Magic Eden
ETH/Arbitrum endpoints are wired in: reads return the minimal primitive and
empty order books.
"""

from __future__ import annotations

from typing import Any

from nftkit.core.types import (
    BulkCancelParams,
    BuyParams,
    CancelOfferParams,
    GetAssetParams,
    GetListingsParams,
    GetOffersParams,
    ListParams,
    NftPrimitive,
    OfferParams,
    TokenStandard,
    TransferParams,
    UnwrapParams,
    WrapParams,
)
from nftkit.plugins.base import PreparedAction, prepared


class MagicEdenPlugin:
    id = "magic-eden"

    async def get_asset(self, params: GetAssetParams) -> NftPrimitive:
        return NftPrimitive(
            contract_address=params.contract_address,
            token_id=params.token_id,
            token_standard=TokenStandard.ERC721,
            chain_id=params.chain_id,
        )

    async def get_listings(self, params: GetListingsParams) -> list[dict[str, Any]]:
        return []

    async def get_offers(self, params: GetOffersParams) -> list[dict[str, Any]]:
        return []

    async def list(self, params: ListParams) -> PreparedAction:
        return prepared("magic-eden-listing", params)

    async def buy(self, params: BuyParams) -> PreparedAction:
        return prepared("magic-eden-buy", params)

    async def offer(self, params: OfferParams) -> PreparedAction:
        return prepared("magic-eden-offer", params)

    async def cancel_offer(self, params: CancelOfferParams) -> PreparedAction:
        return prepared("magic-eden-cancel-offer", params)

    async def transfer(self, params: TransferParams) -> PreparedAction:
        return prepared("magic-eden-transfer", params)

    async def wrap(self, params: WrapParams) -> PreparedAction:
        return prepared("wrap-weth", params)

    async def unwrap(self, params: UnwrapParams) -> PreparedAction:
        return prepared("unwrap-weth", params)

    async def bulk_cancel(self, params: BulkCancelParams) -> PreparedAction:
        return prepared("magic-eden-bulk-cancel", params)
