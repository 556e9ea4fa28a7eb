"""NFT plugin capability interface.

A plugin is one marketplace backend. Read capabilities may hit the network;
write capabilities are non-custodial and only return a prepared descriptor
``{"prepared": <operation tag>, "params": <input echoed back>}``.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

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
    TransferParams,
    UnwrapParams,
    WrapParams,
)

PreparedAction = dict[str, Any]

READ_CAPABILITIES = ("get_asset", "get_listings", "get_offers")
WRITE_CAPABILITIES = (
    "list",
    "buy",
    "offer",
    "cancel_offer",
    "transfer",
    "wrap",
    "unwrap",
    "bulk_cancel",
)
CAPABILITIES = READ_CAPABILITIES + WRITE_CAPABILITIES


def prepared(tag: str, params: Any) -> PreparedAction:
    """Build the placeholder returned by every write capability."""
    return {"prepared": tag, "params": params.to_wire()}


def missing_capabilities(plugin: object) -> list[str]:
    """Names of capabilities ``plugin`` does not provide as callables."""
    return [name for name in CAPABILITIES if not callable(getattr(plugin, name, None))]


@runtime_checkable
class NftPlugin(Protocol):
    """Protocol every marketplace plugin must implement."""

    id: str

    async def get_asset(self, params: GetAssetParams) -> NftPrimitive:
        """Fetch one NFT as a marketplace-independent primitive."""
        ...

    async def get_listings(self, params: GetListingsParams) -> list[dict[str, Any]]:
        """Active listings for an asset (raw marketplace order objects)."""
        ...

    async def get_offers(self, params: GetOffersParams) -> list[dict[str, Any]]:
        """Active offers for an asset (raw marketplace order objects)."""
        ...

    async def list(self, params: ListParams) -> PreparedAction: ...

    async def buy(self, params: BuyParams) -> PreparedAction: ...

    async def offer(self, params: OfferParams) -> PreparedAction: ...

    async def cancel_offer(self, params: CancelOfferParams) -> PreparedAction: ...

    async def transfer(self, params: TransferParams) -> PreparedAction: ...

    async def wrap(self, params: WrapParams) -> PreparedAction: ...

    async def unwrap(self, params: UnwrapParams) -> PreparedAction: ...

    async def bulk_cancel(self, params: BulkCancelParams) -> PreparedAction: ...
