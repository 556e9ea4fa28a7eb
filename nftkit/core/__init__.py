"""Core NFT types, normalization and errors."""

from nftkit.core.errors import (
    InvalidParamsError,
    MarketplaceAPIError,
    NftKitError,
    PluginConformanceError,
    PluginNotRegisteredError,
    RetryableError,
    RetryExhaustedError,
    TerminalError,
    UnexpectedResponseError,
)
from nftkit.core.normalize import (
    Chain,
    chain_slug,
    normalize_address,
    normalize_slug,
    normalize_token_id,
)
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

__all__ = [
    "BulkCancelParams",
    "BuyParams",
    "CancelOfferParams",
    "Chain",
    "GetAssetParams",
    "GetListingsParams",
    "GetOffersParams",
    "InvalidParamsError",
    "ListParams",
    "MarketplaceAPIError",
    "NftAttribute",
    "NftKitError",
    "NftPrimitive",
    "OfferParams",
    "PluginConformanceError",
    "PluginNotRegisteredError",
    "RetryExhaustedError",
    "RetryableError",
    "TerminalError",
    "TokenStandard",
    "UnexpectedResponseError",
    "TransferParams",
    "UnwrapParams",
    "WrapParams",
    "chain_slug",
    "normalize_address",
    "normalize_slug",
    "normalize_token_id",
]
