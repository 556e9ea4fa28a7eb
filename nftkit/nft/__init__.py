"""OpenSea REST access: settings and the resilient fetch client."""

from .config import NftKitSettings
from .opensea_client import (
    FetchResult,
    OpenSeaClient,
    OrderSide,
    RateLimitInfo,
    next_cursor,
)

__all__ = [
    "FetchResult",
    "NftKitSettings",
    "OpenSeaClient",
    "OrderSide",
    "RateLimitInfo",
    "next_cursor",
]
