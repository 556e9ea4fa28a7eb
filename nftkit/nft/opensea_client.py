"""
OpenSea API v2 client with retry and rate-limit surfacing.

Every read goes through ``fetch``: transient failures (429, 5xx, network
faults) are retried with exponential backoff, other HTTP errors fail
immediately, and the ``x-ratelimit-*`` headers of the successful response are
returned next to the decoded payload.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx
import structlog

from nftkit.core.errors import MarketplaceAPIError
from nftkit.nft.config import OPENSEA_BASE_URL, NftKitSettings
from nftkit.utils.resilience import DEFAULT_RETRY_POLICY, Retrier, RetryPolicy

log = structlog.get_logger()

QueryValue = str | int | float | None


@dataclass(frozen=True)
class RateLimitInfo:
    """Rate-limit headers of a response, verbatim, or None when absent."""

    limit: str | None
    remaining: str | None
    reset: str | None

    @classmethod
    def from_headers(cls, headers: httpx.Headers) -> RateLimitInfo:
        return cls(
            limit=headers.get("x-ratelimit-limit"),
            remaining=headers.get("x-ratelimit-remaining"),
            reset=headers.get("x-ratelimit-reset"),
        )

    def to_dict(self) -> dict[str, str | None]:
        return {"limit": self.limit, "remaining": self.remaining, "reset": self.reset}


@dataclass(frozen=True)
class FetchResult:
    """Decoded JSON body plus rate-limit metadata of one successful call."""

    data: Any
    rate_limit: RateLimitInfo


class OrderSide(StrEnum):
    """Seaport order book side."""

    LISTINGS = "listings"
    OFFERS = "offers"


def next_cursor(data: Any) -> str | None:
    """Pagination cursor of a response (``next``, then ``next_cursor``)."""
    if not isinstance(data, Mapping):
        return None
    for key in ("next", "next_cursor"):
        value = data.get(key)
        if value is not None:
            return value
    return None


def build_query(params: Mapping[str, QueryValue] | None) -> dict[str, str]:
    """Stringify query parameters, dropping absent values."""
    if not params:
        return {}
    return {key: str(value) for key, value in params.items() if value is not None}


class OpenSeaClient:
    """
    Client for OpenSea API v2.

    Example:
        >>> async with OpenSeaClient(api_key="...") as client:
        ...     result = await client.get_collection("alchemy-denver2025-blue")
        ...     result.rate_limit.remaining
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = OPENSEA_BASE_URL,
        *,
        timeout: float = 30.0,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        """
        Initialize OpenSea client.

        Args:
            api_key: OpenSea API key (sent as x-api-key)
            base_url: API host; paths passed to ``fetch`` start with /api/v2
            timeout: Per-request timeout in seconds
            retry_policy: Backoff parameters for transient failures
            transport: Optional httpx transport (tests use httpx.MockTransport)
            sleep: Awaitable used for backoff delays
            rng: Random source for backoff jitter
        """
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy
        self._sleep = sleep
        self._rng = rng or random.Random()

        headers = {"accept": "application/json"}
        if api_key:
            headers["x-api-key"] = api_key

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers=headers,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: NftKitSettings, **kwargs: Any) -> OpenSeaClient:
        return cls(
            api_key=settings.api_key(),
            base_url=settings.opensea_base_url,
            timeout=settings.request_timeout,
            **kwargs,
        )

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self) -> OpenSeaClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def fetch(
        self,
        path: str,
        params: Mapping[str, QueryValue] | None = None,
        *,
        retry_policy: RetryPolicy | None = None,
    ) -> FetchResult:
        """
        GET ``path`` with retry on transient failures.

        Args:
            path: API path (e.g. /api/v2/collections/{slug})
            params: Query parameters; None values are omitted
            retry_policy: Overrides the client policy for this call

        Returns:
            FetchResult with the decoded JSON and rate-limit headers

        Raises:
            TerminalError: Non-retryable failure (4xx other than 429, bad JSON)
            RetryExhaustedError: Transient failures used up the retry budget
        """
        query = build_query(params)

        async def attempt() -> FetchResult:
            response = await self.client.get(path, params=query)
            if not response.is_success:
                raise MarketplaceAPIError(response.status_code, response.text)
            return FetchResult(
                data=response.json(),
                rate_limit=RateLimitInfo.from_headers(response.headers),
            )

        retrier = Retrier(
            retry_policy or self.retry_policy,
            sleep=self._sleep,
            rng=self._rng,
            name="opensea",
        )
        result = await retrier.run(attempt)

        log.debug(
            "opensea.fetched",
            path=path,
            attempts=retrier.attempts,
            ratelimit_remaining=result.rate_limit.remaining,
        )
        return result

    async def get_wallet_nfts(
        self,
        wallet_address: str,
        chain: str = "ethereum",
        *,
        cursor: str | None = None,
        limit: int | None = None,
    ) -> FetchResult:
        """Fetch NFTs owned by a wallet on ``chain``."""
        return await self.fetch(
            f"/api/v2/chain/{chain}/account/{wallet_address}/nfts",
            {"cursor": cursor, "limit": limit},
        )

    async def get_collection(self, collection_slug: str) -> FetchResult:
        """Fetch collection details by slug."""
        return await self.fetch(f"/api/v2/collections/{collection_slug}")

    async def list_collections(
        self,
        *,
        limit: int = 20,
        cursor: str | None = None,
    ) -> FetchResult:
        """List collections; ``cursor`` is sent as OpenSea's ``next`` parameter."""
        return await self.fetch("/api/v2/collections", {"limit": limit, "next": cursor})

    async def get_orders(
        self,
        side: OrderSide,
        chain: str,
        *,
        asset_contract_address: str | None = None,
        token_ids: str | None = None,
        collection_slug: str | None = None,
        limit: int | None = None,
        cursor: str | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> FetchResult:
        """Query Seaport listings or offers, scoped to an asset or a collection."""
        return await self.fetch(
            f"/api/v2/orders/{chain}/seaport/{side}",
            {
                "asset_contract_address": asset_contract_address,
                "token_ids": token_ids,
                "collection_slug": collection_slug,
                "limit": limit,
                "next": cursor,
            },
            retry_policy=retry_policy,
        )

    async def get_nft(self, chain: str, contract_address: str, token_id: str) -> FetchResult:
        """Fetch a single NFT by contract and token id."""
        return await self.fetch(
            f"/api/v2/chain/{chain}/contract/{contract_address}/nfts/{token_id}"
        )
