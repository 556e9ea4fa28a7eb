"""Listings/offers lookup with plugin-first routing and collection fallback.

Order of preference for an asset's order book:

1. The registered plugin. Its outcome is explicit: SUCCESS, EMPTY or ERROR.
   The plugin makes a single attempt. Its orders are returned with
   ``rateLimit`` and ``nextCursor`` set to None, and ``limit``/``cursor`` do
   not apply, since the plugin interface is not paginated.
2. EMPTY with ``fallback_to_collection`` and a collection slug: the
   collection-scoped endpoint, tagged ``collection_listings`` /
   ``collection_offers``.
3. ERROR or no plugin: the asset endpoint over raw HTTP, with the same
   collection fallback when it returns no orders.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

import structlog

from nftkit.core.normalize import chain_slug
from nftkit.core.types import GetAssetParams
from nftkit.nft.opensea_client import FetchResult, OpenSeaClient, OrderSide, next_cursor
from nftkit.plugins.base import NftPlugin
from nftkit.plugins.registry import PluginRegistry

log = structlog.get_logger()

FALLBACK_TAGS = {
    OrderSide.LISTINGS: "collection_listings",
    OrderSide.OFFERS: "collection_offers",
}


class OutcomeKind(StrEnum):
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class PluginOutcome:
    """Result of asking a plugin for an order book."""

    kind: OutcomeKind
    orders: list[dict[str, Any]] = field(default_factory=list)
    error: Exception | None = None


@dataclass(frozen=True)
class AssetOrdersQuery:
    contract_address: str
    token_id: str
    chain_id: int
    collection_slug: str | None = None
    fallback_to_collection: bool = False
    limit: int | None = None
    cursor: str | None = None

    @property
    def wants_collection_fallback(self) -> bool:
        return bool(self.fallback_to_collection and self.collection_slug)


async def query_plugin(plugin: NftPlugin, side: OrderSide, params: GetAssetParams) -> PluginOutcome:
    """Ask ``plugin`` for listings or offers and classify the outcome."""
    capability = plugin.get_listings if side == OrderSide.LISTINGS else plugin.get_offers
    try:
        orders = await capability(params)
    except Exception as e:
        log.warning(
            "plugin.orders_failed",
            plugin_id=getattr(plugin, "id", None),
            side=str(side),
            error=str(e),
        )
        return PluginOutcome(OutcomeKind.ERROR, error=e)

    if not orders:
        return PluginOutcome(OutcomeKind.EMPTY)
    return PluginOutcome(OutcomeKind.SUCCESS, orders=list(orders))


def envelope(result: FetchResult, *, fallback: str | None = None) -> dict[str, Any]:
    """Standard read-tool payload for a fetch result."""
    payload: dict[str, Any] = {
        "rateLimit": result.rate_limit.to_dict(),
        "nextCursor": next_cursor(result.data),
        "data": result.data,
    }
    if fallback is not None:
        payload["fallback"] = fallback
    return payload


class AssetOrderReader:
    """Resolves an asset's listings or offers through plugin and HTTP paths."""

    def __init__(
        self,
        registry: PluginRegistry,
        client: OpenSeaClient,
        *,
        plugin_id: str = "opensea",
    ) -> None:
        self.registry = registry
        self.client = client
        self.plugin_id = plugin_id

    async def read(self, side: OrderSide, query: AssetOrdersQuery) -> dict[str, Any]:
        plugin = self.registry.resolve(self.plugin_id)
        if plugin is not None:
            params = GetAssetParams(
                contract_address=query.contract_address,
                token_id=query.token_id,
                chain_id=query.chain_id,
            )
            outcome = await query_plugin(plugin, side, params)

            if outcome.kind == OutcomeKind.SUCCESS:
                return self._plugin_envelope(outcome.orders)
            if outcome.kind == OutcomeKind.EMPTY:
                if query.wants_collection_fallback:
                    return await self._collection_fallback(side, query)
                return self._plugin_envelope([])
            log.info("orders.http_fallback", plugin_id=self.plugin_id, side=str(side))
        else:
            log.debug("orders.no_plugin", plugin_id=self.plugin_id, side=str(side))

        result = await self.client.get_orders(
            side,
            chain_slug(query.chain_id),
            asset_contract_address=query.contract_address,
            token_ids=query.token_id,
            limit=query.limit,
            cursor=query.cursor,
        )
        orders = result.data.get("orders") if isinstance(result.data, dict) else None
        if isinstance(orders, list) and not orders and query.wants_collection_fallback:
            return await self._collection_fallback(side, query)
        return envelope(result)

    async def _collection_fallback(self, side: OrderSide, query: AssetOrdersQuery) -> dict[str, Any]:
        log.info(
            "orders.collection_fallback",
            side=str(side),
            collection_slug=query.collection_slug,
        )
        result = await self.client.get_orders(
            side,
            chain_slug(query.chain_id),
            collection_slug=query.collection_slug,
            limit=query.limit,
            cursor=query.cursor,
        )
        return envelope(result, fallback=FALLBACK_TAGS[side])

    @staticmethod
    def _plugin_envelope(orders: list[dict[str, Any]]) -> dict[str, Any]:
        return {"rateLimit": None, "nextCursor": None, "data": {"orders": orders}}
