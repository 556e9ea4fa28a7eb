"""OpenSea actions MCP server (Arbitrum, non-custodial).

Write tools never sign or broadcast. With ``ENABLE_OPENSEA_WRITE`` off they
return a "disabled" payload without touching any plugin; with it on they ask
the configured plugin for a prepared descriptor and return a placeholder
transaction for review.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from decimal import Decimal, InvalidOperation
from typing import Any, ClassVar, Literal

import structlog
from mcp.server.fastmcp import FastMCP
from pydantic import Field, model_validator
from web3 import Web3

from nftkit.core.errors import InvalidParamsError, NftKitError
from nftkit.core.normalize import Chain, EthAddress, TokenId
from nftkit.core.types import (
    BulkCancelParams,
    BuyParams,
    CancelOfferParams,
    ListParams,
    OfferParams,
    TransferParams,
    UnwrapParams,
    WrapParams,
)
from nftkit.nft.config import NftKitSettings
from nftkit.plugins.base import NftPlugin
from nftkit.plugins.registry import PluginRegistry
from nftkit.servers.common import ToolArgs, error_envelope, given

log = structlog.get_logger()

SERVER_NAME = "opensea-actions-mcp-server"

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
DEFAULT_OPENSEA_CONDUIT = "0x1e0049783f008a0085193e00003d00cd54003c71"
WETH_CONTRACT = "0x82af49447d8a07e3bd95bd0d56f35241523fbab1"

NOT_EXECUTED_NOTE = "Transaction prepared but not executed (review required)"

CONTRACT_ALIASES = ("contract_address", "contractAddress")
TOKEN_ALIASES = ("token_id", "tokenId")


class ApproveTokenArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {"contract_address": CONTRACT_ALIASES}

    contract_address: EthAddress
    token_type: Literal["erc721", "erc1155"] = "erc721"
    operator: EthAddress | None = None


class ListNftArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "contract_address": CONTRACT_ALIASES,
        "token_id": TOKEN_ALIASES,
    }

    contract_address: EthAddress
    token_id: TokenId
    price: str
    duration: int = Field(default=30, ge=1)
    currency: EthAddress = ZERO_ADDRESS


class BuyNftArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "contract_address": CONTRACT_ALIASES,
        "token_id": TOKEN_ALIASES,
    }

    contract_address: EthAddress
    token_id: TokenId
    max_price: str | None = None
    currency: EthAddress = ZERO_ADDRESS


class MakeOfferArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "contract_address": CONTRACT_ALIASES,
        "token_id": TOKEN_ALIASES,
    }

    contract_address: EthAddress
    token_id: TokenId | None = None
    price: str
    duration: int = Field(default=7, ge=1)
    offer_type: Literal["asset", "collection"] = "asset"
    currency: EthAddress = ZERO_ADDRESS

    @model_validator(mode="after")
    def _asset_offer_needs_token(self) -> MakeOfferArgs:
        if self.offer_type == "asset" and self.token_id is None:
            raise ValueError("token_id is required for asset offers")
        return self


class CancelOfferArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "contract_address": CONTRACT_ALIASES,
        "token_id": TOKEN_ALIASES,
    }

    contract_address: EthAddress
    token_id: TokenId | None = None
    offer_id: str = Field(min_length=1)


class TransferNftArgs(ToolArgs):
    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {
        "contract_address": CONTRACT_ALIASES,
        "token_id": TOKEN_ALIASES,
    }

    contract_address: EthAddress
    token_id: TokenId
    to_address: EthAddress
    from_address: EthAddress | None = None


class AmountArgs(ToolArgs):
    amount: str


class BulkCancelArgs(ToolArgs):
    order_ids: list[str] = Field(min_length=1)
    order_type: Literal["listings", "offers", "all"] = "all"


def to_wei(amount: str) -> int:
    """Convert a decimal ETH amount to wei.

    Raises:
        ValueError: If the amount is not a positive decimal number
    """
    try:
        value = Decimal(amount.strip())
    except InvalidOperation as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite() or value <= 0:
        raise ValueError(f"Amount must be a positive number: {amount!r}")
    return Web3.to_wei(value, "ether")


def placeholder_transaction(to: str, value: int | str = 0) -> dict[str, Any]:
    """Unsigned transaction stub; calldata is never encoded."""
    return {"to": to, "data": "0x", "value": str(value), "chainId": int(Chain.ARBITRUM)}


class OpenSeaActionTools:
    """Handlers behind the actions server's tools."""

    def __init__(self, registry: PluginRegistry, settings: NftKitSettings) -> None:
        self.registry = registry
        self.settings = settings
        self.chain_id = int(Chain.ARBITRUM)

    @property
    def writes_enabled(self) -> bool:
        return self.settings.enable_write

    def _plugin(self) -> NftPlugin:
        return self.registry.require(self.settings.write_plugin)

    async def _run(
        self,
        tool: str,
        failure: str,
        args_model: type[ToolArgs],
        arguments: Mapping[str, Any],
        prepare: Callable[[Any], Awaitable[dict[str, Any]]],
    ) -> dict[str, Any]:
        try:
            args = args_model.parse(arguments)
        except InvalidParamsError as e:
            return error_envelope(e)

        if not self.writes_enabled:
            log.info("actions.write_disabled", tool=tool)
            return {
                "error": "Write actions disabled",
                "message": "Set ENABLE_OPENSEA_WRITE=true to enable execution",
                "preparedTransaction": "Transaction prepared but not executed (non-custodial mode)",
            }

        try:
            payload = await prepare(args)
        except (NftKitError, ValueError) as e:
            log.warning("actions.prepare_failed", tool=tool, error=str(e))
            return {"error": failure, "details": str(e)}

        log.info("actions.prepared", tool=tool, plugin=self.settings.write_plugin)
        payload["executed"] = False
        payload["note"] = NOT_EXECUTED_NOTE
        return payload

    async def approve_token(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def prepare(args: ApproveTokenArgs) -> dict[str, Any]:
            return {
                "message": "Token approval prepared successfully",
                "contractAddress": args.contract_address,
                "approvedOperator": args.operator or DEFAULT_OPENSEA_CONDUIT,
                "tokenType": args.token_type,
                "preparedTransaction": placeholder_transaction(args.contract_address),
            }

        return await self._run(
            "approve_token", "Failed to prepare token approval", ApproveTokenArgs, arguments, prepare
        )

    async def list_nft(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def prepare(args: ListNftArgs) -> dict[str, Any]:
            price_wei = to_wei(args.price)
            descriptor = await self._plugin().list(
                ListParams(
                    contract_address=args.contract_address,
                    token_id=args.token_id,
                    chain_id=self.chain_id,
                    price=args.price,
                    currency=args.currency,
                )
            )
            return {
                "message": "NFT listing prepared successfully",
                "contractAddress": args.contract_address,
                "tokenId": args.token_id,
                "price": f"{args.price} ETH",
                "priceInWei": str(price_wei),
                "duration": f"{args.duration} days",
                "currency": args.currency,
                "preparedTransaction": placeholder_transaction(ZERO_ADDRESS),
                "prepared": descriptor,
            }

        return await self._run(
            "list_nft", "Failed to prepare NFT listing", ListNftArgs, arguments, prepare
        )

    async def buy_nft(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def prepare(args: BuyNftArgs) -> dict[str, Any]:
            value = to_wei(args.max_price) if args.max_price else 0
            descriptor = await self._plugin().buy(
                BuyParams(
                    contract_address=args.contract_address,
                    token_id=args.token_id,
                    chain_id=self.chain_id,
                    price=args.max_price or "market",
                )
            )
            return {
                "message": "NFT purchase prepared successfully",
                "contractAddress": args.contract_address,
                "tokenId": args.token_id,
                "maxPrice": f"{args.max_price} ETH" if args.max_price else "Market price",
                "currency": args.currency,
                "preparedTransaction": placeholder_transaction(ZERO_ADDRESS, value),
                "prepared": descriptor,
            }

        return await self._run(
            "buy_nft", "Failed to prepare NFT purchase", BuyNftArgs, arguments, prepare
        )

    async def make_offer(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def prepare(args: MakeOfferArgs) -> dict[str, Any]:
            price_wei = to_wei(args.price)
            descriptor = await self._plugin().offer(
                OfferParams(
                    contract_address=args.contract_address,
                    token_id=args.token_id,
                    chain_id=self.chain_id,
                    price=args.price,
                    currency=args.currency,
                )
            )
            return {
                "message": "Offer prepared successfully",
                "contractAddress": args.contract_address,
                "tokenId": args.token_id,
                "price": f"{args.price} ETH",
                "priceInWei": str(price_wei),
                "duration": f"{args.duration} days",
                "offerType": args.offer_type,
                "currency": args.currency,
                "preparedTransaction": placeholder_transaction(ZERO_ADDRESS),
                "prepared": descriptor,
            }

        return await self._run(
            "make_offer", "Failed to prepare offer", MakeOfferArgs, arguments, prepare
        )

    async def cancel_offer(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def prepare(args: CancelOfferArgs) -> dict[str, Any]:
            descriptor = await self._plugin().cancel_offer(
                CancelOfferParams(chain_id=self.chain_id, offer_id=args.offer_id)
            )
            return {
                "message": "Offer cancellation prepared successfully",
                "contractAddress": args.contract_address,
                "tokenId": args.token_id,
                "offerId": args.offer_id,
                "preparedTransaction": placeholder_transaction(ZERO_ADDRESS),
                "prepared": descriptor,
            }

        return await self._run(
            "cancel_offer",
            "Failed to prepare offer cancellation",
            CancelOfferArgs,
            arguments,
            prepare,
        )

    async def transfer_nft(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def prepare(args: TransferNftArgs) -> dict[str, Any]:
            descriptor = await self._plugin().transfer(
                TransferParams(
                    contract_address=args.contract_address,
                    token_id=args.token_id,
                    chain_id=self.chain_id,
                    to=args.to_address,
                )
            )
            return {
                "message": "NFT transfer prepared successfully",
                "contractAddress": args.contract_address,
                "tokenId": args.token_id,
                "toAddress": args.to_address,
                "fromAddress": args.from_address,
                "preparedTransaction": placeholder_transaction(args.contract_address),
                "prepared": descriptor,
            }

        return await self._run(
            "transfer_nft", "Failed to prepare NFT transfer", TransferNftArgs, arguments, prepare
        )

    async def wrap_weth(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def prepare(args: AmountArgs) -> dict[str, Any]:
            amount_wei = to_wei(args.amount)
            descriptor = await self._plugin().wrap(
                WrapParams(amount=args.amount, chain_id=self.chain_id)
            )
            return {
                "message": "WETH wrap prepared successfully",
                "amount": f"{args.amount} ETH",
                "amountInWei": str(amount_wei),
                "wethContract": WETH_CONTRACT,
                "preparedTransaction": placeholder_transaction(WETH_CONTRACT, amount_wei),
                "prepared": descriptor,
            }

        return await self._run(
            "wrap_weth", "Failed to prepare WETH wrap", AmountArgs, arguments, prepare
        )

    async def unwrap_weth(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def prepare(args: AmountArgs) -> dict[str, Any]:
            amount_wei = to_wei(args.amount)
            descriptor = await self._plugin().unwrap(
                UnwrapParams(amount=args.amount, chain_id=self.chain_id)
            )
            return {
                "message": "WETH unwrap prepared successfully",
                "amount": f"{args.amount} WETH",
                "amountInWei": str(amount_wei),
                "wethContract": WETH_CONTRACT,
                "preparedTransaction": placeholder_transaction(WETH_CONTRACT),
                "prepared": descriptor,
            }

        return await self._run(
            "unwrap_weth", "Failed to prepare WETH unwrap", AmountArgs, arguments, prepare
        )

    async def bulk_cancel(self, arguments: Mapping[str, Any]) -> dict[str, Any]:
        async def prepare(args: BulkCancelArgs) -> dict[str, Any]:
            descriptor = await self._plugin().bulk_cancel(
                BulkCancelParams(chain_id=self.chain_id, order_ids=args.order_ids)
            )
            return {
                "message": "Bulk cancellation prepared successfully",
                "orderIds": args.order_ids,
                "orderType": args.order_type,
                "count": len(args.order_ids),
                "preparedTransaction": placeholder_transaction(ZERO_ADDRESS),
                "prepared": descriptor,
            }

        return await self._run(
            "bulk_cancel",
            "Failed to prepare bulk cancellation",
            BulkCancelArgs,
            arguments,
            prepare,
        )


WRITE_SUFFIX = (
    " This prepares the transaction but does not execute it unless ENABLE_OPENSEA_WRITE=true."
)


def create_actions_server(tools: OpenSeaActionTools, *, port: int | None = None) -> FastMCP:
    """Build the FastMCP server exposing the write tools."""
    server = FastMCP(
        SERVER_NAME,
        instructions=(
            "Non-custodial OpenSea actions on Arbitrum. Tools only prepare "
            "placeholder transactions; nothing is signed or broadcast."
        ),
    )
    if port is not None:
        server.settings.port = port

    @server.tool(
        name="approve_token",
        description="Approve NFT contract for trading on OpenSea (Arbitrum only)." + WRITE_SUFFIX,
    )
    async def approve_token(
        contract_address: str,
        token_type: str = "erc721",
        operator: str | None = None,
    ) -> dict[str, Any]:
        return await tools.approve_token(
            given(
                {
                    "contract_address": contract_address,
                    "token_type": token_type,
                    "operator": operator,
                }
            )
        )

    @server.tool(
        name="list_nft",
        description="Create a fixed-price listing for an NFT on OpenSea (Arbitrum only)."
        + WRITE_SUFFIX,
    )
    async def list_nft(
        contract_address: str,
        token_id: str | int,
        price: str,
        duration: int = 30,
        currency: str = ZERO_ADDRESS,
    ) -> dict[str, Any]:
        return await tools.list_nft(
            {
                "contract_address": contract_address,
                "token_id": token_id,
                "price": price,
                "duration": duration,
                "currency": currency,
            }
        )

    @server.tool(
        name="buy_nft",
        description="Purchase a listed NFT on OpenSea (Arbitrum only)." + WRITE_SUFFIX,
    )
    async def buy_nft(
        contract_address: str,
        token_id: str | int,
        max_price: str | None = None,
        currency: str = ZERO_ADDRESS,
    ) -> dict[str, Any]:
        return await tools.buy_nft(
            given(
                {
                    "contract_address": contract_address,
                    "token_id": token_id,
                    "max_price": max_price,
                    "currency": currency,
                }
            )
        )

    @server.tool(
        name="make_offer",
        description="Create an offer for an NFT asset or collection on OpenSea (Arbitrum only)."
        + WRITE_SUFFIX,
    )
    async def make_offer(
        contract_address: str,
        price: str,
        token_id: str | int | None = None,
        duration: int = 7,
        offer_type: str = "asset",
        currency: str = ZERO_ADDRESS,
    ) -> dict[str, Any]:
        return await tools.make_offer(
            given(
                {
                    "contract_address": contract_address,
                    "token_id": token_id,
                    "price": price,
                    "duration": duration,
                    "offer_type": offer_type,
                    "currency": currency,
                }
            )
        )

    @server.tool(
        name="cancel_offer",
        description="Cancel an existing offer on OpenSea (Arbitrum only)." + WRITE_SUFFIX,
    )
    async def cancel_offer(
        contract_address: str,
        offer_id: str,
        token_id: str | int | None = None,
    ) -> dict[str, Any]:
        return await tools.cancel_offer(
            given(
                {
                    "contract_address": contract_address,
                    "token_id": token_id,
                    "offer_id": offer_id,
                }
            )
        )

    @server.tool(
        name="transfer_nft",
        description="Transfer an NFT to another wallet on Arbitrum." + WRITE_SUFFIX,
    )
    async def transfer_nft(
        contract_address: str,
        token_id: str | int,
        to_address: str,
        from_address: str | None = None,
    ) -> dict[str, Any]:
        return await tools.transfer_nft(
            given(
                {
                    "contract_address": contract_address,
                    "token_id": token_id,
                    "to_address": to_address,
                    "from_address": from_address,
                }
            )
        )

    @server.tool(name="wrap_weth", description="Wrap ETH to WETH on Arbitrum." + WRITE_SUFFIX)
    async def wrap_weth(amount: str) -> dict[str, Any]:
        return await tools.wrap_weth({"amount": amount})

    @server.tool(name="unwrap_weth", description="Unwrap WETH to ETH on Arbitrum." + WRITE_SUFFIX)
    async def unwrap_weth(amount: str) -> dict[str, Any]:
        return await tools.unwrap_weth({"amount": amount})

    @server.tool(
        name="bulk_cancel",
        description="Cancel multiple orders at once on OpenSea (Arbitrum only)." + WRITE_SUFFIX,
    )
    async def bulk_cancel(order_ids: list[str], order_type: str = "all") -> dict[str, Any]:
        return await tools.bulk_cancel({"order_ids": order_ids, "order_type": order_type})

    return server
