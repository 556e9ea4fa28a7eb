"""Canonical NFT representation and plugin parameter objects.

All models are immutable and normalize addresses/token ids on construction,
so a plugin never sees a mixed-case address or an integer token id. Models
accept both snake_case field names and the camelCase wire names, and dump
with camelCase.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from nftkit.core.errors import InvalidParamsError
from nftkit.core.normalize import EthAddress, TokenId


class TokenStandard(StrEnum):
    """Supported NFT token standards."""

    ERC721 = "ERC721"
    ERC1155 = "ERC1155"


class _Model(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="ignore",
    )

    @classmethod
    def parse(cls, data: dict[str, Any]) -> Any:
        """Validate ``data``, raising InvalidParamsError with every issue found."""
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise InvalidParamsError(validation_issues(e)) from e

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


def validation_issues(error: ValidationError) -> list[dict[str, Any]]:
    """Flatten a pydantic ValidationError into ``[{path, message}]``."""
    issues = []
    for item in error.errors(include_url=False):
        message = item["msg"]
        # BeforeValidator ValueErrors come through as "Value error, <text>"
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        issues.append(
            {
                "path": ".".join(str(part) for part in item["loc"]),
                "message": message,
            }
        )
    return issues


class NftAttribute(BaseModel):
    model_config = ConfigDict(frozen=True)

    trait_type: str
    value: str | int | float


class NftPrimitive(_Model):
    """Marketplace-independent view of a single NFT."""

    contract_address: EthAddress
    token_id: TokenId
    token_standard: TokenStandard = TokenStandard.ERC721
    owner: EthAddress | None = None
    name: str | None = None
    description: str | None = None
    image: str | None = None
    attributes: list[NftAttribute] | None = None

    is_listed: bool | None = None
    is_offered: bool | None = None
    current_price: str | None = None
    floor_price: str | None = None
    last_sale_price: str | None = None
    offer_price: str | None = None

    collection_slug: str | None = None
    collection_name: str | None = None
    collection_verified: bool | None = None

    chain_id: int


# ---------------------------------------------------------------------------
# Read parameters
# ---------------------------------------------------------------------------


class GetAssetParams(_Model):
    contract_address: EthAddress
    token_id: TokenId
    chain_id: int


GetListingsParams = GetAssetParams
GetOffersParams = GetAssetParams


# ---------------------------------------------------------------------------
# Write parameters
# ---------------------------------------------------------------------------

Price = Annotated[str, Field(min_length=1)]


class ListParams(_Model):
    contract_address: EthAddress
    token_id: TokenId
    chain_id: int
    price: Price
    currency: str = "ETH"


class BuyParams(_Model):
    contract_address: EthAddress
    token_id: TokenId
    chain_id: int
    price: Price


class OfferParams(_Model):
    """Asset offer, or a collection offer when ``token_id`` is omitted."""

    contract_address: EthAddress
    token_id: TokenId | None = None
    chain_id: int
    price: Price
    currency: str = "WETH"


class CancelOfferParams(_Model):
    chain_id: int
    offer_id: str = Field(min_length=1)


class TransferParams(_Model):
    contract_address: EthAddress
    token_id: TokenId
    chain_id: int
    to: EthAddress


class WrapParams(_Model):
    amount: Price
    chain_id: int


UnwrapParams = WrapParams


class BulkCancelParams(_Model):
    chain_id: int
    order_ids: list[str] = Field(min_length=1)
