"""Address, token id and chain normalization shared by every operation."""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Annotated, Any

from pydantic import BeforeValidator

ADDRESS_PATTERN = re.compile(r"^0x[a-f0-9]{40}$")


class Chain(IntEnum):
    """EVM chains the marketplace tools know about."""

    ETHEREUM = 1
    ARBITRUM = 42161


# Every chain other than Arbitrum resolves to "ethereum".
CHAIN_TO_MARKETPLACE_SLUG: dict[int, str] = {
    Chain.ARBITRUM: "arbitrum",
}
DEFAULT_CHAIN_SLUG = "ethereum"


def normalize_address(value: Any) -> str:
    """Trim, lower-case and validate an EVM address.

    Raises:
        ValueError: If the value is not ``0x`` followed by 40 hex characters.
    """
    if not isinstance(value, str):
        raise ValueError("address must be a string")
    address = value.strip().lower()
    if not ADDRESS_PATTERN.match(address):
        raise ValueError("address must be a 42-char 0x-prefixed hex string")
    return address


def normalize_token_id(value: Any) -> str:
    """Return the trimmed string form of a token id given as int or str."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError("token_id must be a string or an integer")
    token_id = str(value).strip()
    if not token_id:
        raise ValueError("token_id cannot be empty")
    return token_id


def normalize_slug(value: Any) -> str:
    """Return a trimmed, non-empty collection slug."""
    if not isinstance(value, str):
        raise ValueError("collection_slug must be a string")
    slug = value.strip()
    if not slug:
        raise ValueError("collection_slug cannot be empty")
    return slug


def chain_slug(chain_id: int) -> str:
    """Map a numeric chain id to the marketplace chain slug used in API paths."""
    return CHAIN_TO_MARKETPLACE_SLUG.get(chain_id, DEFAULT_CHAIN_SLUG)


EthAddress = Annotated[str, BeforeValidator(normalize_address)]
TokenId = Annotated[str, BeforeValidator(normalize_token_id)]
CollectionSlug = Annotated[str, BeforeValidator(normalize_slug)]
