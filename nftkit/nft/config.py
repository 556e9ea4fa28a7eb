"""Configuration for the OpenSea tool servers.

Pydantic BaseSettings loaded from the environment and an optional .env file.

Example .env:
    OPENSEA_API_KEY=your_api_key_here
    ENABLE_OPENSEA_WRITE=false
    DEFAULT_ARBITRUM_WALLET=0xc9d7a0d7136277a4b1ffda1cadb0f1f114865af1
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nftkit.core.normalize import normalize_address

OPENSEA_BASE_URL = "https://api.opensea.io"


class NftKitSettings(BaseSettings):
    """Typed settings shared by the read and actions servers."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    opensea_api_key: SecretStr = Field(
        default=SecretStr(""),
        alias="OPENSEA_API_KEY",
        description="OpenSea API key sent as x-api-key",
    )
    opensea_base_url: str = Field(
        default=OPENSEA_BASE_URL,
        alias="OPENSEA_BASE_URL",
        description="Override for the OpenSea API host",
    )
    request_timeout: Annotated[
        float,
        Field(gt=0, le=300, alias="OPENSEA_REQUEST_TIMEOUT"),
    ] = 30.0

    enable_write: bool = Field(
        default=False,
        alias="ENABLE_OPENSEA_WRITE",
        description="Allow write tools to prepare transactions",
    )
    write_plugin: str = Field(
        default="opensea",
        alias="NFT_WRITE_PLUGIN",
        description="Plugin id used by the write tools",
    )
    default_wallet: str = Field(
        default="0xc9d7a0d7136277a4b1ffda1cadb0f1f114865af1",
        alias="DEFAULT_ARBITRUM_WALLET",
    )

    enable_http: bool = Field(default=False, alias="ENABLE_HTTP")
    port: int | None = Field(default=None, ge=1, le=65535, alias="PORT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_json: bool = Field(default=True, alias="LOG_JSON")

    @field_validator("default_wallet", mode="before")
    @classmethod
    def _normalize_wallet(cls, value: str) -> str:
        return normalize_address(value)

    @field_validator("opensea_base_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def api_key(self) -> str:
        return self.opensea_api_key.get_secret_value()
