"""Argument parsing and result envelopes shared by the tool servers."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from typing import Any, ClassVar

import structlog
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from nftkit.core.errors import (
    InvalidParamsError,
    NftKitError,
    PluginNotRegisteredError,
)
from nftkit.core.types import validation_issues

log = structlog.get_logger()


def coalesce(data: Mapping[str, Any], *names: str) -> Any:
    """First value among ``names`` that is present and not a blank string."""
    for name in names:
        value = data.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


class ToolArgs(BaseModel):
    """Base for tool argument models.

    ``ALIASES`` maps a canonical field to the argument names accepted for it,
    in priority order; the first non-blank one wins.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    ALIASES: ClassVar[dict[str, tuple[str, ...]]] = {}

    @model_validator(mode="before")
    @classmethod
    def _apply_aliases(cls, data: Any) -> Any:
        if not isinstance(data, Mapping) or not cls.ALIASES:
            return data
        resolved = dict(data)
        for target, names in cls.ALIASES.items():
            value = coalesce(data, *names)
            if value is None:
                resolved.pop(target, None)
            else:
                resolved[target] = value
        return resolved

    @classmethod
    def parse(cls, arguments: Mapping[str, Any]) -> Any:
        try:
            return cls.model_validate(dict(arguments))
        except ValidationError as e:
            raise InvalidParamsError(validation_issues(e)) from e


def given(arguments: Mapping[str, Any]) -> dict[str, Any]:
    """Drop arguments the caller did not supply."""
    return {key: value for key, value in arguments.items() if value is not None}


def error_envelope(error: NftKitError) -> dict[str, Any]:
    """JSON payload reported in place of a result when a tool fails."""
    if isinstance(error, InvalidParamsError):
        return {"error": "Invalid arguments", "message": error.message, "issues": error.issues}
    if isinstance(error, PluginNotRegisteredError):
        return {"error": "Plugin not registered", "message": error.message}

    payload: dict[str, Any] = {"error": "Marketplace request failed", "message": error.message}
    if error.status_code is not None:
        payload["status"] = error.status_code
    return payload


async def run_tool(
    tool: str,
    handler: Callable[[], Awaitable[dict[str, Any]]],
) -> dict[str, Any]:
    """Run a tool handler, turning nftkit errors into an error envelope."""
    try:
        return await handler()
    except NftKitError as e:
        log.warning(
            "tool.failed",
            tool=tool,
            error_type=type(e).__name__,
            status=e.status_code,
            error=e.message,
        )
        return error_envelope(e)
