"""Exception hierarchy shared by the fetch layer, plugins and tool servers."""

from __future__ import annotations

from typing import Any


class NftKitError(Exception):
    """Base exception for nftkit errors."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body


class InvalidParamsError(NftKitError):
    """Raised when tool or plugin arguments fail validation.

    Carries a structured issue list so callers can report every problem at
    once instead of the first one.
    """

    def __init__(self, issues: list[dict[str, Any]]) -> None:
        summary = "; ".join(
            f"{issue.get('path') or '<root>'}: {issue.get('message')}" for issue in issues
        )
        super().__init__(f"Invalid arguments: {summary}")
        self.issues = issues


class MarketplaceAPIError(NftKitError):
    """Non-success HTTP response from a marketplace REST API."""

    def __init__(self, status_code: int, body: str, *, marketplace: str = "OpenSea") -> None:
        super().__init__(
            f"{marketplace} API error {status_code}: {body}",
            status_code=status_code,
            body=body,
        )


class _ClassifiedError(NftKitError):
    """Wraps a failure with its retry classification."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(
            str(cause),
            status_code=getattr(cause, "status_code", None),
            body=getattr(cause, "body", None),
        )
        self.cause = cause


class RetryableError(_ClassifiedError):
    """Transient failure (429, 5xx, network fault); safe to retry."""


class TerminalError(_ClassifiedError):
    """Failure that must never be retried."""


class RetryExhaustedError(NftKitError):
    """Raised when every attempt in the retry budget failed."""

    def __init__(self, attempts: int, last_error: BaseException) -> None:
        super().__init__(
            f"Giving up after {attempts} attempts: {last_error}",
            status_code=getattr(last_error, "status_code", None),
            body=getattr(last_error, "body", None),
        )
        self.attempts = attempts
        self.last_error = last_error


class PluginNotRegisteredError(NftKitError):
    """Raised when a plugin-only call site asks for an unknown plugin id."""

    def __init__(self, plugin_id: str) -> None:
        super().__init__(f"NFT plugin not registered: {plugin_id}")
        self.plugin_id = plugin_id


class PluginConformanceError(NftKitError):
    """Raised when an object missing capabilities is registered as a plugin."""

    def __init__(self, plugin_id: str, missing: list[str]) -> None:
        super().__init__(
            f"Plugin '{plugin_id}' does not implement: {', '.join(missing)}"
        )
        self.plugin_id = plugin_id
        self.missing = missing


class UnexpectedResponseError(NftKitError):
    """Marketplace response did not have the expected shape."""

    def __init__(self, detail: str, *, marketplace: str = "OpenSea") -> None:
        super().__init__(f"Unexpected {marketplace} response: {detail}")
