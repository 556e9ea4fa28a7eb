"""Utility modules for the marketplace tool servers.

Provides:
- Retry with exponential backoff (explicit state machine)
- Structured logging setup
"""

from nftkit.utils.logging import configure_logging
from nftkit.utils.resilience import (
    DEFAULT_RETRY_POLICY,
    SINGLE_ATTEMPT_POLICY,
    FailedAttempt,
    Retrier,
    RetryPolicy,
    RetryState,
    classify_error,
)

__all__ = [
    "DEFAULT_RETRY_POLICY",
    "SINGLE_ATTEMPT_POLICY",
    "FailedAttempt",
    "Retrier",
    "RetryPolicy",
    "RetryState",
    "classify_error",
    "configure_logging",
]
