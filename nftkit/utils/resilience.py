"""Retry with exponential backoff for marketplace API calls.

Implements:
- Failure classification (retryable vs terminal)
- Exponential backoff with jitter, capped per delay
- A fixed retry budget driven by an explicit state machine

States:
- ATTEMPTING: calling the operation
- BACKOFF: waiting before the next attempt
- SUCCEEDED: operation returned a value
- FAILED_TERMINAL: a terminal error aborted the run
- FAILED_EXHAUSTED: every attempt failed with a retryable error
"""

from __future__ import annotations

import asyncio
import random
import re
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeVar

import httpx
import structlog

from nftkit.core.errors import (
    MarketplaceAPIError,
    RetryableError,
    RetryExhaustedError,
    TerminalError,
)

log = structlog.get_logger()

T = TypeVar("T")

TRANSIENT_MESSAGE = re.compile(r"429|5\d\d|rate|timeout|network", re.IGNORECASE)


def classify_error(error: BaseException) -> RetryableError | TerminalError:
    """Tag a failure as retryable or terminal.

    HTTP errors are classified by status code (429 and 5xx retry). Transport
    failures and any error whose message looks transient are retryable.
    Everything else is terminal.
    """
    if isinstance(error, (RetryableError, TerminalError)):
        return error

    if isinstance(error, MarketplaceAPIError):
        status = error.status_code or 0
        if status == 429 or status >= 500:
            return RetryableError(error)
        return TerminalError(error)

    if isinstance(error, httpx.TransportError):
        return RetryableError(error)

    if TRANSIENT_MESSAGE.search(str(error)):
        return RetryableError(error)

    return TerminalError(error)


class RetryState(StrEnum):
    """Lifecycle of a single retried operation."""

    ATTEMPTING = "attempting"
    BACKOFF = "backoff"
    SUCCEEDED = "succeeded"
    FAILED_TERMINAL = "failed_terminal"
    FAILED_EXHAUSTED = "failed_exhausted"


@dataclass(frozen=True)
class RetryPolicy:
    """Backoff parameters.

    Attributes:
        retries: Additional attempts after the first one
        factor: Exponential growth factor between delays
        min_delay: Base delay in seconds
        max_delay: Upper bound for any single delay in seconds
        randomize: Multiply each delay by a random factor in [1, 2)
    """

    retries: int = 4
    factor: float = 2.0
    min_delay: float = 0.5
    max_delay: float = 4.0
    randomize: bool = True

    @property
    def max_attempts(self) -> int:
        return self.retries + 1

    def backoff_delay(self, retry_number: int, rng: random.Random) -> float:
        """Delay before retry ``retry_number`` (1-based)."""
        jitter = rng.uniform(1.0, 2.0) if self.randomize else 1.0
        delay = self.min_delay * jitter * self.factor ** (retry_number - 1)
        return min(delay, self.max_delay)


DEFAULT_RETRY_POLICY = RetryPolicy()
SINGLE_ATTEMPT_POLICY = RetryPolicy(retries=0)


@dataclass(frozen=True)
class FailedAttempt:
    """Details of one failed attempt, passed to the failure hook."""

    attempt_number: int
    retries_left: int
    error: RetryableError | TerminalError


class Retrier:
    """Runs an async operation under a RetryPolicy.

    One Retrier drives one logical operation; create a new one per call.

    Example:
        >>> retrier = Retrier(RetryPolicy(retries=2), name="opensea")
        >>> data = await retrier.run(lambda: client.get("/api/v2/collections"))
    """

    def __init__(
        self,
        policy: RetryPolicy = DEFAULT_RETRY_POLICY,
        *,
        classify: Callable[[BaseException], RetryableError | TerminalError] = classify_error,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        rng: random.Random | None = None,
        on_failed_attempt: Callable[[FailedAttempt], None] | None = None,
        name: str = "default",
    ) -> None:
        self.policy = policy
        self.classify = classify
        self.sleep = sleep
        self.rng = rng or random.Random()
        self.on_failed_attempt = on_failed_attempt
        self.name = name

        self.state = RetryState.ATTEMPTING
        self.attempts = 0
        self.delays: list[float] = []

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Call ``operation`` until it succeeds, fails terminally, or the budget runs out.

        Raises:
            TerminalError: On the first terminal failure
            RetryExhaustedError: When every attempt failed with a retryable error
        """
        self.state = RetryState.ATTEMPTING
        self.attempts = 0
        self.delays = []

        while True:
            if self.state == RetryState.ATTEMPTING:
                self.attempts += 1
                try:
                    result = await operation()
                except Exception as exc:
                    self._on_failure(exc)
                else:
                    self.state = RetryState.SUCCEEDED
                    return result

            elif self.state == RetryState.BACKOFF:
                delay = self.policy.backoff_delay(self.attempts, self.rng)
                self.delays.append(delay)
                await self.sleep(delay)
                self.state = RetryState.ATTEMPTING

    def _on_failure(self, exc: Exception) -> None:
        classified = self.classify(exc)
        if isinstance(classified, TerminalError):
            retries_left = 0
        else:
            retries_left = max(self.policy.max_attempts - self.attempts, 0)
        failure = FailedAttempt(
            attempt_number=self.attempts,
            retries_left=retries_left,
            error=classified,
        )

        log.warning(
            "retry.attempt_failed",
            name=self.name,
            attempt=failure.attempt_number,
            retries_left=failure.retries_left,
            retryable=isinstance(classified, RetryableError),
            error=str(classified),
        )
        if self.on_failed_attempt is not None:
            self.on_failed_attempt(failure)

        cause = exc if classified is not exc else None

        if isinstance(classified, TerminalError):
            self.state = RetryState.FAILED_TERMINAL
            raise classified from cause

        if retries_left == 0:
            self.state = RetryState.FAILED_EXHAUSTED
            log.error(
                "retry.exhausted",
                name=self.name,
                attempts=self.attempts,
                error=str(classified),
            )
            raise RetryExhaustedError(self.attempts, classified.cause) from exc

        self.state = RetryState.BACKOFF
