"""Retry building blocks on top of tenacity.

The sync and async executors build their retry controllers here so both
follow the same backoff schedule, the same retry predicate and the same
retry logging.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, Type

from tenacity import (
    BaseRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from wegli.domain.config.retry import RateLimitPolicy, RetryPolicy
from wegli.domain.errors import RateLimitedError, UnexpectedStatusError, WegliError

logger = logging.getLogger(__name__)

RATE_LIMIT_STATUSES = (429, 503)
RETRY_AFTER_HEADER = "Retry-After"

# Retry-After values beyond the unsigned 64-bit range are treated as absent
_MAX_RETRY_AFTER = 2**64 - 1


def parse_retry_after(value: Optional[str]) -> Optional[int]:
    """Parse a ``Retry-After`` header as a base-10 count of seconds.

    HTTP-date values and anything else that is not a plain non-negative
    integer yield None.
    """
    if value is None:
        return None
    if not (value.isascii() and value.isdigit()):
        return None
    seconds = int(value)
    if seconds > _MAX_RETRY_AFTER:
        return None
    return seconds


def retryable_errors(rate_limit: RateLimitPolicy) -> tuple[Type[WegliError], ...]:
    """Error types that enter the backoff loop under the given rate-limit policy."""
    if rate_limit is RateLimitPolicy.RETRY:
        return (UnexpectedStatusError, RateLimitedError)
    return (UnexpectedStatusError,)


class wait_policy_backoff(wait_base):
    """Wait ``initial_backoff_ms * backoff_multiplier ** n`` before retry ``n``.

    Raises BackoffOverflowError from the policy when the delay is not
    representable.
    """

    def __init__(self, policy: RetryPolicy) -> None:
        self.policy = policy

    def __call__(self, retry_state: RetryCallState) -> float:
        retry_number = retry_state.attempt_number
        # Past max_retries the stop condition ends the chain; no delay is due
        if retry_number > self.policy.max_retries:
            return 0.0
        return self.policy.backoff_ms(retry_number) / 1000.0


def log_before_retry(policy: RetryPolicy) -> Callable[[RetryCallState], None]:
    """Create a before_sleep hook that logs the scheduled retry."""

    def _before_sleep(retry_state: RetryCallState) -> None:
        if retry_state.outcome is None:
            return
        exception = retry_state.outcome.exception()
        logger.warning(
            f"{exception} (attempt {retry_state.attempt_number}/{policy.max_retries + 1}). "
            f"Retrying in {retry_state.next_action.sleep:.3f}s..."
        )

    return _before_sleep


def create_retrying(
    policy: RetryPolicy,
    *,
    rate_limit: RateLimitPolicy,
    sleep: Callable[[float], Any],
    before_sleep: Callable[[RetryCallState], None] | None = None,
    retrying_cls: Type[BaseRetrying] = Retrying,
) -> BaseRetrying:
    """Create a tenacity controller for one call chain.

    Args:
        policy: Backoff settings; at most ``max_retries + 1`` attempts are made
        rate_limit: Whether RateLimitedError is retried or terminal
        sleep: Sleep function (coroutine function for AsyncRetrying)
        before_sleep: Hook run before each delay (defaults to retry logging)
        retrying_cls: Retrying or AsyncRetrying

    Returns:
        Retrying controller; call it with the attempt function and its arguments
    """
    if before_sleep is None:
        before_sleep = log_before_retry(policy)

    return retrying_cls(
        sleep=sleep,
        stop=stop_after_attempt(policy.max_retries + 1),
        wait=wait_policy_backoff(policy),
        retry=retry_if_exception_type(retryable_errors(rate_limit)),
        reraise=True,
        before_sleep=before_sleep,
    )
