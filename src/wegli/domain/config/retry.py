"""Retry policy and retry configuration models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from wegli.domain.errors import BackoffOverflowError

# Delays are tracked as unsigned 64-bit milliseconds
MAX_BACKOFF_MS = 2**64 - 1


class RateLimitPolicy(str, Enum):
    """How 429/503 responses interact with the retry loop"""

    TERMINAL = "terminal"  # fail at once with RateLimitedError
    RETRY = "retry"  # back off and retry like any other failed status


class RetryPolicy(BaseModel):
    """Exponential backoff settings for API calls.

    The delay before retry ``n`` (starting at 1) is
    ``initial_backoff_ms * backoff_multiplier ** n``.

    Attributes:
        max_retries: Retries after the initial attempt (0 disables retrying)
        initial_backoff_ms: Base delay in milliseconds
        backoff_multiplier: Exponential growth factor
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_retries: int = Field(5, ge=0)
    initial_backoff_ms: int = Field(300, ge=0)
    backoff_multiplier: int = Field(2, ge=1)

    def backoff_ms(self, attempt: int) -> int:
        """Delay in milliseconds before retry number ``attempt``.

        Raises:
            BackoffOverflowError: If the delay does not fit in MAX_BACKOFF_MS
        """
        factor = self.backoff_multiplier**attempt
        if factor > MAX_BACKOFF_MS:
            raise BackoffOverflowError(
                f"exceeded maximum backoff value ({self.backoff_multiplier}^{attempt})"
            )
        delay = self.initial_backoff_ms * factor
        if delay > MAX_BACKOFF_MS:
            raise BackoffOverflowError(
                f"exceeded maximum backoff value ({self.initial_backoff_ms}ms * {factor})"
            )
        return delay


DEFAULT_RETRY_POLICY = RetryPolicy(initial_backoff_ms=300, max_retries=5, backoff_multiplier=2)


class RetryConfig(BaseModel):
    """``retry`` section of the configuration file.

    Attributes:
        max_retries: Retries after the initial attempt (0 disables retrying)
        initial_backoff_ms: Base delay in milliseconds
        backoff_multiplier: Exponential growth factor
        rate_limit: Whether 429/503 end the call ("terminal") or are retried ("retry")
    """

    max_retries: int = Field(5, ge=0)
    initial_backoff_ms: int = Field(300, ge=0)
    backoff_multiplier: int = Field(2, ge=1)
    rate_limit: RateLimitPolicy = RateLimitPolicy.TERMINAL

    def to_policy(self) -> RetryPolicy:
        return RetryPolicy(
            max_retries=self.max_retries,
            initial_backoff_ms=self.initial_backoff_ms,
            backoff_multiplier=self.backoff_multiplier,
        )
