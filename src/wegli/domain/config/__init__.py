"""Configuration models with Pydantic validation."""

from wegli.domain.config.api import ApiConfig
from wegli.domain.config.app import AppConfig
from wegli.domain.config.retry import (
    DEFAULT_RETRY_POLICY,
    RateLimitPolicy,
    RetryConfig,
    RetryPolicy,
)

__all__ = [
    "AppConfig",
    "ApiConfig",
    "RetryConfig",
    "RetryPolicy",
    "RateLimitPolicy",
    "DEFAULT_RETRY_POLICY",
]
