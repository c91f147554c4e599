"""Main application configuration model."""

from pydantic import BaseModel, ConfigDict, Field

from wegli.domain.config.api import ApiConfig
from wegli.domain.config.retry import RetryConfig


class AppConfig(BaseModel):
    """Main application configuration.

    Root model aggregating all configuration sections. Validation runs at
    load time to fail fast on configuration errors.

    Attributes:
        api: API connection configuration
        retry: Retry/backoff configuration
    """

    api: ApiConfig = Field(default_factory=ApiConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",
        json_schema_extra={
            "example": {
                "api": {
                    "url": "https://www.weg.li/api",
                    "token": None,
                    "timeout": 30.0,
                },
                "retry": {
                    "max_retries": 5,
                    "initial_backoff_ms": 300,
                    "backoff_multiplier": 2,
                    "rate_limit": "terminal",
                },
            }
        },
    )
