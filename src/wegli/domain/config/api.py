"""API connection configuration model."""

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_API_URL = "https://www.weg.li/api"


class ApiConfig(BaseModel):
    """Configuration for the weg.li API connection.

    Attributes:
        url: Base URL of the API (endpoints are appended to it)
        token: API key sent as X-API-KEY (None = from WEGLI_API_TOKEN env)
        timeout: Per-request transport timeout in seconds
    """

    url: str = DEFAULT_API_URL
    token: Optional[str] = None
    timeout: float = Field(30.0, gt=0.0)
