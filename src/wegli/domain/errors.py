"""Error taxonomy for the weg.li client.

Every failure surfaced by the client is a subclass of :class:`WegliError`, so
callers can catch the whole family or branch on the specific kind.
"""

from __future__ import annotations

from typing import Optional


class WegliError(Exception):
    """Base class for all client errors."""


class RequestNotReissuableError(WegliError):
    """The request body is a stream and cannot be sent more than once."""

    def __init__(self, message: str = "request cannot be cloned (streaming body)"):
        super().__init__(message)


class TransportError(WegliError):
    """Low-level send failure (connection, DNS, TLS, timeout)."""

    def __init__(self, details: str):
        super().__init__(f"transport error: {details}")
        self.details = details


class RateLimitedError(WegliError):
    """The API answered 429 or 503 and asked the client to back off.

    Attributes:
        retry_after: Seconds from the ``Retry-After`` header, None if absent or unparseable
        status_code: The throttling status (429 or 503)
    """

    def __init__(self, retry_after: Optional[int] = None, status_code: int = 429):
        hint = f", retry after {retry_after}s" if retry_after is not None else ""
        super().__init__(f"API signals to wait (status {status_code}{hint})")
        self.retry_after = retry_after
        self.status_code = status_code


class UnexpectedStatusError(WegliError):
    """Non-success status that is not a throttling signal."""

    def __init__(self, status_code: int):
        super().__init__(f"received unexpected response code {status_code}")
        self.status_code = status_code


class BackoffOverflowError(WegliError):
    """Computed backoff delay left the representable range (misconfigured policy)."""


class RequestCancelledError(WegliError):
    """The call chain was cancelled through its cancellation token."""


class DeserializationError(WegliError):
    """Response body is not JSON of the expected shape."""


class ConversionError(WegliError):
    """JSON was parsed but a field could not be converted to its typed form."""


class DownloadError(WegliError):
    """Export file could not be downloaded."""


class UnzipError(WegliError):
    """Export archive could not be extracted."""


class ExportNotFoundError(WegliError):
    """No export (or no CSV inside an export) was found."""
