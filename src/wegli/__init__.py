"""Python client for the weg.li API."""

from wegli.domain.config.retry import DEFAULT_RETRY_POLICY, RateLimitPolicy, RetryPolicy
from wegli.domain.errors import (
    BackoffOverflowError,
    ConversionError,
    DeserializationError,
    DownloadError,
    ExportNotFoundError,
    RateLimitedError,
    RequestCancelledError,
    RequestNotReissuableError,
    TransportError,
    UnexpectedStatusError,
    UnzipError,
    WegliError,
)
from wegli.domain.models import (
    Charge,
    District,
    Export,
    ExportDownload,
    ExportNotice,
    ExportType,
    Notice,
    NoticePhoto,
    NoticeStatus,
)
from wegli.infrastructure.http_client import CancellationToken, RequestDescriptor, RequestExecutor
from wegli.infrastructure.wegli.client import WegliClient

__version__ = "0.1.0"

__all__ = [
    "WegliClient",
    "RequestExecutor",
    "RequestDescriptor",
    "CancellationToken",
    "RetryPolicy",
    "RateLimitPolicy",
    "DEFAULT_RETRY_POLICY",
    "Charge",
    "District",
    "Export",
    "ExportDownload",
    "ExportNotice",
    "ExportType",
    "Notice",
    "NoticePhoto",
    "NoticeStatus",
    "WegliError",
    "RequestNotReissuableError",
    "TransportError",
    "RateLimitedError",
    "UnexpectedStatusError",
    "BackoffOverflowError",
    "RequestCancelledError",
    "DeserializationError",
    "ConversionError",
    "DownloadError",
    "UnzipError",
    "ExportNotFoundError",
]
