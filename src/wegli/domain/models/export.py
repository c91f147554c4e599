"""Export models - notice exports and their CSV rows"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import AwareDatetime, BaseModel, field_serializer, field_validator

from wegli.domain.models.base import WegliModel, datetime_to_rfc3339

# Timestamp layout inside export CSV files, e.g. "2023-01-13 08:51:07 .356+0100"
EXPORT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S .%f%z"


def parse_export_timestamp(value: str) -> datetime:
    """Parse a timestamp in the export CSV layout"""
    return datetime.strptime(value, EXPORT_TIMESTAMP_FORMAT)


def format_export_timestamp(value: datetime) -> str:
    """Format a timestamp in the export CSV layout (milliseconds precision)"""
    return f"{value:%Y-%m-%d %H:%M:%S} .{value.microsecond // 1000:03d}{value:%z}"


class ExportType(str, Enum):
    """Kind of data contained in an export"""

    NOTICES = "notices"


class ExportDownload(BaseModel):
    """Download location of an export archive"""

    filename: str
    url: str


class Export(WegliModel):
    """Metadata of a notice export"""

    export_type: ExportType
    file_extension: str
    created_at: AwareDatetime
    download: ExportDownload

    @field_serializer("created_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        return datetime_to_rfc3339(value)


class ExportNotice(WegliModel):
    """One row of an exported notices CSV"""

    start_date: AwareDatetime
    end_date: AwareDatetime
    tbnr: str
    street: str
    city: str
    zip: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_timestamp(cls, value: Any) -> Any:
        if isinstance(value, str):
            return parse_export_timestamp(value)
        return value

    @field_validator("latitude", "longitude", mode="before")
    @classmethod
    def _empty_coordinate(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_serializer("start_date", "end_date")
    def _serialize_timestamp(self, value: datetime) -> str:
        return format_export_timestamp(value)
