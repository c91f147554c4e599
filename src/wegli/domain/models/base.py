"""Shared base for API models and timestamp helpers."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

from wegli.domain.errors import ConversionError, DeserializationError

M = TypeVar("M", bound="WegliModel")


def datetime_to_rfc3339(value: datetime) -> str:
    """Format a timestamp the way the API writes it (RFC 3339, milliseconds)."""
    return value.isoformat(timespec="milliseconds")


class WegliModel(BaseModel):
    """Base class for models converted from API payloads.

    ``from_json`` separates shape problems (DeserializationError) from
    field conversion problems (ConversionError).
    """

    @classmethod
    def from_json(cls: Type[M], payload: Any) -> M:
        if not isinstance(payload, dict):
            raise DeserializationError(
                f"expected a JSON object for {cls.__name__}, got {type(payload).__name__}"
            )
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise ConversionError(f"failed to convert {payload!r}: {e}") from e

    @classmethod
    def list_from_json(cls: Type[M], payload: Any) -> List[M]:
        if not isinstance(payload, list):
            raise DeserializationError(
                f"expected a JSON array of {cls.__name__}, got {type(payload).__name__}"
            )
        return [cls.from_json(item) for item in payload]

    def to_json(self) -> dict:
        """Dump back to the API's wire representation."""
        return self.model_dump(mode="json")
