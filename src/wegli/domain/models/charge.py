"""Charge model - an offense type ("Tatbestand") with its fine"""

from datetime import datetime
from typing import Optional

from pydantic import AwareDatetime, Field, field_serializer

from wegli.domain.models.base import WegliModel, datetime_to_rfc3339


class Charge(WegliModel):
    """A charge as listed on https://www.weg.li/charges.

    Fines arrive as stringified decimals and are parsed to floats.
    """

    tbnr: str  # "Tatbestandsnummer", unique id of the offense
    description: str
    fine: float  # Euros
    bkat: str
    penalty: Optional[str] = None
    fap: Optional[str] = None
    points: Optional[int] = Field(None, ge=0)
    valid_from: Optional[AwareDatetime] = None  # start of legal validity
    valid_to: Optional[AwareDatetime] = None  # end of legal validity
    implementation: Optional[int] = None
    classification: int
    variant_table_id: Optional[int] = None
    rule_id: int
    table_id: Optional[int] = None
    required_refinements: str
    number_required_refinements: int
    max_fine: float
    created_at: AwareDatetime
    updated_at: AwareDatetime

    @field_serializer("fine", "max_fine")
    def _serialize_money(self, value: float) -> str:
        return str(value)

    @field_serializer("valid_from", "valid_to", "created_at", "updated_at")
    def _serialize_timestamp(self, value: Optional[datetime]) -> Optional[str]:
        return datetime_to_rfc3339(value) if value is not None else None
