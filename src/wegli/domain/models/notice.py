"""Notice model - a reported parking offense"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import AwareDatetime, BaseModel, field_serializer

from wegli.domain.models.base import WegliModel, datetime_to_rfc3339
from wegli.domain.models.charge import Charge


class NoticeStatus(str, Enum):
    """Processing status of a notice"""

    OPEN = "open"
    DISABLED = "disabled"
    ANALYZING = "analyzing"
    SHARED = "shared"  # sent to the district's contact email


class NoticePhoto(BaseModel):
    """Photo attached to a notice as evidence"""

    filename: str
    url: str


class Notice(WegliModel):
    """A notice of the authenticated user.

    Attributes:
        token: Token identifying the notice
        status: Processing status
        street: Street the offense was recorded in
        city: City the offense was recorded in
        zip: Zip code the offense was recorded in
        latitude: Latitude of the offense location
        longitude: Longitude of the offense location
        registration: Licence tag of the vehicle
        color: Color of the vehicle
        brand: Brand of the vehicle
        charge: Charge reported with the notice
        tbnr: "Tatbestandsnummer" of the charge
        start_date: Start of observing the offense
        end_date: End of observing the offense
        note: Free text for additional notes
        photos: Evidence photos
        created_at: Creation timestamp
        updated_at: Update timestamp
        sent_at: When the notice was sent to the district
        vehicle_empty: Vehicle was empty
        hazard_lights: Hazard lights were on
        expired_tuv: TÜV certification was expired
        expired_eco: Emission test certificate was expired
        over_2_8_tons: Vehicle weighs more than 2.8 metric tons
    """

    token: str
    status: NoticeStatus
    street: str
    city: str
    zip: str
    latitude: float
    longitude: float
    registration: str
    color: str
    brand: str
    charge: Charge
    tbnr: str
    start_date: AwareDatetime
    end_date: AwareDatetime
    note: Optional[str] = None
    photos: List[NoticePhoto] = []
    created_at: AwareDatetime
    updated_at: AwareDatetime
    sent_at: AwareDatetime
    vehicle_empty: bool
    hazard_lights: bool
    expired_tuv: bool
    expired_eco: bool
    over_2_8_tons: bool

    @field_serializer("start_date", "end_date", "created_at", "updated_at", "sent_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        return datetime_to_rfc3339(value)
