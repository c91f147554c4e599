"""District model"""

from datetime import datetime
from typing import List, Optional

from pydantic import AwareDatetime, field_serializer

from wegli.domain.models.base import WegliModel, datetime_to_rfc3339


class District(WegliModel):
    """A district (zip code area) and the authority notices are sent to"""

    name: str
    zip: str
    email: str
    prefixes: List[str]
    latitude: float
    longitude: float
    aliases: Optional[List[str]] = None
    personal_email: bool  # email belongs to a single person
    created_at: AwareDatetime
    updated_at: AwareDatetime

    @field_serializer("created_at", "updated_at")
    def _serialize_timestamp(self, value: datetime) -> str:
        return datetime_to_rfc3339(value)
