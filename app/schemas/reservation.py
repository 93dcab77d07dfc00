"""Reservation schemas."""

from datetime import date, datetime, time

from pydantic import field_serializer

from app.models.reservation import ReservationStatus
from app.schemas.common import BaseSchema


class ReservationResponse(BaseSchema):
    """Schema for reservation response."""

    reservation_id: int
    first_name: str
    last_name: str
    mobile_number: str
    reservation_date: date
    reservation_time: time
    people: int
    status: ReservationStatus
    created_at: datetime
    updated_at: datetime

    @field_serializer("reservation_time")
    def serialize_time(self, value: time) -> str:
        """Render as HH:MM, keeping seconds only when they are set."""
        if value.second or value.microsecond:
            return value.isoformat()
        return value.strftime("%H:%M")
