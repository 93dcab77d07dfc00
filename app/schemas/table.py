"""Table schemas."""

from app.schemas.common import BaseSchema
from app.schemas.reservation import ReservationResponse


class TableResponse(BaseSchema):
    """Schema for table response."""

    table_id: int
    table_name: str
    capacity: int
    occupied: bool
    reservation_id: int | None = None


class SeatingResponse(BaseSchema):
    """Schema for seat and unseat responses, showing both updated rows."""

    table: TableResponse
    reservation: ReservationResponse | None = None
