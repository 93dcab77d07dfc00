"""Services package."""

from app.services.reservation_service import ReservationService
from app.services.table_service import TableService

__all__ = [
    "ReservationService",
    "TableService",
]
