"""SQLAlchemy models."""

from app.models.base import Base
from app.models.reservation import Reservation, ReservationStatus
from app.models.table import Table

__all__ = [
    "Base",
    "Reservation",
    "ReservationStatus",
    "Table",
]
