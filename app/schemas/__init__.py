"""Pydantic schemas for API request/response."""

from app.schemas.common import DataResponse, ErrorResponse, RequestEnvelope
from app.schemas.reservation import ReservationResponse
from app.schemas.table import SeatingResponse, TableResponse

__all__ = [
    "DataResponse",
    "ErrorResponse",
    "RequestEnvelope",
    "ReservationResponse",
    "SeatingResponse",
    "TableResponse",
]
