"""API v1 routers package."""

from app.api.v1.reservations import router as reservations_router
from app.api.v1.tables import router as tables_router

__all__ = [
    "reservations_router",
    "tables_router",
]
