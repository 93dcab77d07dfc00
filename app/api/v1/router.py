"""API v1 main router."""

from fastapi import APIRouter

from app.api.v1.reservations import router as reservations_router
from app.api.v1.tables import router as tables_router

router = APIRouter(prefix="/v1")

router.include_router(reservations_router, prefix="/reservations", tags=["Reservations"])
router.include_router(tables_router, prefix="/tables", tags=["Tables"])
