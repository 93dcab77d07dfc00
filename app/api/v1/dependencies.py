"""API dependencies."""

from datetime import datetime
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.database import get_db
from app.redis_client import get_redis
from app.services.reservation_service import ReservationService
from app.services.table_service import TableService
from app.validators.hours import BusinessHours

# Type aliases
DBSession = Annotated[AsyncSession, Depends(get_db)]
RedisClient = Annotated[redis.Redis, Depends(get_redis)]


def get_business_hours() -> BusinessHours:
    """Get the configured business hours."""
    return BusinessHours.from_settings(get_settings())


def get_clock() -> datetime:
    """Get the moment the request is handled."""
    return datetime.now()


def get_reservation_service(db: DBSession) -> ReservationService:
    """Get reservation service."""
    return ReservationService(db)


def get_table_service(
    db: DBSession,
    redis_client: RedisClient,
) -> TableService:
    """Get table service."""
    return TableService(db, redis_client)


# Annotated dependencies
BusinessHoursDep = Annotated[BusinessHours, Depends(get_business_hours)]
RequestTime = Annotated[datetime, Depends(get_clock)]
ReservationServiceDep = Annotated[ReservationService, Depends(get_reservation_service)]
TableServiceDep = Annotated[TableService, Depends(get_table_service)]
