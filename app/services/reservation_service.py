"""Reservation persistence service."""

import logging
from datetime import date, datetime
from typing import Any

from sqlalchemy import String, cast, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import NotFoundError
from app.models.reservation import Reservation, ReservationStatus
from app.validators.reservation import DATE_QUERY, VALID_FIELDS, parse_query_date

logger = logging.getLogger(__name__)

# Columns a list query may filter on, keyed by query parameter name.
SEARCHABLE_COLUMNS = {field: getattr(Reservation, field) for field in VALID_FIELDS}


class ReservationService:
    """Service for reservation operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_reservations(self) -> list[Reservation]:
        """Get all reservations ordered by id."""
        result = await self.db.execute(
            select(Reservation).order_by(Reservation.reservation_id.asc())
        )
        return list(result.scalars().all())

    async def search_reservations_by_date(self, reservation_date: date) -> list[Reservation]:
        """Get the unfinished reservations on a date, earliest first."""
        result = await self.db.execute(
            select(Reservation)
            .where(
                Reservation.reservation_date == reservation_date,
                Reservation.status != ReservationStatus.FINISHED,
            )
            .order_by(Reservation.reservation_time.asc())
        )
        return list(result.scalars().all())

    async def search_reservations_by_fields(
        self,
        filters: dict[str, str],
    ) -> list[Reservation]:
        """
        Get reservations whose fields contain the given values.

        Each filter is a case-insensitive substring match on the text form of
        the column; all filters must match. Empty values are ignored, and with
        no non-empty filter every reservation is returned ordered by id.
        """
        conditions = [
            cast(SEARCHABLE_COLUMNS[field], String).icontains(value, autoescape=True)
            for field, value in filters.items()
            if value
        ]
        if not conditions:
            return await self.list_reservations()

        result = await self.db.execute(
            select(Reservation)
            .where(*conditions)
            .order_by(Reservation.reservation_date.desc())
        )
        return list(result.scalars().all())

    async def find_reservations(self, query: dict[str, str]) -> list[Reservation]:
        """Dispatch a validated list query to the matching search."""
        if query.get(DATE_QUERY):
            return await self.search_reservations_by_date(parse_query_date(query[DATE_QUERY]))

        filters = {field: value for field, value in query.items() if field != DATE_QUERY}
        return await self.search_reservations_by_fields(filters)

    async def create_reservation(self, fields: dict[str, Any]) -> Reservation:
        """Create a new reservation."""
        reservation = Reservation(**fields)
        self.db.add(reservation)
        await self.db.commit()
        await self.db.refresh(reservation)

        logger.info(
            f"Created reservation {reservation.reservation_id} for "
            f"{reservation.people} on {reservation.reservation_date} "
            f"at {reservation.reservation_time}"
        )
        return reservation

    async def get_reservation(
        self,
        reservation_id: int,
        for_update: bool = False,
    ) -> Reservation | None:
        """Get reservation by ID, optionally locking the row."""
        query = select(Reservation).where(Reservation.reservation_id == reservation_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def require_reservation(
        self,
        reservation_id: int,
        for_update: bool = False,
    ) -> Reservation:
        """Get reservation by ID or raise NotFoundError."""
        reservation = await self.get_reservation(reservation_id, for_update=for_update)
        if not reservation:
            raise NotFoundError(f"Reservation {reservation_id} cannot be found.")
        return reservation

    async def update_reservation(
        self,
        reservation: Reservation,
        fields: dict[str, Any],
    ) -> Reservation:
        """Overwrite a reservation's editable fields."""
        for field, value in fields.items():
            setattr(reservation, field, value)
        reservation.updated_at = datetime.now()

        await self.db.commit()
        await self.db.refresh(reservation)

        logger.info(f"Updated reservation {reservation.reservation_id}")
        return reservation

    async def update_reservation_status(
        self,
        reservation: Reservation,
        status: ReservationStatus,
    ) -> Reservation:
        """Set a reservation's status."""
        previous = reservation.status
        reservation.status = status
        reservation.updated_at = datetime.now()

        await self.db.commit()
        await self.db.refresh(reservation)

        logger.info(
            f"Reservation {reservation.reservation_id} status "
            f"{previous.value} -> {status.value}"
        )
        return reservation
