"""Table service with the seat and unseat protocols."""

import logging
from typing import Any

import redis.asyncio as redis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.distributed_lock import DistributedLockError, multi_lock
from app.errors import ConflictError, NotFoundError
from app.models.reservation import Reservation, ReservationStatus
from app.models.table import Table
from app.services.reservation_service import ReservationService
from app.validators.status import TERMINAL_STATUSES, check_transition
from app.validators.table import check_reservation_id

logger = logging.getLogger(__name__)


class TableService:
    """Service for table operations with distributed locking."""

    def __init__(self, db: AsyncSession, redis_client: redis.Redis):
        self.db = db
        self.redis = redis_client
        self.reservation_service = ReservationService(db)

    async def list_tables(self) -> list[Table]:
        """Get all tables ordered by name."""
        result = await self.db.execute(select(Table).order_by(Table.table_name))
        return list(result.scalars().all())

    async def create_table(self, fields: dict[str, Any]) -> Table:
        """
        Create a new table.

        A table may be created already holding a reservation, which must
        exist, must not be cancelled or finished, and must not be held by
        another table.
        """
        reservation_id = fields.get("reservation_id")
        if reservation_id is not None:
            reservation = await self.reservation_service.require_reservation(reservation_id)
            if reservation.status in TERMINAL_STATUSES:
                raise ConflictError(
                    f"Reservation {reservation_id} is '{reservation.status.value}'. "
                    "Archived reservations cannot be assigned to a table."
                )
            holder = await self.get_table_by_reservation(reservation_id)
            if holder:
                raise ConflictError(
                    f"Reservation {reservation_id} is already assigned to "
                    f'"{holder.table_name}" (#{holder.table_id}).'
                )

        table = Table(**fields)
        self.db.add(table)
        await self.db.commit()
        await self.db.refresh(table)

        logger.info(f"Created table {table.table_id} ({table.table_name})")
        return table

    async def get_table(self, table_id: int, for_update: bool = False) -> Table | None:
        """Get table by ID, optionally locking the row."""
        query = select(Table).where(Table.table_id == table_id)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def require_table(self, table_id: int, for_update: bool = False) -> Table:
        """Get table by ID or raise NotFoundError."""
        table = await self.get_table(table_id, for_update=for_update)
        if not table:
            raise NotFoundError(f"Table {table_id} cannot be found.")
        return table

    async def get_table_by_reservation(self, reservation_id: int) -> Table | None:
        """Get the table currently holding a reservation."""
        result = await self.db.execute(
            select(Table).where(Table.reservation_id == reservation_id)
        )
        return result.scalar_one_or_none()

    def assign_table_reservation(self, table: Table, reservation_id: int) -> Table:
        """Point a table at a reservation. The caller commits."""
        table.reservation_id = reservation_id
        return table

    def clear_table_reservation(self, table: Table) -> Table:
        """Free a table. The caller commits."""
        table.reservation_id = None
        return table

    async def seat_reservation(
        self,
        table_id: int,
        reservation_id: Any,
    ) -> tuple[Table, Reservation]:
        """
        Seat a reservation at a table.

        Checks, in order: the table exists, a reservation id was given, the
        reservation exists, the table is free and large enough, and the
        reservation is neither seated elsewhere nor archived. The reservation
        becomes ``seated`` and the table occupied in a single transaction.

        Raises:
            NotFoundError: If the table or reservation does not exist
            ValidationError: If no reservation id was given
            ConflictError: If the seating is not allowed
        """
        await self.require_table(table_id)
        reservation_id = check_reservation_id(reservation_id)

        lock_keys = [f"table:{table_id}", f"reservation:{reservation_id}"]
        try:
            async with multi_lock(self.redis, lock_keys, blocking=True):
                return await self._do_seat_reservation(table_id, reservation_id)
        except DistributedLockError:
            raise ConflictError(
                f"Table {table_id} is being updated by another request. "
                "Please try again."
            )

    async def _do_seat_reservation(
        self,
        table_id: int,
        reservation_id: int,
    ) -> tuple[Table, Reservation]:
        """Gate and apply a seating. Must hold the table and reservation locks."""
        table = await self.require_table(table_id, for_update=True)
        reservation = await self.reservation_service.require_reservation(
            reservation_id, for_update=True
        )

        if table.occupied:
            raise ConflictError(
                f'"{table.table_name}" (#{table.table_id}) is currently occupied, '
                "and cannot be seated."
            )

        if reservation.people > table.capacity:
            raise ConflictError(
                f'"{table.table_name}" (#{table.table_id}) has a maximum capacity '
                f"of {table.capacity}. This table cannot accomodate the "
                f"{reservation.people} people in reservation "
                f"#{reservation.reservation_id}."
            )

        if reservation.status == ReservationStatus.SEATED:
            raise ConflictError(
                "This reservation has already been seated, and therefore cannot "
                "be seated elsewhere simultaneously."
            )

        holder = await self.get_table_by_reservation(reservation.reservation_id)
        if holder:
            raise ConflictError(
                f"Reservation {reservation.reservation_id} is already assigned to "
                f'"{holder.table_name}" (#{holder.table_id}), and therefore cannot '
                "be seated elsewhere simultaneously."
            )

        if reservation.status == ReservationStatus.FINISHED:
            raise ConflictError(
                "This reservation is currently finished. Finished reservations "
                "are archived, and cannot be seated."
            )

        check_transition(reservation.status, ReservationStatus.SEATED)

        try:
            reservation.status = ReservationStatus.SEATED
            self.assign_table_reservation(table, reservation.reservation_id)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(table)
        await self.db.refresh(reservation)

        logger.info(
            f"Seated reservation {reservation.reservation_id} "
            f"at table {table.table_id} ({table.table_name})"
        )
        return table, reservation

    async def unseat(self, table_id: int) -> tuple[Table, Reservation | None]:
        """
        Free an occupied table and finish its reservation.

        A reservation that is already cancelled or finished keeps its status.

        Both rows are written in a single transaction.

        Raises:
            NotFoundError: If the table does not exist
            ConflictError: If the table is not occupied
        """
        table = await self.require_table(table_id)
        self._check_occupied(table)

        lock_keys = [f"table:{table_id}", f"reservation:{table.reservation_id}"]
        try:
            async with multi_lock(self.redis, lock_keys, blocking=True):
                return await self._do_unseat(table_id, table.reservation_id)
        except DistributedLockError:
            raise ConflictError(
                f"Table {table_id} is being updated by another request. "
                "Please try again."
            )

    async def _do_unseat(
        self,
        table_id: int,
        locked_reservation_id: int,
    ) -> tuple[Table, Reservation | None]:
        """Apply an unseating. Must hold the table and reservation locks."""
        table = await self.require_table(table_id, for_update=True)
        self._check_occupied(table)
        if table.reservation_id != locked_reservation_id:
            raise ConflictError(
                f'"{table.table_name}" (#{table.table_id}) was reseated by another '
                "request. Please try again."
            )

        reservation = await self.reservation_service.get_reservation(
            table.reservation_id, for_update=True
        )

        try:
            # Cancelled and finished reservations keep their status
            if reservation and reservation.status not in TERMINAL_STATUSES:
                reservation.status = ReservationStatus.FINISHED
            self.clear_table_reservation(table)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(table)
        if reservation:
            await self.db.refresh(reservation)
            logger.info(
                f"Reservation {reservation.reservation_id} is {reservation.status.value}, "
                f"freed table {table.table_id} ({table.table_name})"
            )
        else:
            logger.warning(f"Freed table {table.table_id} holding a missing reservation")
        return table, reservation

    @staticmethod
    def _check_occupied(table: Table) -> None:
        if not table.occupied:
            raise ConflictError(
                f'"{table.table_name}" (#{table.table_id}) is currently not '
                "occupied. A table must be occupied before it can be unseated."
            )
