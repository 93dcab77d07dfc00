"""Tables API endpoints."""

from fastapi import APIRouter, status

from app.api.v1.dependencies import TableServiceDep
from app.schemas.common import DataResponse, RequestEnvelope
from app.schemas.reservation import ReservationResponse
from app.schemas.table import SeatingResponse, TableResponse
from app.validators.table import validate_new_table

router = APIRouter()


@router.get(
    "",
    response_model=DataResponse[list[TableResponse]],
    summary="List tables",
)
async def list_tables(
    table_service: TableServiceDep,
    date: str | None = None,
) -> DataResponse[list[TableResponse]]:
    """List all tables by name. `date` is accepted but does not filter."""
    tables = await table_service.list_tables()
    return DataResponse(data=[TableResponse.model_validate(t) for t in tables])


@router.post(
    "",
    response_model=DataResponse[TableResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a table",
)
async def create_table(
    table_service: TableServiceDep,
    payload: RequestEnvelope | None = None,
) -> DataResponse[TableResponse]:
    """Create a table, optionally already holding a reservation."""
    data = payload.data if payload else {}
    fields = validate_new_table(data)

    table = await table_service.create_table(fields)
    return DataResponse(data=TableResponse.model_validate(table))


@router.get(
    "/{table_id}",
    response_model=DataResponse[TableResponse],
    summary="Get table details",
)
async def get_table(
    table_id: int,
    table_service: TableServiceDep,
) -> DataResponse[TableResponse]:
    """Get table details."""
    table = await table_service.require_table(table_id)
    return DataResponse(data=TableResponse.model_validate(table))


@router.put(
    "/{table_id}/seat",
    response_model=DataResponse[SeatingResponse],
    summary="Seat a reservation",
)
async def seat_reservation(
    table_id: int,
    table_service: TableServiceDep,
    payload: RequestEnvelope | None = None,
) -> DataResponse[SeatingResponse]:
    """Seat a reservation at this table."""
    data = payload.data if payload else {}
    table, reservation = await table_service.seat_reservation(
        table_id, data.get("reservation_id")
    )
    return DataResponse(
        data=SeatingResponse(
            table=TableResponse.model_validate(table),
            reservation=ReservationResponse.model_validate(reservation),
        )
    )


@router.delete(
    "/{table_id}/seat",
    response_model=DataResponse[SeatingResponse],
    summary="Unseat a table",
)
async def unseat_table(
    table_id: int,
    table_service: TableServiceDep,
) -> DataResponse[SeatingResponse]:
    """Free this table and finish the reservation seated at it."""
    table, reservation = await table_service.unseat(table_id)
    return DataResponse(
        data=SeatingResponse(
            table=TableResponse.model_validate(table),
            reservation=(
                ReservationResponse.model_validate(reservation) if reservation else None
            ),
        )
    )
