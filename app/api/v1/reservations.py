"""Reservations API endpoints."""

from fastapi import APIRouter, Request, status

from app.api.v1.dependencies import BusinessHoursDep, RequestTime, ReservationServiceDep
from app.schemas.common import DataResponse, RequestEnvelope
from app.schemas.reservation import ReservationResponse
from app.validators.reservation import (
    check_query,
    validate_new_reservation,
    validate_reservation_update,
)
from app.validators.status import check_transition, parse_status

router = APIRouter()


@router.get(
    "",
    response_model=DataResponse[list[ReservationResponse]],
    summary="List reservations",
)
async def list_reservations(
    request: Request,
    reservation_service: ReservationServiceDep,
) -> DataResponse[list[ReservationResponse]]:
    """
    List reservations.

    - `date=YYYY-MM-DD`: unfinished reservations on that date, by time.
    - any other reservation field: case-insensitive substring match on every
      given field, newest date first.
    - no query: all reservations by id.
    """
    query = dict(request.query_params)
    check_query(query)

    reservations = await reservation_service.find_reservations(query)
    return DataResponse(
        data=[ReservationResponse.model_validate(r) for r in reservations]
    )


@router.post(
    "",
    response_model=DataResponse[ReservationResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a reservation",
)
async def create_reservation(
    reservation_service: ReservationServiceDep,
    business_hours: BusinessHoursDep,
    now: RequestTime,
    payload: RequestEnvelope | None = None,
) -> DataResponse[ReservationResponse]:
    """Create a reservation with status `booked`."""
    data = payload.data if payload else {}
    fields = validate_new_reservation(data, business_hours, now)

    reservation = await reservation_service.create_reservation(fields)
    return DataResponse(data=ReservationResponse.model_validate(reservation))


@router.get(
    "/{reservation_id}",
    response_model=DataResponse[ReservationResponse],
    summary="Get reservation details",
)
async def get_reservation(
    reservation_id: int,
    reservation_service: ReservationServiceDep,
) -> DataResponse[ReservationResponse]:
    """Get reservation details."""
    reservation = await reservation_service.require_reservation(reservation_id)
    return DataResponse(data=ReservationResponse.model_validate(reservation))


@router.put(
    "/{reservation_id}",
    response_model=DataResponse[ReservationResponse],
    summary="Update reservation",
)
async def update_reservation(
    reservation_id: int,
    reservation_service: ReservationServiceDep,
    business_hours: BusinessHoursDep,
    now: RequestTime,
    payload: RequestEnvelope | None = None,
) -> DataResponse[ReservationResponse]:
    """
    Replace a reservation's guest, party and timing details.

    `reservation_id` and `created_at` may be echoed back but not changed;
    `updated_at` is always reset to the current time.
    """
    reservation = await reservation_service.require_reservation(reservation_id)

    data = payload.data if payload else {}
    fields = validate_reservation_update(reservation, data, business_hours, now)

    reservation = await reservation_service.update_reservation(reservation, fields)
    return DataResponse(data=ReservationResponse.model_validate(reservation))


@router.put(
    "/{reservation_id}/status",
    response_model=DataResponse[ReservationResponse],
    summary="Update reservation status",
)
async def update_reservation_status(
    reservation_id: int,
    reservation_service: ReservationServiceDep,
    payload: RequestEnvelope | None = None,
) -> DataResponse[ReservationResponse]:
    """Move a reservation to a new status."""
    reservation = await reservation_service.require_reservation(reservation_id)

    data = payload.data if payload else {}
    new_status = parse_status(data.get("status"))
    check_transition(reservation.status, new_status)

    reservation = await reservation_service.update_reservation_status(
        reservation, new_status
    )
    return DataResponse(data=ReservationResponse.model_validate(reservation))
