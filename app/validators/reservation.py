"""Request validation for reservations."""

import re
from datetime import date, datetime
from typing import Any

from app.errors import ValidationError
from app.models.reservation import Reservation, ReservationStatus
from app.validators.hours import BusinessHours
from app.validators.status import check_transition, parse_status

REQUIRED_FIELDS = (
    "first_name",
    "last_name",
    "mobile_number",
    "reservation_date",
    "reservation_time",
    "people",
)

VALID_FIELDS = REQUIRED_FIELDS + (
    "reservation_id",
    "created_at",
    "updated_at",
    "status",
)

DATE_QUERY = "date"

# Size of the text columns on both models.
MAX_TEXT_LENGTH = 255

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
TIME_PATTERN = re.compile(r"^\d{2}:\d{2}")


def check_required_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Check that every required field is present and well formed.

    Returns:
        The required fields with ``reservation_date`` and ``reservation_time``
        parsed into ``date`` and ``time`` objects.
    """
    for field in REQUIRED_FIELDS:
        if not data.get(field):
            raise ValidationError(
                f"The data in the request body requires a {field} field."
            )

    reservation_date = data["reservation_date"]
    reservation_time = data["reservation_time"]

    if not isinstance(reservation_date, str) or not DATE_PATTERN.fullmatch(reservation_date):
        raise ValidationError(
            f"The reservation_date property ({reservation_date}) must be a valid "
            "date in the format of YYYY-MM-DD"
        )

    if not isinstance(reservation_time, str) or not TIME_PATTERN.match(reservation_time):
        raise ValidationError(
            f"The reservation_time property ({reservation_time}) must be a valid "
            "time in the format of HH:MM."
        )

    moment = combine_date_time(reservation_date, reservation_time)

    people = data["people"]
    if isinstance(people, bool) or not isinstance(people, int):
        raise ValidationError(
            f"The people property ({people} of type {type(people).__name__}) "
            "must be a number."
        )
    if people < 1:
        raise ValidationError("The people property must be a number that is 1 or greater.")

    for field in ("first_name", "last_name", "mobile_number"):
        if not isinstance(data[field], str):
            raise ValidationError(f"The {field} property must be a string.")
        if len(data[field]) > MAX_TEXT_LENGTH:
            raise ValidationError(
                f"The {field} property must be at most {MAX_TEXT_LENGTH} characters long."
            )

    return {
        "first_name": data["first_name"],
        "last_name": data["last_name"],
        "mobile_number": data["mobile_number"],
        "reservation_date": moment.date(),
        "reservation_time": moment.time(),
        "people": people,
    }


def combine_date_time(reservation_date: str, reservation_time: str) -> datetime:
    """Parse ``YYYY-MM-DD`` and ``HH:MM[:SS]`` into a single datetime."""
    value = f"{reservation_date}T{reservation_time}"
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(
            "The reservation_date and reservation_time property do not make a "
            f"valid Date-Time string ({value})."
        )


def check_no_invalid_fields(data: dict[str, Any], valid_fields: tuple[str, ...]) -> None:
    """Reject any field not in ``valid_fields``, listing every offender."""
    invalid = [field for field in data if field not in valid_fields]
    if invalid:
        raise ValidationError(f"Invalid field(s): {', '.join(invalid)}")


def check_new_status(data: dict[str, Any]) -> None:
    """A new reservation may only carry the default ``booked`` status."""
    status = data.get("status", ReservationStatus.BOOKED.value)
    if status != ReservationStatus.BOOKED.value:
        raise ValidationError(
            f"Status cannot be set to '{status}'. When creating a reservation, it "
            "must have the default status of 'booked', or no status at all."
        )


def _parse_timestamp(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


def check_immutable_fields(reservation: Reservation, data: dict[str, Any]) -> None:
    """``reservation_id`` and ``created_at`` must be omitted or unchanged."""
    new_id = data.get("reservation_id", reservation.reservation_id)
    if new_id != reservation.reservation_id:
        raise ValidationError(
            f"You are attempting to change this reservation's id from "
            f"{reservation.reservation_id} to {new_id}. You cannot change a "
            "reservation's id."
        )

    if "created_at" in data and _parse_timestamp(data["created_at"]) != reservation.created_at:
        raise ValidationError(
            "You cannot alter the date this reservation was created on. Either "
            "remove 'created_at' from the request body or ensure it matches the "
            "original date"
        )


def check_query(query: dict[str, str]) -> None:
    """List queries may only name reservation fields or ``date``."""
    invalid = [key for key in query if key not in VALID_FIELDS and key != DATE_QUERY]
    if invalid:
        listed = "', '".join(invalid)
        raise ValidationError(f"Invalid queries: '{listed}'")


def parse_query_date(value: str) -> date:
    """Parse the ``date`` list filter."""
    try:
        if not DATE_PATTERN.fullmatch(value):
            raise ValueError(value)
        return date.fromisoformat(value)
    except ValueError:
        raise ValidationError(
            f"The date query ({value}) must be a valid date in the format of YYYY-MM-DD"
        )


def validate_new_reservation(
    data: dict[str, Any],
    hours: BusinessHours,
    now: datetime,
) -> dict[str, Any]:
    """
    Run the creation checks in order, stopping at the first failure.

    Returns:
        The fields to persist. Store-assigned fields in the body are dropped.
    """
    fields = check_required_fields(data)
    check_no_invalid_fields(data, VALID_FIELDS)
    check_new_status(data)
    hours.check(datetime.combine(fields["reservation_date"], fields["reservation_time"]), now)

    fields["status"] = ReservationStatus.BOOKED
    return fields


def validate_reservation_update(
    reservation: Reservation,
    data: dict[str, Any],
    hours: BusinessHours,
    now: datetime,
) -> dict[str, Any]:
    """
    Run the full-update checks in order, stopping at the first failure.

    Returns:
        The fields to write, including the new status. ``updated_at`` is left
        to the store clock whatever the body says.
    """
    fields = check_required_fields(data)
    check_no_invalid_fields(data, VALID_FIELDS)
    hours.check(datetime.combine(fields["reservation_date"], fields["reservation_time"]), now)
    check_immutable_fields(reservation, data)

    status = parse_status(data.get("status"))
    check_transition(reservation.status, status)

    fields["status"] = status
    return fields
