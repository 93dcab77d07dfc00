"""Request validation for tables."""

from typing import Any

from app.errors import ValidationError
from app.validators.reservation import MAX_TEXT_LENGTH, check_no_invalid_fields

REQUIRED_FIELDS = ("table_name", "capacity")
VALID_FIELDS = REQUIRED_FIELDS + ("reservation_id",)


def check_required_fields(data: dict[str, Any]) -> None:
    """Check that ``table_name`` and ``capacity`` are present and well formed."""
    for field in REQUIRED_FIELDS:
        if not data.get(field):
            raise ValidationError(
                f"The data in the request body requires a {field} field."
            )

    table_name = data["table_name"]
    if not isinstance(table_name, str) or len(table_name) < 2:
        raise ValidationError(
            "The 'table_name' property must have a length of two or greater"
        )
    if len(table_name) > MAX_TEXT_LENGTH:
        raise ValidationError(
            f"The 'table_name' property must be at most {MAX_TEXT_LENGTH} characters long"
        )

    capacity = data["capacity"]
    if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
        raise ValidationError(
            "The 'capacity' property must be a number that is 1 or greater"
        )


def check_reservation_id(value: Any) -> int:
    """Check a ``reservation_id`` given in a table request body."""
    if not value:
        raise ValidationError(
            "The data in the request body requires a reservation_id property."
        )
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(
            f"The reservation_id property ({value}) must be an integer."
        )
    return value


def validate_new_table(data: dict[str, Any]) -> dict[str, Any]:
    """
    Run the table creation checks.

    Returns:
        The fields to persist. ``occupied`` is never taken from the request,
        it follows from whether ``reservation_id`` is set.
    """
    check_required_fields(data)
    check_no_invalid_fields(data, VALID_FIELDS)

    fields = {
        "table_name": data["table_name"],
        "capacity": data["capacity"],
        "reservation_id": None,
    }
    if data.get("reservation_id"):
        fields["reservation_id"] = check_reservation_id(data["reservation_id"])
    return fields
