from datetime import date, datetime, time

import pytest

from app.errors import ConflictError, ValidationError
from app.models.reservation import Reservation, ReservationStatus
from app.validators.hours import BusinessHours
from app.validators.reservation import (
    REQUIRED_FIELDS,
    check_immutable_fields,
    check_query,
    parse_query_date,
    validate_new_reservation,
    validate_reservation_update,
)
from app.validators.table import validate_new_table

NOW = datetime(2030, 1, 7, 9, 0)
HOURS = BusinessHours()
CREATED = datetime(2030, 1, 1, 12, 0, 0, 250000)


def body(**overrides):
    data = {
        "first_name": "Grace",
        "last_name": "Hopper",
        "mobile_number": "555-0199",
        "reservation_date": "2030-01-09",
        "reservation_time": "19:15",
        "people": 3,
    }
    data.update(overrides)
    return data


def stored(**overrides):
    fields = {
        "reservation_id": 7,
        "first_name": "Grace",
        "last_name": "Hopper",
        "mobile_number": "555-0199",
        "reservation_date": date(2030, 1, 9),
        "reservation_time": time(19, 15),
        "people": 3,
        "status": ReservationStatus.BOOKED,
        "created_at": CREATED,
        "updated_at": CREATED,
    }
    fields.update(overrides)
    return Reservation(**fields)


def test_valid_reservation_is_normalized():
    fields = validate_new_reservation(body(), HOURS, NOW)

    assert fields["reservation_date"] == date(2030, 1, 9)
    assert fields["reservation_time"] == time(19, 15)
    assert fields["status"] == ReservationStatus.BOOKED
    assert "reservation_id" not in fields


@pytest.mark.parametrize("field", REQUIRED_FIELDS)
def test_missing_field_is_named(field):
    data = body()
    del data[field]

    with pytest.raises(ValidationError) as exc_info:
        validate_new_reservation(data, HOURS, NOW)

    assert exc_info.value.message == f"The data in the request body requires a {field} field."


@pytest.mark.parametrize("field", ["first_name", "people"])
def test_empty_field_counts_as_missing(field):
    empty = 0 if field == "people" else ""

    with pytest.raises(ValidationError, match=f"requires a {field} field"):
        validate_new_reservation(body(**{field: empty}), HOURS, NOW)


@pytest.mark.parametrize("value", ["7pm", "1915", "9:15", "noon"])
def test_rejects_badly_formatted_time(value):
    with pytest.raises(ValidationError, match="format of HH:MM"):
        validate_new_reservation(body(reservation_time=value), HOURS, NOW)


@pytest.mark.parametrize("value", ["01/09/2030", "2030-1-9", "tomorrow"])
def test_rejects_badly_formatted_date(value):
    with pytest.raises(ValidationError, match="format of YYYY-MM-DD"):
        validate_new_reservation(body(reservation_date=value), HOURS, NOW)


def test_rejects_impossible_date_time():
    with pytest.raises(ValidationError, match="valid Date-Time string"):
        validate_new_reservation(body(reservation_date="2030-02-30"), HOURS, NOW)


@pytest.mark.parametrize("value", ["3", True, 2.5])
def test_people_must_be_an_integer(value):
    with pytest.raises(ValidationError, match="must be a number"):
        validate_new_reservation(body(people=value), HOURS, NOW)


def test_people_must_be_positive():
    with pytest.raises(ValidationError, match="1 or greater"):
        validate_new_reservation(body(people=-2), HOURS, NOW)


def test_unknown_fields_are_listed():
    with pytest.raises(ValidationError) as exc_info:
        validate_new_reservation(body(table="Bar", notes="window"), HOURS, NOW)

    assert exc_info.value.message == "Invalid field(s): table, notes"


def test_new_reservation_accepts_booked_status():
    fields = validate_new_reservation(body(status="booked"), HOURS, NOW)

    assert fields["status"] == ReservationStatus.BOOKED


@pytest.mark.parametrize("status", ["seated", "finished", "cancelled"])
def test_new_reservation_rejects_other_statuses(status):
    with pytest.raises(ValidationError, match=f"Status cannot be set to '{status}'"):
        validate_new_reservation(body(status=status), HOURS, NOW)


def test_store_fields_are_dropped_on_create():
    fields = validate_new_reservation(
        body(reservation_id=99, created_at="2001-01-01T00:00:00"), HOURS, NOW
    )

    assert "reservation_id" not in fields
    assert "created_at" not in fields


def test_business_hours_apply_to_create():
    with pytest.raises(ValidationError, match="closed on Tuesdays"):
        validate_new_reservation(body(reservation_date="2030-01-08"), HOURS, NOW)


def test_immutable_fields_may_be_echoed():
    check_immutable_fields(
        stored(),
        {"reservation_id": 7, "created_at": CREATED.isoformat()},
    )


def test_immutable_fields_may_be_omitted():
    check_immutable_fields(stored(), {})


def test_reservation_id_cannot_change():
    with pytest.raises(ValidationError, match="from 7 to 8"):
        check_immutable_fields(stored(), {"reservation_id": 8})


def test_created_at_cannot_change():
    with pytest.raises(ValidationError, match="cannot alter the date"):
        check_immutable_fields(stored(), {"created_at": "2029-12-31T12:00:00"})


def test_update_requires_status():
    with pytest.raises(ValidationError, match="requires a status field"):
        validate_reservation_update(stored(), body(), HOURS, NOW)


def test_update_applies_transition_table():
    with pytest.raises(ConflictError, match="'seated' reservation can not be updated to 'booked'"):
        validate_reservation_update(
            stored(status=ReservationStatus.SEATED), body(status="booked"), HOURS, NOW
        )


def test_update_returns_new_status():
    fields = validate_reservation_update(stored(), body(status="cancelled", people=5), HOURS, NOW)

    assert fields["status"] == ReservationStatus.CANCELLED
    assert fields["people"] == 5


def test_query_accepts_fields_and_date():
    check_query({"date": "2030-01-09", "last_name": "hop", "status": "booked"})


def test_query_rejects_unknown_keys():
    with pytest.raises(ValidationError) as exc_info:
        check_query({"mobile_number": "555", "foo": "1", "bar": "2"})

    assert exc_info.value.message == "Invalid queries: 'foo', 'bar'"


def test_query_date_must_be_a_date():
    assert parse_query_date("2024-01-01") == date(2024, 1, 1)

    with pytest.raises(ValidationError):
        parse_query_date("2024-13-01")


def test_valid_table():
    fields = validate_new_table({"table_name": "Bar #1", "capacity": 1})

    assert fields == {"table_name": "Bar #1", "capacity": 1, "reservation_id": None}


def test_table_keeps_reservation_id():
    fields = validate_new_table({"table_name": "#2", "capacity": 6, "reservation_id": 4})

    assert fields["reservation_id"] == 4


@pytest.mark.parametrize(
    "data, message",
    [
        ({"capacity": 2}, "requires a table_name field"),
        ({"table_name": "Patio"}, "requires a capacity field"),
        ({"table_name": "A", "capacity": 2}, "length of two or greater"),
        ({"table_name": "Patio", "capacity": "2"}, "must be a number that is 1 or greater"),
        ({"table_name": "Patio", "capacity": -1}, "must be a number that is 1 or greater"),
        ({"table_name": "Patio", "capacity": 2, "occupied": True}, r"Invalid field\(s\): occupied"),
    ],
)
def test_invalid_tables(data, message):
    with pytest.raises(ValidationError, match=message):
        validate_new_table(data)


def test_rejects_names_longer_than_the_column():
    with pytest.raises(ValidationError, match="at most 255 characters"):
        validate_new_reservation(body(last_name="x" * 256), HOURS, NOW)


def test_accepts_names_as_long_as_the_column():
    fields = validate_new_reservation(body(last_name="x" * 255), HOURS, NOW)

    assert len(fields["last_name"]) == 255


def test_rejects_table_name_longer_than_the_column():
    with pytest.raises(ValidationError, match="at most 255 characters"):
        validate_new_table({"table_name": "T" * 256, "capacity": 2})
