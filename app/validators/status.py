"""Reservation status state machine."""

import enum

from app.errors import ConflictError, ValidationError
from app.models.reservation import ReservationStatus

# Statuses a reservation may move to from each status.
ALLOWED_TRANSITIONS: dict[ReservationStatus, frozenset[ReservationStatus]] = {
    ReservationStatus.BOOKED: frozenset(
        {ReservationStatus.BOOKED, ReservationStatus.SEATED, ReservationStatus.CANCELLED}
    ),
    ReservationStatus.SEATED: frozenset({ReservationStatus.FINISHED}),
    ReservationStatus.FINISHED: frozenset(),
    ReservationStatus.CANCELLED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


class TransitionRejection(str, enum.Enum):
    """Reason a status transition is refused."""

    TERMINAL_STATE = "terminal_state"
    SEATED_MUST_FINISH = "seated_must_finish"
    NOT_ALLOWED = "not_allowed"


def parse_status(value: object) -> ReservationStatus:
    """Parse a client-supplied status, rejecting missing or unknown values."""
    if not value:
        raise ValidationError("The data in the request body requires a status field.")

    try:
        return ReservationStatus(value)
    except ValueError:
        valid = "', '".join(s.value for s in ReservationStatus)
        raise ValidationError(
            f"{value} is an invalid status. The only valid statuses are: '{valid}'."
        )


def transition_rejection(
    current: ReservationStatus,
    target: ReservationStatus,
) -> TransitionRejection | None:
    """Return why ``current -> target`` is refused, or None if it is allowed."""
    if target in ALLOWED_TRANSITIONS[current]:
        return None
    if current in TERMINAL_STATUSES:
        return TransitionRejection.TERMINAL_STATE
    if current == ReservationStatus.SEATED:
        return TransitionRejection.SEATED_MUST_FINISH
    return TransitionRejection.NOT_ALLOWED


def check_transition(current: ReservationStatus, target: ReservationStatus) -> None:
    """Raise ConflictError unless ``current -> target`` is a legal transition."""
    reason = transition_rejection(current, target)
    if reason is None:
        return

    if reason == TransitionRejection.TERMINAL_STATE:
        raise ConflictError(
            f"A '{current.value}' reservation cannot be updated. If you must book "
            "this reservation again, please make a new reservation instead."
        )
    if reason == TransitionRejection.SEATED_MUST_FINISH:
        raise ConflictError(
            f"A 'seated' reservation can not be updated to '{target.value}'. "
            "Seated reservations can only have their status changed to 'finished'."
        )
    raise ConflictError(
        f"A '{current.value}' reservation can not be updated to '{target.value}'."
    )
