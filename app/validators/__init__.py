"""Request validators for reservations and tables."""

from app.validators.hours import BusinessHours, closed_day_message
from app.validators.status import (
    ALLOWED_TRANSITIONS,
    TransitionRejection,
    check_transition,
    parse_status,
    transition_rejection,
)

__all__ = [
    "ALLOWED_TRANSITIONS",
    "BusinessHours",
    "TransitionRejection",
    "check_transition",
    "closed_day_message",
    "parse_status",
    "transition_rejection",
]
