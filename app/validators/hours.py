"""Restaurant opening hours and the reservation moment policy."""

from dataclasses import dataclass
from datetime import datetime, time

from app.config import Settings
from app.errors import ValidationError

WEEKDAYS = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def parse_clock_time(value: str) -> time:
    """Parse an ``HH:MM`` setting value."""
    try:
        return datetime.strptime(value, "%H:%M").time()
    except ValueError:
        raise ValueError(f"Invalid time of day {value!r}, expected HH:MM")


def weekday_index(name: str) -> int:
    """Map an English weekday name (any case) to ``datetime.weekday()``."""
    normalized = name.strip().capitalize()
    if normalized not in WEEKDAYS:
        raise ValueError(f"Unknown weekday {name!r}")
    return WEEKDAYS.index(normalized)


def closed_day_message(closed_days: tuple[int, ...], selected_day: int) -> str:
    """
    Build the rejection message for a reservation on a closed day.

    Day names are pluralized and joined as an English list:
    "Tuesdays", "Tuesdays and Wednesdays", "Mondays, Tuesdays, and Wednesdays".
    """
    names = [f"{WEEKDAYS[day]}s" for day in sorted(closed_days)]
    if len(names) == 1:
        listed = names[0]
    elif len(names) == 2:
        listed = f"{names[0]} and {names[1]}"
    else:
        listed = f"{', '.join(names[:-1])}, and {names[-1]}"

    return (
        f"The date you have selected is a {WEEKDAYS[selected_day]}. "
        f"The restaurant is closed on {listed}."
    )


@dataclass(frozen=True)
class BusinessHours:
    """Days and times the restaurant accepts reservations for."""

    closed_days: tuple[int, ...] = (1,)
    opening_time: time = time(10, 30)
    closing_time: time = time(21, 30)

    @classmethod
    def from_settings(cls, settings: Settings) -> "BusinessHours":
        """Build business hours from application settings."""
        opening = parse_clock_time(settings.OPENING_TIME)
        closing = parse_clock_time(settings.CLOSING_TIME)
        if closing < opening:
            raise ValueError("CLOSING_TIME must not be earlier than OPENING_TIME")

        return cls(
            closed_days=tuple(sorted({weekday_index(day) for day in settings.CLOSED_DAYS})),
            opening_time=opening,
            closing_time=closing,
        )

    def check(self, moment: datetime, now: datetime) -> None:
        """
        Validate that a reservation moment can be booked.

        Raises:
            ValidationError: If the moment is not in the future, falls on a
                closed day, or lies outside the opening window.
        """
        if moment <= now:
            raise ValidationError(
                "Your reservation cannot be made for a date or time of the past. "
                "Please select a future date."
            )

        if moment.weekday() in self.closed_days:
            raise ValidationError(closed_day_message(self.closed_days, moment.weekday()))

        if not self.opening_time <= moment.time() <= self.closing_time:
            raise ValidationError(
                f"Your reservation cannot be made for that time "
                f"({moment.strftime('%H:%M')}). The restaurant is only taking "
                f"reservations between {self.opening_time.strftime('%H:%M')} "
                f"and {self.closing_time.strftime('%H:%M')}"
            )
