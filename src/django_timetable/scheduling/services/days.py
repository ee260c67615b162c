"""Day generation for conference schedules.

Derives the canonical day skeleton of a conference from its date range.
The same arithmetic decides the ``order`` of persisted ``Day`` rows, so a
stored day always agrees with what :func:`generate_days` yields for its date.
"""

import datetime
from dataclasses import dataclass

from django_timetable.scheduling.exceptions import InvalidRangeError
from django_timetable.settings import get_config


@dataclass(frozen=True, slots=True)
class DayDescriptor:
    """One calendar day of a conference."""

    date: datetime.date
    order: int
    weekday: str
    name: str

    @property
    def iso_date(self) -> str:
        """Return the day's date as an ISO 8601 string."""
        return self.date.isoformat()


def day_order(start_date: datetime.date, date: datetime.date) -> int:
    """Return the 1-based position of *date* in a range starting at *start_date*."""
    return (date - start_date).days + 1


def day_name(order: int) -> str:
    """Render the display name of the day at *order*."""
    return get_config().scheduling.day_name_template.format(order=order)


def calendar_date(value: datetime.datetime) -> datetime.date:
    """Extract the calendar date of a section or slot start.

    Aware datetimes are normalised to UTC first so the date matches what the
    database hands back when the value is read again.
    """
    if value.tzinfo is not None:
        value = value.astimezone(datetime.UTC)
    return value.date()


def generate_days(start_date: datetime.date, end_date: datetime.date) -> list[DayDescriptor]:
    """Build one descriptor per calendar day from *start_date* to *end_date*.

    Args:
        start_date: First day of the conference.
        end_date: Last day of the conference (inclusive).

    Returns:
        Descriptors in ascending date order with contiguous 1-based orders.

    Raises:
        InvalidRangeError: If *end_date* precedes *start_date*.
    """
    if end_date < start_date:
        msg = f"End date {end_date.isoformat()} is before start date {start_date.isoformat()}"
        raise InvalidRangeError(msg)

    count = (end_date - start_date).days + 1
    days: list[DayDescriptor] = []
    for offset in range(count):
        date = start_date + datetime.timedelta(days=offset)
        order = offset + 1
        days.append(
            DayDescriptor(
                date=date,
                order=order,
                weekday=date.strftime("%A"),
                name=day_name(order),
            )
        )
    return days
