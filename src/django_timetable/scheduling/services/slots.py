"""Next-available-slot calculation for a section.

A pure computation over an explicit snapshot of a section's occupied slots.
Nothing here touches the database; callers read the snapshot and hand it in,
which keeps the calculator trivially testable and safe to share.
"""

import datetime
from collections.abc import Iterable
from dataclasses import dataclass
from typing import NamedTuple

from django_timetable.scheduling.exceptions import (
    InvalidDurationError,
    InvalidScheduleDataError,
    NoCapacityError,
)
from django_timetable.settings import get_config

_MINUTE = datetime.timedelta(minutes=1)


class SlotWindow(NamedTuple):
    """The ``[start, end)`` window of an occupied slot."""

    start: datetime.datetime
    end: datetime.datetime


@dataclass(frozen=True, slots=True)
class PlacementResult:
    """Where a new item would land inside a section.

    ``available_minutes`` is the room between the frontier and the section
    end before placement.  When ``truncated`` is set, ``actual_duration`` is
    shorter than ``requested_duration`` and equals ``available_minutes``.
    """

    start_time: datetime.datetime
    end_time: datetime.datetime
    requested_duration: int
    actual_duration: int
    truncated: bool
    available_minutes: int


def validate_duration(duration: object, label: str = "Duration") -> int:
    """Return *duration* if it is a positive whole number of minutes.

    Raises:
        InvalidDurationError: If *duration* is not a positive ``int``.
    """
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        msg = f"{label} must be a positive number of minutes, got {duration!r}"
        raise InvalidDurationError(msg)
    return duration


def whole_minutes(delta: datetime.timedelta) -> int:
    """Return the floor of *delta* in minutes (negative deltas floor downward)."""
    return delta // _MINUTE


def find_frontier(
    section_start: datetime.datetime,
    occupied: Iterable[tuple[datetime.datetime, datetime.datetime]],
    *,
    max_slots: int | None = None,
) -> datetime.datetime:
    """Return the latest end time among *occupied*, never earlier than *section_start*.

    Slots are walked in ascending start order while the running maximum end
    time is tracked, so a long early slot that outlasts later short ones still
    pushes the frontier.

    Raises:
        InvalidScheduleDataError: If a slot ends before it starts or there are
            more slots than *max_slots*.
    """
    limit = max_slots if max_slots is not None else get_config().scheduling.max_slots_per_section
    windows = sorted((SlotWindow(*slot) for slot in occupied), key=lambda window: window.start)
    if len(windows) > limit:
        msg = f"Section has {len(windows)} slots, more than the limit of {limit}"
        raise InvalidScheduleDataError(msg)

    frontier = section_start
    for window in windows:
        if window.end < window.start:
            msg = f"Slot ending at {window.end.isoformat()} starts later, at {window.start.isoformat()}"
            raise InvalidScheduleDataError(msg)
        frontier = max(frontier, window.end)
    return frontier


def next_available_slot(
    section_start: datetime.datetime,
    section_end: datetime.datetime,
    occupied: Iterable[tuple[datetime.datetime, datetime.datetime]],
    duration: int,
    *,
    max_slots: int | None = None,
) -> PlacementResult:
    """Compute the next free window of *duration* minutes in a section.

    The window opens at the frontier of the occupied slots (or the section
    start when nothing is placed yet).  When it would run past the section
    end the placement is truncated to the remaining whole minutes.

    Args:
        section_start: Start bound of the section.
        section_end: End bound of the section.
        occupied: ``(start, end)`` pairs of the slots already in the section,
            in any order.
        duration: Requested length in minutes.
        max_slots: Upper bound on the number of slots scanned; defaults to
            ``DJANGO_TIMETABLE['scheduling']['max_slots_per_section']``.

    Returns:
        The computed placement.

    Raises:
        InvalidDurationError: If *duration* is not a positive integer.
        NoCapacityError: If no whole minute remains after the frontier.
        InvalidScheduleDataError: If the occupied slots are malformed.
    """
    validate_duration(duration)
    frontier = find_frontier(section_start, occupied, max_slots=max_slots)

    available_minutes = whole_minutes(section_end - frontier)
    candidate_end = frontier + datetime.timedelta(minutes=duration)

    if candidate_end <= section_end:
        return PlacementResult(
            start_time=frontier,
            end_time=candidate_end,
            requested_duration=duration,
            actual_duration=duration,
            truncated=False,
            available_minutes=available_minutes,
        )

    if available_minutes <= 0:
        msg = f"No capacity left: section ends at {section_end.isoformat()}, next free start is {frontier.isoformat()}"
        raise NoCapacityError(msg)

    return PlacementResult(
        start_time=frontier,
        end_time=frontier + datetime.timedelta(minutes=available_minutes),
        requested_duration=duration,
        actual_duration=available_minutes,
        truncated=True,
        available_minutes=available_minutes,
    )
