"""Section creation service with lazy Day lookup.

Sections are attached to the persisted ``Day`` of their start date.  Days
are created on demand, with the same order and name the day generator
derives on read, so stored days never drift from the generated skeleton.
"""

import datetime
import logging

from django.db import IntegrityError, transaction
from django.db.models import Q

from django_timetable.conference.models import Conference, Day, Section
from django_timetable.scheduling.exceptions import InvalidRangeError
from django_timetable.scheduling.services.days import calendar_date, day_name, day_order

logger = logging.getLogger(__name__)


class SectionService:
    """Creates sections and the days they belong to.

    Args:
        using: Database alias every query and transaction runs against.
    """

    def __init__(self, using: str = "default") -> None:
        self.using = using

    def get_or_create_day(self, conference: Conference, date: datetime.date) -> Day:
        """Return the persisted Day for *date*, creating it if absent.

        Args:
            conference: The conference the day belongs to.
            date: The calendar date to look up.

        Returns:
            The existing or newly created Day.

        Raises:
            InvalidRangeError: If *date* lies outside the conference dates.
        """
        if not conference.start_date <= date <= conference.end_date:
            msg = (
                f"{date.isoformat()} is outside conference '{conference.slug}' "
                f"({conference.start_date.isoformat()} to {conference.end_date.isoformat()})"
            )
            raise InvalidRangeError(msg)

        days = Day.objects.using(self.using)
        day = days.filter(conference=conference, date=date).first()
        if day is not None:
            return day

        order = day_order(conference.start_date, date)
        try:
            with transaction.atomic(using=self.using):
                day = days.create(conference=conference, date=date, order=order, name=day_name(order))
        except IntegrityError:
            # Another request created the same day first.
            return days.get(conference=conference, date=date)

        logger.info("Created day %d (%s) for conference '%s'", order, date.isoformat(), conference.slug)
        return day

    def create_section(
        self,
        conference: Conference,
        *,
        name: str,
        start_time: datetime.datetime,
        end_time: datetime.datetime,
        room: str = "",
        capacity: int | None = None,
        description: str = "",
        type: str = Section.SectionType.PRESENTATION,  # noqa: A002
        order: int = 0,
    ) -> Section:
        """Create a section and attach it to the Day of its start date.

        Args:
            conference: The owning conference.
            name: Display name of the section.
            start_time: Start of the section window.
            end_time: End of the section window.
            room: Room or venue space.
            capacity: Seat capacity, if known.
            description: Free-text description.
            type: One of :class:`Section.SectionType`.
            order: Display order among sections starting together.

        Returns:
            The created Section.

        Raises:
            InvalidRangeError: If the window is empty or inverted, or its
                start date is outside the conference dates.
        """
        if end_time <= start_time:
            msg = f"Section '{name}' must end after it starts"
            raise InvalidRangeError(msg)

        with transaction.atomic(using=self.using):
            day = self.get_or_create_day(conference, calendar_date(start_time))
            return Section.objects.using(self.using).create(
                conference=conference,
                day=day,
                name=name,
                start_time=start_time,
                end_time=end_time,
                room=room,
                capacity=capacity,
                description=description,
                type=type,
                order=order,
            )

    def update_section_times(
        self,
        section: Section,
        *,
        start_time: datetime.datetime,
        end_time: datetime.datetime,
    ) -> Section:
        """Move a section to a new window, re-attaching it to the matching Day.

        The previous Day is deleted when the section was its last one.

        Raises:
            InvalidRangeError: If the new window is empty or inverted, falls
                outside the conference dates, or no longer contains every
                time slot assigned to the section.
        """
        if end_time <= start_time:
            msg = f"Section '{section.name}' must end after it starts"
            raise InvalidRangeError(msg)

        with transaction.atomic(using=self.using):
            slots = section.time_slots.using(self.using)
            outside = slots.filter(Q(start_time__lt=start_time) | Q(end_time__gt=end_time)).count()
            if outside:
                msg = (
                    f"Section '{section.name}' has {outside} time slot(s) outside "
                    f"{start_time.isoformat()} - {end_time.isoformat()}"
                )
                raise InvalidRangeError(msg)

            previous_day_id = section.day_id
            day = self.get_or_create_day(section.conference, calendar_date(start_time))
            section.start_time = start_time
            section.end_time = end_time
            section.day = day
            section.save(using=self.using, update_fields=["start_time", "end_time", "day", "updated_at"])

            if previous_day_id is not None and previous_day_id != day.pk:
                remaining = Section.objects.using(self.using).filter(day_id=previous_day_id).exists()
                if not remaining:
                    Day.objects.using(self.using).filter(pk=previous_day_id).delete()
        return section

    def sync_days(self, conference: Conference) -> int:
        """Realign persisted days after the conference dates changed.

        Days inside the new range get their order and name recomputed; days
        outside it are deleted and their sections detached.

        Returns:
            The number of days changed or deleted.
        """
        changed = 0
        with transaction.atomic(using=self.using):
            for day in Day.objects.using(self.using).filter(conference=conference):
                if not conference.start_date <= day.date <= conference.end_date:
                    day.delete(using=self.using)
                    changed += 1
                    continue
                order = day_order(conference.start_date, day.date)
                name = day_name(order)
                if (day.order, day.name) != (order, name):
                    day.order, day.name = order, name
                    day.save(using=self.using, update_fields=["order", "name", "updated_at"])
                    changed += 1

        if changed:
            logger.info("Realigned %d day(s) of conference '%s'", changed, conference.slug)
        return changed
