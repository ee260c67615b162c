"""Read-only schedule overview for a conference.

Builds the nested ``conference -> days -> sections -> slots`` tree the
schedule builder renders, together with completion statistics.  The day
skeleton always comes from :func:`~django_timetable.scheduling.services.days.generate_days`;
persisted ``Day`` rows only contribute their ids.
"""

import datetime
import logging
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from django.db.models import Prefetch

from django_timetable.conference.models import Conference, Day, Section
from django_timetable.presentations.authors import ResolvedAuthor, resolve_author
from django_timetable.presentations.models import Presentation, PresentationAuthor
from django_timetable.scheduling.exceptions import NotFoundError
from django_timetable.scheduling.models import TimeSlot
from django_timetable.scheduling.services.days import DayDescriptor, calendar_date, generate_days

logger = logging.getLogger(__name__)


def scheduling_progress(scheduled: int, total: int) -> int:
    """Return the scheduled share as a whole percentage, rounding halves up.

    Returns 0 when there is nothing to schedule.
    """
    if total == 0:
        return 0
    percent = Decimal(scheduled) * 100 / Decimal(total)
    return int(percent.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass
class ScheduledPresentation:
    """The presentation occupying a slot, as shown in the overview."""

    id: int
    title: str
    duration: int | None
    category: dict[str, object] | None
    presenters: list[ResolvedAuthor]

    def as_dict(self) -> dict[str, object]:
        """Return the JSON representation."""
        return {
            "id": self.id,
            "title": self.title,
            "duration": self.duration,
            "category": self.category,
            "presenters": [presenter.as_dict() for presenter in self.presenters],
        }


@dataclass
class SlotNode:
    """One time slot of a section."""

    id: int
    start_time: datetime.datetime
    end_time: datetime.datetime
    duration: int
    is_fixed: bool
    is_available: bool
    presentation: ScheduledPresentation | None = None

    def as_dict(self) -> dict[str, object]:
        """Return the JSON representation."""
        return {
            "id": self.id,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration": self.duration,
            "is_fixed": self.is_fixed,
            "is_available": self.is_available,
            "presentation": self.presentation.as_dict() if self.presentation else None,
        }


@dataclass
class SectionNode:
    """A section and its slots in start-time order."""

    id: int
    name: str
    room: str
    capacity: int | None
    type: str
    start_time: datetime.datetime
    end_time: datetime.datetime
    is_fixed: bool
    slots: list[SlotNode] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        """Return the JSON representation."""
        return {
            "id": self.id,
            "name": self.name,
            "room": self.room,
            "capacity": self.capacity,
            "type": self.type,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "is_fixed": self.is_fixed,
            "slots": [slot.as_dict() for slot in self.slots],
        }


@dataclass
class DayNode:
    """A generated conference day with the sections that start on it.

    ``id`` is the primary key of the persisted ``Day`` for the date, or
    ``None`` when no section has been created on that day yet.
    """

    id: int | None
    descriptor: DayDescriptor
    sections: list[SectionNode] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        """Return the JSON representation."""
        return {
            "id": self.id,
            "date": self.descriptor.iso_date,
            "order": self.descriptor.order,
            "weekday": self.descriptor.weekday,
            "name": self.descriptor.name,
            "sections": [section.as_dict() for section in self.sections],
        }


@dataclass(frozen=True)
class ScheduleStatistics:
    """Completion counts for a conference's approved presentations."""

    total_presentations: int
    scheduled_presentations: int
    unscheduled_presentations: int
    scheduling_progress: int


@dataclass
class ScheduleTree:
    """The full schedule overview of one conference."""

    conference: Conference
    days: list[DayNode]
    statistics: ScheduleStatistics
    unmatched_section_ids: list[int] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        """Return the JSON body served by the overview view."""
        conference = self.conference
        return {
            "conference": {
                "id": conference.pk,
                "name": conference.name,
                "slug": conference.slug,
                "start_date": conference.start_date.isoformat(),
                "end_date": conference.end_date.isoformat(),
                "timezone": conference.timezone,
                "venue": conference.venue,
                "status": conference.status,
                "is_public": conference.is_public,
            },
            "days": [day.as_dict() for day in self.days],
            "statistics": {
                "total_presentations": self.statistics.total_presentations,
                "scheduled_presentations": self.statistics.scheduled_presentations,
                "unscheduled_presentations": self.statistics.unscheduled_presentations,
                "scheduling_progress": self.statistics.scheduling_progress,
            },
            "unmatched_section_ids": self.unmatched_section_ids,
        }


class ScheduleOverviewBuilder:
    """Assembles the schedule overview of a conference.

    Args:
        using: Database alias every query runs against.
    """

    def __init__(self, using: str = "default") -> None:
        self.using = using

    def build(self, conference_id: int) -> ScheduleTree:
        """Build the overview tree and statistics for a conference.

        Args:
            conference_id: Primary key of the conference.

        Returns:
            The schedule tree, days ascending by date.

        Raises:
            NotFoundError: If the conference does not exist or lacks a
                start or end date.
        """
        conference = Conference.objects.using(self.using).filter(pk=conference_id).first()
        if conference is None:
            msg = f"Conference {conference_id} not found"
            raise NotFoundError(msg)
        if not conference.start_date or not conference.end_date:
            msg = f"Conference '{conference.slug}' has no start or end date"
            raise NotFoundError(msg)

        persisted = dict(
            Day.objects.using(self.using).filter(conference=conference).values_list("date", "pk"),
        )
        days = [
            DayNode(id=persisted.get(descriptor.date), descriptor=descriptor)
            for descriptor in generate_days(conference.start_date, conference.end_date)
        ]
        by_date = {day.descriptor.date: day for day in days}

        unmatched: list[int] = []
        for section in self._sections(conference):
            day = by_date.get(calendar_date(section.start_time))
            if day is None:
                unmatched.append(section.pk)
                continue
            day.sections.append(self._section_node(section))

        if unmatched:
            logger.warning(
                "Conference '%s' has %d section(s) outside %s..%s: %s",
                conference.slug,
                len(unmatched),
                conference.start_date.isoformat(),
                conference.end_date.isoformat(),
                unmatched,
            )

        return ScheduleTree(
            conference=conference,
            days=days,
            statistics=self._statistics(conference),
            unmatched_section_ids=unmatched,
        )

    def _sections(self, conference: Conference) -> list[Section]:
        presenters = PresentationAuthor.objects.using(self.using).filter(is_presenter=True).select_related(
            "user", "presenter"
        )
        slots = (
            TimeSlot.objects.using(self.using)
            .select_related("presentation__category")
            .prefetch_related(Prefetch("presentation__authors", queryset=presenters, to_attr="presenter_authors"))
            .order_by("start_time")
        )
        return list(
            Section.objects.using(self.using)
            .filter(conference=conference)
            .prefetch_related(Prefetch("time_slots", queryset=slots))
            .order_by("start_time", "order", "name")
        )

    def _section_node(self, section: Section) -> SectionNode:
        is_fixed = section.is_fixed
        node = SectionNode(
            id=section.pk,
            name=section.name,
            room=section.room,
            capacity=section.capacity,
            type=section.type,
            start_time=section.start_time,
            end_time=section.end_time,
            is_fixed=is_fixed,
        )
        for slot in section.time_slots.all():
            presentation = slot.presentation
            node.slots.append(
                SlotNode(
                    id=slot.pk,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    duration=slot.duration_minutes,
                    is_fixed=is_fixed,
                    is_available=presentation is None and not is_fixed,
                    presentation=self._presentation(presentation) if presentation is not None else None,
                )
            )
        return node

    def _presentation(self, presentation: Presentation) -> ScheduledPresentation:
        category = presentation.category
        return ScheduledPresentation(
            id=presentation.pk,
            title=presentation.title,
            duration=presentation.final_duration,
            category=(
                {"id": category.pk, "name": category.name, "color": category.color} if category is not None else None
            ),
            presenters=[resolve_author(author) for author in presentation.presenter_authors],
        )

    def _statistics(self, conference: Conference) -> ScheduleStatistics:
        presentations = Presentation.objects.using(self.using).filter(
            conference=conference, review_status=Presentation.ReviewStatus.APPROVED
        )
        total = presentations.count()
        scheduled = presentations.filter(time_slot__isnull=False).count()
        return ScheduleStatistics(
            total_presentations=total,
            scheduled_presentations=scheduled,
            unscheduled_presentations=total - scheduled,
            scheduling_progress=scheduling_progress(scheduled, total),
        )
