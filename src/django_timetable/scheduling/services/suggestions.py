"""Read-only placement suggestions for unscheduled presentations.

Every approved presentation without a time slot gets a proposed section and
start time, computed with the same slot calculator the assignment service
uses.  Nothing is written: the proposals are simulated against an in-memory
copy of each section's occupied windows, so two proposals never overlap.
"""

import datetime
import logging
from dataclasses import dataclass, field

from django.db.models import Prefetch

from django_timetable.conference.models import Conference, Section
from django_timetable.presentations.models import Presentation
from django_timetable.scheduling.exceptions import (
    InvalidDurationError,
    InvalidScheduleDataError,
    NoCapacityError,
    NotFoundError,
)
from django_timetable.scheduling.models import TimeSlot
from django_timetable.scheduling.services.slots import (
    PlacementResult,
    SlotWindow,
    next_available_slot,
    validate_duration,
)

logger = logging.getLogger(__name__)

CATEGORY_MATCH = "category_match"
NEXT_AVAILABLE = "next_available"

_CONFIDENCE = {CATEGORY_MATCH: 0.9, NEXT_AVAILABLE: 0.6}


@dataclass(frozen=True, slots=True)
class Suggestion:
    """A proposed placement for one presentation."""

    presentation_id: int
    title: str
    section_id: int
    section_name: str
    start_time: datetime.datetime
    end_time: datetime.datetime
    duration: int
    reason: str
    confidence: float

    def as_dict(self) -> dict[str, object]:
        """Return the JSON representation of the suggestion."""
        return {
            "presentation_id": self.presentation_id,
            "title": self.title,
            "section_id": self.section_id,
            "section_name": self.section_name,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration": self.duration,
            "reason": self.reason,
            "confidence": self.confidence,
        }


@dataclass
class SuggestionReport:
    """Suggestions for a conference plus the presentations that fit nowhere."""

    conference_id: int
    total_unscheduled: int
    suggestions: list[Suggestion] = field(default_factory=list)
    unplaced_presentation_ids: list[int] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        """Return the JSON representation of the report."""
        return {
            "conference_id": self.conference_id,
            "total_unscheduled": self.total_unscheduled,
            "suggestions": [suggestion.as_dict() for suggestion in self.suggestions],
            "unplaced_presentation_ids": self.unplaced_presentation_ids,
        }


@dataclass
class _Candidate:
    section: Section
    occupied: list[SlotWindow]
    category_ids: set[int]

    def place(self, duration: int) -> PlacementResult | None:
        try:
            placement = next_available_slot(self.section.start_time, self.section.end_time, self.occupied, duration)
        except (NoCapacityError, InvalidScheduleDataError):
            return None
        return None if placement.truncated else placement


def _candidates(conference: Conference, using: str) -> list[_Candidate]:
    slots = TimeSlot.objects.using(using).select_related("presentation").order_by("start_time")
    sections = (
        Section.objects.using(using)
        .filter(conference=conference)
        .prefetch_related(Prefetch("time_slots", queryset=slots))
        .order_by("start_time", "order", "name", "pk")
    )
    return [
        _Candidate(
            section=section,
            occupied=[SlotWindow(slot.start_time, slot.end_time) for slot in section.time_slots.all()],
            category_ids={
                slot.presentation.category_id
                for slot in section.time_slots.all()
                if slot.presentation is not None and slot.presentation.category_id is not None
            },
        )
        for section in sections
        if not section.is_fixed
    ]


def suggest_assignments(conference_id: int, *, using: str = "default") -> SuggestionReport:
    """Propose a section and start time for each approved, unscheduled presentation.

    Fixed sections are never proposed.  A section that already hosts a
    presentation of the same category is preferred over the first section
    with room; placements that would have to be truncated are not proposed.

    Args:
        conference_id: Primary key of the conference.
        using: Database alias to read from.

    Returns:
        The suggestions, in presentation title order, and the ids of the
        presentations no section can take whole.

    Raises:
        NotFoundError: If the conference does not exist.
    """
    conference = Conference.objects.using(using).filter(pk=conference_id).first()
    if conference is None:
        msg = f"Conference {conference_id} not found"
        raise NotFoundError(msg)

    candidates = _candidates(conference, using)
    presentations = list(
        Presentation.objects.using(using)
        .filter(
            conference=conference,
            review_status=Presentation.ReviewStatus.APPROVED,
            time_slot__isnull=True,
        )
        .order_by("title", "pk")
    )
    report = SuggestionReport(conference_id=conference.pk, total_unscheduled=len(presentations))

    for presentation in presentations:
        try:
            duration = validate_duration(presentation.final_duration, f"Presentation {presentation.pk} duration")
        except InvalidDurationError:
            report.unplaced_presentation_ids.append(presentation.pk)
            continue

        fits = []
        for candidate in candidates:
            placement = candidate.place(duration)
            if placement is not None:
                fits.append((candidate, placement))
        if not fits:
            report.unplaced_presentation_ids.append(presentation.pk)
            continue

        matched = [fit for fit in fits if presentation.category_id in fit[0].category_ids]
        candidate, placement = (matched or fits)[0]
        reason = CATEGORY_MATCH if matched else NEXT_AVAILABLE

        candidate.occupied.append(SlotWindow(placement.start_time, placement.end_time))
        if presentation.category_id is not None:
            candidate.category_ids.add(presentation.category_id)
        report.suggestions.append(
            Suggestion(
                presentation_id=presentation.pk,
                title=presentation.title,
                section_id=candidate.section.pk,
                section_name=candidate.section.name,
                start_time=placement.start_time,
                end_time=placement.end_time,
                duration=placement.actual_duration,
                reason=reason,
                confidence=_CONFIDENCE[reason],
            )
        )

    logger.debug(
        "Suggested %d of %d unscheduled presentations for conference %s",
        len(report.suggestions),
        report.total_unscheduled,
        conference.pk,
    )
    return report
