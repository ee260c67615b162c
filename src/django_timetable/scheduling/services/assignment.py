"""Slot assignment service for placing presentations into sections.

Places a presentation at the next free window of a section, asks for
confirmation instead of writing when the presentation would have to be
truncated, removes placements, and reflows later slots when a placed
duration changes.  The service is the only writer of ``TimeSlot`` rows.

Every operation reads a fresh snapshot of the section inside one
transaction.  Concurrent writers are caught by the store's uniqueness
constraints; their ``IntegrityError`` surfaces as a retryable
:class:`~django_timetable.scheduling.exceptions.ConflictError`.
"""

import datetime
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from django.db import IntegrityError, transaction

from django_timetable.conference.models import Conference, Section
from django_timetable.presentations.models import Presentation
from django_timetable.scheduling.exceptions import (
    AlreadyScheduledError,
    ConflictError,
    FixedSectionError,
    NoCapacityError,
    NotFoundError,
    SchedulingError,
)
from django_timetable.scheduling.models import TimeSlot
from django_timetable.scheduling.services.slots import (
    PlacementResult,
    SlotWindow,
    next_available_slot,
    validate_duration,
)

logger = logging.getLogger(__name__)


def serialize_time_slot(slot: TimeSlot) -> dict[str, object]:
    """Return the JSON representation of a time slot."""
    return {
        "id": slot.pk,
        "section_id": slot.section_id,
        "presentation_id": slot.presentation_id,
        "start_time": slot.start_time.isoformat(),
        "end_time": slot.end_time.isoformat(),
        "duration": slot.duration_minutes,
    }


def serialize_presentation(presentation: Presentation) -> dict[str, object]:
    """Return the JSON representation of a presentation's scheduling fields."""
    return {
        "id": presentation.pk,
        "title": presentation.title,
        "final_duration": presentation.final_duration,
        "category_id": presentation.category_id,
    }


@dataclass
class Scheduled:
    """A presentation was written into a new time slot."""

    time_slot: TimeSlot
    presentation: Presentation
    actual_duration: int

    def as_dict(self) -> dict[str, object]:
        """Return the JSON body for a successful placement."""
        return {
            "time_slot": serialize_time_slot(self.time_slot),
            "presentation": serialize_presentation(self.presentation),
            "actual_duration": self.actual_duration,
        }


@dataclass(frozen=True)
class RequiresConfirmation:
    """The presentation only fits truncated; nothing was written.

    Callers re-invoke
    :meth:`SlotAssignmentService.assign_presentation_with_duration` with
    ``available_duration`` to accept the shorter placement.
    """

    presentation_id: int
    section_id: int
    original_duration: int
    available_duration: int
    available_minutes: int

    def as_dict(self) -> dict[str, object]:
        """Return the JSON body describing the shortfall."""
        return {
            "requires_confirmation": True,
            "truncation_info": {
                "presentation_id": self.presentation_id,
                "section_id": self.section_id,
                "original_duration": self.original_duration,
                "available_duration": self.available_duration,
                "available_minutes": self.available_minutes,
            },
        }


AssignmentOutcome = Scheduled | RequiresConfirmation


@dataclass(frozen=True)
class Unassigned:
    """A presentation's time slot was removed."""

    presentation_id: int
    time_slot_id: int
    section_id: int


@dataclass
class Reflowed:
    """A placed duration changed and later slots were shifted to follow it."""

    time_slot: TimeSlot
    presentation: Presentation
    shifted_slot_ids: list[int]

    def as_dict(self) -> dict[str, object]:
        """Return the JSON body for an adjusted placement."""
        return {
            "time_slot": serialize_time_slot(self.time_slot),
            "presentation": serialize_presentation(self.presentation),
            "shifted_slot_ids": self.shifted_slot_ids,
        }


@dataclass(frozen=True)
class BulkFailure:
    """A presentation the bulk assignment could not place."""

    presentation_id: int
    code: str
    message: str


@dataclass
class BulkAssignmentResult:
    """Per-presentation outcomes of a bulk assignment."""

    scheduled: list[Scheduled] = field(default_factory=list)
    requires_confirmation: list[RequiresConfirmation] = field(default_factory=list)
    failed: list[BulkFailure] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        """Return the JSON body summarising every outcome."""
        return {
            "scheduled": [outcome.as_dict() for outcome in self.scheduled],
            "requires_confirmation": [outcome.as_dict()["truncation_info"] for outcome in self.requires_confirmation],
            "failed": [
                {"presentation_id": f.presentation_id, "error": f.code, "message": f.message} for f in self.failed
            ],
        }


class SlotAssignmentService:
    """Writes, removes, and reflows the time slots of presentations.

    Args:
        using: Database alias every query and transaction runs against.
    """

    def __init__(self, using: str = "default") -> None:
        self.using = using

    def assign_presentation_to_section(
        self,
        presentation_id: int,
        section_id: int,
        *,
        conference: Conference | None = None,
    ) -> AssignmentOutcome:
        """Place a presentation at the next free window of a section.

        Args:
            presentation_id: Primary key of the presentation.
            section_id: Primary key of the target section.
            conference: When given, both records must belong to it.

        Returns:
            :class:`Scheduled` when the full duration fits, otherwise
            :class:`RequiresConfirmation` (and no slot is written).

        Raises:
            NotFoundError: If the presentation or section does not exist.
            FixedSectionError: If the section holds a fixed calendar item.
            AlreadyScheduledError: If the presentation already has a slot.
            InvalidDurationError: If the presentation has no positive duration.
            NoCapacityError: If the section is full.
            ConflictError: If a concurrent write collided with this one.
        """
        with transaction.atomic(using=self.using):
            presentation = self._get_presentation(presentation_id, conference)
            section = self._lock_section(section_id, presentation.conference_id)
            self._ensure_open(section)
            self._ensure_unscheduled(presentation)
            duration = validate_duration(presentation.final_duration, f"Presentation {presentation.pk} duration")

            placement = self._placement(section, duration)
            if placement.truncated:
                logger.info(
                    "Presentation %s needs %d minutes but section %s has %d; confirmation required",
                    presentation.pk,
                    duration,
                    section.pk,
                    placement.available_minutes,
                )
                return RequiresConfirmation(
                    presentation_id=presentation.pk,
                    section_id=section.pk,
                    original_duration=duration,
                    available_duration=placement.actual_duration,
                    available_minutes=placement.available_minutes,
                )

            slot = self._insert_slot(section, presentation, placement)
        return Scheduled(time_slot=slot, presentation=presentation, actual_duration=placement.actual_duration)

    def assign_presentation_with_duration(
        self,
        presentation_id: int,
        section_id: int,
        confirmed_duration: int,
        *,
        conference: Conference | None = None,
    ) -> Scheduled:
        """Place a presentation using a duration the caller confirmed.

        The confirmed duration usually comes from a previous
        :class:`RequiresConfirmation`.  The section is re-read, so a window
        filled in the meantime is reported rather than overlapped.

        Raises:
            NotFoundError: If the presentation or section does not exist.
            FixedSectionError: If the section holds a fixed calendar item.
            AlreadyScheduledError: If the presentation already has a slot.
            InvalidDurationError: If *confirmed_duration* is not positive.
            NoCapacityError: If the confirmed duration no longer fits.
            ConflictError: If a concurrent write collided with this one.
        """
        duration = validate_duration(confirmed_duration, "Confirmed duration")
        with transaction.atomic(using=self.using):
            presentation = self._get_presentation(presentation_id, conference)
            section = self._lock_section(section_id, presentation.conference_id)
            self._ensure_open(section)
            self._ensure_unscheduled(presentation)

            placement = self._placement(section, duration)
            if placement.truncated:
                msg = (
                    f"Section {section.pk} has only {placement.available_minutes} minutes left, "
                    f"not the confirmed {duration}"
                )
                raise NoCapacityError(msg)

            slot = self._insert_slot(section, presentation, placement)
        return Scheduled(time_slot=slot, presentation=presentation, actual_duration=duration)

    def unassign_presentation(
        self,
        presentation_id: int,
        *,
        conference: Conference | None = None,
    ) -> Unassigned:
        """Remove the time slot holding a presentation.

        Later slots keep their times; nothing is compacted.

        Raises:
            NotFoundError: If the presentation or its time slot does not exist.
        """
        with transaction.atomic(using=self.using):
            presentation = self._get_presentation(presentation_id, conference)
            slot = TimeSlot.objects.using(self.using).filter(presentation=presentation).first()
            if slot is None:
                msg = f"Presentation {presentation.pk} is not scheduled"
                raise NotFoundError(msg)
            result = Unassigned(presentation_id=presentation.pk, time_slot_id=slot.pk, section_id=slot.section_id)
            slot.delete(using=self.using)

        logger.info(
            "Unassigned presentation %s from section %s (slot %s)",
            result.presentation_id,
            result.section_id,
            result.time_slot_id,
        )
        return result

    def bulk_assign(
        self,
        section_id: int,
        presentation_ids: Iterable[int],
        *,
        conference: Conference | None = None,
    ) -> BulkAssignmentResult:
        """Assign several presentations to a section one after another.

        Each presentation is placed in its own transaction; a failure is
        recorded and the batch moves on.

        Raises:
            NotFoundError: If the section does not exist.
            FixedSectionError: If the section holds a fixed calendar item.
        """
        sections = Section.objects.using(self.using)
        if conference is not None:
            sections = sections.filter(conference=conference)
        section = sections.filter(pk=section_id).first()
        if section is None:
            msg = f"Section {section_id} not found"
            raise NotFoundError(msg)
        self._ensure_open(section)

        result = BulkAssignmentResult()
        for presentation_id in presentation_ids:
            try:
                outcome = self.assign_presentation_to_section(presentation_id, section_id, conference=conference)
            except SchedulingError as exc:
                result.failed.append(BulkFailure(presentation_id=presentation_id, code=exc.code, message=str(exc)))
                continue
            if isinstance(outcome, RequiresConfirmation):
                result.requires_confirmation.append(outcome)
            else:
                result.scheduled.append(outcome)

        logger.info(
            "Bulk assignment to section %s: %d scheduled, %d need confirmation, %d failed",
            section_id,
            len(result.scheduled),
            len(result.requires_confirmation),
            len(result.failed),
        )
        return result

    def adjust_assignment_duration(
        self,
        presentation_id: int,
        new_duration: int,
        *,
        conference: Conference | None = None,
    ) -> Reflowed:
        """Change a placed duration and shift the later slots of the section.

        Slots starting at or after the old end move by the same delta.  In a
        fixed section nothing moves; the resized slot must then still end
        before the next slot begins.

        Raises:
            NotFoundError: If the presentation or its time slot does not exist.
            InvalidDurationError: If *new_duration* is not positive.
            NoCapacityError: If the shifted slots would leave the section or
                collide with a slot that cannot move.
            ConflictError: If a concurrent write collided with this one.
        """
        duration = validate_duration(new_duration, "New duration")
        with transaction.atomic(using=self.using):
            presentation = self._get_presentation(presentation_id, conference)
            slot = TimeSlot.objects.using(self.using).filter(presentation=presentation).first()
            if slot is None:
                msg = f"Presentation {presentation.pk} is not scheduled"
                raise NotFoundError(msg)
            section = self._lock_section(slot.section_id, presentation.conference_id)

            old_end = slot.end_time
            new_end = slot.start_time + datetime.timedelta(minutes=duration)
            delta = new_end - old_end
            later = list(
                TimeSlot.objects.using(self.using)
                .filter(section=section, start_time__gte=old_end)
                .exclude(pk=slot.pk)
                .order_by("start_time")
            )

            movable = [] if section.is_fixed else later
            self._check_reflow(section, new_end, later, movable, delta)

            # Move in the direction of travel so no two slots share a start mid-way.
            ordered = reversed(movable) if delta > datetime.timedelta(0) else movable
            shifted_ids: list[int] = []
            try:
                with transaction.atomic(using=self.using):
                    if delta < datetime.timedelta(0):
                        self._save_slot_end(slot, new_end)
                    for other in ordered:
                        other.start_time += delta
                        other.end_time += delta
                        other.save(using=self.using, update_fields=["start_time", "end_time", "updated_at"])
                        shifted_ids.append(other.pk)
                    if delta >= datetime.timedelta(0):
                        self._save_slot_end(slot, new_end)
            except IntegrityError as exc:
                logger.warning("Conflict while reflowing section %s: %s", section.pk, exc)
                msg = f"Section {section.pk} changed while reflowing; retry the adjustment"
                raise ConflictError(msg) from exc

        logger.info(
            "Adjusted presentation %s to %d minutes in section %s; shifted %d slot(s)",
            presentation.pk,
            duration,
            section.pk,
            len(shifted_ids),
        )
        return Reflowed(time_slot=slot, presentation=presentation, shifted_slot_ids=sorted(shifted_ids))

    def _get_presentation(self, presentation_id: int, conference: Conference | None) -> Presentation:
        presentations = Presentation.objects.using(self.using)
        if conference is not None:
            presentations = presentations.filter(conference=conference)
        try:
            return presentations.get(pk=presentation_id)
        except (Presentation.DoesNotExist, ValueError, TypeError) as exc:
            msg = f"Presentation {presentation_id} not found"
            raise NotFoundError(msg) from exc

    def _lock_section(self, section_id: int, conference_id: int) -> Section:
        """Fetch the section with a row lock, scoped to the presentation's conference."""
        try:
            return (
                Section.objects.using(self.using)
                .select_for_update()
                .get(pk=section_id, conference_id=conference_id)
            )
        except (Section.DoesNotExist, ValueError, TypeError) as exc:
            msg = f"Section {section_id} not found"
            raise NotFoundError(msg) from exc

    def _ensure_open(self, section: Section) -> None:
        if section.is_fixed:
            msg = f"Section {section.pk} is a {section.type} section and takes no presentations"
            raise FixedSectionError(msg)

    def _ensure_unscheduled(self, presentation: Presentation) -> None:
        if TimeSlot.objects.using(self.using).filter(presentation=presentation).exists():
            msg = f"Presentation {presentation.pk} is already scheduled"
            raise AlreadyScheduledError(msg)

    def _placement(self, section: Section, duration: int) -> PlacementResult:
        occupied = [
            SlotWindow(start, end)
            for start, end in TimeSlot.objects.using(self.using)
            .filter(section=section)
            .values_list("start_time", "end_time")
        ]
        return next_available_slot(section.start_time, section.end_time, occupied, duration)

    def _insert_slot(self, section: Section, presentation: Presentation, placement: PlacementResult) -> TimeSlot:
        try:
            with transaction.atomic(using=self.using):
                slot = TimeSlot.objects.using(self.using).create(
                    section=section,
                    presentation=presentation,
                    start_time=placement.start_time,
                    end_time=placement.end_time,
                )
        except IntegrityError as exc:
            logger.warning(
                "Conflict placing presentation %s in section %s at %s: %s",
                presentation.pk,
                section.pk,
                placement.start_time.isoformat(),
                exc,
            )
            msg = f"Section {section.pk} changed while placing presentation {presentation.pk}; retry the assignment"
            raise ConflictError(msg) from exc

        logger.info(
            "Assigned presentation %s to section %s from %s to %s",
            presentation.pk,
            section.pk,
            placement.start_time.isoformat(),
            placement.end_time.isoformat(),
        )
        return slot

    def _check_reflow(
        self,
        section: Section,
        new_end: datetime.datetime,
        later: list[TimeSlot],
        movable: list[TimeSlot],
        delta: datetime.timedelta,
    ) -> None:
        """Raise :class:`NoCapacityError` if the reflow would break section invariants."""
        if new_end > section.end_time:
            msg = f"Section {section.pk} ends at {section.end_time.isoformat()}, before {new_end.isoformat()}"
            raise NoCapacityError(msg)
        if movable:
            shifted_end = movable[-1].end_time + delta
            if shifted_end > section.end_time:
                msg = f"Shifting later slots of section {section.pk} would run past its end"
                raise NoCapacityError(msg)
            return
        if later and later[0].start_time < new_end:
            msg = f"Slot {later[0].pk} in fixed section {section.pk} cannot move to make room"
            raise NoCapacityError(msg)

    def _save_slot_end(self, slot: TimeSlot, new_end: datetime.datetime) -> None:
        slot.end_time = new_end
        slot.save(using=self.using, update_fields=["end_time", "updated_at"])
