"""TimeSlot model for placed schedule items."""

from django.core.exceptions import ValidationError
from django.db import models


class TimeSlot(models.Model):
    """A concrete ``[start_time, end_time)`` window inside a section.

    A slot optionally holds one presentation; a presentation occupies at
    most one slot.  Slots without a presentation are available, or hold the
    fixed calendar item of their section (keynote, break, lunch).
    """

    section = models.ForeignKey(
        "timetable_conference.Section",
        on_delete=models.CASCADE,
        related_name="time_slots",
    )
    presentation = models.OneToOneField(
        "timetable_presentations.Presentation",
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name="time_slot",
    )
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_time__lt=models.F("end_time")),
                name="time_slot_start_before_end",
            ),
            models.UniqueConstraint(
                fields=["section", "start_time"],
                name="unique_time_slot_section_start",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.section.name}: {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    @property
    def is_fixed(self) -> bool:
        """Return ``True`` when the slot belongs to a fixed section type."""
        return self.section.is_fixed

    @property
    def is_available(self) -> bool:
        """Return ``True`` when the slot is neither assigned nor fixed."""
        return self.presentation_id is None and not self.is_fixed

    @property
    def duration_minutes(self) -> int:
        """Return the slot length in whole minutes."""
        return int((self.end_time - self.start_time).total_seconds() // 60)

    def clean(self) -> None:
        """Validate the slot against its section bounds and sibling slots."""
        super().clean()
        if not (self.start_time and self.end_time and self.section_id):
            return
        if self.end_time <= self.start_time:
            raise ValidationError({"end_time": "End time must be after the start time."})
        section = self.section
        if self.start_time < section.start_time or self.end_time > section.end_time:
            raise ValidationError("Time slot must lie within its section's time bounds.")
        overlapping = (
            TimeSlot.objects.filter(
                section_id=self.section_id,
                start_time__lt=self.end_time,
                end_time__gt=self.start_time,
            )
            .exclude(pk=self.pk)
            .exists()
        )
        if overlapping:
            raise ValidationError("Time slot overlaps another slot in the same section.")
