"""Conference, Day, and Section models for django-timetable."""

from django.core.exceptions import ValidationError
from django.db import models

from django_timetable.settings import get_config


class Conference(models.Model):
    """A conference event with dates, venue, and publication status.

    The central model that all other apps reference.  The date range drives
    the day skeleton of the schedule; ``status`` flips to ``published`` once
    organizers release the schedule.
    """

    class Status(models.TextChoices):
        """Publication state of the conference schedule."""

        DRAFT = "draft", "Draft"
        PUBLISHED = "published", "Published"

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=200, unique=True)
    start_date = models.DateField()
    end_date = models.DateField()
    timezone = models.CharField(max_length=100, default="UTC")
    venue = models.CharField(max_length=300, blank=True, default="")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.DRAFT)
    is_public = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-start_date"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_date__lte=models.F("end_date")),
                name="conference_start_before_end",
            ),
        ]

    def __str__(self) -> str:
        return self.name

    def clean(self) -> None:
        """Reject conferences whose end date precedes the start date."""
        super().clean()
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValidationError({"end_date": "End date must be on or after the start date."})


class Day(models.Model):
    """A persisted calendar day of a conference.

    Days are created lazily the first time a section is scheduled on a date.
    ``order`` always equals the 1-based position of ``date`` inside the
    conference date range, matching what the day generator derives on read.
    """

    conference = models.ForeignKey(
        Conference,
        on_delete=models.CASCADE,
        related_name="days",
    )
    date = models.DateField()
    order = models.PositiveIntegerField()
    name = models.CharField(max_length=200)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["date"]
        constraints = [
            models.UniqueConstraint(
                fields=["conference", "date"],
                name="unique_day_per_conference_date",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.date.isoformat()})"


class Section(models.Model):
    """A scheduled block of a conference: a room over a time window.

    The section's ``start_time``/``end_time`` form the envelope inside which
    time slots are placed.  Sections of a fixed type (keynotes, breaks,
    meals) hold non-adjustable calendar items.
    """

    class SectionType(models.TextChoices):
        """The kind of block a section represents."""

        KEYNOTE = "keynote", "Keynote"
        BREAK = "break", "Break"
        LUNCH = "lunch", "Lunch"
        NETWORKING = "networking", "Networking"
        OPENING = "opening", "Opening"
        CLOSING = "closing", "Closing"
        PRESENTATION = "presentation", "Presentation"
        WORKSHOP = "workshop", "Workshop"
        PANEL = "panel", "Panel"
        ROOM = "room", "Room"

    conference = models.ForeignKey(
        Conference,
        on_delete=models.CASCADE,
        related_name="sections",
    )
    day = models.ForeignKey(
        Day,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="sections",
    )
    name = models.CharField(max_length=200)
    room = models.CharField(max_length=200, blank=True, default="")
    capacity = models.PositiveIntegerField(null=True, blank=True)
    description = models.TextField(blank=True, default="")
    start_time = models.DateTimeField()
    end_time = models.DateTimeField()
    type = models.CharField(
        max_length=20,
        choices=SectionType.choices,
        default=SectionType.PRESENTATION,
    )
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["start_time", "order", "name"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(start_time__lt=models.F("end_time")),
                name="section_start_before_end",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} ({self.conference.slug})"

    def clean(self) -> None:
        """Reject sections whose time window is empty or inverted."""
        super().clean()
        if self.start_time and self.end_time and self.end_time <= self.start_time:
            raise ValidationError({"end_time": "End time must be after the start time."})

    @property
    def is_fixed(self) -> bool:
        """Return ``True`` when the section type is a non-adjustable calendar item."""
        return self.type in get_config().scheduling.fixed_section_types
