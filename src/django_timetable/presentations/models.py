"""Category, Presenter, Presentation, and author models."""

from django.conf import settings
from django.db import models

from django_timetable.presentations.authors import (
    AuthorRef,
    ExternalPresenter,
    FreeformAuthor,
    InternalAuthor,
)


class Category(models.Model):
    """A topical category that groups presentations of a conference."""

    conference = models.ForeignKey(
        "timetable_conference.Conference",
        on_delete=models.CASCADE,
        related_name="categories",
    )
    name = models.CharField(max_length=200)
    color = models.CharField(max_length=7, blank=True, default="#6B7280")
    order = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["order", "name"]
        verbose_name_plural = "categories"
        unique_together = [("conference", "name")]

    def __str__(self) -> str:
        return self.name


class Presenter(models.Model):
    """An external presenter without a user account on this site."""

    conference = models.ForeignKey(
        "timetable_conference.Conference",
        on_delete=models.CASCADE,
        related_name="presenters",
    )
    name = models.CharField(max_length=300)
    email = models.EmailField(blank=True, default="")
    affiliation = models.CharField(max_length=300, blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class Presentation(models.Model):
    """A submitted presentation and its scheduling duration.

    ``final_duration`` (in minutes) is the length the schedule builder
    places; the placement itself lives on the presentation's ``time_slot``.
    """

    class ReviewStatus(models.TextChoices):
        """Outcome of the abstract review."""

        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REVISION = "revision", "Revision requested"
        REJECTED = "rejected", "Rejected"

    conference = models.ForeignKey(
        "timetable_conference.Conference",
        on_delete=models.CASCADE,
        related_name="presentations",
    )
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="presentations",
    )
    title = models.CharField(max_length=500)
    abstract = models.TextField(blank=True, default="")
    submission_type = models.CharField(max_length=200, blank=True, default="")
    keywords = models.JSONField(blank=True, default=list)
    requested_duration = models.PositiveIntegerField(null=True, blank=True)
    final_duration = models.PositiveIntegerField(null=True, blank=True)
    review_status = models.CharField(
        max_length=20,
        choices=ReviewStatus.choices,
        default=ReviewStatus.PENDING,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["title"]

    def __str__(self) -> str:
        return self.title


class PresentationAuthor(models.Model):
    """An author credited on a presentation.

    Attribution comes from exactly one source: an internal ``user``, an
    external ``presenter`` record, or the freeform name/email/affiliation
    columns.  The freeform columns double as fallbacks for the other two.
    """

    presentation = models.ForeignKey(
        Presentation,
        on_delete=models.CASCADE,
        related_name="authors",
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="presentation_authorships",
    )
    presenter = models.ForeignKey(
        Presenter,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="authorships",
    )
    author_name = models.CharField(max_length=300, blank=True, default="")
    author_email = models.EmailField(blank=True, default="")
    affiliation = models.CharField(max_length=300, blank=True, default="")
    is_presenter = models.BooleanField(default=False)
    order = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order", "pk"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(user__isnull=True) | models.Q(presenter__isnull=True),
                name="author_single_attribution_source",
            ),
        ]

    def __str__(self) -> str:
        return self.author_name or f"Author #{self.pk}"

    def as_ref(self) -> AuthorRef:
        """Return the tagged attribution source of this author."""
        if self.user_id is not None:
            return InternalAuthor(user_id=self.user_id)
        if self.presenter_id is not None:
            return ExternalPresenter(presenter_id=self.presenter_id)
        return FreeformAuthor(name=self.author_name, email=self.author_email, affiliation=self.affiliation)
