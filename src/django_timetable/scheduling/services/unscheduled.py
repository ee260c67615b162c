"""Listing of approved presentations that still need a time slot."""

from dataclasses import dataclass, field

from django.db.models import Prefetch

from django_timetable.conference.models import Conference
from django_timetable.presentations.authors import resolve_author
from django_timetable.presentations.models import Category, Presentation, PresentationAuthor
from django_timetable.scheduling.exceptions import NotFoundError
from django_timetable.settings import get_config

UNCATEGORIZED_ID = 0
UNCATEGORIZED_NAME = "Uncategorized"


@dataclass
class UnscheduledGroup:
    """Unscheduled presentations of one category, ordered by title."""

    id: int
    name: str
    color: str
    presentations: list[Presentation] = field(default_factory=list)

    def as_dict(self) -> dict[str, object]:
        """Return the JSON representation of the group."""
        return {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "presentations": [_presentation_dict(p) for p in self.presentations],
        }


def _presentation_dict(presentation: Presentation) -> dict[str, object]:
    return {
        "id": presentation.pk,
        "title": presentation.title,
        "abstract": presentation.abstract,
        "submission_type": presentation.submission_type,
        "keywords": presentation.keywords,
        "requested_duration": presentation.requested_duration,
        "duration": presentation.final_duration,
        "authors": [
            {**resolve_author(author).as_dict(), "is_presenter": author.is_presenter}
            for author in presentation.authors.all()
        ],
    }


def list_unscheduled(conference_id: int, *, using: str = "default") -> list[UnscheduledGroup]:
    """Group a conference's approved, unscheduled presentations by category.

    Categories follow their display order, then name.  Presentations without
    a category are collected in a trailing group with id ``0``.  Categories
    without unscheduled presentations are omitted.

    Args:
        conference_id: Primary key of the conference.
        using: Database alias to read from.

    Returns:
        The non-empty groups.

    Raises:
        NotFoundError: If the conference does not exist.
    """
    if not Conference.objects.using(using).filter(pk=conference_id).exists():
        msg = f"Conference {conference_id} not found"
        raise NotFoundError(msg)

    authors = PresentationAuthor.objects.using(using).select_related("user", "presenter")
    presentations = (
        Presentation.objects.using(using)
        .filter(
            conference_id=conference_id,
            review_status=Presentation.ReviewStatus.APPROVED,
            time_slot__isnull=True,
        )
        .prefetch_related(Prefetch("authors", queryset=authors))
        .order_by("title", "pk")
    )

    groups = {
        category.pk: UnscheduledGroup(id=category.pk, name=category.name, color=category.color)
        for category in Category.objects.using(using).filter(conference_id=conference_id).order_by("order", "name")
    }
    uncategorized = UnscheduledGroup(
        id=UNCATEGORIZED_ID,
        name=UNCATEGORIZED_NAME,
        color=get_config().scheduling.uncategorized_color,
    )
    for presentation in presentations:
        groups.get(presentation.category_id, uncategorized).presentations.append(presentation)

    result = [group for group in groups.values() if group.presentations]
    if uncategorized.presentations:
        result.append(uncategorized)
    return result
