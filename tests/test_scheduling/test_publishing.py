import datetime

import pytest

from django_timetable.conference.models import Conference
from django_timetable.scheduling.exceptions import NotFoundError
from django_timetable.scheduling.services.publishing import publish_conference, unpublish_conference


@pytest.fixture
def conference() -> Conference:
    return Conference.objects.create(
        name="PyCon Test",
        slug="pycon-test",
        start_date=datetime.date(2027, 5, 1),
        end_date=datetime.date(2027, 5, 3),
    )


@pytest.mark.django_db
def test_publish_marks_conference_public(conference: Conference) -> None:
    result = publish_conference(conference.pk)

    conference.refresh_from_db()
    assert result.pk == conference.pk
    assert conference.status == Conference.Status.PUBLISHED
    assert conference.is_public is True


@pytest.mark.django_db
def test_unpublish_reverts_to_draft(conference: Conference) -> None:
    publish_conference(conference.pk)
    unpublish_conference(conference.pk)

    conference.refresh_from_db()
    assert conference.status == Conference.Status.DRAFT
    assert conference.is_public is False


@pytest.mark.django_db
def test_publish_missing_conference_raises() -> None:
    with pytest.raises(NotFoundError):
        publish_conference(999_999)

    with pytest.raises(NotFoundError):
        unpublish_conference(999_999)
