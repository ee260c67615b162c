"""Smoke tests for the timetable admin pages."""

import datetime

import pytest
from django.urls import reverse

from django_timetable.conference.models import Conference
from django_timetable.conference.services import SectionService
from django_timetable.presentations.models import Presentation
from django_timetable.scheduling.services.assignment import SlotAssignmentService


@pytest.fixture
def scheduled(db):
    conference = Conference.objects.create(
        name="PyCon Test",
        slug="pycon-test",
        start_date=datetime.date(2027, 5, 1),
        end_date=datetime.date(2027, 5, 1),
    )
    section = SectionService().create_section(
        conference,
        name="Talks",
        start_time=datetime.datetime(2027, 5, 1, 9, tzinfo=datetime.UTC),
        end_time=datetime.datetime(2027, 5, 1, 12, tzinfo=datetime.UTC),
    )
    talk = Presentation.objects.create(
        conference=conference,
        title="Typing in Practice",
        final_duration=30,
        review_status=Presentation.ReviewStatus.APPROVED,
    )
    SlotAssignmentService().assign_presentation_to_section(talk.pk, section.pk)
    return conference


@pytest.mark.parametrize(
    "model",
    [
        "timetable_conference_conference",
        "timetable_conference_day",
        "timetable_conference_section",
        "timetable_presentations_category",
        "timetable_presentations_presenter",
        "timetable_presentations_presentation",
        "timetable_scheduling_timeslot",
    ],
)
def test_changelist_renders(admin_client, scheduled, model):
    response = admin_client.get(reverse(f"admin:{model}_changelist"))
    assert response.status_code == 200


def test_conference_change_page_lists_days_and_sections(admin_client, scheduled):
    response = admin_client.get(reverse("admin:timetable_conference_conference_change", args=[scheduled.pk]))

    assert response.status_code == 200
    content = response.content.decode()
    assert "Day 1" in content
    assert "Talks" in content


def test_presentation_changelist_shows_scheduled_flag(admin_client, scheduled):
    response = admin_client.get(reverse("admin:timetable_presentations_presentation_changelist"))

    assert "Typing in Practice" in response.content.decode()
