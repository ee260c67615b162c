"""Tests for the read-only assignment suggestions."""

import datetime
import json

import pytest

from django_timetable.conference.models import Conference, Section
from django_timetable.conference.services import SectionService
from django_timetable.presentations.models import Category, Presentation
from django_timetable.scheduling.exceptions import NotFoundError
from django_timetable.scheduling.models import TimeSlot
from django_timetable.scheduling.services.assignment import SlotAssignmentService
from django_timetable.scheduling.services.suggestions import CATEGORY_MATCH, NEXT_AVAILABLE, suggest_assignments


def _at(hour: int, minute: int = 0) -> datetime.datetime:
    return datetime.datetime(2027, 5, 1, hour, minute, tzinfo=datetime.UTC)


@pytest.fixture
def conference() -> Conference:
    return Conference.objects.create(
        name="PyCon Test",
        slug="pycon-test",
        start_date=datetime.date(2027, 5, 1),
        end_date=datetime.date(2027, 5, 2),
    )


def _section(conference: Conference, name: str, start_hour: int, end_hour: int, **kwargs: object) -> Section:
    return SectionService().create_section(
        conference, name=name, start_time=_at(start_hour), end_time=_at(end_hour), **kwargs
    )


def _presentation(conference: Conference, title: str, duration: int | None = 30, **kwargs: object) -> Presentation:
    kwargs.setdefault("review_status", Presentation.ReviewStatus.APPROVED)
    return Presentation.objects.create(conference=conference, title=title, final_duration=duration, **kwargs)


@pytest.mark.django_db
class TestSuggestAssignments:
    def test_missing_conference_raises(self) -> None:
        with pytest.raises(NotFoundError, match="Conference"):
            suggest_assignments(999_999)

    def test_fills_sections_in_order_without_overlap(self, conference: Conference) -> None:
        morning = _section(conference, "Morning", 9, 10)
        afternoon = _section(conference, "Afternoon", 13, 14)
        for title in ("Alpha", "Bravo", "Charlie"):
            _presentation(conference, title)

        report = suggest_assignments(conference.pk)

        assert report.total_unscheduled == 3
        assert [(s.title, s.section_id, s.start_time, s.end_time) for s in report.suggestions] == [
            ("Alpha", morning.pk, _at(9), _at(9, 30)),
            ("Bravo", morning.pk, _at(9, 30), _at(10)),
            ("Charlie", afternoon.pk, _at(13), _at(13, 30)),
        ]
        assert {s.reason for s in report.suggestions} == {NEXT_AVAILABLE}
        assert {s.confidence for s in report.suggestions} == {0.6}
        assert report.unplaced_presentation_ids == []
        assert not TimeSlot.objects.exists()

    def test_never_proposes_fixed_sections(self, conference: Conference) -> None:
        _section(conference, "Opening Keynote", 9, 10, type=Section.SectionType.KEYNOTE)
        _section(conference, "Lunch", 12, 13, type=Section.SectionType.LUNCH)
        talks = _section(conference, "Talks", 14, 15)
        _presentation(conference, "Talk")

        report = suggest_assignments(conference.pk)

        assert [s.section_id for s in report.suggestions] == [talks.pk]

    def test_prefers_section_hosting_same_category(self, conference: Conference) -> None:
        web = Category.objects.create(conference=conference, name="Web")
        open_room = _section(conference, "Room A", 9, 12)
        web_room = _section(conference, "Room B", 13, 17)
        SlotAssignmentService().assign_presentation_to_section(
            _presentation(conference, "Already placed", category=web).pk, web_room.pk
        )
        routing = _presentation(conference, "Routing", category=web)
        misc = _presentation(conference, "Misc")

        report = suggest_assignments(conference.pk)

        by_id = {s.presentation_id: s for s in report.suggestions}
        assert (by_id[routing.pk].section_id, by_id[routing.pk].reason) == (web_room.pk, CATEGORY_MATCH)
        assert by_id[routing.pk].confidence == 0.9
        assert by_id[routing.pk].start_time == _at(13, 30)
        assert (by_id[misc.pk].section_id, by_id[misc.pk].reason) == (open_room.pk, NEXT_AVAILABLE)

    def test_earlier_suggestions_count_towards_category_match(self, conference: Conference) -> None:
        data = Category.objects.create(conference=conference, name="Data")
        _section(conference, "Room A", 9, 12)
        _presentation(conference, "Arrays", category=data)
        _presentation(conference, "Beams", category=data)

        report = suggest_assignments(conference.pk)

        assert [(s.title, s.reason) for s in report.suggestions] == [
            ("Arrays", NEXT_AVAILABLE),
            ("Beams", CATEGORY_MATCH),
        ]
        assert report.suggestions[1].start_time == _at(9, 30)

    def test_unplaceable_presentations_are_reported(self, conference: Conference) -> None:
        section = _section(conference, "Short", 9, 10)
        SlotAssignmentService().assign_presentation_to_section(_presentation(conference, "Long", 45).pk, section.pk)
        too_long = _presentation(conference, "Needs half an hour")
        no_duration = _presentation(conference, "Undecided length", None)
        fits = _presentation(conference, "Lightning", 10)

        report = suggest_assignments(conference.pk)

        assert [s.presentation_id for s in report.suggestions] == [fits.pk]
        assert report.suggestions[0].duration == 10
        assert sorted(report.unplaced_presentation_ids) == sorted([too_long.pk, no_duration.pk])

    def test_skips_scheduled_and_unapproved_presentations(self, conference: Conference) -> None:
        _section(conference, "Talks", 9, 12)
        _presentation(conference, "Pending", review_status=Presentation.ReviewStatus.PENDING)
        _presentation(conference, "Rejected", review_status=Presentation.ReviewStatus.REJECTED)
        waiting = _presentation(conference, "Waiting")

        report = suggest_assignments(conference.pk)

        assert report.total_unscheduled == 1
        assert [s.presentation_id for s in report.suggestions] == [waiting.pk]

    def test_as_dict_is_json_ready(self, conference: Conference) -> None:
        section = _section(conference, "Talks", 9, 12)
        talk = _presentation(conference, "Talk")

        body = json.loads(json.dumps(suggest_assignments(conference.pk).as_dict()))

        assert body == {
            "conference_id": conference.pk,
            "total_unscheduled": 1,
            "suggestions": [
                {
                    "presentation_id": talk.pk,
                    "title": "Talk",
                    "section_id": section.pk,
                    "section_name": "Talks",
                    "start_time": "2027-05-01T09:00:00+00:00",
                    "end_time": "2027-05-01T09:30:00+00:00",
                    "duration": 30,
                    "reason": NEXT_AVAILABLE,
                    "confidence": 0.6,
                }
            ],
            "unplaced_presentation_ids": [],
        }
