import datetime
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from django_timetable.conference.models import Conference, Day, Section
from django_timetable.presentations.models import Category, Presentation
from django_timetable.scheduling.models import TimeSlot

BASE_CONFIG = """[conference]
name = "PyCon Test"
start = 2027-05-01
end = 2027-05-03
timezone = "America/New_York"
venue = "Convention Center"

[[conference.categories]]
name = "Web"
color = "#2563EB"

[[conference.categories]]
name = "Data"

[[conference.sections]]
name = "Tutorials"
type = "workshop"
start = 2027-05-01T09:00:00
end = 2027-05-01T12:00:00

[[conference.sections]]
name = "Talks"
room = "Hall A"
start = 2027-05-02T09:00:00
end = 2027-05-02T17:00:00

[[conference.sections]]
name = "Lunch"
type = "break"
start = 2027-05-02T12:00:00
end = 2027-05-02T13:00:00
"""


def _write_config(path, contents):
    path.write_text(contents)
    return str(path)


def test_bootstrap_wraps_loader_type_errors_as_command_error(tmp_path):
    config_path = _write_config(
        tmp_path / "bad.toml",
        """[conference]
name = "PyCon Test"
start = 2027-05-01
end = 2027-05-03
timezone = "UTC"

sections = ["invalid"]
""",
    )

    with pytest.raises(CommandError, match=r"conference\.sections\[0\] must be a mapping"):
        call_command("bootstrap_conference", config=config_path)


def test_bootstrap_reports_missing_file(tmp_path):
    with pytest.raises(CommandError, match="not found"):
        call_command("bootstrap_conference", config=str(tmp_path / "missing.toml"))


@pytest.mark.django_db
def test_bootstrap_creates_conference_categories_sections_and_days(tmp_path):
    config_path = _write_config(tmp_path / "conference.toml", BASE_CONFIG)
    out = StringIO()

    call_command("bootstrap_conference", config=config_path, stdout=out)

    conference = Conference.objects.get(slug="pycon-test")
    assert conference.start_date == datetime.date(2027, 5, 1)
    assert conference.end_date == datetime.date(2027, 5, 3)
    assert conference.venue == "Convention Center"

    categories = list(Category.objects.filter(conference=conference).order_by("order"))
    assert [(c.name, c.order) for c in categories] == [("Web", 0), ("Data", 1)]
    assert categories[0].color == "#2563EB"

    sections = {s.name: s for s in Section.objects.filter(conference=conference)}
    assert sections["Tutorials"].type == "workshop"
    assert sections["Talks"].type == "presentation"
    assert sections["Talks"].room == "Hall A"
    assert sections["Lunch"].order == 2

    days = list(Day.objects.filter(conference=conference).order_by("order"))
    assert [(d.order, d.date, d.name) for d in days] == [
        (1, datetime.date(2027, 5, 1), "Day 1"),
        (2, datetime.date(2027, 5, 2), "Day 2"),
    ]
    assert sections["Talks"].day == days[1]
    assert sections["Lunch"].day == days[1]

    output = out.getvalue()
    assert "Bootstrap complete for 'pycon-test'" in output
    assert "Sections: 3 created, 0 updated" in output
    assert "Categories: 2 created, 0 updated" in output
    assert "Days: 2 persisted" in output


@pytest.mark.django_db
def test_bootstrap_interprets_naive_times_in_conference_time_zone(tmp_path):
    config_path = _write_config(tmp_path / "conference.toml", BASE_CONFIG)

    call_command("bootstrap_conference", config=config_path, stdout=StringIO())

    talks = Section.objects.get(name="Talks")
    # 09:00 in New York during daylight saving time.
    assert talks.start_time == datetime.datetime(2027, 5, 2, 13, 0, tzinfo=datetime.UTC)
    assert talks.end_time == datetime.datetime(2027, 5, 2, 21, 0, tzinfo=datetime.UTC)


@pytest.mark.django_db
def test_bootstrap_keeps_explicit_offsets(tmp_path):
    config_path = _write_config(
        tmp_path / "conference.toml",
        """[conference]
name = "Offset Conf"
start = 2027-05-01
end = 2027-05-01
timezone = "Europe/Paris"

[[conference.sections]]
name = "Keynote"
start = 2027-05-01T10:00:00Z
end = 2027-05-01T11:00:00Z
""",
    )

    call_command("bootstrap_conference", config=config_path, stdout=StringIO())

    keynote = Section.objects.get(name="Keynote")
    assert keynote.start_time == datetime.datetime(2027, 5, 1, 10, 0, tzinfo=datetime.UTC)


@pytest.mark.django_db
def test_bootstrap_rejects_duplicate_slug_without_update(tmp_path):
    config_path = _write_config(tmp_path / "conference.toml", BASE_CONFIG)
    call_command("bootstrap_conference", config=config_path, stdout=StringIO())

    with pytest.raises(CommandError, match="already exists"):
        call_command("bootstrap_conference", config=config_path, stdout=StringIO())

    assert Conference.objects.count() == 1
    assert Section.objects.count() == 3


@pytest.mark.django_db
def test_bootstrap_update_moves_sections_and_realigns_days(tmp_path):
    config_path = _write_config(tmp_path / "conference.toml", BASE_CONFIG)
    call_command("bootstrap_conference", config=config_path, stdout=StringIO())

    updated = (
        BASE_CONFIG.replace("start = 2027-05-01\n", "start = 2027-04-30\n")
        .replace('venue = "Convention Center"', 'venue = "Expo Hall"')
        .replace("2027-05-01T09:00:00", "2027-05-03T09:00:00")
        .replace("2027-05-01T12:00:00", "2027-05-03T12:00:00")
        .replace('name = "Data"', 'name = "Data"\ncolor = "#16A34A"')
    )
    _write_config(tmp_path / "conference.toml", updated)
    out = StringIO()

    call_command("bootstrap_conference", config=config_path, update=True, stdout=out)

    conference = Conference.objects.get(slug="pycon-test")
    assert conference.venue == "Expo Hall"
    assert conference.start_date == datetime.date(2027, 4, 30)
    assert Category.objects.get(name="Data").color == "#16A34A"

    tutorials = Section.objects.get(name="Tutorials")
    assert tutorials.start_time == datetime.datetime(2027, 5, 3, 13, 0, tzinfo=datetime.UTC)

    days = list(Day.objects.filter(conference=conference).order_by("order"))
    assert [(d.order, d.date) for d in days] == [
        (3, datetime.date(2027, 5, 2)),
        (4, datetime.date(2027, 5, 3)),
    ]
    assert [d.name for d in days] == ["Day 3", "Day 4"]
    assert tutorials.day == days[1]
    assert "Sections: 0 created, 3 updated" in out.getvalue()


@pytest.mark.django_db
def test_bootstrap_update_refuses_to_strand_assigned_slots(tmp_path):
    config_path = _write_config(tmp_path / "conference.toml", BASE_CONFIG)
    call_command("bootstrap_conference", config=config_path, stdout=StringIO())
    talks = Section.objects.get(name="Talks")
    talk = Presentation.objects.create(conference=talks.conference, title="Afternoon Talk", final_duration=60)
    TimeSlot.objects.create(
        section=talks,
        presentation=talk,
        start_time=datetime.datetime(2027, 5, 2, 19, 0, tzinfo=datetime.UTC),
        end_time=datetime.datetime(2027, 5, 2, 20, 0, tzinfo=datetime.UTC),
    )
    _write_config(tmp_path / "conference.toml", BASE_CONFIG.replace("2027-05-02T17:00:00", "2027-05-02T12:00:00"))

    with pytest.raises(CommandError, match="time slot"):
        call_command("bootstrap_conference", config=config_path, update=True, stdout=StringIO())

    talks.refresh_from_db()
    assert talks.end_time == datetime.datetime(2027, 5, 2, 21, 0, tzinfo=datetime.UTC)


@pytest.mark.django_db
def test_bootstrap_rejects_section_outside_conference_dates(tmp_path):
    config_path = _write_config(
        tmp_path / "conference.toml",
        """[conference]
name = "Short Conf"
start = 2027-05-01
end = 2027-05-01
timezone = "UTC"

[[conference.sections]]
name = "Sprints"
start = 2027-05-04T09:00:00
end = 2027-05-04T17:00:00
""",
    )

    with pytest.raises(CommandError, match="outside conference"):
        call_command("bootstrap_conference", config=config_path, stdout=StringIO())

    assert not Conference.objects.exists()


@pytest.mark.django_db
def test_bootstrap_dry_run_makes_no_changes(tmp_path):
    config_path = _write_config(tmp_path / "conference.toml", BASE_CONFIG)
    out = StringIO()

    call_command("bootstrap_conference", config=config_path, dry_run=True, stdout=out)

    output = out.getvalue()
    assert "[DRY RUN]" in output
    assert "Slug:       pycon-test" in output
    assert "Sections (3):" in output
    assert "[1] Talks [presentation]" in output
    assert "Categories (2):" in output
    assert not Conference.objects.exists()
    assert not Day.objects.exists()
