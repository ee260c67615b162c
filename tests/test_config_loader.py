import datetime

import pytest

from django_timetable.config_loader import load_conference_config

_HEADER = """[conference]
name = "PyCon Test"
start = 2027-05-01
end = 2027-05-03
timezone = "UTC"
"""

_TALKS = """
[[conference.sections]]
name = "Talks"
start = 2027-05-01T09:00:00
end = 2027-05-01T12:00:00
"""


def _write(tmp_path, contents):
    config_file = tmp_path / "conference.toml"
    config_file.write_text(contents)
    return config_file


def test_load_conference_config_returns_native_types_and_defaults(tmp_path):
    conf = load_conference_config(
        _write(
            tmp_path,
            _HEADER
            + _TALKS
            + """
[[conference.categories]]
name = "Web"
color = "#2563EB"
""",
        )
    )

    assert conf["slug"] == "pycon-test"
    assert conf["start"] == datetime.date(2027, 5, 1)
    section = conf["sections"][0]
    assert section["start"] == datetime.datetime(2027, 5, 1, 9, 0)
    assert section["type"] == "presentation"
    assert conf["categories"][0]["name"] == "Web"


def test_load_conference_config_keeps_explicit_slug(tmp_path):
    header = _HEADER.replace('timezone = "UTC"', 'timezone = "UTC"\nslug = "pc27"')
    conf = load_conference_config(_write(tmp_path, header + _TALKS))
    assert conf["slug"] == "pc27"


def test_load_conference_config_rejects_duplicate_section_names(tmp_path):
    config_file = _write(tmp_path, _HEADER + _TALKS + _TALKS)

    with pytest.raises(ValueError, match="duplicate names: Talks"):
        load_conference_config(config_file)


def test_load_conference_config_file_not_found(tmp_path):
    missing = tmp_path / "does_not_exist.toml"

    with pytest.raises(FileNotFoundError, match="Conference config file not found"):
        load_conference_config(missing)


def test_load_conference_config_invalid_toml(tmp_path):
    with pytest.raises(ValueError, match="Invalid TOML in"):
        load_conference_config(_write(tmp_path, "this is [[[not valid toml"))


def test_load_conference_config_missing_conference_table(tmp_path):
    with pytest.raises(ValueError, match=r"Missing required \[conference\] table"):
        load_conference_config(_write(tmp_path, '[other]\nname = "x"\n'))


def test_load_conference_config_missing_required_fields(tmp_path):
    with pytest.raises(ValueError, match="missing required fields: timezone"):
        load_conference_config(_write(tmp_path, '[conference]\nname = "X"\nstart = 2027-05-01\nend = 2027-05-02\n'))


def test_load_conference_config_requires_sections(tmp_path):
    with pytest.raises(ValueError, match="conference.sections must be a non-empty list"):
        load_conference_config(_write(tmp_path, _HEADER))


def test_load_conference_config_rejects_inverted_conference_dates(tmp_path):
    header = _HEADER.replace("end = 2027-05-03", "end = 2027-04-30")
    with pytest.raises(ValueError, match="is before conference.start"):
        load_conference_config(_write(tmp_path, header + _TALKS))


def test_load_conference_config_rejects_unknown_timezone(tmp_path):
    header = _HEADER.replace('timezone = "UTC"', 'timezone = "Mars/Olympus_Mons"')
    with pytest.raises(ValueError, match="not a known time zone"):
        load_conference_config(_write(tmp_path, header + _TALKS))


def test_load_conference_config_rejects_section_dates_without_time(tmp_path):
    section = '\n[[conference.sections]]\nname = "Talks"\nstart = 2027-05-01\nend = 2027-05-02\n'
    with pytest.raises(ValueError, match="must be datetimes"):
        load_conference_config(_write(tmp_path, _HEADER + section))


def test_load_conference_config_rejects_inverted_section(tmp_path):
    section = _TALKS.replace("end = 2027-05-01T12:00:00", "end = 2027-05-01T08:00:00")
    with pytest.raises(ValueError, match=r"sections\[0\].end must be after"):
        load_conference_config(_write(tmp_path, _HEADER + section))


def test_load_conference_config_rejects_unknown_section_type(tmp_path):
    section = _TALKS + 'type = "coffee"\n'
    with pytest.raises(ValueError, match=r"sections\[0\].type must be one of"):
        load_conference_config(_write(tmp_path, _HEADER + section))


def test_load_conference_config_rejects_non_mapping_section(tmp_path):
    with pytest.raises(TypeError, match=r"conference\.sections\[0\] must be a mapping"):
        load_conference_config(_write(tmp_path, _HEADER + '\nsections = ["invalid"]\n'))


def test_load_conference_config_rejects_bad_category_color(tmp_path):
    category = '\n[[conference.categories]]\nname = "Web"\ncolor = "blue"\n'
    with pytest.raises(ValueError, match="hex colour"):
        load_conference_config(_write(tmp_path, _HEADER + _TALKS + category))
