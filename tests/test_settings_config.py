import pytest
from django.test import override_settings

from django_timetable.settings import get_config


def test_get_config_defaults() -> None:
    config = get_config()

    assert config.scheduling.max_slots_per_section == 500
    assert config.scheduling.fixed_section_types == ("keynote", "break", "lunch", "networking", "opening", "closing")
    assert config.scheduling.day_name_template == "Day {order}"
    assert config.scheduling.uncategorized_color == "#6B7280"
    assert config.features.schedule_builder_enabled is True
    assert config.features.publishing_enabled is True


def test_get_config_rejects_non_mapping_root() -> None:
    with override_settings(DJANGO_TIMETABLE=["bad"]):
        with pytest.raises(TypeError, match="must be a mapping"):
            get_config()


def test_get_config_rejects_non_mapping_nested_sections() -> None:
    with override_settings(DJANGO_TIMETABLE={"scheduling": ["bad"]}):
        with pytest.raises(TypeError, match=r"DJANGO_TIMETABLE\['scheduling'\] must be a mapping"):
            get_config()

    with override_settings(DJANGO_TIMETABLE={"features": "bad"}):
        with pytest.raises(TypeError, match=r"DJANGO_TIMETABLE\['features'\] must be a mapping"):
            get_config()


def test_get_config_validates_scheduling_values() -> None:
    with override_settings(DJANGO_TIMETABLE={"scheduling": {"max_slots_per_section": 0}}):
        with pytest.raises(ValueError, match="positive integer"):
            get_config()

    with override_settings(DJANGO_TIMETABLE={"scheduling": {"max_slots_per_section": True}}):
        with pytest.raises(ValueError, match="positive integer"):
            get_config()

    with override_settings(DJANGO_TIMETABLE={"scheduling": {"day_name_template": "Day"}}):
        with pytest.raises(ValueError, match="day_name_template"):
            get_config()

    with override_settings(DJANGO_TIMETABLE={"scheduling": {"fixed_section_types": ["keynote", "coffee"]}}):
        with pytest.raises(ValueError, match="unknown section types: coffee"):
            get_config()

    with override_settings(DJANGO_TIMETABLE={"scheduling": {"uncategorized_color": "  "}}):
        with pytest.raises(ValueError, match="uncategorized_color"):
            get_config()


def test_get_config_rejects_non_bool_feature_toggle() -> None:
    with override_settings(DJANGO_TIMETABLE={"features": {"publishing_enabled": "yes"}}):
        with pytest.raises(TypeError, match="publishing_enabled"):
            get_config()


def test_get_config_rejects_unknown_keys() -> None:
    with override_settings(DJANGO_TIMETABLE={"scheduling": {"max_slots": 10}}):
        with pytest.raises(TypeError):
            get_config()


def test_get_config_normalizes_fixed_section_types_to_tuple() -> None:
    with override_settings(DJANGO_TIMETABLE={"scheduling": {"fixed_section_types": ["keynote"]}}):
        assert get_config().scheduling.fixed_section_types == ("keynote",)


def test_get_config_cache_clears_on_setting_changed() -> None:
    with override_settings(DJANGO_TIMETABLE={"scheduling": {"day_name_template": "Tag {order}"}}):
        assert get_config().scheduling.day_name_template == "Tag {order}"

    with override_settings(DJANGO_TIMETABLE={"scheduling": {"day_name_template": "Jour {order}"}}):
        assert get_config().scheduling.day_name_template == "Jour {order}"

    assert get_config().scheduling.day_name_template == "Day {order}"
