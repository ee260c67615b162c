"""Typed configuration for django-timetable.

Reads a single ``DJANGO_TIMETABLE`` dict from Django settings and exposes it as
composed, frozen dataclasses with sensible defaults.

Usage::

    from django_timetable.settings import get_config

    config = get_config()
    config.scheduling.max_slots_per_section
    config.features.schedule_builder_enabled
"""

import functools
from collections.abc import Mapping
from dataclasses import dataclass, field

from django.conf import settings
from django.test.signals import setting_changed

SECTION_TYPES: frozenset[str] = frozenset(
    {
        "keynote",
        "break",
        "lunch",
        "networking",
        "opening",
        "closing",
        "presentation",
        "workshop",
        "panel",
        "room",
    }
)


@dataclass(frozen=True, slots=True)
class SchedulingConfig:
    """Schedule builder configuration.

    ``fixed_section_types`` lists the section types whose slots are
    non-adjustable calendar items (keynotes, breaks, meals).  Their slots are
    never moved by reflow and are flagged ``is_fixed`` in the overview.
    """

    max_slots_per_section: int = 500
    fixed_section_types: tuple[str, ...] = ("keynote", "break", "lunch", "networking", "opening", "closing")
    day_name_template: str = "Day {order}"
    uncategorized_color: str = "#6B7280"


@dataclass(frozen=True, slots=True)
class FeaturesConfig:
    """Feature toggles for enabling/disabling django-timetable endpoints.

    All features are enabled by default. Set to ``False`` in
    ``DJANGO_TIMETABLE['features']`` to disable.
    """

    schedule_builder_enabled: bool = True
    publishing_enabled: bool = True


@dataclass(frozen=True, slots=True)
class TimetableConfig:
    """Top-level django-timetable configuration."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    features: FeaturesConfig = field(default_factory=FeaturesConfig)


@functools.lru_cache(maxsize=1)
def get_config() -> TimetableConfig:
    """Build and return the timetable configuration.

    Reads ``settings.DJANGO_TIMETABLE`` (a plain dict) and returns a frozen
    :class:`TimetableConfig`.  The result is cached; the cache is cleared
    automatically when Django's ``setting_changed`` signal fires (e.g. inside
    ``override_settings``).
    """
    raw = getattr(settings, "DJANGO_TIMETABLE", {})
    if not isinstance(raw, Mapping):
        msg = "DJANGO_TIMETABLE must be a mapping (dict-like object)"
        raise TypeError(msg)
    raw_data = dict(raw)

    scheduling_data = raw_data.pop("scheduling", {})
    features_data = raw_data.pop("features", {})
    if not isinstance(scheduling_data, Mapping):
        msg = "DJANGO_TIMETABLE['scheduling'] must be a mapping (dict-like object)"
        raise TypeError(msg)
    if not isinstance(features_data, Mapping):
        msg = "DJANGO_TIMETABLE['features'] must be a mapping (dict-like object)"
        raise TypeError(msg)

    scheduling_kwargs = dict(scheduling_data)
    if "fixed_section_types" in scheduling_kwargs:
        scheduling_kwargs["fixed_section_types"] = tuple(scheduling_kwargs["fixed_section_types"])

    config = TimetableConfig(
        scheduling=SchedulingConfig(**scheduling_kwargs),
        features=FeaturesConfig(**dict(features_data)),
        **raw_data,
    )
    _validate_timetable_config(config)
    return config


def _validate_timetable_config(config: TimetableConfig) -> None:
    """Validate high-impact configuration values with clear error messages."""
    scheduling = config.scheduling
    if (
        not isinstance(scheduling.max_slots_per_section, int)
        or isinstance(scheduling.max_slots_per_section, bool)
        or scheduling.max_slots_per_section <= 0
    ):
        msg = "DJANGO_TIMETABLE['scheduling']['max_slots_per_section'] must be a positive integer"
        raise ValueError(msg)
    if not isinstance(scheduling.day_name_template, str) or "{order}" not in scheduling.day_name_template:
        msg = "DJANGO_TIMETABLE['scheduling']['day_name_template'] must contain '{order}'"
        raise ValueError(msg)
    unknown = set(scheduling.fixed_section_types) - SECTION_TYPES
    if unknown:
        msg = (
            "DJANGO_TIMETABLE['scheduling']['fixed_section_types'] contains unknown section types: "
            f"{', '.join(sorted(unknown))}"
        )
        raise ValueError(msg)
    if not isinstance(scheduling.uncategorized_color, str) or not scheduling.uncategorized_color.strip():
        msg = "DJANGO_TIMETABLE['scheduling']['uncategorized_color'] must be a non-empty string"
        raise ValueError(msg)
    for name in ("schedule_builder_enabled", "publishing_enabled"):
        if not isinstance(getattr(config.features, name), bool):
            msg = f"DJANGO_TIMETABLE['features']['{name}'] must be a boolean"
            raise TypeError(msg)


def _clear_config_cache(*, setting: str, **kwargs: object) -> None:  # noqa: ARG001
    """Clear the cached config when Django settings change during tests."""
    if setting == "DJANGO_TIMETABLE":
        get_config.cache_clear()


setting_changed.connect(_clear_config_cache, dispatch_uid="django_timetable.settings.clear_config_cache")
