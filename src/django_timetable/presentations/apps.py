"""Django app configuration for the presentations app."""

from django.apps import AppConfig


class DjangoTimetablePresentationsConfig(AppConfig):
    """Configuration for the presentations app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_timetable.presentations"
    label = "timetable_presentations"
    verbose_name = "Presentations"
