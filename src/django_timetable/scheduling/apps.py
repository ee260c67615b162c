"""Django app configuration for the scheduling app."""

from django.apps import AppConfig


class DjangoTimetableSchedulingConfig(AppConfig):
    """Configuration for the scheduling app."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "django_timetable.scheduling"
    label = "timetable_scheduling"
    verbose_name = "Scheduling"
