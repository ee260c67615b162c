"""Django admin configuration for the scheduling app."""

from django.contrib import admin

from django_timetable.scheduling.models import TimeSlot


@admin.register(TimeSlot)
class TimeSlotAdmin(admin.ModelAdmin):
    """Admin interface for time slots.

    Edits go through ``TimeSlot.clean()``, which rejects slots outside their
    section or overlapping a sibling.
    """

    list_display = ("__str__", "section", "presentation", "start_time", "end_time")
    list_filter = ("section__conference", "section")
    search_fields = ("section__name", "presentation__title")
    raw_id_fields = ("section", "presentation")
    readonly_fields = ("created_at", "updated_at")
