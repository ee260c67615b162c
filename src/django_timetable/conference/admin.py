"""Django admin configuration for the conference app."""

from django.contrib import admin

from django_timetable.conference.models import Conference, Day, Section


class SectionInline(admin.TabularInline):
    """Inline editor for conference sections.

    Sections added here are not attached to a Day; use the bootstrap
    command or the section service for lazily created days.
    """

    model = Section
    extra = 0
    fields = ("name", "type", "room", "start_time", "end_time", "order")


class DayInline(admin.TabularInline):
    """Read-only list of the days persisted for a conference."""

    model = Day
    extra = 0
    fields = ("order", "date", "name")
    readonly_fields = ("order", "date", "name")
    can_delete = False

    def has_add_permission(self, request: object, obj: object = None) -> bool:  # noqa: ARG002
        """Days are created by the section service only."""
        return False


@admin.register(Conference)
class ConferenceAdmin(admin.ModelAdmin):
    """Admin interface for managing conferences.

    Groups fields into basic information, dates and publication status.
    Days and sections are shown inline.
    """

    list_display = ("name", "slug", "start_date", "end_date", "status", "is_public")
    list_filter = ("status", "is_public")
    search_fields = ("name", "slug")
    prepopulated_fields = {"slug": ("name",)}
    inlines = (DayInline, SectionInline)

    fieldsets = (
        (None, {"fields": ("name", "slug", "venue")}),
        ("Dates", {"fields": ("start_date", "end_date", "timezone")}),
        ("Status", {"fields": ("status", "is_public")}),
    )


@admin.register(Day)
class DayAdmin(admin.ModelAdmin):
    """Admin interface for persisted conference days."""

    list_display = ("name", "conference", "date", "order")
    list_filter = ("conference",)
    readonly_fields = ("created_at", "updated_at")


@admin.register(Section)
class SectionAdmin(admin.ModelAdmin):
    """Admin interface for managing conference sections.

    Provides filtering by conference, day and type.  ``is_fixed`` reflects
    the configured fixed section types.
    """

    list_display = ("name", "conference", "day", "type", "room", "start_time", "end_time", "is_fixed")
    list_filter = ("conference", "day", "type")
    search_fields = ("name", "room")
    raw_id_fields = ("day",)
    readonly_fields = ("created_at", "updated_at")

    @admin.display(boolean=True, description="Fixed")
    def is_fixed(self, obj: Section) -> bool:
        """Return whether the section holds fixed calendar items."""
        return obj.is_fixed
