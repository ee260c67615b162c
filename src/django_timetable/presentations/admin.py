"""Django admin configuration for the presentations app."""

from django.contrib import admin

from django_timetable.presentations.models import Category, Presentation, PresentationAuthor, Presenter


class PresentationAuthorInline(admin.TabularInline):
    """Inline editor for the authors of a presentation."""

    model = PresentationAuthor
    extra = 0
    raw_id_fields = ("user", "presenter")
    fields = ("order", "user", "presenter", "author_name", "author_email", "affiliation", "is_presenter")


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    """Admin interface for presentation categories."""

    list_display = ("name", "conference", "color", "order")
    list_filter = ("conference",)
    search_fields = ("name",)


@admin.register(Presenter)
class PresenterAdmin(admin.ModelAdmin):
    """Admin interface for external presenters."""

    list_display = ("name", "conference", "email", "affiliation")
    list_filter = ("conference",)
    search_fields = ("name", "email", "affiliation")


@admin.register(Presentation)
class PresentationAdmin(admin.ModelAdmin):
    """Admin interface for presentations.

    Filtering by review status and category allows quick navigation of
    large programmes.  Placement is managed by the schedule builder, so the
    time slot is not editable here.
    """

    list_display = ("title", "conference", "category", "review_status", "final_duration", "is_scheduled")
    list_filter = ("conference", "review_status", "category")
    search_fields = ("title", "abstract")
    inlines = (PresentationAuthorInline,)
    readonly_fields = ("created_at", "updated_at")

    @admin.display(boolean=True, description="Scheduled")
    def is_scheduled(self, obj: Presentation) -> bool:
        """Return whether the presentation has a time slot."""
        return hasattr(obj, "time_slot")
