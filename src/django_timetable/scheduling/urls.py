"""URL configuration for the schedule builder.

Mount these under a conference-scoped prefix in the host project::

    urlpatterns = [
        path("<slug:conference_slug>/schedule/", include("django_timetable.scheduling.urls")),
    ]
"""

from django.urls import path

from django_timetable.scheduling.views import (
    AdjustDurationView,
    AssignPresentationView,
    AssignmentSuggestionsView,
    BulkAssignView,
    ConfirmAssignmentView,
    PublishScheduleView,
    ScheduleOverviewView,
    UnassignPresentationView,
    UnpublishScheduleView,
    UnscheduledPresentationsView,
)

app_name = "scheduling"

urlpatterns = [
    path("overview.json", ScheduleOverviewView.as_view(), name="overview"),
    path("unscheduled.json", UnscheduledPresentationsView.as_view(), name="unscheduled"),
    path("suggestions.json", AssignmentSuggestionsView.as_view(), name="suggestions"),
    path("presentations/<int:presentation_id>/assign/", AssignPresentationView.as_view(), name="assign"),
    path(
        "presentations/<int:presentation_id>/assign/confirm/",
        ConfirmAssignmentView.as_view(),
        name="assign-confirm",
    ),
    path("presentations/<int:presentation_id>/duration/", AdjustDurationView.as_view(), name="adjust-duration"),
    path("presentations/<int:presentation_id>/unassign/", UnassignPresentationView.as_view(), name="unassign"),
    path("sections/<int:section_id>/bulk-assign/", BulkAssignView.as_view(), name="bulk-assign"),
    path("publish/", PublishScheduleView.as_view(), name="publish"),
    path("unpublish/", UnpublishScheduleView.as_view(), name="unpublish"),
]
