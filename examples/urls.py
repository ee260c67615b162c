"""URL configuration for the example development server."""

from django.contrib import admin
from django.urls import include, path
from django.views.generic import RedirectView

urlpatterns = [
    path("", RedirectView.as_view(pattern_name="admin:index"), name="root"),
    path("admin/", admin.site.urls),
    path("<slug:conference_slug>/schedule/", include("django_timetable.scheduling.urls")),
]
