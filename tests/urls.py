"""Minimal URL configuration for tests."""

from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("<slug:conference_slug>/schedule/", include("django_timetable.scheduling.urls")),
]
