"""Switches for the optional schedule-building surfaces.

``DJANGO_TIMETABLE["features"]`` turns the write endpoints of the schedule
builder and the publish endpoints on or off.  A switched-off surface answers
404, as if it were not mounted.
"""

from django.http import Http404, HttpRequest, HttpResponse

from django_timetable.settings import get_config

FEATURES: tuple[str, ...] = ("schedule_builder", "publishing")


def is_feature_enabled(feature: str) -> bool:
    """Return whether *feature* is switched on.

    Raises:
        ValueError: If *feature* is not one of :data:`FEATURES`.
    """
    if feature not in FEATURES:
        msg = f"Unknown feature: {feature!r} (expected one of {', '.join(FEATURES)})"
        raise ValueError(msg)
    return getattr(get_config().features, f"{feature}_enabled")


def require_feature(feature: str) -> None:
    """Raise :class:`~django.http.Http404` unless *feature* is switched on."""
    if not is_feature_enabled(feature):
        msg = f"The {feature!r} feature is switched off"
        raise Http404(msg)


class FeatureRequiredMixin:
    """Answer 404 from any view whose ``required_feature`` is switched off.

    ``required_feature`` names one feature or a tuple of features that must
    all be on; the empty default imposes no requirement.
    """

    required_feature: str | tuple[str, ...] = ""

    def dispatch(self, request: HttpRequest, *args: object, **kwargs: object) -> HttpResponse:
        required = self.required_feature
        for feature in (required,) if isinstance(required, str) else required:
            if feature:
                require_feature(feature)
        return super().dispatch(request, *args, **kwargs)  # type: ignore[misc]
