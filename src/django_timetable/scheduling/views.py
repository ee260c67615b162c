"""JSON views for the schedule builder.

Every view is scoped to a conference via the ``conference_slug`` URL kwarg
and returns a 404 if the slug does not match.  Write views delegate to
:class:`~django_timetable.scheduling.services.assignment.SlotAssignmentService`
and translate its exceptions into ``{"error": <code>, "message": <text>}``
bodies.
"""

import json
import logging

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.views import View

from django_timetable.conference.models import Conference
from django_timetable.features import FeatureRequiredMixin
from django_timetable.scheduling.exceptions import (
    ConflictError,
    FixedSectionError,
    InvalidDurationError,
    InvalidRangeError,
    InvalidScheduleDataError,
    NoCapacityError,
    NotFoundError,
    SchedulingError,
)
from django_timetable.scheduling.services.assignment import RequiresConfirmation, SlotAssignmentService
from django_timetable.scheduling.services.overview import ScheduleOverviewBuilder
from django_timetable.scheduling.services.publishing import publish_conference, unpublish_conference
from django_timetable.scheduling.services.suggestions import suggest_assignments
from django_timetable.scheduling.services.unscheduled import list_unscheduled

logger = logging.getLogger(__name__)


class BadPayloadError(SchedulingError):
    """The request body is not the JSON object the view expects."""

    code = "bad_request"


_ERROR_STATUS: dict[type[SchedulingError], int] = {
    BadPayloadError: 400,
    InvalidDurationError: 400,
    InvalidRangeError: 400,
    NotFoundError: 404,
    NoCapacityError: 409,
    FixedSectionError: 409,
    ConflictError: 409,
    InvalidScheduleDataError: 422,
}


def error_response(exc: SchedulingError) -> JsonResponse:
    """Translate a scheduling exception into its JSON error response."""
    status = next((_ERROR_STATUS[cls] for cls in type(exc).__mro__ if cls in _ERROR_STATUS), 400)
    logger.warning("Schedule request refused with %s (%d): %s", exc.code, status, exc)
    body: dict[str, object] = {"error": exc.code, "message": str(exc)}
    if isinstance(exc, ConflictError):
        body["retryable"] = exc.retryable
    return JsonResponse(body, status=status)


def parse_json_body(request: HttpRequest) -> dict[str, object]:
    """Decode the request body as a JSON object.

    An empty body decodes to an empty dict.

    Raises:
        BadPayloadError: If the body is not valid JSON or not an object.
    """
    if not request.body:
        return {}
    try:
        payload = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        msg = "Request body must be valid JSON"
        raise BadPayloadError(msg) from exc
    if not isinstance(payload, dict):
        msg = "Request body must be a JSON object"
        raise BadPayloadError(msg)
    return payload


def require_int(payload: dict[str, object], key: str) -> int:
    """Return ``payload[key]`` as an integer id.

    Raises:
        BadPayloadError: If the key is missing or not an integer.
    """
    if key not in payload or payload[key] is None:
        msg = f"'{key}' is required"
        raise BadPayloadError(msg)
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        msg = f"'{key}' must be an integer"
        raise BadPayloadError(msg)
    return value


class ConferenceMixin:
    """Mixin that resolves the conference from the ``conference_slug`` URL kwarg.

    Stores the conference on ``self.conference``.  Returns a 404 if no
    conference matches the slug.
    """

    conference: Conference
    kwargs: dict[str, str]

    def get_conference(self) -> Conference:
        """Look up the conference by slug from the URL.

        Raises:
            Http404: If no conference matches the slug.
        """
        return get_object_or_404(Conference, slug=self.kwargs["conference_slug"])

    def dispatch(self, request: HttpRequest, *args: str, **kwargs: str) -> HttpResponse:
        """Resolve the conference before dispatching."""
        self.conference = self.get_conference()
        return super().dispatch(request, *args, **kwargs)  # type: ignore[misc]


class ScheduleOverviewView(ConferenceMixin, View):
    """Nested schedule overview with completion statistics."""

    def get(self, _request: HttpRequest, **_kwargs: str) -> JsonResponse:
        """Return the schedule tree of the conference."""
        try:
            tree = ScheduleOverviewBuilder().build(self.conference.pk)
        except SchedulingError as exc:
            return error_response(exc)
        return JsonResponse(tree.as_dict())


class UnscheduledPresentationsView(ConferenceMixin, View):
    """Approved presentations without a time slot, grouped by category."""

    def get(self, _request: HttpRequest, **_kwargs: str) -> JsonResponse:
        """Return the unscheduled presentations of the conference."""
        try:
            groups = list_unscheduled(self.conference.pk)
        except SchedulingError as exc:
            return error_response(exc)
        return JsonResponse(
            {
                "conference_id": self.conference.pk,
                "total_unscheduled": sum(len(group.presentations) for group in groups),
                "groups": [group.as_dict() for group in groups],
            }
        )


class AssignmentSuggestionsView(ConferenceMixin, FeatureRequiredMixin, View):
    """Proposed placements for the unscheduled presentations; writes nothing."""

    required_feature = "schedule_builder"

    def get(self, _request: HttpRequest, **_kwargs: str) -> JsonResponse:
        """Return a suggested section and start time per unscheduled presentation."""
        try:
            report = suggest_assignments(self.conference.pk)
        except SchedulingError as exc:
            return error_response(exc)
        return JsonResponse(report.as_dict())


class ScheduleBuilderView(ConferenceMixin, FeatureRequiredMixin, View):
    """Base class for the schedule builder's write endpoints.

    Subclasses implement :meth:`handle`; scheduling errors raised from it
    become JSON error responses.
    """

    required_feature = "schedule_builder"
    http_method_names = ["post"]

    def post(self, request: HttpRequest, **kwargs: str) -> JsonResponse:
        """Parse the body, run :meth:`handle`, and map failures to JSON."""
        try:
            return self.handle(parse_json_body(request), **kwargs)
        except SchedulingError as exc:
            return error_response(exc)

    def handle(self, payload: dict[str, object], **kwargs: str) -> JsonResponse:
        """Run the write for the decoded *payload* and the URL kwargs."""
        raise NotImplementedError

    @property
    def service(self) -> SlotAssignmentService:
        """Return the assignment service the write runs through."""
        return SlotAssignmentService()


class AssignPresentationView(ScheduleBuilderView):
    """Place a presentation at the next free window of a section.

    Responds 201 on placement and 409 with ``truncation_info`` when the
    presentation only fits truncated and needs confirmation.
    """

    def handle(self, payload: dict[str, object], **kwargs: str) -> JsonResponse:
        outcome = self.service.assign_presentation_to_section(
            int(kwargs["presentation_id"]),
            require_int(payload, "section_id"),
            conference=self.conference,
        )
        if isinstance(outcome, RequiresConfirmation):
            return JsonResponse(outcome.as_dict(), status=409)
        body = outcome.as_dict()
        del body["actual_duration"]
        return JsonResponse(body, status=201)


class ConfirmAssignmentView(ScheduleBuilderView):
    """Place a presentation with a duration the organizer confirmed."""

    def handle(self, payload: dict[str, object], **kwargs: str) -> JsonResponse:
        if payload.get("confirmed_duration") is None:
            msg = "'confirmed_duration' is required"
            raise BadPayloadError(msg)
        outcome = self.service.assign_presentation_with_duration(
            int(kwargs["presentation_id"]),
            require_int(payload, "section_id"),
            payload["confirmed_duration"],
            conference=self.conference,
        )
        return JsonResponse(outcome.as_dict(), status=201)


class AdjustDurationView(ScheduleBuilderView):
    """Change a placed duration and reflow the later slots of its section."""

    def handle(self, payload: dict[str, object], **kwargs: str) -> JsonResponse:
        if payload.get("duration") is None:
            msg = "'duration' is required"
            raise BadPayloadError(msg)
        outcome = self.service.adjust_assignment_duration(
            int(kwargs["presentation_id"]),
            payload["duration"],
            conference=self.conference,
        )
        return JsonResponse(outcome.as_dict())


class BulkAssignView(ScheduleBuilderView):
    """Assign several presentations to one section in order."""

    def handle(self, payload: dict[str, object], **kwargs: str) -> JsonResponse:
        presentation_ids = payload.get("presentation_ids")
        if not isinstance(presentation_ids, list) or not all(
            isinstance(pid, int) and not isinstance(pid, bool) for pid in presentation_ids
        ):
            msg = "'presentation_ids' must be a list of integers"
            raise BadPayloadError(msg)
        result = self.service.bulk_assign(int(kwargs["section_id"]), presentation_ids, conference=self.conference)
        return JsonResponse(result.as_dict())


class UnassignPresentationView(ScheduleBuilderView):
    """Remove a presentation from the schedule."""

    def handle(self, payload: dict[str, object], **kwargs: str) -> JsonResponse:  # noqa: ARG002
        result = self.service.unassign_presentation(int(kwargs["presentation_id"]), conference=self.conference)
        return JsonResponse({"message": f"Presentation {result.presentation_id} removed from the schedule"})


class PublishScheduleView(ConferenceMixin, FeatureRequiredMixin, View):
    """Publish the conference schedule."""

    required_feature = "publishing"
    http_method_names = ["post"]
    publish = True

    def post(self, _request: HttpRequest, **_kwargs: str) -> JsonResponse:
        """Flip the conference status and return its new state."""
        action = publish_conference if self.publish else unpublish_conference
        try:
            conference = action(self.conference.pk)
        except SchedulingError as exc:
            return error_response(exc)
        verb = "published" if self.publish else "unpublished"
        return JsonResponse(
            {
                "message": f"Schedule for {conference.name} {verb}",
                "conference": {
                    "id": conference.pk,
                    "slug": conference.slug,
                    "status": conference.status,
                    "is_public": conference.is_public,
                },
            }
        )


class UnpublishScheduleView(PublishScheduleView):
    """Return the conference schedule to draft."""

    publish = False
