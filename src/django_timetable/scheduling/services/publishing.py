"""Publish and unpublish a conference schedule."""

import logging

from django.db import transaction

from django_timetable.conference.models import Conference
from django_timetable.scheduling.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def _set_status(conference_id: int, status: str, *, is_public: bool, using: str) -> Conference:
    with transaction.atomic(using=using):
        conference = Conference.objects.using(using).select_for_update().filter(pk=conference_id).first()
        if conference is None:
            msg = f"Conference {conference_id} not found"
            raise NotFoundError(msg)
        conference.status = status
        conference.is_public = is_public
        conference.save(using=using, update_fields=["status", "is_public", "updated_at"])
    return conference


def publish_conference(conference_id: int, *, using: str = "default") -> Conference:
    """Mark a conference as published and publicly visible.

    Raises:
        NotFoundError: If the conference does not exist.
    """
    conference = _set_status(conference_id, Conference.Status.PUBLISHED, is_public=True, using=using)
    logger.info("Published schedule of conference '%s'", conference.slug)
    return conference


def unpublish_conference(conference_id: int, *, using: str = "default") -> Conference:
    """Return a conference to draft and hide it from the public.

    Raises:
        NotFoundError: If the conference does not exist.
    """
    conference = _set_status(conference_id, Conference.Status.DRAFT, is_public=False, using=using)
    logger.info("Unpublished schedule of conference '%s'", conference.slug)
    return conference
