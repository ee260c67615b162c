"""Signals for the conference app."""

import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from django_timetable.conference.models import Day, Section

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=Section)
def delete_empty_day(
    sender: type[Section],  # noqa: ARG001
    instance: Section,
    **kwargs: object,  # noqa: ARG001
) -> None:
    """Delete the section's Day once its last section is gone."""
    if instance.day_id is None:
        return
    if Section.objects.filter(day_id=instance.day_id).exists():
        return
    deleted, _ = Day.objects.filter(pk=instance.day_id).delete()
    if deleted:
        logger.info("Deleted empty day %s after removing section %s", instance.day_id, instance.pk)
