"""Signals keeping chart caches in step with the Event table."""

from __future__ import annotations

from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from tracking.models import Event
from tracking.services import invalidate_all, invalidate_for_kind


@receiver(post_save, sender=Event)
def invalidate_charts_on_save(sender, instance: Event, created: bool, **kwargs) -> None:
    """Drop cached series affected by a saved event.

    An update may have changed the event kind, so it clears every metric.
    Fixture loading (`raw=True`) skips invalidation.
    """

    if kwargs.get("raw", False):
        return
    if created:
        invalidate_for_kind(instance.kind)
    else:
        invalidate_all()


@receiver(post_delete, sender=Event)
def invalidate_charts_on_delete(sender, instance: Event, **kwargs) -> None:
    """Drop cached series fed by the deleted event's kind."""

    invalidate_for_kind(instance.kind)
