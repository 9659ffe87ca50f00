"""Database models for recorded infant-care events."""

from __future__ import annotations

import uuid

from django.core.exceptions import ValidationError
from django.db import models

from analysis.dto import Event as EventDTO
from analysis.dto import EventKind


class Event(models.Model):
    """A sleep, feeding or diaper event logged by a caregiver.

    `end` stays empty while an event (e.g. a nap) is ongoing. Rows are soft
    deleted so synced clients can observe removals.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    kind = models.CharField(max_length=16, choices=[(kind.value, kind.value.title()) for kind in EventKind])
    start = models.DateTimeField(db_index=True)
    end = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default="")
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)
    is_deleted = models.BooleanField(default=False)

    class Meta:
        verbose_name = "Event"
        verbose_name_plural = "Events"
        ordering = ["-start"]
        indexes = [models.Index(fields=["kind", "start"], name="tracking_event_kind_start")]

    def __str__(self) -> str:
        """Return a concise display string for admin/debug usage."""

        return f"Event(kind={self.kind}, start={self.start.isoformat()}, ongoing={self.end is None})"

    def clean(self) -> None:
        """Reject events that end before they start."""

        if self.end is not None and self.start is not None and self.end < self.start:
            raise ValidationError("Event.end must not be before Event.start.")

    def save(self, *args, **kwargs) -> None:
        """Persist the event after validating its time bounds."""

        self.full_clean()
        super().save(*args, **kwargs)

    def to_dto(self) -> EventDTO:
        """Return the read-only analysis representation of this row."""

        return EventDTO(
            id=self.id,
            kind=EventKind(self.kind),
            start=self.start,
            end=self.end,
            notes=self.notes or None,
        )
