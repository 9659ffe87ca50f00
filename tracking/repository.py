"""Django ORM-backed events source for the chart aggregator."""

from __future__ import annotations

from analysis.dto import DateInterval, Event, EventKind
from tracking.models import Event as EventRow


class DjangoEventsSource:
    """Read care events from the `tracking.Event` table.

    Soft-deleted rows are never returned. Queries run through Django's async
    ORM so the aggregator's fetch is the only await point.
    """

    async def events(self, date_range: DateInterval | None, kind: EventKind | None) -> list[Event]:
        """Return events starting in `[date_range.start, date_range.end)` of `kind`.

        Args:
            date_range: Optional start-time window (inclusive start, exclusive end).
            kind: Optional event kind filter.

        Returns:
            Matching events as analysis DTOs, ordered by start.
        """

        queryset = EventRow.objects.filter(is_deleted=False)
        if kind is not None:
            queryset = queryset.filter(kind=str(kind))
        if date_range is not None:
            queryset = queryset.filter(start__gte=date_range.start, start__lt=date_range.end)
        return [row.to_dto() async for row in queryset.order_by("start")]
