"""Events data-source protocol and an in-memory implementation.

The aggregator only depends on `EventsSource`; persistence-backed sources live
in the Django layer (`tracking.repository`).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from .dto import DateInterval, Event, EventKind


class EventsSource(Protocol):
    """Async source of care events (duck-typed)."""

    async def events(self, date_range: DateInterval | None, kind: EventKind | None) -> list[Event]:
        """Return events starting in `[date_range.start, date_range.end)` of `kind`.

        Either filter may be None to disable it. Ordering is not guaranteed.
        """
        ...


class InMemoryEventsSource:
    """Dict-backed events source keyed by event id.

    Args:
        events: Optional initial events.
    """

    def __init__(self, events: Iterable[Event] = ()) -> None:
        self._storage: dict[object, Event] = {event.id: event for event in events}
        self.call_count = 0

    def add(self, event: Event) -> Event:
        """Insert or replace an event."""

        self._storage[event.id] = event
        return event

    def remove(self, event_id: object) -> None:
        """Remove an event by id.

        Raises:
            KeyError: When no event with `event_id` exists.
        """

        del self._storage[event_id]

    async def events(self, date_range: DateInterval | None, kind: EventKind | None) -> list[Event]:
        """Return matching events, newest first."""

        self.call_count += 1
        matched = [
            event
            for event in self._storage.values()
            if (kind is None or event.kind == kind)
            and (date_range is None or date_range.contains(event.start))
        ]
        return sorted(matched, key=lambda event: event.start, reverse=True)
