"""Integration tests for the Event table, its events source and cache signals."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest
from asgiref.sync import async_to_sync
from django.core.exceptions import ValidationError

from analysis.dto import AggregationPeriod, ChartMetric, DateInterval, EventKind
from tracking.models import Event
from tracking.repository import DjangoEventsSource
from tracking.services import chart_calendar_from_settings, get_chart_aggregator, reset_chart_aggregator

pytestmark = pytest.mark.integration


def _utc(year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> datetime:
    return datetime(year, month, day, hour, minute, tzinfo=timezone.utc)


def _fetch(date_range: DateInterval | None, kind: EventKind | None):
    return async_to_sync(DjangoEventsSource().events)(date_range, kind)


def _prime(metric: ChartMetric, date_range: DateInterval) -> None:
    async_to_sync(get_chart_aggregator().series)(metric, date_range, AggregationPeriod.day)


@pytest.mark.django_db
def test_events_source_filters_by_kind_and_start_window() -> None:
    """Only live events of the requested kind starting inside the window are returned."""

    Event.objects.create(kind="feeding", start=_utc(2024, 3, 1, 8), end=_utc(2024, 3, 1, 8, 20))
    Event.objects.create(kind="feeding", start=_utc(2024, 3, 2, 9))
    Event.objects.create(kind="feeding", start=_utc(2024, 3, 3))
    Event.objects.create(kind="diaper", start=_utc(2024, 3, 1, 10))
    Event.objects.create(kind="feeding", start=_utc(2024, 3, 1, 12), is_deleted=True)

    events = _fetch(DateInterval(start=_utc(2024, 3, 1), end=_utc(2024, 3, 3)), EventKind.feeding)

    assert [event.start for event in events] == [_utc(2024, 3, 1, 8), _utc(2024, 3, 2, 9)]
    assert all(event.kind is EventKind.feeding for event in events)
    assert events[0].end == _utc(2024, 3, 1, 8, 20)
    assert events[1].is_ongoing


@pytest.mark.django_db
def test_events_source_without_filters_returns_all_live_events() -> None:
    Event.objects.create(kind="sleep", start=_utc(2024, 3, 1, 1), end=_utc(2024, 3, 1, 3), notes="crib")
    Event.objects.create(kind="diaper", start=_utc(2024, 3, 1, 4))
    Event.objects.create(kind="diaper", start=_utc(2024, 3, 1, 5), is_deleted=True)

    events = _fetch(None, None)

    assert [event.kind for event in events] == [EventKind.sleep, EventKind.diaper]
    assert events[0].notes == "crib"
    assert events[1].notes is None


@pytest.mark.django_db
def test_event_rejects_end_before_start() -> None:
    with pytest.raises(ValidationError):
        Event.objects.create(kind="sleep", start=_utc(2024, 3, 1, 5), end=_utc(2024, 3, 1, 4))


@pytest.mark.django_db
def test_event_rejects_unknown_kind() -> None:
    with pytest.raises(ValidationError):
        Event.objects.create(kind="bath", start=_utc(2024, 3, 1, 5))


@pytest.mark.django_db
def test_chart_aggregator_reads_events_from_database(fresh_chart_aggregator) -> None:
    """The Django-wired aggregator charts rows stored in the Event table."""

    Event.objects.create(kind="sleep", start=_utc(2024, 3, 1, 22), end=_utc(2024, 3, 2, 6))
    Event.objects.create(kind="sleep", start=_utc(2024, 3, 2, 12), end=_utc(2024, 3, 2, 13, 30))

    series = async_to_sync(get_chart_aggregator().series)(
        ChartMetric.sleep_total,
        DateInterval(start=_utc(2024, 3, 1), end=_utc(2024, 3, 3)),
        AggregationPeriod.day,
    )

    assert [point.value for point in series.points] == pytest.approx([2.0, 7.5])
    assert series.statistics.sample_count == 2


@pytest.mark.django_db
def test_aggregator_is_built_from_settings(settings, fresh_chart_aggregator) -> None:
    settings.CHART_CACHE_TTL_SECONDS = 5.0
    settings.CHART_CACHE_MAX_ENTRIES = 3
    settings.CHART_FIRST_WEEKDAY = 6
    reset_chart_aggregator()

    aggregator = get_chart_aggregator()

    assert aggregator is get_chart_aggregator()
    assert aggregator.cache.ttl == 5.0
    assert aggregator.cache.max_entries == 3
    assert aggregator.calendar.first_weekday == 6
    assert chart_calendar_from_settings().first_weekday == 6


@pytest.mark.django_db
def test_creating_event_invalidates_only_metrics_of_its_kind(fresh_chart_aggregator) -> None:
    """A new feeding drops feeding charts while sleep charts stay cached."""

    date_range = DateInterval(start=_utc(2024, 3, 1), end=_utc(2024, 3, 2))
    _prime(ChartMetric.sleep_total, date_range)
    _prime(ChartMetric.feed_frequency, date_range)
    _prime(ChartMetric.feed_average_duration, date_range)

    Event.objects.create(kind="feeding", start=_utc(2024, 3, 1, 7))

    assert [key.metric for key in get_chart_aggregator().cache.keys()] == [ChartMetric.sleep_total]


@pytest.mark.django_db
def test_new_event_shows_up_in_next_series(fresh_chart_aggregator) -> None:
    date_range = DateInterval(start=_utc(2024, 3, 1), end=_utc(2024, 3, 2))
    aggregate = async_to_sync(get_chart_aggregator().series)

    assert aggregate(ChartMetric.diaper_frequency, date_range, AggregationPeriod.day).statistics.total == 0.0
    Event.objects.create(kind="diaper", start=_utc(2024, 3, 1, 7))
    assert aggregate(ChartMetric.diaper_frequency, date_range, AggregationPeriod.day).statistics.total == 1.0


@pytest.mark.django_db
def test_updating_event_invalidates_every_metric(fresh_chart_aggregator) -> None:
    """An update may change the kind, so every cached series is dropped."""

    event = Event.objects.create(kind="diaper", start=_utc(2024, 3, 1, 7))
    date_range = DateInterval(start=_utc(2024, 3, 1), end=_utc(2024, 3, 2))
    _prime(ChartMetric.sleep_total, date_range)
    _prime(ChartMetric.diaper_frequency, date_range)

    event.kind = "feeding"
    event.save()

    assert len(get_chart_aggregator().cache) == 0


@pytest.mark.django_db
def test_deleting_event_invalidates_metrics_of_its_kind(fresh_chart_aggregator) -> None:
    event = Event.objects.create(kind="diaper", start=_utc(2024, 3, 1, 7))
    date_range = DateInterval(start=_utc(2024, 3, 1), end=_utc(2024, 3, 2))
    _prime(ChartMetric.sleep_total, date_range)
    _prime(ChartMetric.diaper_frequency, date_range)

    event.delete()

    assert [key.metric for key in get_chart_aggregator().cache.keys()] == [ChartMetric.sleep_total]


@pytest.mark.django_db
def test_signals_are_noops_before_aggregator_exists(fresh_chart_aggregator) -> None:
    event = Event.objects.create(kind="sleep", start=_utc(2024, 3, 1, 1))
    event.delete()

    assert not Event.objects.exists()


@pytest.mark.django_db
def test_admin_lists_events(admin_client) -> None:
    Event.objects.create(kind="feeding", start=_utc(2024, 3, 1, 7), notes="left side")

    response = admin_client.get("/admin/tracking/event/", {"q": "left"})

    assert response.status_code == 200
    assert response.context["cl"].result_count == 1
