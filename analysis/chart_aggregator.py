"""Chart data aggregation engine.

`ChartDataAggregator` turns raw care events into calendar-bucketed chart series
with summary statistics, caching results per (metric, period, range). It is a
pure, non-Django module: events arrive through an injected `EventsSource`.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from .chart_aggregations import aggregate_metric, compute_statistics
from .chart_cache import CacheKey, SeriesCache
from .dto import AggregationPeriod, ChartMetric, ChartSeries, ChartStatistics, DateInterval, Event
from .event_sources import EventsSource
from .periods import ChartCalendar, make_buckets

logger = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 120.0
DEFAULT_MAXIMUM_CACHE_ENTRIES = 20


class InvalidRangeError(ValueError):
    """Raised when a requested chart range does not satisfy `end > start`."""

    def __init__(self, *, start: datetime, end: datetime) -> None:
        """Initialize the error.

        Args:
            start: Requested range start.
            end: Requested range end.
        """

        super().__init__(f"Invalid chart range: end {end.isoformat()} must be after start {start.isoformat()}.")
        self.start = start
        self.end = end


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ChartDataAggregator:
    """Aggregate events into cached, chart-ready series.

    Args:
        events_source: Async provider of events.
        calendar: Calendar rules for bucket alignment (UTC, Monday weeks by default).
        cache_ttl: Cache entry lifetime in seconds; `<= 0` disables caching.
        maximum_cache_entries: Maximum number of cached series.
        now: Wall clock used as the effective end of ongoing events.
        monotonic: Clock used for cache entry ages.
    """

    def __init__(
        self,
        events_source: EventsSource,
        *,
        calendar: ChartCalendar | None = None,
        cache_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        maximum_cache_entries: int = DEFAULT_MAXIMUM_CACHE_ENTRIES,
        now: Callable[[], datetime] = _utc_now,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.events_source = events_source
        self.calendar = calendar or ChartCalendar()
        self._now = now
        self._cache = SeriesCache(ttl=cache_ttl, max_entries=maximum_cache_entries, clock=monotonic)

    @property
    def cache(self) -> SeriesCache:
        """Return the series cache owned by this aggregator."""

        return self._cache

    async def series(
        self,
        metric: ChartMetric,
        date_range: DateInterval,
        period: AggregationPeriod,
    ) -> ChartSeries:
        """Return the chart series for a metric over a range.

        Args:
            metric: Metric to aggregate.
            date_range: Display range `[start, end)`.
            period: Bucket granularity.

        Returns:
            ChartSeries with one point per calendar bucket.

        Raises:
            InvalidRangeError: When `date_range.end <= date_range.start`.
            Exception: Any error raised by the events source, unchanged.
        """

        if date_range.end <= date_range.start:
            raise InvalidRangeError(start=date_range.start, end=date_range.end)

        date_range = DateInterval(
            start=date_range.start.astimezone(timezone.utc),
            end=date_range.end.astimezone(timezone.utc),
        )
        key = CacheKey.for_request(metric, period, date_range)
        generation = self._cache.generation(metric)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Chart cache hit: %s", key)
            return cached

        buckets = make_buckets(date_range, period, self.calendar)
        if not buckets:
            empty = ChartSeries(
                metric=metric,
                period=period,
                unit=metric.unit,
                points=(),
                statistics=ChartStatistics.empty(),
            )
            self._cache.put(key, empty, generation=generation)
            return empty

        events = await self._fetch_events(metric, date_range)
        aggregated = aggregate_metric(
            metric,
            events,
            buckets=buckets,
            date_range=date_range,
            now=self._now().astimezone(timezone.utc),
        )
        series = ChartSeries(
            metric=metric,
            period=period,
            unit=metric.unit,
            points=aggregated.points,
            statistics=compute_statistics(metric, aggregated),
        )
        self._cache.put(key, series, generation=generation)
        return series

    def invalidate_cache(self, metric: ChartMetric | None = None) -> None:
        """Drop cached series for `metric`, or the whole cache when omitted."""

        removed = self._cache.invalidate(metric)
        logger.info("Chart cache invalidated: metric=%s removed=%d", metric or "*", removed)

    def fetch_interval(self, metric: ChartMetric, date_range: DateInterval) -> DateInterval:
        """Return the interval queried from the events source for a request.

        Sleep sessions may start the day before the range and run into it, so
        `sleep_total` looks back one calendar day.
        """

        if metric is ChartMetric.sleep_total:
            return DateInterval(start=self.calendar.shift_days(date_range.start, -1), end=date_range.end)
        return date_range

    async def _fetch_events(self, metric: ChartMetric, date_range: DateInterval) -> list[Event]:
        interval = self.fetch_interval(metric, date_range)
        events = await self.events_source.events(interval, metric.event_kind)
        logger.debug(
            "Chart cache miss: metric=%s fetched=%d interval=%s..%s",
            metric,
            len(events),
            interval.start.isoformat(),
            interval.end.isoformat(),
        )
        normalized = [_as_utc(event) for event in events]
        return sorted(normalized, key=lambda event: event.start)


def _as_utc(event: Event) -> Event:
    return Event(
        id=event.id,
        kind=event.kind,
        start=event.start.astimezone(timezone.utc),
        end=event.end.astimezone(timezone.utc) if event.end is not None else None,
        notes=event.notes,
    )
