"""DTO types shared by the chart and growth analysis modules.

DTOs are plain data containers used to transport analysis inputs and results
between the persistence layer and chart consumers. They intentionally avoid any
Django/ORM dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Final


class EventKind(StrEnum):
    """Kind of infant-care event recorded by caregivers."""

    sleep = "sleep"
    feeding = "feeding"
    diaper = "diaper"


class ChartUnit(StrEnum):
    """Display unit attached to a chart series."""

    hours = "hours"
    minutes = "minutes"
    count = "count"


class AggregationPeriod(StrEnum):
    """Calendar granularity used to bucket a chart series."""

    day = "day"
    week = "week"
    month = "month"


class ChartMetric(StrEnum):
    """Logical metric plotted on a chart.

    Values are stable identifiers used by cache keys, settings and commands.
    """

    sleep_total = "sleep_total"
    feed_average_duration = "feed_average_duration"
    feed_frequency = "feed_frequency"
    diaper_frequency = "diaper_frequency"

    @property
    def unit(self) -> ChartUnit:
        """Return the fixed display unit for this metric."""

        return _METRIC_UNITS[self]

    @property
    def event_kind(self) -> EventKind:
        """Return the event kind whose rows feed this metric."""

        return _METRIC_EVENT_KINDS[self]


_METRIC_UNITS: Final[dict[ChartMetric, ChartUnit]] = {
    ChartMetric.sleep_total: ChartUnit.hours,
    ChartMetric.feed_average_duration: ChartUnit.minutes,
    ChartMetric.feed_frequency: ChartUnit.count,
    ChartMetric.diaper_frequency: ChartUnit.count,
}

_METRIC_EVENT_KINDS: Final[dict[ChartMetric, EventKind]] = {
    ChartMetric.sleep_total: EventKind.sleep,
    ChartMetric.feed_average_duration: EventKind.feeding,
    ChartMetric.feed_frequency: EventKind.feeding,
    ChartMetric.diaper_frequency: EventKind.diaper,
}


def metrics_for_kind(kind: EventKind) -> tuple[ChartMetric, ...]:
    """Return every chart metric computed from events of the given kind."""

    return tuple(metric for metric in ChartMetric if metric.event_kind is kind)


class MeasurementType(StrEnum):
    """Growth measurement categories with a bundled percentile table."""

    height = "height"
    weight = "weight"
    head = "head"

    @property
    def default_unit(self) -> str:
        """Return the unit the percentile tables are expressed in."""

        return "kg" if self is MeasurementType.weight else "cm"


@dataclass(frozen=True, slots=True)
class DateInterval:
    """A half-open time interval `[start, end)`.

    Attributes:
        start: Inclusive start (timezone-aware).
        end: Exclusive end (timezone-aware).
    """

    start: datetime
    end: datetime

    @property
    def duration(self) -> float:
        """Return the interval length in seconds."""

        return self.end.timestamp() - self.start.timestamp()

    def contains(self, moment: datetime) -> bool:
        """Return True when `moment` falls in `[start, end)`."""

        return self.start <= moment < self.end

    def intersection(self, other: DateInterval) -> DateInterval | None:
        """Return the overlapping part of two intervals, or None when disjoint."""

        start = max(self.start, other.start)
        end = min(self.end, other.end)
        if end <= start:
            return None
        return DateInterval(start=start, end=end)


@dataclass(frozen=True, slots=True)
class Event:
    """A single recorded care event.

    Attributes:
        id: Opaque identifier from the owning store.
        kind: Event kind.
        start: When the event started.
        end: When the event ended, or None while it is ongoing.
        notes: Optional free-form caregiver notes.
    """

    id: object
    kind: EventKind
    start: datetime
    end: datetime | None = None
    notes: str | None = None

    @property
    def is_ongoing(self) -> bool:
        """Return True while the event has no recorded end."""

        return self.end is None

    def effective_end(self, now: datetime) -> datetime:
        """Return the recorded end, or `now` for an ongoing event."""

        return self.end if self.end is not None else now


@dataclass(frozen=True, slots=True)
class ChartDataPoint:
    """One bucket of a chart series.

    Attributes:
        interval: Bucket interval covered by this point.
        value: Aggregated metric value for the bucket.
        sample_count: Number of events contributing to the bucket.
    """

    interval: DateInterval
    value: float
    sample_count: int


@dataclass(frozen=True, slots=True)
class ChartStatistics:
    """Summary statistics over an entire chart series.

    Attributes:
        total: Sum of the metric across every contributing event.
        average: Metric-specific mean (event- or bucket-weighted).
        minimum: Smallest value among non-empty buckets (0 when none).
        maximum: Largest value among non-empty buckets (0 when none).
        sample_count: Number of distinct contributing events.
    """

    total: float
    average: float
    minimum: float
    maximum: float
    sample_count: int

    @classmethod
    def empty(cls) -> ChartStatistics:
        """Return all-zero statistics for a series without data."""

        return cls(total=0.0, average=0.0, minimum=0.0, maximum=0.0, sample_count=0)


@dataclass(frozen=True, slots=True)
class ChartSeries:
    """A chart-ready series and its summary statistics.

    Attributes:
        metric: Metric plotted by the series.
        period: Bucket granularity.
        unit: Display unit of `ChartDataPoint.value`.
        points: One point per calendar bucket, ordered by time.
        statistics: Summary statistics over the points.
    """

    metric: ChartMetric
    period: AggregationPeriod
    unit: ChartUnit
    points: tuple[ChartDataPoint, ...]
    statistics: ChartStatistics
