"""Per-metric aggregation of care events into chart buckets.

These helpers are deterministic and synchronous: they take already-fetched
events plus pre-built buckets and return per-bucket values, without caching
or Django dependencies.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime

from .dto import ChartDataPoint, ChartMetric, ChartStatistics, DateInterval, Event, EventKind
from .periods import bucket_index

SECONDS_PER_HOUR = 3600.0
SECONDS_PER_MINUTE = 60.0


@dataclass(frozen=True, slots=True)
class AggregatedSeries:
    """Intermediate aggregation output consumed by `compute_statistics`.

    Attributes:
        points: One point per bucket.
        total_value: Sum of the metric across contributing events.
        sample_count: Number of distinct contributing events.
    """

    points: tuple[ChartDataPoint, ...]
    total_value: float
    sample_count: int


def aggregate_sleep(
    events: Iterable[Event],
    *,
    buckets: Sequence[DateInterval],
    date_range: DateInterval,
    now: datetime,
) -> AggregatedSeries:
    """Sum sleep hours per bucket, splitting sessions across bucket boundaries.

    Each sleep event overlapping the range is clipped to the range and its
    overlap with every touched bucket is added to that bucket. A bucket's
    sample count is incremented once per event touching it, while the series
    sample count counts each qualifying event once.

    Args:
        events: Events sorted by start; non-sleep events are ignored.
        buckets: Sorted, non-overlapping buckets covering `date_range`.
        date_range: Display range.
        now: Effective end for ongoing events.

    Returns:
        AggregatedSeries with hour totals per bucket.
    """

    totals = [0.0] * len(buckets)
    counts = [0] * len(buckets)
    event_count = 0

    for event in events:
        if event.kind is not EventKind.sleep:
            continue
        event_end = event.effective_end(now)
        if event_end <= date_range.start or event.start >= date_range.end:
            continue
        event_count += 1

        clipped = DateInterval(start=max(event.start, date_range.start), end=min(event_end, date_range.end))
        if clipped.end <= clipped.start:
            continue

        for index, bucket in enumerate(buckets):
            if bucket.end <= clipped.start:
                continue
            if bucket.start >= clipped.end:
                break
            overlap = clipped.intersection(bucket)
            if overlap is None:
                continue
            totals[index] += overlap.duration / SECONDS_PER_HOUR
            counts[index] += 1

    points = tuple(
        ChartDataPoint(interval=bucket, value=total, sample_count=count)
        for bucket, total, count in zip(buckets, totals, counts)
    )
    return AggregatedSeries(points=points, total_value=sum(totals), sample_count=event_count)


def aggregate_feed_average(
    events: Iterable[Event],
    *,
    buckets: Sequence[DateInterval],
    date_range: DateInterval,
) -> AggregatedSeries:
    """Average feeding duration (minutes) per bucket by feed start time.

    Ongoing feeds contribute a zero duration.

    Args:
        events: Events sorted by start; non-feeding events are ignored.
        buckets: Buckets covering `date_range`.
        date_range: Display range; only feeds starting inside it count.

    Returns:
        AggregatedSeries whose `total_value` is the summed minutes across feeds.
    """

    totals = [0.0] * len(buckets)
    counts = [0] * len(buckets)
    total_minutes = 0.0
    total_samples = 0

    for event in events:
        if event.kind is not EventKind.feeding:
            continue
        index = _placed_bucket(event, buckets=buckets, date_range=date_range)
        if index is None:
            continue
        end = event.end if event.end is not None else event.start
        minutes = max(0.0, end.timestamp() - event.start.timestamp()) / SECONDS_PER_MINUTE
        totals[index] += minutes
        counts[index] += 1
        total_minutes += minutes
        total_samples += 1

    points = tuple(
        ChartDataPoint(interval=bucket, value=(total / count) if count else 0.0, sample_count=count)
        for bucket, total, count in zip(buckets, totals, counts)
    )
    return AggregatedSeries(points=points, total_value=total_minutes, sample_count=total_samples)


def aggregate_frequency(
    events: Iterable[Event],
    *,
    buckets: Sequence[DateInterval],
    date_range: DateInterval,
    kind: EventKind,
) -> AggregatedSeries:
    """Count events of one kind per bucket by start time.

    Args:
        events: Events sorted by start.
        buckets: Buckets covering `date_range`.
        date_range: Display range; only events starting inside it count.
        kind: Event kind to count.

    Returns:
        AggregatedSeries of raw counts.
    """

    counts = [0] * len(buckets)
    total = 0

    for event in events:
        if event.kind is not kind:
            continue
        index = _placed_bucket(event, buckets=buckets, date_range=date_range)
        if index is None:
            continue
        counts[index] += 1
        total += 1

    points = tuple(
        ChartDataPoint(interval=bucket, value=float(count), sample_count=count)
        for bucket, count in zip(buckets, counts)
    )
    return AggregatedSeries(points=points, total_value=float(total), sample_count=total)


def _placed_bucket(event: Event, *, buckets: Sequence[DateInterval], date_range: DateInterval) -> int | None:
    if not date_range.contains(event.start):
        return None
    return bucket_index(event.start, buckets)


def aggregate_metric(
    metric: ChartMetric,
    events: Iterable[Event],
    *,
    buckets: Sequence[DateInterval],
    date_range: DateInterval,
    now: datetime,
) -> AggregatedSeries:
    """Dispatch to the aggregation algorithm for `metric`."""

    if metric is ChartMetric.sleep_total:
        return aggregate_sleep(events, buckets=buckets, date_range=date_range, now=now)
    if metric is ChartMetric.feed_average_duration:
        return aggregate_feed_average(events, buckets=buckets, date_range=date_range)
    return aggregate_frequency(events, buckets=buckets, date_range=date_range, kind=metric.event_kind)


def compute_statistics(metric: ChartMetric, aggregated: AggregatedSeries) -> ChartStatistics:
    """Compute summary statistics for an aggregated series.

    Minimum and maximum only consider buckets with data. The average is
    event-weighted for `feed_average_duration` and bucket-weighted (per
    non-empty bucket) for every other metric.

    Args:
        metric: Metric the series was aggregated for.
        aggregated: Aggregation output.

    Returns:
        ChartStatistics for the series.
    """

    non_empty = [point.value for point in aggregated.points if point.sample_count > 0]
    minimum = min(non_empty) if non_empty else 0.0
    maximum = max(non_empty) if non_empty else 0.0

    if metric is ChartMetric.feed_average_duration:
        divisor = aggregated.sample_count
    else:
        divisor = len(non_empty)
    average = aggregated.total_value / divisor if divisor > 0 else 0.0

    return ChartStatistics(
        total=aggregated.total_value,
        average=average,
        minimum=minimum,
        maximum=maximum,
        sample_count=aggregated.sample_count,
    )
