"""Calendar-aligned bucket construction for chart series.

Buckets are computed in the calendar's local time zone (so "a day" is a local
calendar day, including 23/25 hour DST days) and returned as UTC-normalized
intervals. This module is pure: no Django imports, no I/O.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo

from .dto import AggregationPeriod, DateInterval

MONDAY = 0
SUNDAY = 6


@dataclass(frozen=True, slots=True)
class ChartCalendar:
    """Calendar rules used to align chart buckets.

    Args:
        tz: Time zone whose local midnights/week starts/month starts define
            bucket boundaries.
        first_weekday: Day a week starts on, `0` (Monday, ISO) to `6` (Sunday).
    """

    tz: tzinfo = field(default=timezone.utc)
    first_weekday: int = MONDAY

    def __post_init__(self) -> None:
        """Validate the weekday index."""

        if not MONDAY <= self.first_weekday <= SUNDAY:
            raise ValueError("first_weekday must be between 0 (Monday) and 6 (Sunday).")

    def to_local(self, moment: datetime) -> datetime:
        """Convert an aware datetime to the calendar's time zone."""

        return moment.astimezone(self.tz)

    def aligned_start(self, moment: datetime, period: AggregationPeriod) -> datetime:
        """Return the start of the period containing `moment`, in local time.

        Args:
            moment: Timezone-aware datetime.
            period: Period whose start is requested.

        Returns:
            Local midnight of the day, first day of the week, or first day of the
            month containing `moment`.
        """

        local = self.to_local(moment)
        midnight = _local_midnight(local.year, local.month, local.day, self.tz)
        if period is AggregationPeriod.day:
            return midnight
        if period is AggregationPeriod.week:
            offset = (local.weekday() - self.first_weekday) % 7
            start_day = midnight.date() - timedelta(days=offset)
            return _local_midnight(start_day.year, start_day.month, start_day.day, self.tz)
        return _local_midnight(local.year, local.month, 1, self.tz)

    def add_periods(self, local_start: datetime, period: AggregationPeriod, count: int) -> datetime:
        """Step a local period start forward (or back) by whole periods.

        Args:
            local_start: A local-time period start as returned by `aligned_start`.
            period: Step size.
            count: Number of periods; negative steps backward.

        Returns:
            The local-time start of the target period.
        """

        if period is AggregationPeriod.month:
            month_index = local_start.year * 12 + (local_start.month - 1) + count
            year, month = divmod(month_index, 12)
            return _local_midnight(year, month + 1, 1, self.tz)
        days = count * (7 if period is AggregationPeriod.week else 1)
        target = local_start.date() + timedelta(days=days)
        return _local_midnight(target.year, target.month, target.day, self.tz)

    def shift_days(self, moment: datetime, days: int) -> datetime:
        """Shift a moment by whole local calendar days, keeping wall-clock time."""

        local = self.to_local(moment)
        shifted = local.replace(tzinfo=None) + timedelta(days=days)
        return shifted.replace(tzinfo=self.tz).astimezone(timezone.utc)


def _local_midnight(year: int, month: int, day: int, tz: tzinfo) -> datetime:
    return datetime(year, month, day, tzinfo=tz)


def make_buckets(date_range: DateInterval, period: AggregationPeriod, calendar: ChartCalendar) -> list[DateInterval]:
    """Split a range into calendar-aligned buckets.

    The first bucket starts at `date_range.start` (clipped from its period
    start), interior buckets are full periods, and the last bucket is truncated
    at `date_range.end`. Together they cover the range with no gaps or overlaps.

    Args:
        date_range: Range to cover; `end` must be after `start` for any output.
        period: Bucket granularity.
        calendar: Calendar rules for alignment.

    Returns:
        UTC-normalized bucket intervals in ascending order (empty for a
        degenerate range).
    """

    range_start = date_range.start.astimezone(timezone.utc)
    range_end = date_range.end.astimezone(timezone.utc)

    current = calendar.aligned_start(range_start, period)
    if current.astimezone(timezone.utc) > range_start:
        current = calendar.add_periods(current, period, -1)

    buckets: list[DateInterval] = []
    while current.astimezone(timezone.utc) < range_end:
        following = calendar.add_periods(current, period, 1)
        bucket_start = max(current.astimezone(timezone.utc), range_start)
        bucket_end = min(following.astimezone(timezone.utc), range_end)
        buckets.append(DateInterval(start=bucket_start, end=bucket_end))
        current = following
    return buckets


def bucket_index(moment: datetime, buckets: Sequence[DateInterval]) -> int | None:
    """Return the index of the bucket containing `moment`, or None."""

    for index, bucket in enumerate(buckets):
        if bucket.start <= moment < bucket.end:
            return index
    return None
