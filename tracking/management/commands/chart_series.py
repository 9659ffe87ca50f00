"""Print a chart series computed from recorded events."""

from __future__ import annotations

from datetime import datetime

from asgiref.sync import async_to_sync
from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from analysis.chart_aggregator import InvalidRangeError
from analysis.dto import AggregationPeriod, ChartMetric, ChartSeries, DateInterval
from tracking.services import get_chart_aggregator


class Command(BaseCommand):
    """Aggregate events for one metric and print each bucket plus statistics."""

    help = "Print a chart series (one line per bucket) for a metric over a date range."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "--metric",
            required=True,
            choices=[metric.value for metric in ChartMetric],
            help="Metric to aggregate.",
        )
        parser.add_argument("--start", required=True, help="Inclusive start date or datetime (ISO 8601).")
        parser.add_argument("--end", required=True, help="Exclusive end date or datetime (ISO 8601).")
        parser.add_argument(
            "--period",
            default=AggregationPeriod.day.value,
            choices=[period.value for period in AggregationPeriod],
            help="Bucket granularity (default: day).",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        try:
            date_range = DateInterval(start=_parse_moment(options["start"]), end=_parse_moment(options["end"]))
        except ValueError as exc:
            raise CommandError(str(exc)) from exc

        metric = ChartMetric(options["metric"])
        period = AggregationPeriod(options["period"])
        try:
            series = async_to_sync(get_chart_aggregator().series)(metric, date_range, period)
        except InvalidRangeError as exc:
            raise CommandError(str(exc)) from exc

        self._write_series(series)
        return None

    def _write_series(self, series: ChartSeries) -> None:
        for point in series.points:
            self.stdout.write(
                f"{point.interval.start.isoformat()}\t{point.value:.2f} {series.unit}\tsamples={point.sample_count}"
            )
        stats = series.statistics
        self.stdout.write(
            f"[{series.metric} by {series.period}] total={stats.total:.2f} average={stats.average:.2f} "
            f"min={stats.minimum:.2f} max={stats.maximum:.2f} samples={stats.sample_count}"
        )


def _parse_moment(raw: str) -> datetime:
    """Parse an ISO date/datetime, treating naive values as settings.TIME_ZONE local time."""

    parsed = datetime.fromisoformat(raw.strip())
    if parsed.tzinfo is None:
        parsed = timezone.make_aware(parsed, timezone.get_default_timezone())
    return parsed
