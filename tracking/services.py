"""Service-layer wiring between Django and the pure analysis modules.

Services in `tracking` build analysis objects from Django settings and keep the
process-wide chart cache consistent with the Event table.
"""

from __future__ import annotations

import logging
from threading import Lock

from django.conf import settings
from django.utils import timezone

from analysis.chart_aggregator import ChartDataAggregator
from analysis.dto import EventKind, metrics_for_kind
from analysis.percentiles import PercentileInterpolator
from analysis.periods import ChartCalendar
from tracking.repository import DjangoEventsSource

logger = logging.getLogger(__name__)

_aggregator: ChartDataAggregator | None = None
_aggregator_lock = Lock()
_interpolator = PercentileInterpolator()


def chart_calendar_from_settings() -> ChartCalendar:
    """Return bucket calendar rules from `TIME_ZONE` and `CHART_FIRST_WEEKDAY`."""

    return ChartCalendar(
        tz=timezone.get_default_timezone(),
        first_weekday=getattr(settings, "CHART_FIRST_WEEKDAY", 0),
    )


def get_chart_aggregator() -> ChartDataAggregator:
    """Return the process-wide chart aggregator over the Event table.

    The aggregator (and its cache) is created lazily from settings on first
    use and reused afterwards.
    """

    global _aggregator
    with _aggregator_lock:
        if _aggregator is None:
            _aggregator = ChartDataAggregator(
                DjangoEventsSource(),
                calendar=chart_calendar_from_settings(),
                cache_ttl=settings.CHART_CACHE_TTL_SECONDS,
                maximum_cache_entries=settings.CHART_CACHE_MAX_ENTRIES,
            )
            logger.info(
                "Chart aggregator ready: ttl=%ss max_entries=%d tz=%s",
                settings.CHART_CACHE_TTL_SECONDS,
                settings.CHART_CACHE_MAX_ENTRIES,
                settings.TIME_ZONE,
            )
        return _aggregator


def reset_chart_aggregator() -> None:
    """Drop the process-wide aggregator so the next call rebuilds it from settings."""

    global _aggregator
    with _aggregator_lock:
        _aggregator = None


def invalidate_for_kind(kind: EventKind | str) -> None:
    """Invalidate every cached chart metric computed from events of `kind`.

    No-op when the aggregator has not been created yet.
    """

    aggregator = _aggregator
    if aggregator is None:
        return
    for metric in metrics_for_kind(EventKind(kind)):
        aggregator.invalidate_cache(metric)


def get_percentile_interpolator() -> PercentileInterpolator:
    """Return the shared percentile interpolator over the bundled table."""

    return _interpolator


def invalidate_all() -> None:
    """Invalidate the whole chart cache (no-op before the aggregator exists)."""

    aggregator = _aggregator
    if aggregator is not None:
        aggregator.invalidate_cache()
