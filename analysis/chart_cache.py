"""Bounded LRU + TTL cache for computed chart series.

The cache is owned by a single `ChartDataAggregator`. All reads and writes go
through one lock so concurrent callers never interleave mutations of the entry
map and its recency order.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import NamedTuple

from .dto import AggregationPeriod, ChartMetric, ChartSeries, DateInterval

logger = logging.getLogger(__name__)


class CacheKey(NamedTuple):
    """Exact-match cache key for a series request."""

    metric: ChartMetric
    period: AggregationPeriod
    start: float
    end: float

    @classmethod
    def for_request(cls, metric: ChartMetric, period: AggregationPeriod, date_range: DateInterval) -> CacheKey:
        """Build a key from a series request (range bounds as POSIX timestamps)."""

        return cls(metric, period, date_range.start.timestamp(), date_range.end.timestamp())


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached series and the monotonic time it was stored."""

    series: ChartSeries
    created_at: float


class SeriesCache:
    """LRU-evicting, TTL-bounded cache of `ChartSeries` values.

    Args:
        ttl: Entry lifetime in seconds; `<= 0` disables caching.
        max_entries: Maximum number of live entries.
        clock: Monotonic clock returning seconds (injectable for tests).
    """

    def __init__(
        self,
        *,
        ttl: float,
        max_entries: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self.ttl = ttl
        self.max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[CacheKey, CacheEntry] = OrderedDict()
        self._global_generation = 0
        self._metric_generations: dict[ChartMetric, int] = {}
        self._lock = Lock()

    @property
    def enabled(self) -> bool:
        """Return True when entries are stored at all (`ttl > 0`)."""

        return self.ttl > 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def keys(self) -> list[CacheKey]:
        """Return keys from least- to most-recently used."""

        with self._lock:
            return list(self._entries)

    def get(self, key: CacheKey) -> ChartSeries | None:
        """Return a live entry and promote it, purging it instead when expired."""

        if not self.enabled:
            return None
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.created_at > self.ttl:
                del self._entries[key]
                logger.debug("Chart cache entry expired: %s", key)
                return None
            self._entries.move_to_end(key)
            return entry.series

    def generation(self, metric: ChartMetric) -> int:
        """Return a token that changes whenever `metric` is invalidated.

        Read it before computing a series and pass it to `put` so a result
        computed from data that was invalidated meanwhile is never stored.
        """

        with self._lock:
            return self._global_generation + self._metric_generations.get(metric, 0)

    def put(self, key: CacheKey, series: ChartSeries, *, generation: int | None = None) -> None:
        """Store a series as most-recently used, evicting LRU entries over capacity.

        When `generation` is given and the key's metric was invalidated since
        it was read, the series is discarded.
        """

        if not self.enabled:
            return
        with self._lock:
            current = self._global_generation + self._metric_generations.get(key.metric, 0)
            if generation is not None and generation != current:
                logger.debug("Chart cache dropped stale write: %s", key)
                return
            self._entries[key] = CacheEntry(series=series, created_at=self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Chart cache evicted LRU entry: %s", evicted)

    def invalidate(self, metric: ChartMetric | None = None) -> int:
        """Drop entries for one metric, or everything when `metric` is None.

        Returns:
            Number of entries removed.
        """

        with self._lock:
            if metric is None:
                self._global_generation += 1
                removed = len(self._entries)
                self._entries.clear()
                return removed
            self._metric_generations[metric] = self._metric_generations.get(metric, 0) + 1
            stale = [key for key in self._entries if key.metric == metric]
            for key in stale:
                del self._entries[key]
            return len(stale)
