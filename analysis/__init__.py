"""Pure analysis package for Bloomly.

This package contains deterministic, testable computations that operate on
in-memory inputs and return DTOs: chart aggregation over care events and
growth percentile lookups. It must not import Django or perform any database
I/O.
"""

from .chart_aggregator import ChartDataAggregator, InvalidRangeError
from .percentiles import PercentileInterpolator

__all__ = ["ChartDataAggregator", "InvalidRangeError", "PercentileInterpolator"]
