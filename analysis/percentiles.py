"""Value-to-percentile lookup for growth measurements.

`PercentileInterpolator` answers "where does this measurement rank?" against a
dense percentile table (one value per rank 3..97 for each tabulated age),
interpolating linearly between the two tabulated ages bracketing the child's
age. Gaps in the table are an expected "no data for this age" state and yield
None rather than raising.
"""

from __future__ import annotations

from bisect import bisect_left, bisect_right
from collections.abc import Mapping, Sequence
from types import MappingProxyType
from typing import Final

from .dto import MeasurementType
from .units import convert_unit

PercentileTable = Mapping[MeasurementType, Mapping[float, Sequence[float]]]

LOWEST_RANK: Final[int] = 3
HIGHEST_RANK: Final[int] = 97
PERCENTILE_RANKS: Final[tuple[int, ...]] = tuple(range(LOWEST_RANK, HIGHEST_RANK + 1))


def _ranked_row(lowest: float, highest: float) -> tuple[float, ...]:
    """Spread one value per rank evenly between the 3rd and 97th percentile values."""

    steps = len(PERCENTILE_RANKS) - 1
    return tuple(lowest + (highest - lowest) * index / steps for index in range(len(PERCENTILE_RANKS)))


DEFAULT_PERCENTILE_TABLE: Final[PercentileTable] = MappingProxyType(
    {
        MeasurementType.weight: MappingProxyType(
            {
                0.0: _ranked_row(3.0, 97.0),
                6.0: _ranked_row(3.5, 97.5),
            }
        ),
        MeasurementType.height: MappingProxyType(
            {
                0.0: _ranked_row(45.0, 75.0),
                6.0: _ranked_row(55.0, 85.0),
            }
        ),
        MeasurementType.head: MappingProxyType(
            {
                0.0: _ranked_row(30.0, 40.0),
                6.0: _ranked_row(32.0, 42.0),
            }
        ),
    }
)


class PercentileInterpolator:
    """Rank measurements against an immutable percentile table.

    Args:
        table: Mapping of measurement type -> age in months -> 95 values (ranks
            3..97 ascending). Defaults to the bundled table. The table is read
            without locking and must not be mutated after construction.
    """

    def __init__(self, table: PercentileTable | None = None) -> None:
        self.table = DEFAULT_PERCENTILE_TABLE if table is None else table

    def percentile(self, measurement_type: MeasurementType, age_in_months: float, value: float) -> float | None:
        """Return the percentile rank of a measurement at a given age.

        Args:
            measurement_type: Measurement category to look up.
            age_in_months: Child's age; must lie within the tabulated ages.
            value: Measurement in the table's unit.

        Returns:
            The first rank whose interpolated curve is at or above `value`,
            97 when `value` exceeds every curve, or None when the type is not
            tabulated, the age is outside the table, or a bracketing row is
            malformed.
        """

        rows = self.table.get(measurement_type)
        if not rows:
            return None

        ages = sorted(rows)
        upper_index = bisect_left(ages, age_in_months)
        lower_index = bisect_right(ages, age_in_months) - 1
        if lower_index < 0 or upper_index >= len(ages):
            return None
        lower_age = ages[lower_index]
        upper_age = ages[upper_index]

        lower_values = rows[lower_age]
        upper_values = rows[upper_age]
        if len(lower_values) != len(PERCENTILE_RANKS) or len(upper_values) != len(PERCENTILE_RANKS):
            return None

        ratio = 0.0 if upper_age == lower_age else (age_in_months - lower_age) / (upper_age - lower_age)
        for rank, low, high in zip(PERCENTILE_RANKS, lower_values, upper_values):
            if value <= low + (high - low) * ratio:
                return float(rank)
        return float(HIGHEST_RANK)

    def convert(self, value: float, from_unit: str, to_unit: str) -> float:
        """Convert a measurement between units (identity for unknown pairs)."""

        return convert_unit(value, from_unit, to_unit)
