"""WHO Child Growth Standards reference curves (0-24 months).

Source: WHO Multicentre Growth Reference Study (MGRS) 2006, sampled at a few
ages per curve. These points back the curves drawn behind growth charts; the
value-to-percentile lookup lives in `analysis.percentiles`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum, StrEnum
from typing import Final

from .dto import MeasurementType


class Gender(StrEnum):
    """Sex used to select a WHO reference curve."""

    male = "male"
    female = "female"


class PercentileCurve(IntEnum):
    """Published WHO percentile curves."""

    p3 = 3
    p15 = 15
    p50 = 50
    p85 = 85
    p97 = 97

    @property
    def label(self) -> str:
        suffix = "rd" if self.value == 3 else "th"
        return f"{self.value}{suffix}"


@dataclass(frozen=True, slots=True)
class CurvePoint:
    """A reference value at an age in whole months."""

    age_months: int
    value: float


def _points(*pairs: tuple[int, float]) -> tuple[CurvePoint, ...]:
    return tuple(CurvePoint(age_months=age, value=value) for age, value in pairs)


_CurveKey = tuple[MeasurementType, Gender, PercentileCurve]

# Weight in kg; height and head circumference in cm.
_REFERENCE_CURVES: Final[dict[_CurveKey, tuple[CurvePoint, ...]]] = {
    (MeasurementType.weight, Gender.male, PercentileCurve.p50): _points(
        (0, 3.3), (1, 4.5), (2, 5.6), (3, 6.4), (6, 7.9), (9, 9.2), (12, 10.2), (18, 11.5), (24, 12.5)
    ),
    (MeasurementType.weight, Gender.female, PercentileCurve.p50): _points(
        (0, 3.2), (1, 4.2), (2, 5.1), (3, 5.8), (6, 7.3), (9, 8.6), (12, 9.5), (18, 10.8), (24, 11.8)
    ),
    (MeasurementType.weight, Gender.male, PercentileCurve.p3): _points(
        (0, 2.5), (3, 5.0), (6, 6.4), (12, 8.4), (24, 10.3)
    ),
    (MeasurementType.weight, Gender.female, PercentileCurve.p3): _points(
        (0, 2.4), (3, 4.5), (6, 5.9), (12, 7.8), (24, 9.7)
    ),
    (MeasurementType.weight, Gender.male, PercentileCurve.p97): _points(
        (0, 4.3), (3, 7.9), (6, 9.7), (12, 12.3), (24, 15.0)
    ),
    (MeasurementType.weight, Gender.female, PercentileCurve.p97): _points(
        (0, 4.2), (3, 7.4), (6, 9.0), (12, 11.5), (24, 14.2)
    ),
    (MeasurementType.height, Gender.male, PercentileCurve.p50): _points(
        (0, 49.9), (1, 54.7), (3, 61.4), (6, 67.6), (12, 75.7), (18, 82.3), (24, 87.1)
    ),
    (MeasurementType.height, Gender.female, PercentileCurve.p50): _points(
        (0, 49.1), (1, 53.7), (3, 59.8), (6, 65.7), (12, 74.0), (18, 80.7), (24, 85.7)
    ),
    (MeasurementType.height, Gender.male, PercentileCurve.p3): _points(
        (0, 46.1), (6, 63.3), (12, 71.0), (24, 81.7)
    ),
    (MeasurementType.height, Gender.female, PercentileCurve.p3): _points(
        (0, 45.4), (6, 61.5), (12, 69.2), (24, 80.0)
    ),
    (MeasurementType.height, Gender.male, PercentileCurve.p97): _points(
        (0, 53.7), (6, 72.0), (12, 80.5), (24, 92.9)
    ),
    (MeasurementType.height, Gender.female, PercentileCurve.p97): _points(
        (0, 52.9), (6, 70.0), (12, 78.9), (24, 91.4)
    ),
    (MeasurementType.head, Gender.male, PercentileCurve.p50): _points(
        (0, 34.5), (3, 40.5), (6, 43.3), (12, 46.1), (24, 48.3)
    ),
    (MeasurementType.head, Gender.female, PercentileCurve.p50): _points(
        (0, 33.9), (3, 39.5), (6, 42.2), (12, 45.0), (24, 47.2)
    ),
    (MeasurementType.head, Gender.male, PercentileCurve.p3): _points(
        (0, 32.1), (6, 40.9), (12, 43.8), (24, 46.0)
    ),
    (MeasurementType.head, Gender.female, PercentileCurve.p3): _points(
        (0, 31.5), (6, 39.8), (12, 42.7), (24, 44.9)
    ),
    (MeasurementType.head, Gender.male, PercentileCurve.p97): _points(
        (0, 37.0), (6, 45.8), (12, 48.5), (24, 50.7)
    ),
    (MeasurementType.head, Gender.female, PercentileCurve.p97): _points(
        (0, 36.2), (6, 44.7), (12, 47.3), (24, 49.6)
    ),
}


def reference_curve(
    measurement_type: MeasurementType,
    gender: Gender,
    curve: PercentileCurve,
) -> tuple[CurvePoint, ...]:
    """Return the WHO reference points for one curve.

    The bundled sample only tabulates the 3rd, 50th and 97th curves; the 15th
    and 85th fall back to the median.

    Args:
        measurement_type: Measurement category.
        gender: Child's sex.
        curve: Requested percentile curve.

    Returns:
        Points ordered by age.
    """

    points = _REFERENCE_CURVES.get((measurement_type, gender, curve))
    if points is None:
        points = _REFERENCE_CURVES[(measurement_type, gender, PercentileCurve.p50)]
    return points


def curve_value(
    measurement_type: MeasurementType,
    gender: Gender,
    curve: PercentileCurve,
    age_in_months: float,
) -> float | None:
    """Interpolate a reference curve at an arbitrary age.

    Returns:
        The linearly interpolated value, or None outside the tabulated ages.
    """

    points = reference_curve(measurement_type, gender, curve)
    if not points or not points[0].age_months <= age_in_months <= points[-1].age_months:
        return None
    for lower, upper in zip(points, points[1:]):
        if lower.age_months <= age_in_months <= upper.age_months:
            ratio = (age_in_months - lower.age_months) / (upper.age_months - lower.age_months)
            return lower.value + (upper.value - lower.value) * ratio
    return points[-1].value
