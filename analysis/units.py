"""Unit conversion helpers for growth measurements.

Only the fixed conversions shown on growth charts are supported. Unknown unit
pairs are not an error: the value is returned unchanged so callers can display
whatever the caregiver entered.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Final

POUNDS_PER_KILOGRAM: Final[float] = 2.20462
CENTIMETERS_PER_INCH: Final[float] = 2.54


def kilograms_to_pounds(value: float) -> float:
    return value * POUNDS_PER_KILOGRAM


def pounds_to_kilograms(value: float) -> float:
    return value / POUNDS_PER_KILOGRAM


def centimeters_to_inches(value: float) -> float:
    return value / CENTIMETERS_PER_INCH


def inches_to_centimeters(value: float) -> float:
    return value * CENTIMETERS_PER_INCH


_CONVERSIONS: Final[dict[tuple[str, str], Callable[[float], float]]] = {
    ("kg", "lbs"): kilograms_to_pounds,
    ("lbs", "kg"): pounds_to_kilograms,
    ("cm", "in"): centimeters_to_inches,
    ("in", "cm"): inches_to_centimeters,
}


def normalize_unit(unit: str) -> str:
    """Return a unit symbol trimmed and lower-cased for lookup."""

    return unit.strip().lower()


def is_supported_conversion(from_unit: str, to_unit: str) -> bool:
    """Return True when a fixed conversion exists between two units."""

    return (normalize_unit(from_unit), normalize_unit(to_unit)) in _CONVERSIONS


def convert_unit(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a measurement value between supported units.

    Args:
        value: Numeric value in `from_unit`.
        from_unit: Source unit (`kg`, `lbs`, `cm`, `in`; case-insensitive).
        to_unit: Target unit.

    Returns:
        The converted value, or `value` unchanged for unrecognized pairs.
    """

    conversion = _CONVERSIONS.get((normalize_unit(from_unit), normalize_unit(to_unit)))
    if conversion is None:
        return value
    return conversion(value)
