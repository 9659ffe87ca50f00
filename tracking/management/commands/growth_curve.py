"""Print a WHO reference growth curve."""

from __future__ import annotations

from django.core.management.base import BaseCommand

from analysis.dto import MeasurementType
from analysis.growth_curves import Gender, PercentileCurve, curve_value, reference_curve


class Command(BaseCommand):
    """Print the points of one WHO percentile curve, or its value at an age."""

    help = "Print a WHO reference curve (3rd..97th percentile) for a measurement type and gender."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "--type",
            required=True,
            choices=[kind.value for kind in MeasurementType],
            help="Measurement type.",
        )
        parser.add_argument(
            "--gender",
            required=True,
            choices=[gender.value for gender in Gender],
            help="Child's sex.",
        )
        parser.add_argument(
            "--curve",
            type=int,
            default=PercentileCurve.p50.value,
            choices=[curve.value for curve in PercentileCurve],
            help="Percentile curve (default: 50).",
        )
        parser.add_argument("--age", type=float, default=None, help="Age in months; prints a single value.")

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        measurement_type = MeasurementType(options["type"])
        gender = Gender(options["gender"])
        curve = PercentileCurve(options["curve"])
        unit = measurement_type.default_unit
        prefix = f"{measurement_type} {gender} {curve.label}"

        age = options["age"]
        if age is not None:
            value = curve_value(measurement_type, gender, curve, age)
            if value is None:
                self.stdout.write(f"{prefix} at {age:g} months: no data")
            else:
                self.stdout.write(f"{prefix} at {age:g} months: {value:.2f} {unit}")
            return None

        for point in reference_curve(measurement_type, gender, curve):
            self.stdout.write(f"{prefix}\t{point.age_months} months\t{point.value:.2f} {unit}")
        return None
