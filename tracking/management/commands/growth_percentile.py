"""Rank a growth measurement against the bundled percentile table."""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from analysis.dto import MeasurementType
from analysis.units import is_supported_conversion, normalize_unit
from tracking.services import get_percentile_interpolator


class Command(BaseCommand):
    """Print the percentile rank of a measurement at an age."""

    help = "Print the percentile rank of a height/weight/head measurement."

    def add_arguments(self, parser) -> None:
        """Add command arguments."""

        parser.add_argument(
            "--type",
            required=True,
            choices=[kind.value for kind in MeasurementType],
            help="Measurement type.",
        )
        parser.add_argument("--age", required=True, type=float, help="Age in months.")
        parser.add_argument("--value", required=True, type=float, help="Measured value.")
        parser.add_argument(
            "--unit",
            default=None,
            help="Unit of --value (kg, lbs, cm, in). Defaults to the table unit.",
        )

    def handle(self, *args, **options) -> str | None:
        """Run the command."""

        measurement_type = MeasurementType(options["type"])
        table_unit = measurement_type.default_unit
        unit = normalize_unit(options["unit"] or table_unit)
        if unit != table_unit and not is_supported_conversion(unit, table_unit):
            raise CommandError(f"Cannot convert {unit!r} to {table_unit!r} for {measurement_type} measurements.")

        interpolator = get_percentile_interpolator()
        value = interpolator.convert(options["value"], unit, table_unit)
        rank = interpolator.percentile(measurement_type, options["age"], value)
        if rank is None:
            self.stdout.write(f"{measurement_type} at {options['age']:g} months: no data")
            return None
        self.stdout.write(
            f"{measurement_type} {value:.2f} {table_unit} at {options['age']:g} months: percentile {rank:g}"
        )
        return None
