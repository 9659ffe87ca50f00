"""Minimal smoke tests for the project wiring."""

from __future__ import annotations

import pytest

pytestmark = pytest.mark.integration


def test_analysis_package_exports_public_entry_points() -> None:
    """Import the analysis package and verify its public entry points exist."""

    import analysis

    assert callable(analysis.ChartDataAggregator)
    assert callable(analysis.PercentileInterpolator)
    assert issubclass(analysis.InvalidRangeError, ValueError)


def test_django_project_loads() -> None:
    """Verify settings are valid and the tracking app is installed."""

    from django.apps import apps
    from django.conf import settings

    assert "tracking.apps.TrackingConfig" in settings.INSTALLED_APPS
    assert apps.get_app_config("tracking").name == "tracking"
