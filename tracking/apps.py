"""Django app configuration for Tracking."""

from __future__ import annotations

from django.apps import AppConfig


class TrackingConfig(AppConfig):
    """AppConfig for recorded care events and chart wiring."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "tracking"

    def ready(self) -> None:
        """Register cache-invalidation signal handlers."""

        from tracking import signals  # noqa: F401
