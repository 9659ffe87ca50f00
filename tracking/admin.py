"""Admin registrations for Tracking models."""

from __future__ import annotations

from django.contrib import admin

from tracking.models import Event


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    """Admin configuration for Event."""

    list_display = ("kind", "start", "end", "is_deleted", "updated_at")
    list_filter = ("kind", "is_deleted")
    search_fields = ("notes",)
    date_hierarchy = "start"
    readonly_fields = ("created_at", "updated_at")
