"""Admin registration for POS models."""

from django.contrib import admin

from apps.web.pos.models import PosConnectionStatus


@admin.register(PosConnectionStatus)
class PosConnectionStatusAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    """Admin for terminal connection status per venue."""

    list_display = [
        "venue",
        "status",
        "instance_id",
        "previous_instance_id",
        "producer_version",
        "last_heartbeat_at",
    ]
    list_filter = ["status"]
    search_fields = ["venue__name", "venue__id", "instance_id"]
    readonly_fields = [
        "venue",
        "status",
        "instance_id",
        "previous_instance_id",
        "producer_version",
        "last_heartbeat_at",
        "reconciliation_requested_at",
        "updated_at",
    ]
    ordering = ["-last_heartbeat_at"]
