"""Admin registrations for core models."""

from django.contrib import admin

from .models import Venue


@admin.register(Venue)
class VenueAdmin(admin.ModelAdmin):  # type: ignore[type-arg]
    list_display = ["name", "id", "organization_id", "pos_status", "is_active"]
    list_filter = ["pos_status", "is_active"]
    search_fields = ["name", "id", "organization_id"]
    readonly_fields = ["created_at", "updated_at"]
