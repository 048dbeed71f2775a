"""POS connection models - per-venue terminal liveness and identity."""

from django.db import models

from apps.web.core.models import Venue


class ConnectionStatus(models.TextChoices):
    """Terminal connection state for a venue."""

    ONLINE = "ONLINE", "Online"
    NEEDS_RECONCILIATION = "NEEDS_RECONCILIATION", "Needs reconciliation"


class PosConnectionStatus(models.Model):
    """
    Single source of truth for a venue terminal's health and identity.

    A venue without a row has never sent a heartbeat. instance_id is the
    terminal database identity; a change means the terminal was restored or
    replaced and its financial data needs manual reconciliation.
    """

    venue = models.OneToOneField(
        Venue,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="pos_connection_status",
    )
    status = models.CharField(
        max_length=30,
        choices=ConnectionStatus.choices,
        default=ConnectionStatus.ONLINE,
    )
    instance_id = models.CharField(
        max_length=255,
        help_text="Terminal instance identity from the latest heartbeat",
    )
    previous_instance_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Instance identity before the last discontinuity",
    )
    producer_version = models.CharField(max_length=50, blank=True)
    last_heartbeat_at = models.DateTimeField()
    reconciliation_requested_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When an instance identity change was detected",
    )
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "POS connection statuses"

    def __str__(self) -> str:
        return f"{self.venue_id}: {self.status}"
