"""
Core models - Multi-tenancy foundation.

All tenant-scoped models inherit from VenueScopedModel.
"""

import uuid

from django.db import models

from .managers import VenueScopedManager


class OriginSystem(models.TextChoices):
    """System that produced a record."""

    AVOQADO = "AVOQADO", "Avoqado"
    POS_SOFTRESTAURANT = "POS_SOFTRESTAURANT", "SoftRestaurant POS"


def _new_venue_id() -> str:
    return uuid.uuid4().hex


class PosStatus(models.TextChoices):
    """Venue-level POS connectivity shown in the admin."""

    NOT_INTEGRATED = "NOT_INTEGRATED", "Not integrated"
    CONNECTING = "CONNECTING", "Connecting"
    CONNECTED = "CONNECTED", "Connected"
    ERROR = "ERROR", "Error"
    DISABLED = "DISABLED", "Disabled"


class Venue(models.Model):
    """
    Tenant - a physical restaurant or store.

    All synchronized data is scoped to a Venue. Venues are provisioned by
    onboarding; the sync engine never creates them.
    """

    id = models.CharField(
        primary_key=True,
        max_length=64,
        default=_new_venue_id,
        editable=False,
    )
    organization_id = models.CharField(max_length=64)
    name = models.CharField(max_length=200)

    pos_status = models.CharField(
        max_length=20,
        choices=PosStatus.choices,
        default=PosStatus.NOT_INTEGRATED,
    )
    fee_value = models.DecimalField(
        max_digits=6,
        decimal_places=4,
        default=0,
        help_text="Processing fee as decimal (e.g., 0.0250 for 2.5%)",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:
        return self.name


class VenueScopedModel(models.Model):
    """
    Abstract base for all tenant-scoped models.

    Provides:
    - Automatic venue FK
    - VenueScopedManager for filtered queries
    - Origin system tag
    - Created/updated timestamps
    """

    venue = models.ForeignKey(
        Venue,
        on_delete=models.CASCADE,
        related_name="%(class)ss",  # e.g., venue.orders, venue.shifts
    )
    origin_system = models.CharField(
        max_length=30,
        choices=OriginSystem.choices,
        default=OriginSystem.AVOQADO,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = VenueScopedManager()

    class Meta:
        abstract = True
