"""
Custom managers for multi-tenancy.

VenueScopedManager filters queries by venue.
"""

from typing import TYPE_CHECKING, TypeVar

from django.db import models

if TYPE_CHECKING:
    from .models import Venue, VenueScopedModel

_T = TypeVar("_T", bound="VenueScopedModel")


class VenueScopedManager(models.Manager[_T]):
    """
    Manager that filters by venue.

    Usage in sync services:
        order = Order.objects.for_venue(venue_id).filter(external_id=...)

    SECURITY: Event payloads name their venue explicitly; always scope
    natural-key lookups with for_venue(), never by external_id alone.
    """

    def for_venue(self, venue: "Venue | str") -> models.QuerySet[_T]:
        """
        Filter queryset by venue.

        Args:
            venue: Venue instance or venue primary key

        Returns:
            QuerySet filtered to the venue

        Raises:
            ValueError: If no venue is given
        """
        if not venue:
            msg = "A venue is required for tenant-scoped queries."
            raise ValueError(msg)
        venue_id = venue if isinstance(venue, str) else venue.pk
        return self.filter(venue_id=venue_id)
