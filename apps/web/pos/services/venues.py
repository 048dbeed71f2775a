"""Venue lookup and vendor tagging shared by all sync handlers."""

from avoqado_schemas import POSVendor

from apps.web.core.models import OriginSystem, Venue
from apps.web.pos.exceptions import POSPayloadError, VenueNotFoundError

_ORIGIN_BY_VENDOR = {
    POSVendor.SOFTRESTAURANT: OriginSystem.POS_SOFTRESTAURANT,
}


def get_venue(venue_id: str, vendor: POSVendor | None = None) -> Venue:
    """
    Fetch the venue an event is scoped to.

    Raises:
        VenueNotFoundError: The venue does not exist. The sync engine never
            creates placeholder venues.
    """
    try:
        return Venue.objects.get(pk=venue_id)
    except Venue.DoesNotExist as e:
        raise VenueNotFoundError(
            venue_id, vendor=vendor.value if vendor else None
        ) from e


def origin_system_for(vendor: POSVendor) -> str:
    """Map a POS vendor to the origin system tag stored on synced rows."""
    try:
        return _ORIGIN_BY_VENDOR[vendor]
    except KeyError as e:
        raise POSPayloadError(
            f"No origin system registered for vendor {vendor.value}",
            vendor=vendor.value,
        ) from e
