"""Floor-plan and catalog sync - areas, tables and products from the terminal."""

import logging
from decimal import Decimal

from avoqado_schemas import (
    AreaEventPayload,
    AreaPayload,
    POSVendor,
    TableEventPayload,
    TablePayload,
)

from apps.web.pos.services.venues import get_venue, origin_system_for
from apps.web.restaurant.models import Area, Product, Table

logger = logging.getLogger(__name__)


def get_or_create_area(
    payload: AreaPayload | None, venue_id: str, origin_system: str
) -> int | None:
    """
    Find or create an area by (venue, external_id).

    Returns:
        Area primary key, or None when the payload carries no id.
    """
    if payload is None or not payload.external_id:
        return None

    external_id = payload.external_id.strip()
    area, created = Area.objects.get_or_create(
        venue_id=venue_id,
        external_id=external_id,
        defaults={
            "name": payload.name or f"Area {external_id}",
            "origin_system": origin_system,
        },
    )

    if created:
        logger.info("Created area %s for venue %s", external_id, venue_id)
    elif payload.name and area.name != payload.name:
        area.name = payload.name
        area.save(update_fields=["name", "updated_at"])

    return area.pk


def get_or_create_table(
    payload: TablePayload | None, venue_id: str, origin_system: str
) -> int | None:
    """
    Find or create a table by (venue, number).

    The terminal identifies tables by their displayed number, which arrives
    as the payload external_id. New tables get the default capacity.

    Returns:
        Table primary key, or None when the payload carries no number.
    """
    if payload is None or not payload.external_id:
        return None

    number = payload.external_id.strip()
    area_id = get_or_create_area(payload.area, venue_id, origin_system)

    table, created = Table.objects.get_or_create(
        venue_id=venue_id,
        number=number,
        defaults={
            "area_id": area_id,
            "origin_system": origin_system,
        },
    )

    if created:
        logger.info("Created table %s for venue %s", number, venue_id)
    elif area_id and table.area_id != area_id:
        table.area_id = area_id
        table.save(update_fields=["area", "updated_at"])

    return table.pk


def get_or_create_product(
    external_id: str | None,
    venue_id: str,
    origin_system: str,
    name: str | None = None,
    price: Decimal | None = None,
) -> int | None:
    """
    Find or create a product by (venue, external_id).

    Name and price are only filled in on creation; the catalog is owned by
    the menu module, not by order sync.
    """
    if not external_id:
        return None

    product, created = Product.objects.get_or_create(
        venue_id=venue_id,
        external_id=external_id.strip(),
        defaults={
            "name": name or f"Product {external_id}",
            "price": price if price is not None else Decimal("0.00"),
            "origin_system": origin_system,
        },
    )

    if created:
        logger.info("Created product %s for venue %s", external_id, venue_id)

    return product.pk


def process_area_event(payload: AreaEventPayload, vendor: POSVendor) -> int | None:
    """Apply a standalone area created/updated event."""
    venue = get_venue(payload.venue_id, vendor)
    return get_or_create_area(payload, venue.pk, origin_system_for(vendor))


def process_table_event(payload: TableEventPayload, vendor: POSVendor) -> int | None:
    """Apply a standalone table created/updated event."""
    venue = get_venue(payload.venue_id, vendor)
    return get_or_create_table(payload, venue.pk, origin_system_for(vendor))
