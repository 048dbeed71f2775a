"""Order item sync - line item upserts and deletes keyed by (order, external_id)."""

import logging

from django.db import transaction

from avoqado_schemas import OrderItemPayload, POSVendor

from apps.web.pos.exceptions import POSNotFoundError
from apps.web.pos.services.order_sync import find_order_for_reference
from apps.web.pos.services.table_sync import get_or_create_product
from apps.web.pos.services.venues import get_venue, origin_system_for
from apps.web.restaurant.models import OrderItem

logger = logging.getLogger(__name__)

# Item fields copied from the payload when present.
_ITEM_FIELDS = (
    "product_name",
    "quantity",
    "unit_price",
    "discount_amount",
    "tax_amount",
    "total",
    "notes",
    "sequence",
)


def delete_order_item(payload: OrderItemPayload, venue_id: str) -> bool:
    """
    Hard-delete an order item.

    An item (or parent order) that is already gone is not an error.

    Returns:
        True if a row was deleted.
    """
    order = find_order_for_reference(venue_id, payload.parent_order_external_id)
    if order is None:
        logger.warning(
            "Parent order %s not found; nothing to delete for item %s",
            payload.parent_order_external_id,
            payload.external_id,
        )
        return False

    deleted, _ = OrderItem.objects.filter(
        order=order, external_id=payload.external_id
    ).delete()

    if deleted:
        logger.info("Deleted item %s from order %s", payload.external_id, order.pk)
    else:
        logger.info(
            "Item %s already absent from order %s", payload.external_id, order.pk
        )
    return bool(deleted)


def process_order_item_event(
    payload: OrderItemPayload,
    vendor: POSVendor,
    deleted: bool = False,
) -> OrderItem | None:
    """
    Upsert or delete an order item.

    Args:
        payload: Item event from the terminal.
        vendor: POS vendor from the routing key.
        deleted: True for `deleted` routing verbs; the payload flag also
            triggers deletion.

    Returns:
        The saved OrderItem, or None after a deletion.

    Raises:
        VenueNotFoundError: The event's venue does not exist.
        POSNotFoundError: The parent order was never synchronized.
    """
    venue = get_venue(payload.venue_id, vendor)

    with transaction.atomic():
        if deleted or payload.deleted:
            delete_order_item(payload, venue.pk)
            return None

        order = find_order_for_reference(venue.pk, payload.parent_order_external_id)
        if order is None:
            raise POSNotFoundError(
                f"Order {payload.parent_order_external_id} not found at venue "
                f"{venue.pk} for item {payload.external_id}",
                vendor=vendor.value,
                external_id=payload.parent_order_external_id,
            )

        origin_system = origin_system_for(vendor)
        defaults = {
            field: getattr(payload, field)
            for field in _ITEM_FIELDS
            if getattr(payload, field) is not None
        }
        product_id = get_or_create_product(
            payload.product_external_id,
            venue.pk,
            origin_system,
            name=payload.product_name,
            price=payload.unit_price,
        )
        if product_id:
            defaults["product_id"] = product_id

        item, created = OrderItem.objects.update_or_create(
            order=order,
            external_id=payload.external_id,
            defaults=defaults,
            create_defaults={
                **defaults,
                "venue": venue,
                "origin_system": origin_system,
            },
        )

        logger.info(
            "%s item %s on order %s",
            "Created" if created else "Updated",
            payload.external_id,
            order.pk,
        )
        return item
