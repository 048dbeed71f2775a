"""
Order sync - reconciles POS order events into Order + Payment records.

Each order event runs in one transaction:
1. Resolve staff, table and shift parents
2. Resolve the order identity (update / rename orphan then update / create)
3. Upsert the order
4. Create payments once the order is fully settled
"""

import logging
from decimal import ROUND_HALF_UP, Decimal

from django.db import transaction
from django.utils import timezone

from avoqado_schemas import OrderExternalId, OrderPayload, POSVendor
from avoqado_schemas import PaymentStatus as POSPaymentStatus

from apps.web.core.models import Venue
from apps.web.pos.exceptions import POSPayloadError
from apps.web.pos.services.order_identity import (
    OrderIdentity,
    OrderIdentityAction,
    OrderLookup,
    OrderRow,
    resolve_order_identity,
)
from apps.web.pos.services.payment_methods import fallback_catalog, map_payment_method
from apps.web.pos.services.shift_sync import get_or_create_shift
from apps.web.pos.services.staff_sync import StaffSyncService
from apps.web.pos.services.table_sync import get_or_create_table
from apps.web.pos.services.venues import get_venue, origin_system_for
from apps.web.restaurant.models import (
    KitchenStatus,
    Order,
    OrderSource,
    OrderStatus,
    OrderType,
    Payment,
    PaymentAllocation,
    SplitType,
    SyncStatus,
    TransactionStatus,
)

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _locking_lookup(venue_id: str) -> OrderLookup:
    """Order lookup for one venue that locks the rows it finds."""

    def lookup(external_id: str) -> OrderRow | None:
        row = (
            Order.objects.for_venue(venue_id)
            .select_for_update()
            .filter(external_id=external_id)
            .values_list("pk", "status")
            .first()
        )
        if row is None:
            return None
        pk, status = row
        return OrderRow(pk=pk, is_deleted=status == OrderStatus.DELETED)

    return lookup


def _claim_order(
    venue_id: str, external_id: str
) -> tuple[OrderIdentity, Order | None]:
    """
    Resolve and lock the order an event refers to, renaming orphans.

    Must run inside the event transaction so a concurrent duplicate cannot
    observe the order between rename and upsert.
    """
    identity = resolve_order_identity(external_id, _locking_lookup(venue_id))

    if identity.action == OrderIdentityAction.CREATE:
        return identity, None

    if identity.action == OrderIdentityAction.RENAME_THEN_UPDATE:
        logger.info(
            "Orphan order found; renaming externalId %s -> %s",
            identity.previous_external_id,
            external_id,
        )
        Order.objects.filter(pk=identity.target_id).update(external_id=external_id)

    return identity, Order.objects.get(pk=identity.target_id)


def find_order_for_reference(venue_id: str, external_id: str) -> Order | None:
    """
    Read-only lookup of an order referenced by a child event.

    Falls back to the placeholder-shift form of the id for orders whose
    rename has not been delivered yet.
    """
    orders = Order.objects.for_venue(venue_id)
    order = orders.filter(external_id=external_id).first()
    if order:
        return order

    parsed = OrderExternalId.parse(external_id)
    if parsed is None or parsed.is_placeholder:
        return None
    return (
        orders.filter(external_id=str(parsed.with_placeholder_shift()))
        .exclude(status=OrderStatus.DELETED)
        .first()
    )


class OrderSyncService:
    """Sole writer of Order, Payment and PaymentAllocation during sync."""

    def __init__(self, staff_sync: StaffSyncService) -> None:
        self.staff_sync = staff_sync

    def process_order_event(self, payload: OrderPayload, vendor: POSVendor) -> Order:
        """
        Process an order created/updated event.

        Args:
            payload: Order event from the terminal.
            vendor: POS vendor from the routing key.

        Returns:
            The created or updated Order.

        Raises:
            VenueNotFoundError: The event's venue does not exist.
            POSPayloadError: A settled order arrived without any usable
                payment method catalog.
        """
        external_id = payload.external_id
        logger.info(
            "Processing order %s for venue %s", external_id, payload.venue_id
        )

        venue = get_venue(payload.venue_id, vendor)
        origin_system = origin_system_for(vendor)

        with transaction.atomic():
            staff_id = self.staff_sync.sync_staff(
                payload.staff_ref, venue.pk, venue.organization_id, origin_system
            )
            table_id = get_or_create_table(payload.table_ref, venue.pk, origin_system)
            shift_id = get_or_create_shift(
                payload.shift_ref, venue.pk, staff_id, origin_system
            )

            identity, order = _claim_order(venue.pk, external_id)
            now = timezone.now()
            fields = {
                "status": payload.status.value,
                "payment_status": payload.payment_status.value,
                "subtotal": payload.subtotal,
                "tax_amount": payload.tax_amount,
                "discount_amount": payload.discount_amount,
                "tip_amount": payload.tip_amount,
                "total": payload.total,
                "completed_at": payload.completed_at,
                "pos_raw_data": payload.raw_vendor_payload,
                "synced_at": now,
                "sync_status": SyncStatus.SYNCED,
            }

            if order is None:
                order = Order.objects.create(
                    venue=venue,
                    external_id=external_id,
                    order_number=payload.order_number,
                    source=OrderSource.POS,
                    origin_system=origin_system,
                    created_at=payload.created_at or now,
                    kitchen_status=KitchenStatus.PENDING,
                    type=OrderType.DINE_IN,
                    table_id=table_id,
                    shift_id=shift_id,
                    served_by_id=staff_id,
                    created_by_id=staff_id,
                    **fields,
                )
                logger.info("Created order %s (externalId: %s)", order.pk, external_id)
            else:
                for name, value in fields.items():
                    setattr(order, name, value)
                order.external_id = external_id
                if payload.order_number:
                    order.order_number = payload.order_number
                if table_id:
                    order.table_id = table_id
                if shift_id:
                    order.shift_id = shift_id
                if staff_id:
                    order.served_by_id = staff_id
                order.save()
                logger.info(
                    "Updated order %s (externalId: %s, action: %s)",
                    order.pk,
                    external_id,
                    identity.action.value,
                )

            settled = payload.payment_status == POSPaymentStatus.PAID
            if settled and payload.settlement_lines:
                self._create_payments(
                    order, payload, venue, vendor, shift_id, staff_id, origin_system
                )

            return order

    def _create_payments(
        self,
        order: Order,
        payload: OrderPayload,
        venue: Venue,
        vendor: POSVendor,
        shift_id: int | None,
        staff_id: int | None,
        origin_system: str,
    ) -> list[Payment]:
        """Create one payment per settlement line, once per order."""
        existing = Payment.objects.filter(order=order).count()
        if existing > 0:
            logger.warning(
                "Order %s already has %d payment(s); skipping settlement",
                order.pk,
                existing,
            )
            return []

        catalog = payload.payment_method_catalog or fallback_catalog(vendor)
        if not catalog:
            raise POSPayloadError(
                f"Order {order.external_id} is paid but no payment method "
                "catalog is available",
                vendor=vendor.value,
            )

        fee_percentage = venue.fee_value
        payments: list[Payment] = []
        for line in payload.settlement_lines:
            fee_amount = (line.amount * fee_percentage).quantize(
                CENTS, rounding=ROUND_HALF_UP
            )
            payment = Payment.objects.create(
                venue=venue,
                order=order,
                shift_id=shift_id,
                processed_by_id=staff_id,
                external_id=f"{order.external_id}-{line.method_id}",
                amount=line.amount,
                tip_amount=line.tip_amount,
                method=map_payment_method(line.method_id, catalog),
                split_type=SplitType.FULLPAYMENT,
                status=TransactionStatus.COMPLETED,
                fee_percentage=fee_percentage,
                fee_amount=fee_amount,
                net_amount=line.amount - fee_amount,
                origin_system=origin_system,
                pos_raw_data=line.raw_vendor_payload,
            )
            PaymentAllocation.objects.create(
                payment=payment,
                order=order,
                amount=payment.amount,
            )
            payments.append(payment)
            logger.info("Created payment %s for order %s", payment.pk, order.pk)

        return payments

    def process_order_delete_event(
        self, payload: OrderPayload, vendor: POSVendor
    ) -> Order | None:
        """
        Mark an order DELETED instead of removing it.

        Uses the same identity resolution as upserts, so a delete sent under
        the real shift id still finds an orphan stored under the placeholder.

        Returns:
            The deleted order, or None if no matching order exists.
        """
        venue = get_venue(payload.venue_id, vendor)

        with transaction.atomic():
            _identity, order = _claim_order(venue.pk, payload.external_id)
            if order is None:
                logger.warning(
                    "Order %s not found at venue %s for deletion",
                    payload.external_id,
                    venue.pk,
                )
                return None

            order.status = OrderStatus.DELETED
            order.synced_at = timezone.now()
            order.sync_status = SyncStatus.SYNCED
            order.save(
                update_fields=["status", "synced_at", "sync_status", "updated_at"]
            )

            logger.info(
                "Order %s (externalId: %s) marked as DELETED",
                order.pk,
                order.external_id,
            )
            return order
