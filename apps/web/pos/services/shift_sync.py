"""
Shift sync - shift references on orders and shift lifecycle events.

Terminals reuse a shift's external id after it closes, so (venue,
external_id) does not identify a shift on its own. Lookups prefer an exact
start-time match, then the currently open shift, and only fall back to the
most recent shift when the event gives no start time. Order references that
carry a start time accept nothing but the exact match.
"""

import logging
from datetime import datetime
from decimal import Decimal

from django.db import transaction
from django.db.models import Count, Sum
from django.utils import timezone

from avoqado_schemas import (
    PLACEHOLDER_SHIFT_SEGMENT,
    POSVendor,
    ShiftEvent,
    ShiftEventPayload,
    ShiftPayload,
)

from apps.web.pos.services.staff_sync import StaffSyncService
from apps.web.pos.services.venues import get_venue, origin_system_for
from apps.web.restaurant.models import Order, OrderStatus, Shift, ShiftStatus

logger = logging.getLogger(__name__)

# Orders that do not count towards shift totals.
EXCLUDED_FROM_TOTALS = [OrderStatus.DELETED, OrderStatus.CANCELLED]


def find_shift(
    venue_id: str,
    external_id: str,
    start_time: datetime | None = None,
    include_closed: bool = True,
    match_start_time: bool = False,
) -> Shift | None:
    """
    Locate the shift row a terminal shift reference points at.

    Must run inside a transaction; the returned row is locked.

    Args:
        venue_id: Venue the shift belongs to.
        external_id: Terminal shift id (may be shared by several rows).
        start_time: Start time from the event, if any.
        include_closed: Fall back to the latest closed shift when the
            event has no start time and no shift is open.
        match_start_time: When a start time is given, only an exact match
            counts; an open shift with another start time is ignored.
    """
    candidates = (
        Shift.objects.for_venue(venue_id)
        .select_for_update()
        .filter(external_id=external_id)
        .order_by("-start_time", "-pk")
    )

    if start_time is not None:
        exact = candidates.filter(start_time=start_time).first()
        if exact:
            return exact
        if match_start_time:
            return None

    open_shift = candidates.filter(status=ShiftStatus.OPEN).first()
    if open_shift:
        return open_shift

    if include_closed and start_time is None:
        return candidates.first()

    return None


def _create_shift(
    payload: ShiftPayload,
    venue_id: str,
    staff_id: int | None,
    origin_system: str,
) -> Shift:
    shift = Shift.objects.create(
        venue_id=venue_id,
        external_id=payload.external_id,
        staff_id=staff_id,
        start_time=payload.start_time or timezone.now(),
        starting_cash=payload.starting_cash or Decimal("0.00"),
        status=ShiftStatus.OPEN,
        origin_system=origin_system,
        pos_raw_data=payload.raw_vendor_fields,
    )
    logger.info(
        "Created shift %s (externalId: %s) for venue %s",
        shift.pk,
        payload.external_id,
        venue_id,
    )
    return shift


def get_or_create_shift(
    payload: ShiftPayload | None,
    venue_id: str,
    staff_id: int | None,
    origin_system: str,
) -> int | None:
    """
    Resolve the shift referenced by an order event.

    A reference carrying a start time only matches the shift that started
    then, so a shift left open by a lost close event is not reused.

    Returns:
        Shift primary key, or None when the payload carries no shift id or
        the placeholder segment of an order sent before any shift opened.
    """
    if payload is None or not payload.external_id:
        return None
    if payload.external_id == PLACEHOLDER_SHIFT_SEGMENT:
        return None

    with transaction.atomic():
        shift = find_shift(
            venue_id, payload.external_id, payload.start_time, match_start_time=True
        )
        if shift is None:
            shift = _create_shift(payload, venue_id, staff_id, origin_system)
        return shift.pk


def recompute_shift_totals(shift: Shift) -> None:
    """
    Recompute aggregate totals from the orders linked to this shift row.

    Never aggregates by external id: a reused shift number must not pull in
    orders from earlier shifts.
    """
    totals = (
        Order.objects.filter(shift=shift)
        .exclude(status__in=EXCLUDED_FROM_TOTALS)
        .aggregate(
            total_sales=Sum("total"),
            total_tips=Sum("tip_amount"),
            total_orders=Count("pk"),
        )
    )
    shift.total_sales = totals["total_sales"] or Decimal("0.00")
    shift.total_tips = totals["total_tips"] or Decimal("0.00")
    shift.total_orders = totals["total_orders"] or 0


def close_shift(shift: Shift, payload: ShiftPayload) -> Shift:
    """Close a shift and compute its totals. Safe to repeat."""
    shift.end_time = payload.end_time or shift.end_time or timezone.now()
    if payload.ending_cash is not None:
        shift.ending_cash = payload.ending_cash
        shift.cash_difference = payload.ending_cash - shift.starting_cash
    shift.status = ShiftStatus.CLOSED
    recompute_shift_totals(shift)
    shift.save()

    logger.info(
        "Closed shift %s (externalId: %s): %d orders, sales=%s, tips=%s",
        shift.pk,
        shift.external_id,
        shift.total_orders,
        shift.total_sales,
        shift.total_tips,
    )
    return shift


def process_shift_event(
    payload: ShiftEventPayload,
    vendor: POSVendor,
    staff_sync: StaffSyncService,
) -> Shift:
    """
    Apply a shift created/updated/closed event.

    A shift that was already closed is only matched again when the event
    repeats its start time (a redelivery); otherwise `created` opens a new
    row for the reused external id.
    """
    venue = get_venue(payload.venue_id, vendor)
    origin_system = origin_system_for(vendor)

    with transaction.atomic():
        staff_id = staff_sync.sync_staff(
            payload.staff_ref, venue.pk, venue.organization_id, origin_system
        )

        shift = find_shift(
            venue.pk,
            payload.external_id,
            payload.start_time,
            include_closed=payload.event != ShiftEvent.CREATED,
        )

        if shift is None:
            shift = _create_shift(payload, venue.pk, staff_id, origin_system)
        else:
            if payload.start_time is not None:
                shift.start_time = payload.start_time
            if staff_id is not None:
                shift.staff_id = staff_id
            if payload.starting_cash is not None:
                shift.starting_cash = payload.starting_cash
            shift.pos_raw_data = {**shift.pos_raw_data, **payload.raw_vendor_fields}
            shift.save()

        if payload.event == ShiftEvent.CLOSED:
            close_shift(shift, payload)

        return shift
