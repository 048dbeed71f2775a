"""
Staff sync - maps terminal staff codes to Staff + StaffVenue records.

Resolution order for a (venue, terminal code) pair:
1. An assignment already exists -> refresh the name and PIN
2. A placeholder Staff with the synthetic email exists -> attach a new
   assignment to that person
3. Neither exists -> create Staff and assignment together
"""

import logging

from django.db import transaction

from avoqado_schemas import POSVendor, StaffEventPayload, StaffPayload

from apps.web.pos.services.venues import get_venue, origin_system_for
from apps.web.restaurant.models import Staff, StaffRole, StaffVenue

logger = logging.getLogger(__name__)

PLACEHOLDER_LAST_NAME = "(POS)"


class StaffSyncService:
    """
    Resolves terminal staff into durable Staff ids.

    Built once at process start and shared by the order and shift handlers.
    """

    def __init__(self, email_domain: str) -> None:
        self.email_domain = email_domain

    def synthetic_email(self, venue_id: str, pos_staff_id: str) -> str:
        """Deterministic email for a placeholder staff account."""
        return f"pos-{venue_id}-{pos_staff_id}@{self.email_domain}".lower()

    def sync_staff(
        self,
        payload: StaffPayload | None,
        venue_id: str,
        organization_id: str,
        origin_system: str,
    ) -> int | None:
        """
        Find or create the staff member behind a terminal staff code.

        Args:
            payload: Staff reference from the event (may be absent).
            venue_id: Venue the code belongs to.
            organization_id: Organization that owns new Staff rows.
            origin_system: Origin tag for newly created rows.

        Returns:
            Staff primary key, or None when the payload carries no code.
        """
        if payload is None or not payload.external_id:
            logger.warning("Staff payload has no externalId; skipping staff sync")
            return None

        pos_staff_id = payload.external_id.strip()
        name = payload.name or f"Waiter {pos_staff_id}"

        with transaction.atomic():
            assignment = (
                StaffVenue.objects.select_for_update()
                .select_related("staff")
                .filter(venue_id=venue_id, pos_staff_id=pos_staff_id)
                .first()
            )

            if assignment:
                logger.info("Updating staff for terminal code %s", pos_staff_id)
                staff = assignment.staff
                staff.first_name = name
                staff.save(update_fields=["first_name", "updated_at"])

                update_fields = ["active", "updated_at"]
                assignment.active = True
                if payload.pin is not None:
                    assignment.pin = str(payload.pin)
                    update_fields.append("pin")
                assignment.save(update_fields=update_fields)
                return staff.pk

            email = self.synthetic_email(venue_id, pos_staff_id)
            staff = Staff.objects.filter(email=email).first()

            if staff:
                logger.info(
                    "Attaching existing staff %s to venue %s as terminal code %s",
                    staff.pk,
                    venue_id,
                    pos_staff_id,
                )
            else:
                logger.info("Creating staff for terminal code %s", pos_staff_id)
                staff = Staff.objects.create(
                    organization_id=organization_id,
                    email=email,
                    first_name=name,
                    last_name=PLACEHOLDER_LAST_NAME,
                    origin_system=origin_system,
                )

            StaffVenue.objects.create(
                staff=staff,
                venue_id=venue_id,
                pos_staff_id=pos_staff_id,
                role=StaffRole.WAITER,
                pin=str(payload.pin) if payload.pin is not None else None,
            )
            return staff.pk

    def deactivate_staff(self, payload: StaffPayload, venue_id: str) -> bool:
        """
        Deactivate a staff assignment removed on the terminal.

        Staff rows are never deleted; they are referenced by orders and
        payments. Returns False if no assignment exists.
        """
        if not payload.external_id:
            return False

        updated = StaffVenue.objects.filter(
            venue_id=venue_id,
            pos_staff_id=payload.external_id.strip(),
        ).update(active=False)

        if not updated:
            logger.warning(
                "No staff assignment for terminal code %s at venue %s",
                payload.external_id,
                venue_id,
            )
        return bool(updated)

    def process_staff_event(
        self,
        payload: StaffEventPayload,
        vendor: POSVendor,
        deleted: bool = False,
    ) -> int | None:
        """
        Apply a standalone staff created/updated/deleted event.

        Returns:
            Staff primary key, or None after a deactivation.
        """
        venue = get_venue(payload.venue_id, vendor)
        if deleted:
            self.deactivate_staff(payload, venue.pk)
            return None
        return self.sync_staff(
            payload, venue.pk, venue.organization_id, origin_system_for(vendor)
        )
