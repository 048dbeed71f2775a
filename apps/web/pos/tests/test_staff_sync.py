"""Tests for staff synchronization."""

import pytest
from avoqado_schemas import POSVendor, StaffEventPayload, StaffPayload

from apps.web.core.models import OriginSystem
from apps.web.pos.exceptions import VenueNotFoundError
from apps.web.pos.services import StaffSyncService
from apps.web.restaurant.models import Staff, StaffRole, StaffVenue
from apps.web.restaurant.tests.factories import StaffFactory, StaffVenueFactory

ORIGIN = OriginSystem.POS_SOFTRESTAURANT


@pytest.mark.django_db
class TestSyncStaff:
    """Tests for StaffSyncService.sync_staff."""

    def test_creates_placeholder_staff_and_assignment(self, venue, staff_sync) -> None:
        """An unknown terminal code creates Staff + StaffVenue together."""
        staff_id = staff_sync.sync_staff(
            StaffPayload(external_id="7", name="Ana", pin="1234"),
            venue.pk,
            venue.organization_id,
            ORIGIN,
        )

        staff = Staff.objects.get(pk=staff_id)
        assert staff.email == "pos-venue-1-7@pos.test"
        assert staff.first_name == "Ana"
        assert staff.last_name == "(POS)"
        assert staff.organization_id == "org-1"
        assert staff.origin_system == ORIGIN
        assert staff.is_pos_placeholder is True

        assignment = StaffVenue.objects.get(venue=venue, pos_staff_id="7")
        assert assignment.staff_id == staff_id
        assert assignment.role == StaffRole.WAITER
        assert assignment.pin == "1234"
        assert assignment.active is True

    def test_default_name_from_code(self, venue, staff_sync) -> None:
        staff_id = staff_sync.sync_staff(
            StaffPayload(external_id="7"), venue.pk, venue.organization_id, ORIGIN
        )

        assert Staff.objects.get(pk=staff_id).first_name == "Waiter 7"

    def test_is_idempotent(self, venue, staff_sync) -> None:
        payload = StaffPayload(external_id="7", name="Ana")

        first = staff_sync.sync_staff(payload, venue.pk, venue.organization_id, ORIGIN)
        second = staff_sync.sync_staff(payload, venue.pk, venue.organization_id, ORIGIN)

        assert first == second
        assert Staff.objects.count() == 1
        assert StaffVenue.objects.count() == 1

    def test_existing_assignment_is_refreshed(self, venue, staff_sync) -> None:
        """Name is updated; PIN only when the event carries one."""
        assignment = StaffVenueFactory(venue=venue, pos_staff_id="7", pin="1111")

        staff_id = staff_sync.sync_staff(
            StaffPayload(external_id="7", name="Ana María"),
            venue.pk,
            venue.organization_id,
            ORIGIN,
        )

        assert staff_id == assignment.staff_id
        assignment.refresh_from_db()
        assert assignment.staff.first_name == "Ana María"
        assert assignment.pin == "1111"

    def test_pin_is_updated_when_present(self, venue, staff_sync) -> None:
        assignment = StaffVenueFactory(venue=venue, pos_staff_id="7", pin="1111")

        staff_sync.sync_staff(
            StaffPayload(external_id="7", pin="2222"),
            venue.pk,
            venue.organization_id,
            ORIGIN,
        )

        assignment.refresh_from_db()
        assert assignment.pin == "2222"

    def test_inactive_assignment_is_reactivated(self, venue, staff_sync) -> None:
        assignment = StaffVenueFactory(venue=venue, pos_staff_id="7", active=False)

        staff_sync.sync_staff(
            StaffPayload(external_id="7"), venue.pk, venue.organization_id, ORIGIN
        )

        assignment.refresh_from_db()
        assert assignment.active is True

    def test_attaches_existing_placeholder_staff(self, venue, staff_sync) -> None:
        """A placeholder that lost its assignment gets a new one, not a twin."""
        staff = StaffFactory(email="pos-venue-1-7@pos.test")

        staff_id = staff_sync.sync_staff(
            StaffPayload(external_id="7"), venue.pk, venue.organization_id, ORIGIN
        )

        assert staff_id == staff.pk
        assert Staff.objects.count() == 1
        assert StaffVenue.objects.get(venue=venue, pos_staff_id="7").staff == staff

    def test_code_is_trimmed(self, venue, staff_sync) -> None:
        first = staff_sync.sync_staff(
            StaffPayload(external_id=" 7 "), venue.pk, venue.organization_id, ORIGIN
        )
        second = staff_sync.sync_staff(
            StaffPayload(external_id="7"), venue.pk, venue.organization_id, ORIGIN
        )

        assert first == second

    @pytest.mark.parametrize("payload", [None, StaffPayload(), StaffPayload(name="x")])
    def test_missing_code_is_noop(self, venue, staff_sync, payload) -> None:
        result = staff_sync.sync_staff(
            payload, venue.pk, venue.organization_id, ORIGIN
        )

        assert result is None
        assert Staff.objects.count() == 0

    def test_synthetic_email_is_lowercase(self) -> None:
        service = StaffSyncService(email_domain="POS.Example.com")

        email = service.synthetic_email("Venue-A", "W7")

        assert email == "pos-venue-a-w7@pos.example.com"


@pytest.mark.django_db
class TestStaffEvents:
    """Tests for standalone staff events."""

    def test_created_event(self, venue, staff_sync) -> None:
        payload = StaffEventPayload(venue_id=venue.pk, external_id="9", name="Luis")

        staff_id = staff_sync.process_staff_event(payload, POSVendor.SOFTRESTAURANT)

        assert Staff.objects.get(pk=staff_id).first_name == "Luis"

    def test_deleted_event_deactivates(self, venue, staff_sync) -> None:
        assignment = StaffVenueFactory(venue=venue, pos_staff_id="9")
        payload = StaffEventPayload(venue_id=venue.pk, external_id="9")

        result = staff_sync.process_staff_event(
            payload, POSVendor.SOFTRESTAURANT, deleted=True
        )

        assert result is None
        assignment.refresh_from_db()
        assert assignment.active is False
        assert Staff.objects.filter(pk=assignment.staff_id).exists()

    def test_deleting_unknown_code_is_harmless(self, venue, staff_sync) -> None:
        payload = StaffEventPayload(venue_id=venue.pk, external_id="404")

        assert staff_sync.deactivate_staff(payload, venue.pk) is False

    def test_unknown_venue(self, staff_sync) -> None:
        payload = StaffEventPayload(venue_id="missing", external_id="9")

        with pytest.raises(VenueNotFoundError):
            staff_sync.process_staff_event(payload, POSVendor.SOFTRESTAURANT)

        assert Staff.objects.count() == 0
