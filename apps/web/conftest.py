"""
Pytest configuration for Django app tests.
"""

from unittest.mock import Mock

import pytest

from apps.web.core.models import Venue
from apps.web.pos.services import (
    ConnectionMonitor,
    OrderSyncService,
    StaffSyncService,
)
from apps.web.restaurant.tests.factories import VenueFactory

STAFF_EMAIL_DOMAIN = "pos.test"


@pytest.fixture
def venue() -> Venue:
    """Create a test venue (tenant)."""
    return VenueFactory(id="venue-1", organization_id="org-1", name="La Terraza")


@pytest.fixture
def staff_sync() -> StaffSyncService:
    return StaffSyncService(email_domain=STAFF_EMAIL_DOMAIN)


@pytest.fixture
def order_sync(staff_sync: StaffSyncService) -> OrderSyncService:
    return OrderSyncService(staff_sync)


@pytest.fixture
def publisher() -> Mock:
    """Command publisher that records calls instead of talking to a broker."""
    return Mock()


@pytest.fixture
def alerts() -> Mock:
    return Mock()


@pytest.fixture
def connection_monitor(publisher: Mock, alerts: Mock) -> ConnectionMonitor:
    return ConnectionMonitor(publisher, alerts)
