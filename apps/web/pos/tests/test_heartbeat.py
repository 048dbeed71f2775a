"""Tests for the connection monitor (heartbeats and identity tracking)."""

import logging
from unittest.mock import Mock

import pytest
from avoqado_schemas import HeartbeatPayload, POSVendor

from apps.web.core.models import PosStatus
from apps.web.pos.models import ConnectionStatus, PosConnectionStatus
from apps.web.pos.services import (
    ConnectionMonitor,
    HeartbeatResult,
    LoggingOperatorAlerts,
)

VENDOR = POSVendor.SOFTRESTAURANT


def _heartbeat(venue_id: str, instance_id: str = "inst-A", version: str = "2.1.0"):
    return HeartbeatPayload(
        venue_id=venue_id, instance_id=instance_id, producer_version=version
    )


@pytest.mark.django_db
class TestProcessHeartbeat:
    """Tests for ConnectionMonitor.process_heartbeat."""

    def test_first_heartbeat_goes_online(self, venue, connection_monitor) -> None:
        result = connection_monitor.process_heartbeat(_heartbeat(venue.pk), VENDOR)

        assert result == HeartbeatResult.ONLINE
        status = PosConnectionStatus.objects.get(venue=venue)
        assert status.status == ConnectionStatus.ONLINE
        assert status.instance_id == "inst-A"
        assert status.producer_version == "2.1.0"
        assert status.last_heartbeat_at is not None
        venue.refresh_from_db()
        assert venue.pos_status == PosStatus.CONNECTED

    def test_stable_identity_refreshes_heartbeat(
        self, venue, connection_monitor, alerts
    ) -> None:
        connection_monitor.process_heartbeat(_heartbeat(venue.pk), VENDOR)
        first_seen = PosConnectionStatus.objects.get(venue=venue).last_heartbeat_at

        result = connection_monitor.process_heartbeat(
            _heartbeat(venue.pk, version="2.2.0"), VENDOR
        )

        assert result == HeartbeatResult.ONLINE
        status = PosConnectionStatus.objects.get(venue=venue)
        assert status.status == ConnectionStatus.ONLINE
        assert status.producer_version == "2.2.0"
        assert status.last_heartbeat_at >= first_seen
        assert PosConnectionStatus.objects.count() == 1
        alerts.identity_changed.assert_not_called()

    def test_identity_change_needs_reconciliation(
        self, venue, connection_monitor, alerts
    ) -> None:
        connection_monitor.process_heartbeat(_heartbeat(venue.pk), VENDOR)

        result = connection_monitor.process_heartbeat(
            _heartbeat(venue.pk, instance_id="inst-B"), VENDOR
        )

        assert result == HeartbeatResult.NEEDS_RECONCILIATION
        status = PosConnectionStatus.objects.get(venue=venue)
        assert status.status == ConnectionStatus.NEEDS_RECONCILIATION
        assert status.instance_id == "inst-B"
        assert status.previous_instance_id == "inst-A"
        assert status.reconciliation_requested_at is not None
        venue.refresh_from_db()
        assert venue.pos_status == PosStatus.ERROR
        alerts.identity_changed.assert_called_once_with(venue, "inst-A", "inst-B")

    def test_next_heartbeat_after_change_is_online(
        self, venue, connection_monitor
    ) -> None:
        """The new instance id becomes the reference identity."""
        connection_monitor.process_heartbeat(_heartbeat(venue.pk), VENDOR)
        connection_monitor.process_heartbeat(
            _heartbeat(venue.pk, instance_id="inst-B"), VENDOR
        )

        result = connection_monitor.process_heartbeat(
            _heartbeat(venue.pk, instance_id="inst-B"), VENDOR
        )

        assert result == HeartbeatResult.ONLINE
        venue.refresh_from_db()
        assert venue.pos_status == PosStatus.CONNECTED

    def test_unknown_venue_sends_one_command(
        self, connection_monitor, publisher
    ) -> None:
        result = connection_monitor.process_heartbeat(
            _heartbeat("missing-venue"), VENDOR
        )

        assert result == HeartbeatResult.INVALID_VENUE
        assert PosConnectionStatus.objects.count() == 0
        publisher.publish.assert_called_once()
        routing_key, message = publisher.publish.call_args.args
        assert routing_key == "command.softrestaurant.configuration.error"
        assert message["errorType"] == "INVALID_VENUE_ID"
        assert message["invalidVenueId"] == "missing-venue"
        assert message["instanceId"] == "inst-A"
        assert message["requiresReconfiguration"] is True
        assert "missing-venue" in message["message"]

    def test_known_venue_sends_no_command(
        self, venue, connection_monitor, publisher
    ) -> None:
        connection_monitor.process_heartbeat(_heartbeat(venue.pk), VENDOR)

        publisher.publish.assert_not_called()


@pytest.mark.django_db
class TestLoggingOperatorAlerts:
    def test_identity_change_logs_critical(self, venue, caplog) -> None:
        monitor = ConnectionMonitor(Mock(), LoggingOperatorAlerts())
        monitor.process_heartbeat(_heartbeat(venue.pk), VENDOR)

        with caplog.at_level(logging.CRITICAL):
            monitor.process_heartbeat(
                _heartbeat(venue.pk, instance_id="inst-B"), VENDOR
            )

        record = next(r for r in caplog.records if r.levelno == logging.CRITICAL)
        assert record.alert == "pos_instance_changed"
        assert record.venue_id == venue.pk
        assert "inst-A" in record.getMessage()
