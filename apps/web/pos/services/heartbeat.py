"""
Connection monitor - terminal liveness and identity tracking per venue.

Transitions on each heartbeat (venue, instance_id, version):
- unknown venue          -> send a configuration-error command, store nothing
- first heartbeat / same -> ONLINE, venue CONNECTED
- instance id changed    -> NEEDS_RECONCILIATION, venue ERROR, operator alert
"""

import enum
import logging
from typing import Any, Protocol

from django.db import transaction
from django.utils import timezone

from avoqado_schemas import ConfigurationErrorCommand, HeartbeatPayload, POSVendor

from apps.web.core.models import PosStatus, Venue
from apps.web.pos.models import ConnectionStatus, PosConnectionStatus

logger = logging.getLogger(__name__)


class CommandPublisher(Protocol):
    """Sends commands back towards POS terminals."""

    def publish(self, routing_key: str, message: dict[str, Any]) -> None: ...


class OperatorAlerts(Protocol):
    """High-priority notifications for the operations team."""

    def identity_changed(
        self, venue: Venue, previous_instance_id: str, instance_id: str
    ) -> None: ...


class LoggingOperatorAlerts:
    """Alerts emitted as CRITICAL log records for the log pipeline to page on."""

    def identity_changed(
        self, venue: Venue, previous_instance_id: str, instance_id: str
    ) -> None:
        logger.critical(
            "POS instance id changed for venue %s (%s): %s -> %s. "
            "The terminal database may have been restored; manual "
            "reconciliation required.",
            venue.pk,
            venue.name,
            previous_instance_id,
            instance_id,
            extra={
                "alert": "pos_instance_changed",
                "venue_id": venue.pk,
                "previous_instance_id": previous_instance_id,
                "instance_id": instance_id,
            },
        )


class HeartbeatResult(enum.Enum):
    ONLINE = "online"
    NEEDS_RECONCILIATION = "needs_reconciliation"
    INVALID_VENUE = "invalid_venue"


class ConnectionMonitor:
    """Sole writer of PosConnectionStatus."""

    def __init__(self, publisher: CommandPublisher, alerts: OperatorAlerts) -> None:
        self.publisher = publisher
        self.alerts = alerts

    def process_heartbeat(
        self, payload: HeartbeatPayload, vendor: POSVendor
    ) -> HeartbeatResult:
        """
        Record a heartbeat and apply the connection state machine.

        An identity change is a state transition, not an error: the
        heartbeat is still recorded and the message is acknowledged.
        """
        venue = Venue.objects.filter(pk=payload.venue_id).first()
        if venue is None:
            self._send_configuration_error(payload, vendor)
            return HeartbeatResult.INVALID_VENUE

        now = timezone.now()
        with transaction.atomic():
            current = (
                PosConnectionStatus.objects.select_for_update()
                .filter(venue=venue)
                .first()
            )

            if current is None or current.instance_id == payload.instance_id:
                PosConnectionStatus.objects.update_or_create(
                    venue=venue,
                    defaults={
                        "status": ConnectionStatus.ONLINE,
                        "instance_id": payload.instance_id,
                        "producer_version": payload.producer_version,
                        "last_heartbeat_at": now,
                    },
                )
                self._set_venue_pos_status(venue, PosStatus.CONNECTED)
                logger.debug("Heartbeat from venue %s: ONLINE", venue.pk)
                return HeartbeatResult.ONLINE

            previous_instance_id = current.instance_id
            current.status = ConnectionStatus.NEEDS_RECONCILIATION
            current.previous_instance_id = previous_instance_id
            current.instance_id = payload.instance_id
            current.producer_version = payload.producer_version
            current.last_heartbeat_at = now
            current.reconciliation_requested_at = now
            current.save()
            self._set_venue_pos_status(venue, PosStatus.ERROR)

        self.alerts.identity_changed(venue, previous_instance_id, payload.instance_id)
        return HeartbeatResult.NEEDS_RECONCILIATION

    def _set_venue_pos_status(self, venue: Venue, pos_status: str) -> None:
        if venue.pos_status != pos_status:
            logger.info(
                "Venue %s POS status %s -> %s", venue.pk, venue.pos_status, pos_status
            )
            venue.pos_status = pos_status
            venue.save(update_fields=["pos_status", "updated_at"])

    def _send_configuration_error(
        self, payload: HeartbeatPayload, vendor: POSVendor
    ) -> None:
        command = ConfigurationErrorCommand(
            invalid_venue_id=payload.venue_id,
            instance_id=payload.instance_id,
            message=(
                f"Venue {payload.venue_id} does not exist. "
                "Reconfigure the POS with a valid venue id."
            ),
        )
        routing_key = f"command.{vendor.value}.configuration.error"
        logger.error(
            "Heartbeat for unknown venue %s (instance %s); sending %s",
            payload.venue_id,
            payload.instance_id,
            routing_key,
        )
        self.publisher.publish(routing_key, command.model_dump(by_alias=True))
