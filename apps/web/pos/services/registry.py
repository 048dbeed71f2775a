"""
Handler registry - maps event entity types to sync handlers.

The registry is built once at process start from explicitly constructed
services; nothing is resolved lazily at call time.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

from avoqado_schemas import (
    AreaEventPayload,
    EntityType,
    EventVerb,
    HeartbeatPayload,
    OrderItemPayload,
    OrderPayload,
    ShiftEvent,
    ShiftEventPayload,
    StaffEventPayload,
    TableEventPayload,
)
from pydantic import BaseModel, ValidationError

from apps.web.pos.exceptions import POSPayloadError, POSRoutingError
from apps.web.pos.services.dispatcher import RoutingKey
from apps.web.pos.services.heartbeat import (
    CommandPublisher,
    ConnectionMonitor,
    LoggingOperatorAlerts,
    OperatorAlerts,
)
from apps.web.pos.services.order_item_sync import process_order_item_event
from apps.web.pos.services.order_sync import OrderSyncService
from apps.web.pos.services.shift_sync import process_shift_event
from apps.web.pos.services.staff_sync import StaffSyncService
from apps.web.pos.services.table_sync import process_area_event, process_table_event

logger = logging.getLogger(__name__)

Handler = Callable[[RoutingKey, dict[str, Any]], Any]

PayloadT = TypeVar("PayloadT", bound=BaseModel)

_SHIFT_EVENTS = {
    EventVerb.CREATED: ShiftEvent.CREATED,
    EventVerb.UPDATED: ShiftEvent.UPDATED,
    EventVerb.CLOSED: ShiftEvent.CLOSED,
}


@dataclass
class SyncServices:
    """Long-lived services shared by every handler."""

    staff_sync: StaffSyncService
    order_sync: OrderSyncService
    connection_monitor: ConnectionMonitor


def build_sync_services(
    publisher: CommandPublisher, alerts: OperatorAlerts | None = None
) -> SyncServices:
    """Construct the sync services from settings."""
    staff_sync = StaffSyncService(email_domain=settings.POS_STAFF_EMAIL_DOMAIN)
    return SyncServices(
        staff_sync=staff_sync,
        order_sync=OrderSyncService(staff_sync),
        connection_monitor=ConnectionMonitor(
            publisher, alerts or LoggingOperatorAlerts()
        ),
    )


class HandlerRegistry:
    """Entity type -> handler table."""

    def __init__(self) -> None:
        self._handlers: dict[EntityType, Handler] = {}

    def register(self, entity: EntityType, handler: Handler) -> None:
        if entity in self._handlers:
            raise ImproperlyConfigured(
                f"A handler is already registered for {entity.value}"
            )
        self._handlers[entity] = handler

    def get(self, entity: EntityType) -> Handler:
        """
        Look up the handler for an entity type.

        Raises:
            POSRoutingError: No handler is registered for the entity.
        """
        try:
            return self._handlers[entity]
        except KeyError:
            raise POSRoutingError(
                f"No handler registered for entity {entity.value}", entity.value
            ) from None

    def require(self, *entities: EntityType) -> None:
        """Fail startup if any of the given entity types has no handler."""
        missing = [e.value for e in entities if e not in self._handlers]
        if missing:
            raise ImproperlyConfigured(
                f"No handler registered for: {', '.join(missing)}"
            )

    def __contains__(self, entity: EntityType) -> bool:
        return entity in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)


def parse_payload(model: type[PayloadT], data: dict[str, Any]) -> PayloadT:
    """Validate an event body against its payload model."""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise POSPayloadError(
            f"Invalid {model.__name__}: {e.error_count()} validation error(s)\n{e}"
        ) from e


def build_handler_registry(services: SyncServices) -> HandlerRegistry:
    """Register a handler for every entity type the terminal publishes."""
    registry = HandlerRegistry()

    def handle_order(key: RoutingKey, data: dict[str, Any]) -> Any:
        payload = parse_payload(OrderPayload, data)
        if key.verb == EventVerb.DELETED:
            return services.order_sync.process_order_delete_event(payload, key.vendor)
        return services.order_sync.process_order_event(payload, key.vendor)

    def handle_order_item(key: RoutingKey, data: dict[str, Any]) -> Any:
        payload = parse_payload(OrderItemPayload, data)
        return process_order_item_event(
            payload, key.vendor, deleted=key.verb == EventVerb.DELETED
        )

    def handle_shift(key: RoutingKey, data: dict[str, Any]) -> Any:
        event = _SHIFT_EVENTS.get(key.verb)
        if event is None:
            raise POSPayloadError(f"Unsupported shift event: {key}")
        payload = parse_payload(ShiftEventPayload, data)
        payload = payload.model_copy(update={"event": event})
        return process_shift_event(payload, key.vendor, services.staff_sync)

    def handle_staff(key: RoutingKey, data: dict[str, Any]) -> Any:
        payload = parse_payload(StaffEventPayload, data)
        return services.staff_sync.process_staff_event(
            payload, key.vendor, deleted=key.verb == EventVerb.DELETED
        )

    def handle_table(key: RoutingKey, data: dict[str, Any]) -> Any:
        payload = parse_payload(TableEventPayload, data)
        if key.verb == EventVerb.DELETED:
            logger.info("Ignoring %s for table %s", key, payload.external_id)
            return None
        return process_table_event(payload, key.vendor)

    def handle_area(key: RoutingKey, data: dict[str, Any]) -> Any:
        payload = parse_payload(AreaEventPayload, data)
        if key.verb == EventVerb.DELETED:
            logger.info("Ignoring %s for area %s", key, payload.external_id)
            return None
        return process_area_event(payload, key.vendor)

    def handle_heartbeat(key: RoutingKey, data: dict[str, Any]) -> Any:
        payload = parse_payload(HeartbeatPayload, data)
        return services.connection_monitor.process_heartbeat(payload, key.vendor)

    registry.register(EntityType.ORDER, handle_order)
    registry.register(EntityType.ORDER_ITEM, handle_order_item)
    registry.register(EntityType.SHIFT, handle_shift)
    registry.register(EntityType.STAFF, handle_staff)
    registry.register(EntityType.TABLE, handle_table)
    registry.register(EntityType.AREA, handle_area)
    registry.register(EntityType.HEARTBEAT, handle_heartbeat)

    registry.require(*EntityType)
    logger.debug("Registered %d POS event handlers", len(registry))
    return registry
