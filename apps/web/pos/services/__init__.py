"""POS services - event dispatch, entity resolution, and reconciliation."""

from apps.web.pos.services.dispatcher import DeliveryOutcome, Dispatcher, RoutingKey
from apps.web.pos.services.heartbeat import (
    ConnectionMonitor,
    HeartbeatResult,
    LoggingOperatorAlerts,
)
from apps.web.pos.services.order_identity import (
    OrderIdentity,
    OrderIdentityAction,
    resolve_order_identity,
)
from apps.web.pos.services.order_item_sync import process_order_item_event
from apps.web.pos.services.order_sync import OrderSyncService
from apps.web.pos.services.registry import (
    HandlerRegistry,
    SyncServices,
    build_handler_registry,
    build_sync_services,
)
from apps.web.pos.services.shift_sync import process_shift_event
from apps.web.pos.services.staff_sync import StaffSyncService

__all__ = [
    "ConnectionMonitor",
    "DeliveryOutcome",
    "Dispatcher",
    "HandlerRegistry",
    "HeartbeatResult",
    "LoggingOperatorAlerts",
    "OrderIdentity",
    "OrderIdentityAction",
    "OrderSyncService",
    "RoutingKey",
    "StaffSyncService",
    "SyncServices",
    "build_handler_registry",
    "build_sync_services",
    "process_order_item_event",
    "process_shift_event",
    "resolve_order_identity",
]
