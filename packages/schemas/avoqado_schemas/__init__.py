"""Avoqado Schemas - Pydantic models for data contracts."""

from avoqado_schemas.pos import (
    PLACEHOLDER_SHIFT_SEGMENT,
    AreaEventPayload,
    AreaPayload,
    ConfigurationErrorCommand,
    EntityType,
    EventVerb,
    HeartbeatPayload,
    OrderExternalId,
    OrderItemPayload,
    OrderPayload,
    OrderStatus,
    PaymentMethodCatalogEntry,
    PaymentStatus,
    POSPayload,
    POSVendor,
    SettlementLine,
    ShiftEvent,
    ShiftEventPayload,
    ShiftPayload,
    StaffEventPayload,
    StaffPayload,
    TableEventPayload,
    TablePayload,
)

__all__ = [
    "PLACEHOLDER_SHIFT_SEGMENT",
    # Enums
    "EntityType",
    "EventVerb",
    "OrderStatus",
    "PaymentStatus",
    "POSVendor",
    "ShiftEvent",
    # Payloads
    "AreaEventPayload",
    "AreaPayload",
    "HeartbeatPayload",
    "OrderExternalId",
    "OrderItemPayload",
    "OrderPayload",
    "PaymentMethodCatalogEntry",
    "POSPayload",
    "SettlementLine",
    "ShiftEventPayload",
    "ShiftPayload",
    "StaffEventPayload",
    "StaffPayload",
    "TableEventPayload",
    "TablePayload",
    # Commands
    "ConfigurationErrorCommand",
]
