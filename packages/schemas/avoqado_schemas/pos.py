"""POS sync schemas - data contracts for events emitted by POS terminals."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Literal, NamedTuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Placeholder shift segment used by terminals before a shift is opened.
PLACEHOLDER_SHIFT_SEGMENT = "0"

# =============================================================================
# Enums
# =============================================================================


class POSVendor(str, Enum):
    """POS integrations that publish events to the broker."""

    SOFTRESTAURANT = "softrestaurant"


class EntityType(str, Enum):
    """Entity segment of an event routing key."""

    ORDER = "order"
    ORDER_ITEM = "orderitem"
    SHIFT = "shift"
    STAFF = "staff"
    TABLE = "table"
    AREA = "area"
    HEARTBEAT = "heartbeat"


class EventVerb(str, Enum):
    """Verb segment of an event routing key."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    CLOSED = "closed"


class OrderStatus(str, Enum):
    """Order lifecycle status as reported by the terminal."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PREPARING = "PREPARING"
    READY = "READY"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    DELETED = "DELETED"


class PaymentStatus(str, Enum):
    """Order payment status as reported by the terminal."""

    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class ShiftEvent(str, Enum):
    """Shift lifecycle event carried in shift payloads."""

    CREATED = "created"
    UPDATED = "updated"
    CLOSED = "closed"


# =============================================================================
# Base
# =============================================================================


class POSPayload(BaseModel):
    """
    Base for all wire payloads: camelCase on the wire, snake_case in Python.

    Terminals send ids and PINs as JSON numbers or strings interchangeably,
    so numbers are accepted for every string field.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )


class OrderExternalId(NamedTuple):
    """Compound order external id: ``instanceId:shiftExternalId:orderFolio``."""

    instance_id: str
    shift_segment: str
    folio: str

    @classmethod
    def parse(cls, external_id: str) -> "OrderExternalId | None":
        """Split a compound id; returns None when it is not three segments."""
        parts = external_id.split(":")
        if len(parts) != 3:
            return None
        return cls(*parts)

    @property
    def is_placeholder(self) -> bool:
        return self.shift_segment == PLACEHOLDER_SHIFT_SEGMENT

    def with_placeholder_shift(self) -> "OrderExternalId":
        return self._replace(shift_segment=PLACEHOLDER_SHIFT_SEGMENT)

    def __str__(self) -> str:
        return ":".join(self)


# =============================================================================
# Parent entities
# =============================================================================


class StaffPayload(POSPayload):
    """Staff member as known to the terminal."""

    external_id: str | None = None
    name: str | None = None
    pin: str | None = None


class AreaPayload(POSPayload):
    """Floor section on the terminal."""

    external_id: str | None = None
    name: str | None = None


class TablePayload(POSPayload):
    """Table reference; external_id is the table number shown on the terminal."""

    external_id: str | None = None
    name: str | None = None
    area: AreaPayload | None = None


class ShiftPayload(POSPayload):
    """Shift reference or shift lifecycle event."""

    external_id: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    starting_cash: Decimal | None = None
    ending_cash: Decimal | None = None
    staff_ref: StaffPayload | None = None
    event: ShiftEvent = ShiftEvent.UPDATED
    raw_vendor_fields: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Orders
# =============================================================================


class SettlementLine(POSPayload):
    """One payment method's contribution to paying an order."""

    amount: Decimal
    tip_amount: Decimal = Decimal("0.00")
    method_id: str
    raw_vendor_payload: dict[str, Any] = Field(default_factory=dict)


class PaymentMethodCatalogEntry(POSPayload):
    """
    Payment method definition from the terminal catalog.

    ``type`` follows the terminal convention: 1 cash, 2 card, 3 vouchers,
    4 other.
    """

    external_id: str
    description: str = ""
    type: int


class OrderPayload(POSPayload):
    """Order created/updated/deleted event."""

    venue_id: str
    external_id: str
    order_number: str = ""
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    subtotal: Decimal = Decimal("0.00")
    tax_amount: Decimal = Decimal("0.00")
    discount_amount: Decimal = Decimal("0.00")
    tip_amount: Decimal = Decimal("0.00")
    total: Decimal = Decimal("0.00")
    created_at: datetime | None = None
    completed_at: datetime | None = None
    raw_vendor_payload: dict[str, Any] = Field(default_factory=dict)
    staff_ref: StaffPayload | None = None
    table_ref: TablePayload | None = None
    shift_ref: ShiftPayload | None = None
    settlement_lines: list[SettlementLine] = Field(default_factory=list)
    payment_method_catalog: list[PaymentMethodCatalogEntry] = Field(
        default_factory=list
    )


class OrderItemPayload(POSPayload):
    """Order line item event."""

    venue_id: str
    parent_order_external_id: str
    external_id: str
    deleted: bool = False
    product_external_id: str | None = None
    product_name: str | None = None
    quantity: Decimal | None = None
    unit_price: Decimal | None = None
    discount_amount: Decimal | None = None
    tax_amount: Decimal | None = None
    total: Decimal | None = None
    notes: str | None = None
    sequence: int | None = None


# =============================================================================
# Standalone entity events
# =============================================================================


class ShiftEventPayload(ShiftPayload):
    """Shift event published on its own routing key."""

    venue_id: str
    external_id: str


class StaffEventPayload(StaffPayload):
    venue_id: str
    external_id: str


class TableEventPayload(TablePayload):
    venue_id: str
    external_id: str


class AreaEventPayload(AreaPayload):
    venue_id: str
    external_id: str


# =============================================================================
# Liveness and commands
# =============================================================================


class HeartbeatPayload(POSPayload):
    """Terminal liveness heartbeat."""

    venue_id: str
    instance_id: str
    producer_version: str = ""


class ConfigurationErrorCommand(POSPayload):
    """Command sent back to a terminal configured with an invalid venue."""

    error_type: Literal["INVALID_VENUE_ID"] = "INVALID_VENUE_ID"
    invalid_venue_id: str
    instance_id: str
    message: str
    requires_reconfiguration: Literal[True] = True
