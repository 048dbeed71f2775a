"""
Restaurant models - Staff, floor plan, shifts, orders and payments.

All venue data follows the multi-tenancy pattern with VenueScopedModel.
POS-synced models have external_id fields for terminal ID mapping.
"""

from django.db import models
from django.utils import timezone

from apps.web.core.models import OriginSystem, Venue, VenueScopedModel


class StaffRole(models.TextChoices):
    """Role of a staff member at a venue."""

    OWNER = "OWNER", "Owner"
    MANAGER = "MANAGER", "Manager"
    CASHIER = "CASHIER", "Cashier"
    WAITER = "WAITER", "Waiter"


class Staff(models.Model):
    """
    A person working for an organization.

    Staff synchronized from a POS are placeholder accounts: they get a
    deterministic synthetic email and no password until someone registers
    them through the portal.
    """

    organization_id = models.CharField(max_length=64)
    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=200)
    last_name = models.CharField(max_length=200, blank=True)
    password = models.CharField(max_length=128, blank=True)
    origin_system = models.CharField(
        max_length=30,
        choices=OriginSystem.choices,
        default=OriginSystem.AVOQADO,
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["first_name", "last_name"]
        verbose_name_plural = "staff"

    def __str__(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def is_pos_placeholder(self) -> bool:
        """Synced from a POS and never registered through the portal."""
        return self.origin_system != OriginSystem.AVOQADO and not self.password


class StaffVenue(models.Model):
    """
    Assignment of a staff member to a venue.

    The same person can work at several venues, each with its own terminal
    staff code and PIN.
    """

    staff = models.ForeignKey(
        Staff,
        on_delete=models.CASCADE,
        related_name="venues",
    )
    venue = models.ForeignKey(
        Venue,
        on_delete=models.CASCADE,
        related_name="staff_assignments",
    )
    pos_staff_id = models.CharField(
        max_length=100,
        blank=True,
        help_text="Staff code on the venue's terminal",
    )
    pin = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(
        max_length=20,
        choices=StaffRole.choices,
        default=StaffRole.WAITER,
    )
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["venue", "pos_staff_id"],
                name="unique_pos_staff_per_venue",
                condition=models.Q(pos_staff_id__gt=""),
            ),
        ]

    def __str__(self) -> str:
        return f"{self.staff} @ {self.venue_id} ({self.pos_staff_id})"


class Area(VenueScopedModel):
    """Floor section (e.g., Terrace, Bar) as defined on the terminal."""

    external_id = models.CharField(
        max_length=255,
        help_text="ID in the POS system",
    )
    name = models.CharField(max_length=200)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["venue", "external_id"],
                name="unique_area_external_id_per_venue",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class Table(VenueScopedModel):
    """
    Table on the venue floor.

    Created lazily with a default capacity the first time a POS event
    references its number.
    """

    number = models.CharField(max_length=50)
    capacity = models.PositiveIntegerField(default=4)
    area = models.ForeignKey(
        Area,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="tables",
    )

    class Meta:
        ordering = ["number"]
        constraints = [
            models.UniqueConstraint(
                fields=["venue", "number"],
                name="unique_table_number_per_venue",
            ),
        ]

    def __str__(self) -> str:
        return f"Table {self.number}"


class Product(VenueScopedModel):
    """Product sold at the venue, mapped to the terminal's product code."""

    external_id = models.CharField(
        max_length=255,
        help_text="ID in the POS system",
    )
    name = models.CharField(max_length=200)
    price = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    class Meta:
        ordering = ["name"]
        constraints = [
            models.UniqueConstraint(
                fields=["venue", "external_id"],
                name="unique_product_external_id_per_venue",
            ),
        ]

    def __str__(self) -> str:
        return self.name


class ShiftStatus(models.TextChoices):
    """Shift lifecycle status."""

    OPEN = "OPEN", "Open"
    CLOSING = "CLOSING", "Closing"
    CLOSED = "CLOSED", "Closed"


class Shift(VenueScopedModel):
    """
    Cash-register shift.

    external_id is not unique: terminals reuse the same shift number after
    a close. Aggregate totals are recomputed at close from the orders linked
    to this row.
    """

    external_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Shift ID in the POS system (may be reused)",
    )
    staff = models.ForeignKey(
        Staff,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="shifts",
    )
    start_time = models.DateTimeField(default=timezone.now)
    end_time = models.DateTimeField(null=True, blank=True)

    # Cash drawer
    starting_cash = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    ending_cash = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )
    cash_difference = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        null=True,
        blank=True,
    )

    # Aggregates (set at close)
    total_sales = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_tips = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total_orders = models.PositiveIntegerField(default=0)

    status = models.CharField(
        max_length=20,
        choices=ShiftStatus.choices,
        default=ShiftStatus.OPEN,
    )
    pos_raw_data = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-start_time"]
        indexes = [
            models.Index(fields=["venue", "external_id"]),
            models.Index(fields=["venue", "status"]),
        ]

    def __str__(self) -> str:
        return f"Shift {self.external_id or self.pk} ({self.status})"


class OrderStatus(models.TextChoices):
    """Order lifecycle status."""

    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    PREPARING = "PREPARING", "Preparing"
    READY = "READY", "Ready"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"
    DELETED = "DELETED", "Deleted"


class PaymentStatus(models.TextChoices):
    """Order payment status."""

    PENDING = "PENDING", "Pending"
    PARTIAL = "PARTIAL", "Partially paid"
    PAID = "PAID", "Paid"
    REFUNDED = "REFUNDED", "Refunded"


class OrderType(models.TextChoices):
    """Order fulfillment type."""

    DINE_IN = "DINE_IN", "Dine in"
    TAKEOUT = "TAKEOUT", "Takeout"
    DELIVERY = "DELIVERY", "Delivery"


class OrderSource(models.TextChoices):
    """Channel an order was placed through."""

    TPV = "TPV", "Avoqado terminal"
    POS = "POS", "External POS"
    QR = "QR", "QR ordering"


class KitchenStatus(models.TextChoices):
    """Kitchen preparation status."""

    PENDING = "PENDING", "Pending"
    PREPARING = "PREPARING", "Preparing"
    READY = "READY", "Ready"
    SERVED = "SERVED", "Served"


class SyncStatus(models.TextChoices):
    """Synchronization state of a POS-originated record."""

    PENDING = "PENDING", "Pending"
    SYNCED = "SYNCED", "Synced"
    FAILED = "FAILED", "Failed"


class Order(VenueScopedModel):
    """
    Order synchronized from a POS terminal.

    external_id is the compound ``instanceId:shiftExternalId:orderFolio``.
    Exactly one row exists per (venue, external_id); deletions are soft.
    """

    external_id = models.CharField(
        max_length=255,
        help_text="Order ID in the POS system",
    )
    order_number = models.CharField(max_length=100, blank=True)
    source = models.CharField(
        max_length=20,
        choices=OrderSource.choices,
        default=OrderSource.TPV,
    )
    type = models.CharField(
        max_length=20,
        choices=OrderType.choices,
        default=OrderType.DINE_IN,
    )

    # Parents
    table = models.ForeignKey(
        Table,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    shift = models.ForeignKey(
        Shift,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    created_by = models.ForeignKey(
        Staff,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="created_orders",
    )
    served_by = models.ForeignKey(
        Staff,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="served_orders",
    )

    # Status
    status = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    payment_status = models.CharField(
        max_length=20,
        choices=PaymentStatus.choices,
        default=PaymentStatus.PENDING,
    )
    kitchen_status = models.CharField(
        max_length=20,
        choices=KitchenStatus.choices,
        default=KitchenStatus.PENDING,
    )

    # Pricing
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    tip_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    # Timestamps (created_at is the terminal's creation time)
    created_at = models.DateTimeField(default=timezone.now)
    completed_at = models.DateTimeField(null=True, blank=True)

    # Sync bookkeeping
    synced_at = models.DateTimeField(null=True, blank=True)
    sync_status = models.CharField(
        max_length=20,
        choices=SyncStatus.choices,
        default=SyncStatus.PENDING,
    )
    pos_raw_data = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["venue", "status"]),
            models.Index(fields=["venue", "created_at"]),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=["venue", "external_id"],
                name="unique_order_external_id_per_venue",
            ),
        ]

    def __str__(self) -> str:
        return f"Order {self.order_number or self.pk} ({self.external_id})"


class OrderItem(VenueScopedModel):
    """
    Line item in an order.

    Stores a snapshot of the product at order time. Removed items are
    hard-deleted.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="items",
    )
    product = models.ForeignKey(
        Product,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="order_items",
    )
    external_id = models.CharField(
        max_length=255,
        help_text="Line ID in the POS system",
    )

    product_name = models.CharField(max_length=200, blank=True)
    quantity = models.DecimalField(max_digits=10, decimal_places=3, default=1)
    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    tax_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    total = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    notes = models.TextField(blank=True)
    sequence = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["sequence", "pk"]
        constraints = [
            models.UniqueConstraint(
                fields=["order", "external_id"],
                name="unique_order_item_external_id_per_order",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.product_name}"


class PaymentMethod(models.TextChoices):
    """Canonical payment method category."""

    CASH = "CASH", "Cash"
    CREDIT_CARD = "CREDIT_CARD", "Credit card"
    DEBIT_CARD = "DEBIT_CARD", "Debit card"
    DIGITAL_WALLET = "DIGITAL_WALLET", "Digital wallet"
    BANK_TRANSFER = "BANK_TRANSFER", "Bank transfer"
    OTHER = "OTHER", "Other"


class SplitType(models.TextChoices):
    """How a payment splits the order bill."""

    FULLPAYMENT = "FULLPAYMENT", "Full payment"
    PERPRODUCT = "PERPRODUCT", "Per product"
    EQUALPARTS = "EQUALPARTS", "Equal parts"
    CUSTOMAMOUNT = "CUSTOMAMOUNT", "Custom amount"


class TransactionStatus(models.TextChoices):
    """Payment transaction status."""

    PENDING = "PENDING", "Pending"
    COMPLETED = "COMPLETED", "Completed"
    FAILED = "FAILED", "Failed"
    REFUNDED = "REFUNDED", "Refunded"


class Payment(VenueScopedModel):
    """
    Settled payment against an order.

    POS settlements are created once per order; redelivered settlements
    are skipped.
    """

    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="payments",
    )
    shift = models.ForeignKey(
        Shift,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="payments",
    )
    processed_by = models.ForeignKey(
        Staff,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="processed_payments",
    )
    external_id = models.CharField(
        max_length=255,
        blank=True,
        help_text="Order external ID + terminal payment method ID",
    )

    amount = models.DecimalField(max_digits=12, decimal_places=2)
    tip_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    method = models.CharField(max_length=20, choices=PaymentMethod.choices)
    split_type = models.CharField(
        max_length=20,
        choices=SplitType.choices,
        default=SplitType.FULLPAYMENT,
    )
    status = models.CharField(
        max_length=20,
        choices=TransactionStatus.choices,
        default=TransactionStatus.COMPLETED,
    )

    # Fees
    fee_percentage = models.DecimalField(max_digits=6, decimal_places=4, default=0)
    fee_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    net_amount = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    pos_raw_data = models.JSONField(default=dict, blank=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["venue", "created_at"]),
            models.Index(fields=["external_id"]),
        ]

    def __str__(self) -> str:
        return f"{self.method} {self.amount} for {self.order}"


class PaymentAllocation(models.Model):
    """Portion of a payment applied to an order."""

    payment = models.ForeignKey(
        Payment,
        on_delete=models.CASCADE,
        related_name="allocations",
    )
    order = models.ForeignKey(
        Order,
        on_delete=models.CASCADE,
        related_name="payment_allocations",
    )
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return f"{self.amount} of payment {self.payment_id}"
