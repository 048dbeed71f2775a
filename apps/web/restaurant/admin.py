"""Admin registration for restaurant models."""

from django.contrib import admin

from apps.web.restaurant.models import (
    Area,
    Order,
    OrderItem,
    Payment,
    Product,
    Shift,
    Staff,
    StaffVenue,
    Table,
)


class StaffVenueInline(admin.TabularInline):
    """Inline for venue assignments of a staff member."""

    model = StaffVenue
    extra = 0
    fields = ["venue", "pos_staff_id", "role", "active"]


class OrderItemInline(admin.TabularInline):
    """Inline for items within an order."""

    model = OrderItem
    extra = 0
    fields = ["external_id", "product_name", "quantity", "unit_price", "total"]
    readonly_fields = ["external_id", "product_name", "quantity", "unit_price", "total"]


class PaymentInline(admin.TabularInline):
    """Inline for payments against an order."""

    model = Payment
    extra = 0
    fields = ["method", "amount", "tip_amount", "fee_amount", "net_amount", "status"]
    readonly_fields = fields


@admin.register(Staff)
class StaffAdmin(admin.ModelAdmin):
    """Admin for staff."""

    list_display = ["__str__", "email", "organization_id", "origin_system"]
    list_filter = ["origin_system"]
    search_fields = ["first_name", "last_name", "email"]
    inlines = [StaffVenueInline]
    readonly_fields = ["created_at", "updated_at"]
    exclude = ["password"]


@admin.register(Area)
class AreaAdmin(admin.ModelAdmin):
    list_display = ["name", "venue", "external_id"]
    search_fields = ["name", "external_id"]


@admin.register(Table)
class TableAdmin(admin.ModelAdmin):
    list_display = ["number", "venue", "area", "capacity"]
    search_fields = ["number"]


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ["name", "venue", "external_id", "price"]
    search_fields = ["name", "external_id"]


@admin.register(Shift)
class ShiftAdmin(admin.ModelAdmin):
    """Admin for shifts."""

    list_display = [
        "external_id",
        "venue",
        "status",
        "start_time",
        "end_time",
        "total_orders",
        "total_sales",
    ]
    list_filter = ["status", "venue"]
    search_fields = ["external_id"]
    readonly_fields = ["created_at", "updated_at"]
    date_hierarchy = "start_time"


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin for orders."""

    list_display = [
        "external_id",
        "order_number",
        "venue",
        "status",
        "payment_status",
        "total",
        "sync_status",
        "created_at",
    ]
    list_filter = ["status", "payment_status", "sync_status", "source", "venue"]
    search_fields = ["external_id", "order_number"]
    inlines = [OrderItemInline, PaymentInline]
    readonly_fields = ["created_at", "updated_at", "synced_at", "completed_at"]
    date_hierarchy = "created_at"

    fieldsets = [
        (None, {"fields": ["venue", "external_id", "order_number", "source"]}),
        (
            "Status",
            {"fields": ["status", "payment_status", "kitchen_status", "type"]},
        ),
        (
            "Pricing",
            {
                "fields": [
                    "subtotal",
                    "tax_amount",
                    "discount_amount",
                    "tip_amount",
                    "total",
                ]
            },
        ),
        ("Links", {"fields": ["table", "shift", "created_by", "served_by"]}),
        (
            "Sync",
            {"fields": ["sync_status", "synced_at", "pos_raw_data"]},
        ),
        ("Timestamps", {"fields": ["created_at", "updated_at", "completed_at"]}),
    ]


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
    """Admin for payments."""

    list_display = ["external_id", "order", "method", "amount", "net_amount", "status"]
    list_filter = ["method", "status"]
    search_fields = ["external_id", "order__external_id"]
    readonly_fields = ["created_at", "updated_at"]
