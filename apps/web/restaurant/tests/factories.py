"""Factory classes for venue and restaurant models."""

from decimal import Decimal

from django.utils import timezone

import factory

from apps.web.core.models import OriginSystem, Venue
from apps.web.restaurant.models import (
    Area,
    Order,
    OrderItem,
    OrderSource,
    OrderStatus,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Product,
    Shift,
    ShiftStatus,
    Staff,
    StaffVenue,
    Table,
)


class VenueFactory(factory.django.DjangoModelFactory):
    """Factory for Venue model."""

    class Meta:
        model = Venue

    id = factory.Sequence(lambda n: f"v{n:04d}")
    organization_id = factory.Sequence(lambda n: f"org-{n}")
    name = factory.Sequence(lambda n: f"Restaurant {n}")
    fee_value = Decimal("0.0250")


class StaffFactory(factory.django.DjangoModelFactory):
    """Factory for Staff model."""

    class Meta:
        model = Staff

    organization_id = factory.Sequence(lambda n: f"org-{n}")
    email = factory.Sequence(lambda n: f"staff-{n}@example.com")
    first_name = factory.Sequence(lambda n: f"Staff {n}")
    last_name = "(POS)"
    origin_system = OriginSystem.POS_SOFTRESTAURANT


class StaffVenueFactory(factory.django.DjangoModelFactory):
    """Factory for StaffVenue model."""

    class Meta:
        model = StaffVenue

    staff = factory.SubFactory(StaffFactory)
    venue = factory.SubFactory(VenueFactory)
    pos_staff_id = factory.Sequence(lambda n: str(n + 1))


class AreaFactory(factory.django.DjangoModelFactory):
    """Factory for Area model."""

    class Meta:
        model = Area

    venue = factory.SubFactory(VenueFactory)
    external_id = factory.Sequence(lambda n: f"A{n}")
    name = factory.Sequence(lambda n: f"Area {n}")
    origin_system = OriginSystem.POS_SOFTRESTAURANT


class TableFactory(factory.django.DjangoModelFactory):
    """Factory for Table model."""

    class Meta:
        model = Table

    venue = factory.SubFactory(VenueFactory)
    number = factory.Sequence(lambda n: str(n + 1))
    origin_system = OriginSystem.POS_SOFTRESTAURANT


class ProductFactory(factory.django.DjangoModelFactory):
    """Factory for Product model."""

    class Meta:
        model = Product

    venue = factory.SubFactory(VenueFactory)
    external_id = factory.Sequence(lambda n: f"P{n}")
    name = factory.Sequence(lambda n: f"Product {n}")
    price = Decimal("10.00")
    origin_system = OriginSystem.POS_SOFTRESTAURANT


class ShiftFactory(factory.django.DjangoModelFactory):
    """Factory for Shift model."""

    class Meta:
        model = Shift

    venue = factory.SubFactory(VenueFactory)
    external_id = factory.Sequence(lambda n: str(n + 1))
    start_time = factory.LazyFunction(timezone.now)
    starting_cash = Decimal("500.00")
    status = ShiftStatus.OPEN
    origin_system = OriginSystem.POS_SOFTRESTAURANT


class OrderFactory(factory.django.DjangoModelFactory):
    """Factory for Order model."""

    class Meta:
        model = Order

    venue = factory.SubFactory(VenueFactory)
    external_id = factory.Sequence(lambda n: f"inst-f:1:{n + 100}")
    order_number = factory.Sequence(lambda n: str(n + 100))
    source = OrderSource.POS
    status = OrderStatus.PENDING
    payment_status = PaymentStatus.PENDING
    subtotal = Decimal("50.00")
    tax_amount = Decimal("8.00")
    total = Decimal("58.00")
    origin_system = OriginSystem.POS_SOFTRESTAURANT


class OrderItemFactory(factory.django.DjangoModelFactory):
    """Factory for OrderItem model."""

    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    venue = factory.LazyAttribute(lambda obj: obj.order.venue)
    external_id = factory.Sequence(lambda n: f"line-{n}")
    product_name = "Tacos al pastor"
    quantity = Decimal("2")
    unit_price = Decimal("25.00")
    total = Decimal("50.00")
    origin_system = OriginSystem.POS_SOFTRESTAURANT


class PaymentFactory(factory.django.DjangoModelFactory):
    """Factory for Payment model."""

    class Meta:
        model = Payment

    order = factory.SubFactory(OrderFactory)
    venue = factory.LazyAttribute(lambda obj: obj.order.venue)
    amount = Decimal("58.00")
    method = PaymentMethod.CASH
    origin_system = OriginSystem.POS_SOFTRESTAURANT
