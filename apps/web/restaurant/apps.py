"""Django app configuration for restaurant operations (staff, orders, payments)."""

from django.apps import AppConfig


class RestaurantConfig(AppConfig):
    """Restaurant operations app configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.restaurant"
    verbose_name = "Restaurant"
