"""Django app configuration for POS event sync."""

from django.apps import AppConfig


class PosConfig(AppConfig):
    """POS event sync app configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.web.pos"
    verbose_name = "POS Sync"
