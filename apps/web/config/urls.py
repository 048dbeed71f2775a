"""
URL configuration for the POS sync engine.

Only the admin is served; events arrive through the broker.
"""

from django.contrib import admin
from django.urls import path

urlpatterns = [
    path("admin/", admin.site.urls),
]
