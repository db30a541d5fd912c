"""Store configuration URL configuration."""

from __future__ import annotations

from django.urls import path

from modules.storeconfig.views import AdminConfigView, PublicConfigView

urlpatterns = [
    path("config/", PublicConfigView.as_view(), name="public_config"),
    path("admin/config/", AdminConfigView.as_view(), name="admin_config"),
]
