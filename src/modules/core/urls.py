from django.urls import path

from modules.core.views import AdminMeView, health_check

urlpatterns = [
    path("health", health_check, name="health_check"),
    path("api/v1/admin/me", AdminMeView.as_view(), name="admin_me"),
]
