"""
URL configuration for the civic complaints service.
"""

from django.contrib import admin
from django.urls import path, include
from complaints.api.health import health_check, readiness_check

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/health", health_check, name="health_check"),
    path("api/ready", readiness_check, name="readiness_check"),
    path("api/", include("complaints.api.urls")),
]
