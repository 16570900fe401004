# config/urls.py
from django.contrib import admin
from django.urls import path, include

urlpatterns = [
    path("admin/", admin.site.urls),
    # API JSON: auditorías, evidencia y cumplimiento recurrente
    path("api/", include("apps.audits.urls")),
    path("api/", include("apps.compliance.urls")),
]
