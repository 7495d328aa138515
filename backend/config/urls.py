"""
URL configuration for the canvas service.
"""
from __future__ import annotations

from django.conf import settings
from django.conf.urls.static import static
from django.contrib import admin
from django.urls import include, path

urlpatterns = [
    path("admin/", admin.site.urls),
    path("api/v1/", include("apps.tenants.urls")),
    path("api/v1/", include("apps.canvas.urls")),  # orgs/<org_id>/canvases/...
    # Provider callbacks (unauthenticated)
    path("enrichment/", include("apps.enrichment.urls")),
]

# Stored blobs (screenshots, generated images) in development; no-op unless DEBUG
urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)
