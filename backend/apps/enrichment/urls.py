"""
URLs for enrichment app.
"""
from __future__ import annotations

from django.urls import path

from apps.enrichment.views import image_callback

app_name = "enrichment"

urlpatterns = [
    path("image-callback", image_callback, name="image-callback"),
]
