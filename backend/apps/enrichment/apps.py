"""
Enrichment app configuration.
"""
from django.apps import AppConfig


class EnrichmentConfig(AppConfig):
    """Enrichment app configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.enrichment"
