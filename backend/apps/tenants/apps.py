"""
Tenants app configuration.
"""
from django.apps import AppConfig


class TenantsConfig(AppConfig):
    """Tenants app configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.tenants"
