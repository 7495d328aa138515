"""
Common library app configuration.
"""
from django.apps import AppConfig


class CommonConfig(AppConfig):
    """Common library app configuration."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "libs.common"
