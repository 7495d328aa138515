"""
Test settings.
"""
from __future__ import annotations

from .base import *  # noqa: F403, F401

DEBUG = False

ALLOWED_HOSTS = []

# Database
# In-memory SQLite; pytest-django creates the test database
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": ":memory:",
    }
}

# Password hashers for faster tests
PASSWORD_HASHERS = [
    "django.contrib.auth.hashers.MD5PasswordHasher",
]

# Disable migrations in tests for speed
class DisableMigrations:  # noqa: N801
    def __contains__(self, item: str) -> bool:
        return True

    def __getitem__(self, item: str) -> None:
        return None


MIGRATION_MODULES = DisableMigrations()

STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.InMemoryStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Jobs run inline in the thread that commits
TASK_QUEUE_ALWAYS_EAGER = True

# Provider keys (requests are faked with httpx.MockTransport)
SUPADATA_API_KEY = "test-supadata-key"  # noqa: S105
SCRAPE_CREATORS_API_KEY = "test-scrape-creators-key"  # noqa: S105
FIRECRAWL_API_KEY = "test-firecrawl-key"  # noqa: S105
KIE_API_KEY = "test-kie-key"  # noqa: S105
ENRICHMENT_CALLBACK_BASE_URL = "https://testserver"
