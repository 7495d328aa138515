"""
Development settings.
"""
from __future__ import annotations

from decouple import config

from .base import *  # noqa: F403, F401

DEBUG = config("DEBUG", default=True, cast=bool)

ALLOWED_HOSTS = config(
    "ALLOWED_HOSTS",
    default="localhost,127.0.0.1",
    cast=lambda v: [s.strip() for s in v.split(",")],
)

DATABASE_ENGINE = config("DATABASE_ENGINE", default="django.db.backends.sqlite3")

DATABASES = {
    "default": {
        "ENGINE": DATABASE_ENGINE,
        "NAME": config("DATABASE_NAME", default=str(BASE_DIR / "db.sqlite3")),  # noqa: F405
        "USER": config("DATABASE_USER", default=""),
        "PASSWORD": config("DATABASE_PASSWORD", default=""),
        "HOST": config("DATABASE_HOST", default=""),
        "PORT": config("DATABASE_PORT", default=""),
        # SQLite locks the whole file; give enrichment workers time to wait for writers
        "OPTIONS": {"timeout": 20} if DATABASE_ENGINE.endswith("sqlite3") else {},
    }
}

# Blobs land on the local filesystem under MEDIA_ROOT
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "django.contrib.staticfiles.storage.StaticFilesStorage"},
}

# Image callbacks must reach this server; use a tunnel URL when testing with the real provider
ENRICHMENT_CALLBACK_BASE_URL = config("ENRICHMENT_CALLBACK_BASE_URL", default="http://localhost:8000")
TASK_QUEUE_WORKERS = config("TASK_QUEUE_WORKERS", default=2, cast=int)

CORS_ALLOWED_ORIGINS = config(
    "CORS_ALLOWED_ORIGINS",
    default="http://localhost:3000,http://127.0.0.1:3000",
    cast=lambda v: [s.strip() for s in v.split(",")],
)
CORS_ALLOW_CREDENTIALS = True
