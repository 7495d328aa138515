"""
Base Django settings for config project.
"""
from __future__ import annotations

from pathlib import Path

from decouple import config

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent.parent

# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config(
    "SECRET_KEY",
    default="django-insecure-canvas-dev-only-change-me",
)

# Application definition
INSTALLED_APPS = [
    "django.contrib.admin",
    "django.contrib.auth",
    "django.contrib.contenttypes",
    "django.contrib.sessions",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    "corsheaders",
    "rest_framework",
    "rest_framework.authtoken",
    # Local apps
    "libs.common",
    "apps.tenants",
    "apps.canvas",
    "apps.enrichment",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "corsheaders.middleware.CorsMiddleware",
    "django.contrib.sessions.middleware.SessionMiddleware",
    "django.middleware.common.CommonMiddleware",
    "config.middleware.LoggingContextMiddleware",  # Context propagation for logging
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.auth.middleware.AuthenticationMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "config.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.request",
                "django.contrib.auth.context_processors.auth",
                "django.contrib.messages.context_processors.messages",
            ],
        },
    },
]

WSGI_APPLICATION = "config.wsgi.application"

# Password validation
AUTH_PASSWORD_VALIDATORS = [
    {
        "NAME": "django.contrib.auth.password_validation.UserAttributeSimilarityValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.MinimumLengthValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.CommonPasswordValidator",
    },
    {
        "NAME": "django.contrib.auth.password_validation.NumericPasswordValidator",
    },
]

# Internationalization
LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True

# Static files (CSS, JavaScript, Images)
STATIC_URL = "static/"

# Blobs (screenshots, ad media, generated images) go through default_storage
MEDIA_URL = config("MEDIA_URL", default="/media/")
MEDIA_ROOT = config("MEDIA_ROOT", default=str(BASE_DIR / "media"))

# Default primary key field type
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

# DRF Configuration
REST_FRAMEWORK = {
    "DEFAULT_AUTHENTICATION_CLASSES": [
        "rest_framework.authentication.TokenAuthentication",
        # SessionAuthentication removed for security: No sessions as auth replacement
        # Sessions are only for Django admin, not for API authentication
    ],
    "DEFAULT_PERMISSION_CLASSES": [
        "rest_framework.permissions.IsAuthenticated",
    ],
    "DEFAULT_PAGINATION_CLASS": "rest_framework.pagination.PageNumberPagination",
    "PAGE_SIZE": 100,
    "EXCEPTION_HANDLER": "libs.common.errors.exception_handler",
}

# Enrichment providers
# A missing key is reported on the node when its job runs, not at startup
SUPADATA_API_KEY = config("SUPADATA_API_KEY", default="")
SCRAPE_CREATORS_API_KEY = config("SCRAPE_CREATORS_API_KEY", default="")
FIRECRAWL_API_KEY = config("FIRECRAWL_API_KEY", default="")
KIE_API_KEY = config("KIE_API_KEY", default="")
KIE_IMAGE_MODEL = config("KIE_IMAGE_MODEL", default="google/nano-banana")

# Public base URL the image provider calls back on
ENRICHMENT_CALLBACK_BASE_URL = config("ENRICHMENT_CALLBACK_BASE_URL", default="http://localhost:8000")
ENRICHMENT_HTTP_TIMEOUT = config("ENRICHMENT_HTTP_TIMEOUT", default=60.0, cast=float)

# Deferred task queue
TASK_QUEUE_WORKERS = config("TASK_QUEUE_WORKERS", default=4, cast=int)
TASK_QUEUE_ALWAYS_EAGER = config("TASK_QUEUE_ALWAYS_EAGER", default=False, cast=bool)

# BlobStore Configuration
BLOBSTORE_BACKEND = config(
    "BLOBSTORE_BACKEND",
    default="libs.blobstore.storage.DjangoStorageBlobStore",
)

# CORS Configuration
CORS_ALLOWED_ORIGINS = config(
    "CORS_ALLOWED_ORIGINS",
    default="http://localhost:3000,http://127.0.0.1:3000",
    cast=lambda v: [s.strip() for s in v.split(",")],
)

CORS_ALLOW_CREDENTIALS = True

CORS_ALLOW_HEADERS = [
    "accept",
    "accept-encoding",
    "authorization",
    "content-type",
    "dnt",
    "origin",
    "user-agent",
    "x-csrftoken",
    "x-requested-with",
    "x-request-id",  # For request ID propagation
]

# Logging Configuration
# JSON logging with context propagation and secret redaction
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "()": "libs.logging.formatters.JSONFormatter",
        },
        "verbose": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s [trace_id=%(trace_id)s request_id=%(request_id)s org_id=%(org_id)s canvas_id=%(canvas_id)s node_id=%(node_id)s job=%(job)s]",
        },
    },
    "filters": {
        "context": {
            "()": "libs.logging.filters.ContextFilter",
        },
        "secret_redaction": {
            "()": "libs.logging.filters.SecretRedactionFilter",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
            "filters": ["context", "secret_redaction"],
            "stream": "ext://sys.stdout",
        },
        "null": {
            "class": "logging.NullHandler",
        },
    },
    "root": {
        "level": config("LOG_LEVEL", default="INFO"),
        "handlers": ["console"],
    },
    "loggers": {
        # Django loggers
        "django": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "django.request": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
        "django.security": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
        "httpx": {
            "level": "WARNING",
            "handlers": ["console"],
            "propagate": False,
        },
        # Application loggers
        "apps": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
        "libs": {
            "level": "INFO",
            "handlers": ["console"],
            "propagate": False,
        },
    },
}

