"""
Error taxonomy shared by the graph API, enrichment workers and blob store.

Every error carries the HTTP status it maps to; ``exception_handler`` is
installed as DRF's EXCEPTION_HANDLER so views can let them propagate.
"""
from __future__ import annotations

import logging

from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


class CanvasError(Exception):
    """Base error for service-layer failures that map to HTTP responses."""

    status_code: int = 400

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.__class__.__name__
        super().__init__(self.message)


class NotFound(CanvasError):
    """Canvas, node, edge or thread does not exist."""

    status_code = 404


class Unauthorized(CanvasError):
    """Record belongs to a different organization."""

    status_code = 403


class ValidationError(CanvasError):
    """Malformed input (URL, id, prompt) or an operation invalid for the node type."""

    status_code = 400


class ProviderError(CanvasError):
    """External content provider returned non-2xx or a malformed payload."""

    status_code = 502


class StorageError(CanvasError):
    """Blob store failure."""

    status_code = 502


def exception_handler(exc, context):
    """Render CanvasError subclasses as ``{"error": message}``."""
    if isinstance(exc, CanvasError):
        if exc.status_code >= 500:
            logger.error(
                f"{exc.__class__.__name__}: {exc.message}",
                extra={"view": context.get("view").__class__.__name__ if context.get("view") else None},
            )
        return Response({"error": exc.message}, status=exc.status_code)
    return drf_exception_handler(exc, context)
