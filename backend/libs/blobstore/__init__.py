"""
BlobStore package for binary content produced by enrichment.
"""
from __future__ import annotations

from django.conf import settings
from django.utils.module_loading import import_string

from libs.blobstore.base import BlobStore

_blobstore_instance: BlobStore | None = None


def get_blobstore() -> BlobStore:
    """Get the blob store instance (singleton)."""
    global _blobstore_instance  # noqa: PLW0603
    if _blobstore_instance is None:
        backend_class = import_string(
            getattr(settings, "BLOBSTORE_BACKEND", "libs.blobstore.storage.DjangoStorageBlobStore")
        )
        _blobstore_instance = backend_class()
    return _blobstore_instance


def reset_blobstore() -> None:
    """Drop the cached instance (settings changes in tests)."""
    global _blobstore_instance  # noqa: PLW0603
    _blobstore_instance = None


__all__ = ["BlobStore", "get_blobstore", "reset_blobstore"]
