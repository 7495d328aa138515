"""
Base BlobStore interface.
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class BlobStore(ABC):
    """Abstract base class for opaque binary storage (images, screenshots, thumbnails)."""

    @abstractmethod
    def store(self, data: bytes, *, content_type: str | None = None, prefix: str = "") -> str:
        """
        Store bytes and return an opaque reference.

        Args:
            data: Raw content
            content_type: MIME type, used to pick a file extension
            prefix: Optional namespace (e.g. "images", "screenshots")

        Returns:
            Reference string accepted by get_url and delete

        Raises:
            StorageError: If the backend fails to write
        """
        raise NotImplementedError

    @abstractmethod
    def get_url(self, ref: str) -> str | None:
        """Return a URL for the blob, or None if it does not exist."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, ref: str) -> None:
        """Delete the blob; deleting a missing reference is a no-op."""
        raise NotImplementedError
