"""
BlobStore backed by Django's storage API.
"""
from __future__ import annotations

import logging
import mimetypes
import uuid

from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from libs.blobstore.base import BlobStore
from libs.common.errors import StorageError

logger = logging.getLogger(__name__)


class DjangoStorageBlobStore(BlobStore):
    """
    Store blobs through ``default_storage``.

    The reference is the storage name (``<prefix>/<uuid hex><ext>``), so any
    configured backend (filesystem, S3 via django-storages, in-memory for
    tests) works unchanged.
    """

    def __init__(self, storage=None):
        self._storage = storage

    @property
    def storage(self):
        return self._storage if self._storage is not None else default_storage

    def store(self, data: bytes, *, content_type: str | None = None, prefix: str = "") -> str:
        if not data:
            raise StorageError("Cannot store empty blob")

        extension = ""
        if content_type:
            extension = mimetypes.guess_extension(content_type.split(";")[0].strip()) or ""
        name = f"{uuid.uuid4().hex}{extension}"
        if prefix:
            name = f"{prefix.strip('/')}/{name}"

        try:
            ref = self.storage.save(name, ContentFile(data))
        except OSError as e:
            raise StorageError(f"Failed to store blob: {e}") from e

        logger.info(
            f"Stored blob {ref}",
            extra={"blob_ref": ref, "size": len(data), "content_type": content_type},
        )
        return ref

    def get_url(self, ref: str) -> str | None:
        if not ref:
            return None
        try:
            if not self.storage.exists(ref):
                return None
            return self.storage.url(ref)
        except (OSError, ValueError, NotImplementedError) as e:
            logger.warning(f"Could not resolve URL for blob {ref}: {e}", extra={"blob_ref": ref})
            return None

    def delete(self, ref: str) -> None:
        if not ref:
            return
        try:
            self.storage.delete(ref)
        except OSError as e:
            raise StorageError(f"Failed to delete blob {ref}: {e}") from e
