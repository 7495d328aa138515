"""
Signal receivers keeping typed payloads and blobs in step with graph records.
"""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models.signals import post_delete
from django.dispatch import receiver

from apps.canvas.models import CanvasNode, FacebookAdNode, ImageNode, WebsiteNode
from apps.canvas.registry import NODE_TYPES
from libs.blobstore import get_blobstore
from libs.common.errors import StorageError

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=CanvasNode)
def delete_node_payload(sender, instance: CanvasNode, **kwargs):
    """Remove the typed payload of a deleted CanvasNode (covers ORM cascades)."""
    spec = NODE_TYPES.get(instance.node_type)
    if spec is not None:
        spec.payload_model.objects.filter(id=instance.payload_id).delete()


def _delete_blobs(refs: list[str]) -> None:
    store = get_blobstore()
    for ref in refs:
        try:
            store.delete(ref)
        except StorageError as e:
            logger.warning(f"Failed to delete blob {ref}: {e}", extra={"blob_ref": ref})


def _schedule_blob_cleanup(refs: list[str | None]) -> None:
    refs = [ref for ref in refs if ref]
    if refs:
        transaction.on_commit(lambda: _delete_blobs(refs))


@receiver(post_delete, sender=ImageNode)
def delete_image_blob(sender, instance: ImageNode, **kwargs):
    _schedule_blob_cleanup([instance.image_ref])


@receiver(post_delete, sender=WebsiteNode)
def delete_screenshot_blob(sender, instance: WebsiteNode, **kwargs):
    _schedule_blob_cleanup([instance.screenshot_ref])


@receiver(post_delete, sender=FacebookAdNode)
def delete_ad_media_blobs(sender, instance: FacebookAdNode, **kwargs):
    _schedule_blob_cleanup([*(instance.image_refs or []), instance.video_thumbnail_ref])
