"""
Webhook completion handler for asynchronous image generation.

The provider calls back with ``{code, msg?, data: {state, taskId, resultJson?, failMsg?}}``;
every outcome is funnelled through ``finalize`` like the synchronous jobs.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from apps.canvas.models import EnrichmentStatus, ImageNode
from apps.enrichment.schemas import ImageCallback
from apps.enrichment.status import EnrichmentResult, finalize
from apps.enrichment.workers import store_remote_blob
from libs.blobstore import get_blobstore
from libs.common.errors import NotFound, ProviderError, StorageError, ValidationError

logger = logging.getLogger(__name__)

GENERATED_IMAGE_SIZE = 1024


@dataclass
class CallbackOutcome:
    status_code: int
    message: str


def handle_image_callback(node_id, body: Any) -> CallbackOutcome:
    """
    Apply one provider callback to an image node.

    Args:
        node_id: Image node id from the callback URL
        body: Parsed JSON body

    Returns:
        HTTP status and message for the provider

    Raises:
        NotFound: Unknown image node
        ValidationError: Body is not a callback object
    """
    image = ImageNode.objects.filter(id=node_id).first()
    if image is None:
        raise NotFound("Image node not found")

    try:
        callback = ImageCallback.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError("Malformed callback body") from e

    task_id = callback.data.task_id if callback.data else None
    logger.info(
        f"Image callback for {node_id}",
        extra={"node_id": str(node_id), "code": callback.code, "task_id": task_id},
    )

    if callback.is_success:
        image_url = callback.data.first_result_url()
        if not image_url:
            logger.error(f"Image callback for {node_id} has no result URL", extra={"node_id": str(node_id)})
            return CallbackOutcome(400, "Missing image URL in response")

        if image.status == EnrichmentStatus.COMPLETED and image.image_ref:
            logger.info(f"Image {node_id} already completed; ignoring duplicate callback")
            return CallbackOutcome(200, "Already completed")
        if image.status == EnrichmentStatus.FAILED:
            logger.warning(f"Image {node_id} already failed; ignoring late success callback")
            return CallbackOutcome(200, "Already failed")

        try:
            image_ref = store_remote_blob(image_url, prefix="images")
        except (ProviderError, StorageError) as e:
            logger.error(f"Storing generated image {node_id} failed: {e}", extra={"node_id": str(node_id)})
            finalize(ImageNode, node_id, EnrichmentResult.failed(str(e)))
            return CallbackOutcome(200, "Failure recorded")

        stored = finalize(
            ImageNode,
            node_id,
            EnrichmentResult.completed(
                image_ref=image_ref,
                width=GENERATED_IMAGE_SIZE,
                height=GENERATED_IMAGE_SIZE,
            ),
        )
        if not stored:
            # A concurrent callback or the node's deletion won; the new blob is unreferenced
            try:
                get_blobstore().delete(image_ref)
            except StorageError as e:
                logger.error(f"Could not remove unreferenced image {image_ref}: {e}", extra={"node_id": str(node_id)})
            return CallbackOutcome(200, "Already finalized")
        return CallbackOutcome(200, "Success")

    if callback.is_failure:
        message = callback.failure_message
        logger.warning(f"Image generation failed for {node_id}: {message}", extra={"node_id": str(node_id)})
        finalize(ImageNode, node_id, EnrichmentResult.failed(message))
        return CallbackOutcome(200, "Failure recorded")

    logger.warning(f"Unknown image callback state for {node_id}", extra={"node_id": str(node_id)})
    return CallbackOutcome(400, "Unknown state")
