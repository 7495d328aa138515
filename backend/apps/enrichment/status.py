"""
The single entry point for enrichment status transitions.

Jobs and the webhook handler both call ``finalize``. Transitions are
monotonic (pending -> processing -> completed|failed). Re-finalizing a node
with the terminal status it already has overwrites its fields (at-least-once
webhook delivery); switching between completed and failed is refused.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from django.db import transaction

from apps.canvas.models import EnrichmentStatus

logger = logging.getLogger(__name__)

_RANK = {
    EnrichmentStatus.PENDING: 0,
    EnrichmentStatus.PROCESSING: 1,
    EnrichmentStatus.COMPLETED: 2,
    EnrichmentStatus.FAILED: 2,
}
TERMINAL = frozenset({EnrichmentStatus.COMPLETED, EnrichmentStatus.FAILED})


@dataclass
class EnrichmentResult:
    status: str
    fields: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @classmethod
    def processing(cls, **fields: Any) -> EnrichmentResult:
        return cls(status=EnrichmentStatus.PROCESSING, fields=fields)

    @classmethod
    def completed(cls, **fields: Any) -> EnrichmentResult:
        return cls(status=EnrichmentStatus.COMPLETED, fields=fields)

    @classmethod
    def failed(cls, error: str) -> EnrichmentResult:
        return cls(status=EnrichmentStatus.FAILED, error=error)


def can_transition(current: str, new: str) -> bool:
    """True if moving from ``current`` to ``new`` keeps the state machine monotonic."""
    if current == new:
        return new in TERMINAL
    return _RANK[new] > _RANK[current]


def finalize(model, node_id, result: EnrichmentResult) -> bool:
    """
    Apply a status transition to a typed payload row.

    Args:
        model: Payload model class (YoutubeNode, ImageNode, ...)
        node_id: Typed payload id
        result: Target status plus the fields to store

    Returns:
        True if the row was updated, False if it is missing or the
        transition was refused
    """
    with transaction.atomic():
        node = model.objects.select_for_update().filter(id=node_id).first()
        if node is None:
            logger.warning(
                f"{model.__name__} {node_id} not found; dropping {result.status} transition",
                extra={"node_id": str(node_id)},
            )
            return False

        if not can_transition(node.status, result.status):
            logger.warning(
                f"Refused {model.__name__} transition {node.status} -> {result.status}",
                extra={"node_id": str(node_id)},
            )
            return False

        update_fields = ["status", "updated_at"]
        node.status = result.status
        for name, value in result.fields.items():
            setattr(node, name, value)
            update_fields.append(name)
        if result.status == EnrichmentStatus.FAILED:
            node.error = result.error or "Unknown error occurred"
            update_fields.append("error")
        elif result.status == EnrichmentStatus.COMPLETED and node.error:
            node.error = None
            update_fields.append("error")
        node.save(update_fields=update_fields)

    logger.info(
        f"{model.__name__} {node_id} -> {result.status}",
        extra={"node_id": str(node_id), "error": result.error},
    )
    return True
