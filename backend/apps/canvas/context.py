"""
Context aggregation: turn a node's incoming-edge neighborhood into prompt text.

Only one hop is followed (edges whose target is the queried node), so cycles
in the graph are harmless. Blocks come out in edge order. The aggregator reads
whatever state each source holds right now and never waits for enrichment.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from apps.canvas import context_rules
from apps.canvas.models import CanvasEdge, CanvasNode, NodeType, Thread
from apps.canvas.registry import get_node_spec
from apps.canvas.services import get_node
from apps.canvas.threads import get_chat_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ContextBlock:
    content: str
    role: str = "system"

    def as_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChatPreparation:
    """Everything the external chat collaborator needs to run one turn."""

    thread: Thread | None
    blocks: list[ContextBlock]

    @property
    def system_prompt(self) -> str:
        return build_system_prompt(self.blocks)


def build_system_prompt(blocks: list[ContextBlock]) -> str:
    return "\n\n".join(block.content for block in blocks)


def _node_blocks(node: CanvasNode) -> list[ContextBlock]:
    """Blocks for a single source node: primary block (or group expansion), then notes."""
    spec = get_node_spec(node.node_type)
    payload = node.get_payload()
    if payload is None:
        logger.warning(
            f"Node {node.id} has no {node.node_type} payload",
            extra={"canvas_id": str(node.canvas_id)},
        )
        return []

    if spec.has_status and not payload.is_completed:
        return []

    blocks: list[ContextBlock] = []
    if node.node_type == NodeType.GROUP:
        children = list(CanvasNode.objects.filter(parent_group=node).order_by("created_at"))
        if children:
            blocks.append(ContextBlock(context_rules.group_header(payload, len(children))))
            for child in children:
                blocks.extend(_node_blocks(child))
            blocks.append(ContextBlock(context_rules.group_footer(payload)))
    elif spec.context_rule is not None:
        content = spec.context_rule(payload)
        if content:
            blocks.append(ContextBlock(content))

    if node.notes:
        blocks.append(ContextBlock(f"Notes:\n{node.notes}"))
    return blocks


def aggregate_context(*, organization_id, canvas_node_id) -> list[ContextBlock]:
    """
    Build the ordered context blocks for a node (typically a chat node).

    Sources that are still pending/processing or have failed contribute
    nothing, notes included.

    Args:
        organization_id: Caller's organization
        canvas_node_id: The consuming node

    Returns:
        Context blocks in edge order
    """
    target = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id)
    edges = (
        CanvasEdge.objects.filter(target=target, organization_id=target.organization_id)
        .select_related("source")
        .order_by("created_at")
    )

    blocks: list[ContextBlock] = []
    for edge in edges:
        blocks.extend(_node_blocks(edge.source))

    logger.debug(
        f"Aggregated {len(blocks)} context blocks for node {target.id}",
        extra={"canvas_id": str(target.canvas_id), "edge_count": len(edges)},
    )
    return blocks


def prepare_chat(*, organization_id, canvas_node_id) -> ChatPreparation:
    """Collect the selected thread and context for a chat node."""
    _, chat = get_chat_payload(organization_id=organization_id, canvas_node_id=canvas_node_id)
    blocks = aggregate_context(organization_id=organization_id, canvas_node_id=canvas_node_id)
    return ChatPreparation(thread=chat.selected_thread, blocks=blocks)
