"""
Chat threads bound to canvases and selected by chat nodes.
"""
from __future__ import annotations

import logging
import uuid

from django.db import transaction

from apps.canvas.models import ChatNode, NodeType, Thread
from apps.canvas.services import first_by_id, get_canvas, get_node, touch_canvas
from libs.common.errors import NotFound, Unauthorized, ValidationError

logger = logging.getLogger(__name__)


def create_thread(
    *,
    organization_id,
    canvas_id,
    title: str | None = None,
    agent_thread_id: str | None = None,
) -> Thread:
    """
    Create a thread on a canvas.

    Args:
        organization_id: Caller's organization
        canvas_id: Canvas the thread belongs to
        title: Defaults to "Chat Thread <n+1>"
        agent_thread_id: Handle of the external conversation; generated if omitted

    Returns:
        The new Thread
    """
    canvas = get_canvas(organization_id=organization_id, canvas_id=canvas_id)
    if not title:
        title = f"Chat Thread {Thread.objects.filter(canvas=canvas).count() + 1}"
    thread = Thread.objects.create(
        organization_id=canvas.organization_id,
        canvas=canvas,
        title=title,
        agent_thread_id=agent_thread_id or uuid.uuid4().hex,
    )
    logger.info(
        f"Created thread {thread.id}",
        extra={"org_id": str(organization_id), "canvas_id": str(canvas.id)},
    )
    return thread


def list_threads(*, organization_id, canvas_id):
    canvas = get_canvas(organization_id=organization_id, canvas_id=canvas_id)
    return Thread.objects.filter(canvas=canvas).order_by("-updated_at")


def get_thread(*, organization_id, thread_id) -> Thread:
    thread = first_by_id(Thread.objects.all(), thread_id)
    if thread is None:
        raise NotFound("Thread not found")
    if not thread.belongs_to(organization_id):
        raise Unauthorized("Thread not found or does not belong to your organization")
    return thread


def get_chat_payload(*, organization_id, canvas_node_id) -> tuple:
    """Return (canvas_node, chat_payload) for a chat node."""
    node = get_node(organization_id=organization_id, canvas_node_id=canvas_node_id)
    if node.node_type != NodeType.CHAT:
        raise ValidationError("Node is not a chat node")
    chat = ChatNode.objects.select_related("selected_thread").filter(id=node.payload_id).first()
    if chat is None:
        raise NotFound("Chat node not found")
    return node, chat


def select_thread(*, organization_id, canvas_node_id, thread_id) -> ChatNode:
    """Point a chat node at a thread of the same canvas."""
    with transaction.atomic():
        node, chat = get_chat_payload(organization_id=organization_id, canvas_node_id=canvas_node_id)
        thread = get_thread(organization_id=organization_id, thread_id=thread_id)
        if thread.canvas_id != chat.canvas_id:
            raise ValidationError("Thread does not belong to this canvas")
        chat.selected_thread = thread
        chat.save(update_fields=["selected_thread", "updated_at"])
        touch_canvas(node.canvas_id)
    return chat
