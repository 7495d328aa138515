"""
Tests for chat threads.
"""
from __future__ import annotations

import pytest
from model_bakery import baker

from apps.canvas import threads
from apps.canvas.models import Canvas, ChatNode, NodeType, Thread
from libs.common.errors import Unauthorized, ValidationError


@pytest.mark.django_db
class TestThreads:
    def test_default_titles_count_up(self, org, canvas, make_node):
        make_node(NodeType.CHAT)  # creates "Chat Thread 1"
        thread = threads.create_thread(organization_id=org.id, canvas_id=canvas.id)
        assert thread.title == "Chat Thread 2"
        assert thread.agent_thread_id

    def test_select_thread(self, org, canvas, make_node):
        chat = make_node(NodeType.CHAT)
        second = threads.create_thread(organization_id=org.id, canvas_id=canvas.id, title="Follow-up")

        threads.select_thread(organization_id=org.id, canvas_node_id=chat.canvas_node_id, thread_id=second.id)

        assert ChatNode.objects.get(id=chat.typed_node_id).selected_thread_id == second.id

    def test_select_thread_from_other_canvas_rejected(self, org, make_node):
        chat = make_node(NodeType.CHAT)
        elsewhere = baker.make(Canvas, organization=org)
        foreign = threads.create_thread(organization_id=org.id, canvas_id=elsewhere.id)

        with pytest.raises(ValidationError, match="canvas"):
            threads.select_thread(organization_id=org.id, canvas_node_id=chat.canvas_node_id, thread_id=foreign.id)

    def test_select_thread_other_org(self, org, other_org, make_node):
        chat = make_node(NodeType.CHAT)
        other_canvas = baker.make(Canvas, organization=other_org)
        foreign = baker.make(Thread, organization=other_org, canvas=other_canvas, title="x", agent_thread_id="t")

        with pytest.raises(Unauthorized):
            threads.select_thread(organization_id=org.id, canvas_node_id=chat.canvas_node_id, thread_id=foreign.id)

    def test_select_thread_requires_chat_node(self, org, canvas, make_node):
        text = make_node(NodeType.TEXT)
        thread = threads.create_thread(organization_id=org.id, canvas_id=canvas.id)
        with pytest.raises(ValidationError, match="not a chat node"):
            threads.select_thread(organization_id=org.id, canvas_node_id=text.canvas_node_id, thread_id=thread.id)

    def test_list_threads(self, org, canvas, make_node):
        make_node(NodeType.CHAT)
        threads.create_thread(organization_id=org.id, canvas_id=canvas.id)
        assert threads.list_threads(organization_id=org.id, canvas_id=canvas.id).count() == 2
