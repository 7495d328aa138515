"""
Tests for context aggregation.
"""
from __future__ import annotations

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.canvas import context, grouping, services
from apps.canvas.models import (
    CanvasEdge,
    EnrichmentStatus,
    FacebookAdNode,
    NodeType,
    TwitterNode,
    WebsiteNode,
    YoutubeNode,
)
from libs.common.errors import Unauthorized

YOUTUBE_URL = "https://www.youtube.com/watch?v=abc123"


@pytest.fixture
def chat(make_node):
    return make_node(NodeType.CHAT, 2000, 0)


@pytest.fixture
def connect(org, canvas):
    def _connect(source, target):
        return services.create_edge(
            organization_id=org.id,
            canvas_id=canvas.id,
            source_id=source.canvas_node_id,
            target_id=target.canvas_node_id,
        )

    return _connect


def contents(org, chat):
    return [b.content for b in context.aggregate_context(organization_id=org.id, canvas_node_id=chat.canvas_node_id)]


@pytest.mark.django_db
class TestAggregateContext:
    def test_text_node(self, org, make_node, chat, connect):
        connect(make_node(NodeType.TEXT, content="Remember the budget"), chat)
        assert contents(org, chat) == ["Context from connected text node:\nRemember the budget"]

    def test_completed_youtube(self, org, make_node, chat, connect):
        video = make_node(NodeType.YOUTUBE, url=YOUTUBE_URL)
        YoutubeNode.objects.filter(id=video.typed_node_id).update(
            status=EnrichmentStatus.COMPLETED,
            title="Launch talk",
            transcript="hello world",
        )
        connect(video, chat)

        assert contents(org, chat) == [
            f"YouTube Video: Launch talk\nURL: {YOUTUBE_URL}\n\nTranscript:\nhello world"
        ]

    @pytest.mark.parametrize("status", [EnrichmentStatus.PENDING, EnrichmentStatus.PROCESSING, EnrichmentStatus.FAILED])
    def test_unfinished_sources_skipped_with_their_notes(self, org, make_node, chat, connect, status):
        video = make_node(NodeType.YOUTUBE, url=YOUTUBE_URL)
        YoutubeNode.objects.filter(id=video.typed_node_id).update(status=status, transcript="partial")
        services.update_notes(organization_id=org.id, canvas_node_id=video.canvas_node_id, notes="important")
        connect(video, chat)

        assert contents(org, chat) == []

    @pytest.mark.parametrize(
        "title,heading",
        [("Pricing | Example", "Pricing | Example"), (None, "https://example.com"), ("", "https://example.com")],
    )
    def test_completed_website_title_falls_back_to_url(self, org, make_node, chat, connect, title, heading):
        site = make_node(NodeType.WEBSITE, url="https://example.com")
        WebsiteNode.objects.filter(id=site.typed_node_id).update(
            status=EnrichmentStatus.COMPLETED,
            title=title,
            markdown="# Plans",
        )
        connect(site, chat)

        assert contents(org, chat) == [f"Website: {heading}\nURL: https://example.com\n\nContent:\n# Plans"]

    def test_completed_with_empty_field_skipped(self, org, make_node, chat, connect):
        tweet = make_node(NodeType.TWITTER, url="https://x.com/someone/status/123")
        TwitterNode.objects.filter(id=tweet.typed_node_id).update(status=EnrichmentStatus.COMPLETED, full_text="")
        connect(tweet, chat)

        assert contents(org, chat) == []

    def test_notes_follow_primary_block(self, org, make_node, chat, connect):
        note = make_node(NodeType.TEXT, content="A")
        services.update_notes(organization_id=org.id, canvas_node_id=note.canvas_node_id, notes="check pricing")
        connect(note, chat)

        assert contents(org, chat) == [
            "Context from connected text node:\nA",
            "Notes:\ncheck pricing",
        ]

    def test_edge_order(self, org, make_node, chat, connect):
        first = make_node(NodeType.TEXT, content="first")
        second = make_node(NodeType.TEXT, content="second")
        second_edge = connect(second, chat)
        first_edge = connect(first, chat)
        CanvasEdge.objects.filter(id=first_edge.id).update(created_at=timezone.now() - timedelta(minutes=1))
        CanvasEdge.objects.filter(id=second_edge.id).update(created_at=timezone.now())

        assert contents(org, chat) == [
            "Context from connected text node:\nfirst",
            "Context from connected text node:\nsecond",
        ]

    def test_only_one_hop(self, org, make_node, chat, connect):
        far = make_node(NodeType.TEXT, content="far")
        near = make_node(NodeType.TEXT, content="near")
        connect(far, near)
        connect(near, chat)
        connect(chat, near)

        assert contents(org, chat) == ["Context from connected text node:\nnear"]

    def test_tweet_and_facebook_ad_formats(self, org, make_node, chat, connect):
        tweet = make_node(NodeType.TWITTER, url="https://twitter.com/jane/status/42")
        TwitterNode.objects.filter(id=tweet.typed_node_id).update(
            status=EnrichmentStatus.COMPLETED,
            full_text="Shipping today",
            author_username="jane",
        )
        ad = make_node(NodeType.FACEBOOK_AD, ad_id="987")
        FacebookAdNode.objects.filter(id=ad.typed_node_id).update(
            status=EnrichmentStatus.COMPLETED,
            title="Spring Sale",
            page_name="Shop",
            body="50% off",
            media_type="image",
            publisher_platform=["facebook", "instagram"],
            url="https://www.facebook.com/ads/library?id=987",
        )
        connect(tweet, chat)
        connect(ad, chat)

        blocks = contents(org, chat)
        assert blocks[0] == "Tweet by @jane\nURL: https://twitter.com/jane/status/42\n\nContent:\nShipping today"
        assert blocks[1] == (
            "Facebook Ad: Spring Sale by Shop\n"
            "URL: https://www.facebook.com/ads/library?id=987\n"
            "Media Type: image\n"
            "Platforms: facebook, instagram\n\n"
            "Ad Body:\n50% off"
        )

    def test_group_expands_members(self, org, make_node, chat, connect):
        group = make_node(NodeType.GROUP, title="Sources")
        member = make_node(NodeType.TEXT, content="inside")
        grouping.add_to_group(organization_id=org.id, canvas_node_id=member.canvas_node_id, group_node_id=group.canvas_node_id)
        connect(group, chat)

        assert contents(org, chat) == [
            "--- Group: Sources (1 items) ---",
            "Context from connected text node:\ninside",
            "--- End of Group: Sources ---",
        ]

    def test_empty_group_contributes_nothing(self, org, make_node, chat, connect):
        connect(make_node(NodeType.GROUP), chat)
        assert contents(org, chat) == []

    def test_other_org_unauthorized(self, other_org, chat):
        with pytest.raises(Unauthorized):
            context.aggregate_context(organization_id=other_org.id, canvas_node_id=chat.canvas_node_id)


@pytest.mark.django_db
def test_prepare_chat(org, make_node, chat, connect):
    connect(make_node(NodeType.TEXT, content="one"), chat)
    connect(make_node(NodeType.TEXT, content="two"), chat)

    preparation = context.prepare_chat(organization_id=org.id, canvas_node_id=chat.canvas_node_id)

    assert preparation.thread.title == "Chat Thread 1"
    assert preparation.system_prompt == (
        "Context from connected text node:\none\n\nContext from connected text node:\ntwo"
    )
    assert preparation.blocks[0].as_message() == {
        "role": "system",
        "content": "Context from connected text node:\none",
    }
