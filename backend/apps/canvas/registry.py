"""
Node type registry.

The closed set of node variants. Each entry names its payload table, its
creation routine, the default on-canvas size, the background enrichment job
(if any) and the context extraction rule.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from apps.canvas import context_rules, payloads
from apps.canvas.models import (
    ChatNode,
    EnrichedPayload,
    FacebookAdNode,
    GroupNode,
    ImageNode,
    NodeType,
    TextNode,
    TikTokNode,
    TwitterNode,
    WebsiteNode,
    YoutubeNode,
)
from libs.common.errors import ValidationError


@dataclass(frozen=True)
class NodeSpec:
    node_type: str
    payload_model: type
    create_payload: Callable[..., Any]
    default_width: float
    default_height: float
    enrichment_job: str | None = None
    context_rule: Callable[[Any], str | None] | None = None

    @property
    def enriches(self) -> bool:
        return self.enrichment_job is not None

    @property
    def has_status(self) -> bool:
        return issubclass(self.payload_model, EnrichedPayload)


_JOBS = "apps.enrichment.workers"

NODE_TYPES: dict[str, NodeSpec] = {
    spec.node_type: spec
    for spec in (
        NodeSpec(
            NodeType.TEXT, TextNode, payloads.create_text_payload, 400, 300,
            context_rule=context_rules.text_context,
        ),
        NodeSpec(NodeType.CHAT, ChatNode, payloads.create_chat_payload, 1200, 1000),
        NodeSpec(
            NodeType.YOUTUBE, YoutubeNode, payloads.create_youtube_payload, 450, 400,
            enrichment_job=f"{_JOBS}.fetch_youtube_transcript",
            context_rule=context_rules.youtube_context,
        ),
        NodeSpec(
            NodeType.TIKTOK, TikTokNode, payloads.create_tiktok_payload, 450, 400,
            enrichment_job=f"{_JOBS}.fetch_tiktok_video",
            context_rule=context_rules.tiktok_context,
        ),
        NodeSpec(
            NodeType.TWITTER, TwitterNode, payloads.create_twitter_payload, 600, 350,
            enrichment_job=f"{_JOBS}.fetch_tweet",
            context_rule=context_rules.twitter_context,
        ),
        NodeSpec(
            NodeType.WEBSITE, WebsiteNode, payloads.create_website_payload, 450, 400,
            enrichment_job=f"{_JOBS}.scrape_website",
            context_rule=context_rules.website_context,
        ),
        NodeSpec(
            NodeType.FACEBOOK_AD, FacebookAdNode, payloads.create_facebook_ad_payload, 450, 450,
            enrichment_job=f"{_JOBS}.fetch_facebook_ad",
            context_rule=context_rules.facebook_ad_context,
        ),
        NodeSpec(
            NodeType.IMAGE, ImageNode, payloads.create_image_payload, 512, 512,
            enrichment_job=f"{_JOBS}.dispatch_image_generation",
        ),
        NodeSpec(NodeType.GROUP, GroupNode, payloads.create_group_payload, 600, 400),
    )
}


def get_node_spec(node_type: str) -> NodeSpec:
    """
    Look up a node type.

    Raises:
        ValidationError: For an unknown node type
    """
    try:
        return NODE_TYPES[node_type]
    except KeyError:
        raise ValidationError(f"Unknown node type: {node_type}") from None
