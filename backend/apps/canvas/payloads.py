"""
Creation routines for typed node payloads.

Each routine validates its type-specific arguments and inserts the payload
row. They run inside the create_node transaction; a ValidationError raised
here aborts the whole creation before any job is scheduled.
"""
from __future__ import annotations

from typing import Any

from apps.canvas import validators
from apps.canvas.models import (
    Canvas,
    ChatNode,
    FacebookAdNode,
    GroupNode,
    ImageNode,
    TextNode,
    TikTokNode,
    TwitterNode,
    WebsiteNode,
    YoutubeNode,
)

DEFAULT_GROUP_TITLE = "New Group"
DEFAULT_GROUP_COLOR = "rgba(100, 100, 255, 0.1)"


def create_text_payload(*, canvas: Canvas, args: dict[str, Any]) -> TextNode:
    return TextNode.objects.create(
        organization_id=canvas.organization_id,
        content=args.get("content") or "",
    )


def create_chat_payload(*, canvas: Canvas, args: dict[str, Any]) -> ChatNode:
    from apps.canvas.threads import create_thread

    thread = create_thread(
        organization_id=canvas.organization_id,
        canvas_id=canvas.id,
        title=args.get("thread_title") or "Chat Thread 1",
        agent_thread_id=args.get("agent_thread_id"),
    )
    return ChatNode.objects.create(
        organization_id=canvas.organization_id,
        canvas=canvas,
        selected_thread=thread,
    )


def create_youtube_payload(*, canvas: Canvas, args: dict[str, Any]) -> YoutubeNode:
    url = (args.get("url") or "").strip()
    video_id = validators.parse_youtube_video_id(url)
    return YoutubeNode.objects.create(
        organization_id=canvas.organization_id,
        url=url,
        video_id=video_id,
        thumbnail_url=validators.youtube_thumbnail_url(video_id),
    )


def create_tiktok_payload(*, canvas: Canvas, args: dict[str, Any]) -> TikTokNode:
    return TikTokNode.objects.create(
        organization_id=canvas.organization_id,
        url=validators.validate_tiktok_url(args.get("url")),
    )


def create_twitter_payload(*, canvas: Canvas, args: dict[str, Any]) -> TwitterNode:
    url = (args.get("url") or "").strip()
    return TwitterNode.objects.create(
        organization_id=canvas.organization_id,
        url=url,
        tweet_id=validators.parse_tweet_id(url),
    )


def create_website_payload(*, canvas: Canvas, args: dict[str, Any]) -> WebsiteNode:
    return WebsiteNode.objects.create(
        organization_id=canvas.organization_id,
        url=validators.validate_website_url(args.get("url")),
    )


def create_facebook_ad_payload(*, canvas: Canvas, args: dict[str, Any]) -> FacebookAdNode:
    return FacebookAdNode.objects.create(
        organization_id=canvas.organization_id,
        ad_id=validators.validate_facebook_ad_id(args.get("ad_id")),
    )


def create_image_payload(*, canvas: Canvas, args: dict[str, Any]) -> ImageNode:
    return ImageNode.objects.create(
        organization_id=canvas.organization_id,
        prompt=validators.validate_prompt(args.get("prompt")),
        is_ai_generated=True,
    )


def create_group_payload(*, canvas: Canvas, args: dict[str, Any]) -> GroupNode:
    return GroupNode.objects.create(
        organization_id=canvas.organization_id,
        title=args.get("title") or DEFAULT_GROUP_TITLE,
        color=args.get("color") or DEFAULT_GROUP_COLOR,
    )
